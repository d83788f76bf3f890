"""
Normalization utility helpers.
Small helpers to turn raw Favro payloads into normalize.models entities.
"""
from typing import Dict, Any, Optional
from normalize.models import FavroUser, RemoteItem


def card_sequence(raw: Dict[str, Any]) -> Optional[int]:
    """Return the card's sequential number, whichever field the payload uses for it."""
    for field in ('sequentialId', 'cardNumber', 'cardIdShort'):
        seq = raw.get(field)
        if seq is not None:
            try:
                return int(seq)
            except (TypeError, ValueError):
                return None
    return None


def card_prefix(raw: Dict[str, Any]) -> str:
    """Uppercased key prefix, or an empty string when the payload omits it."""
    pre = raw.get('prefix') or raw.get('workspacePrefix') or ''
    return str(pre).upper()


def normalize_card(raw: Dict[str, Any]) -> RemoteItem:
    """Create a RemoteItem from a raw /cards entity.
    Custom fields are keyed by customFieldId; entries without one are dropped.
    """
    fields = {}
    for cf in raw.get('customFields') or []:
        if isinstance(cf, dict) and cf.get('customFieldId'):
            fields[cf['customFieldId']] = cf
    return RemoteItem(
        common_id=str(raw.get('cardCommonId') or raw.get('cardId') or ''),
        name=raw.get('name') or '',
        prefix=card_prefix(raw) or None,
        sequence=card_sequence(raw),
        custom_fields=fields,
        raw=raw,
    )


def card_key(item: RemoteItem) -> str:
    """Human key for a card: PREFIX-SEQ, SEQ, a short common id, or a placeholder."""
    if item.sequence and item.prefix:
        return f"{item.prefix}-{item.sequence}"
    if item.sequence:
        return str(item.sequence)
    if item.common_id:
        return item.common_id[:8].upper()
    return '(card)'


def normalize_user(raw: Dict[str, Any]) -> FavroUser:
    return FavroUser(user_id=str(raw.get('userId') or ''), full_name=raw.get('fullName') or '', email=raw.get('email') or '')
