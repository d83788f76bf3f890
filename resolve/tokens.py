"""
Token classification: turn what a user typed or pasted into a card reference.

Accepted shapes, tried in this order:
- a Favro URL (https://favro.com/organization/<org>/<widget>?card=...)
- an opaque cardCommonId (8+ chars of [A-Za-z0-9_], no hyphen)
- a card key such as BOK-5106
Anything else is Unparseable and never reaches the API.
"""
import re
from typing import List, Optional, Union
from urllib.parse import urlsplit, parse_qs

OPAQUE_ID_RE = re.compile(r"^[A-Za-z0-9_-]{8,}\Z")
KEY_RE = re.compile(r"^([A-Za-z]+)-(\d+)\Z")
FAVRO_HOST_RE = re.compile(r"(^|\.)favro\.com$", re.IGNORECASE)
SPLIT_RE = re.compile(r"[,\s]+")


class OpaqueId:
    kind = 'opaque_id'

    def __init__(self, id: str):
        self.id = id

    def __eq__(self, other):
        return isinstance(other, OpaqueId) and other.id == self.id

    def __repr__(self):
        return f"OpaqueId({self.id!r})"


class KeyRef:
    kind = 'key'

    def __init__(self, prefix: str, sequence: int):
        if sequence < 0:
            raise ValueError("sequence must be non-negative")
        self.prefix = prefix.upper()
        self.sequence = sequence

    def __eq__(self, other):
        return isinstance(other, KeyRef) and (other.prefix, other.sequence) == (self.prefix, self.sequence)

    def __str__(self):
        return f"{self.prefix}-{self.sequence}"

    def __repr__(self):
        return f"KeyRef({self.prefix!r}, {self.sequence!r})"


class Unparseable:
    kind = 'unparseable'

    def __init__(self, raw: str):
        self.raw = raw

    def __eq__(self, other):
        return isinstance(other, Unparseable) and other.raw == self.raw

    def __repr__(self):
        return f"Unparseable({self.raw!r})"


CanonicalReference = Union[OpaqueId, KeyRef, Unparseable]


class ScopeHint:
    """Widget a pasted URL pointed at; scanned first when resolving a key."""
    def __init__(self, widget_id: str, organization_id: Optional[str] = None):
        self.widget_id = widget_id
        self.organization_id = organization_id

    def __eq__(self, other):
        return isinstance(other, ScopeHint) and other.widget_id == self.widget_id

    def __repr__(self):
        return f"ScopeHint({self.widget_id!r})"


class ParsedToken:
    def __init__(self, raw: str, ref: CanonicalReference, scope_hint: Optional[ScopeHint] = None):
        self.raw = raw
        self.ref = ref
        self.scope_hint = scope_hint


def is_opaque_id(value: str) -> bool:
    return bool(OPAQUE_ID_RE.match(value)) and '-' not in value


def parse_key(value: str) -> Optional[KeyRef]:
    m = KEY_RE.match(value.strip())
    return KeyRef(m.group(1), int(m.group(2))) if m else None


def _classify_card_param(value: str) -> Optional[CanonicalReference]:
    if not value:
        return None
    if is_opaque_id(value):
        return OpaqueId(value)
    return parse_key(value)


def parse_url_token(raw: str) -> Optional[ParsedToken]:
    """Parse a Favro card URL. Returns None when raw is not a Favro URL with an organization path."""
    try:
        url = urlsplit(raw)
    except ValueError:
        return None
    if url.scheme not in ('http', 'https') or not url.hostname or not FAVRO_HOST_RE.search(url.hostname):
        return None
    parts = [p for p in url.path.split('/') if p]
    if 'organization' not in parts:
        return None
    idx = parts.index('organization')
    if len(parts) < idx + 3:
        return None
    hint = ScopeHint(widget_id=parts[idx + 2], organization_id=parts[idx + 1])
    card_param = (parse_qs(url.query).get('card') or [''])[0]
    ref = _classify_card_param(card_param) or Unparseable(raw)
    return ParsedToken(raw, ref, hint)


def parse_token(raw: str) -> ParsedToken:
    token = (raw or '').strip()
    from_url = parse_url_token(token)
    if from_url is not None:
        return from_url
    if is_opaque_id(token):
        return ParsedToken(token, OpaqueId(token))
    key = parse_key(token)
    if key is not None:
        return ParsedToken(token, key)
    return ParsedToken(token, Unparseable(token))


def split_tokens(text: str) -> List[str]:
    """Split a free-form "cards" string on commas and whitespace, keeping order."""
    if not text:
        return []
    return [t for t in SPLIT_RE.split(text.strip()) if t]
