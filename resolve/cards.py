"""
Card resolution against Favro.

The public API has no filter on (prefix, sequentialId), so a key is resolved by paging
through the cards of a few known widgets until the sequence number matches. Listings are
fetched with include=basic and often lack the prefix and custom fields, so a candidate is
confirmed (and enriched) with a direct lookup by cardCommonId.
"""

import logging
from typing import List, Optional, Dict, Any

from errors import ScopeDenied
from ingest.favro import FavroClient
from normalize.models import RemoteItem
from normalize.util import normalize_card, card_prefix, card_sequence
from resolve.tokens import CanonicalReference, KeyRef, OpaqueId, ScopeHint, Unparseable

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES_PER_SCOPE = 10


class CardResolver:
    def __init__(self, client: FavroClient, scopes: Optional[List[str]] = None, max_pages_per_scope: int = DEFAULT_MAX_PAGES_PER_SCOPE):
        self.client = client
        self.scopes = list(scopes or [])
        self.max_pages_per_scope = max_pages_per_scope

    def resolve(self, ref: CanonicalReference, scope_hint: Optional[ScopeHint] = None) -> Optional[RemoteItem]:
        """Return the card ref points at, or None when it cannot be found."""
        if isinstance(ref, OpaqueId):
            raw = self._fetch_detailed(ref.id)
            return normalize_card(raw) if raw else None
        if isinstance(ref, KeyRef):
            return self._find_by_key(ref, scope_hint)
        if isinstance(ref, Unparseable):
            return None
        raise TypeError(f"unsupported reference {ref!r}")

    def scan_order(self, scope_hint: Optional[ScopeHint] = None) -> List[str]:
        ordered: List[str] = []
        if scope_hint is not None and scope_hint.widget_id:
            ordered.append(scope_hint.widget_id)
        for widget_id in self.scopes:
            if widget_id not in ordered:
                ordered.append(widget_id)
        return ordered

    def _fetch_detailed(self, common_id: str) -> Optional[Dict[str, Any]]:
        return self.client.get_by_common_id("cards", common_id, {"include": "customFields"})

    def _find_by_key(self, key: KeyRef, scope_hint: Optional[ScopeHint]) -> Optional[RemoteItem]:
        for widget_id in self.scan_order(scope_hint):
            try:
                found = self._scan_widget(widget_id, key)
            except ScopeDenied:
                logger.warning("Skipping Favro widget %s due to 403", widget_id)
                continue
            if found is not None:
                return found
        return None

    def _scan_widget(self, widget_id: str, key: KeyRef) -> Optional[RemoteItem]:
        cursor = None
        pages_read = 0
        while pages_read < self.max_pages_per_scope:
            entities, cursor, total = self.client.list_page("cards", {"widgetCommonId": widget_id, "include": "basic"}, cursor)
            pages_read += 1
            logger.debug("Scanned page %d/%d of widget %s for %s", pages_read, total, widget_id, key)
            for candidate in entities:
                match = self._confirm(candidate, key)
                if match is not None:
                    logger.debug("Resolved %s to card %s in widget %s", key, match.common_id, widget_id)
                    return match
            if cursor is None:
                break
        return None

    def _confirm(self, candidate: Dict[str, Any], key: KeyRef) -> Optional[RemoteItem]:
        if card_sequence(candidate) != key.sequence:
            return None
        listed_prefix = card_prefix(candidate)
        common_id = candidate.get("cardCommonId")
        if listed_prefix:
            if listed_prefix != key.prefix:
                return None
            detailed = self._fetch_detailed(common_id) if common_id else None
            return normalize_card(detailed or candidate)
        if not common_id:
            return None
        detailed = self._fetch_detailed(common_id)
        if detailed and card_prefix(detailed) == key.prefix and card_sequence(detailed) == key.sequence:
            return normalize_card(detailed)
        return None
