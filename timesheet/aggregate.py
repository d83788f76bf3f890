"""
Batch a list of tokens into one report body.

Tokens are handled one after another. A token that cannot be parsed or resolved becomes a
"not found" line and the batch carries on; a GatewayError is not caught here and ends the
whole batch, so callers never see a partial body.
"""
import logging
from datetime import datetime, timezone, tzinfo
from typing import Callable, List, Optional, Sequence, Union

from models import ReportBody, ReportLine
from normalize.util import card_key
from resolve.cards import CardResolver
from resolve.tokens import Unparseable, parse_token
from timesheet.extract import extract_todays_reports

logger = logging.getLogger(__name__)

NOT_FOUND_TEXT = '(card not found in scoped boards)'
NO_ENTRY_TEXT = '(no timesheet entry for today)'
ZERO_DURATION = '00:00'


def format_duration(ms) -> str:
    """Zero-padded HH:MM; minutes rounded half-up, hours may exceed 24."""
    minutes = int(float(ms or 0) / 60000 + 0.5)
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


class TimesheetAggregator:
    def __init__(self, resolver: CardResolver, field_id: str, tz: Union[str, tzinfo], clock: Optional[Callable[[], datetime]] = None):
        self.resolver = resolver
        self.field_id = field_id
        self.tz = tz
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def lines_for_token(self, token: str, user_id: str, reference: datetime) -> List[ReportLine]:
        parsed = parse_token(token)
        if isinstance(parsed.ref, Unparseable):
            logger.debug("Token %r is not a card reference", token)
            return [ReportLine(parsed.raw, ZERO_DURATION, NOT_FOUND_TEXT, kind='not_found')]
        card = self.resolver.resolve(parsed.ref, parsed.scope_hint)
        if card is None:
            return [ReportLine(parsed.raw, ZERO_DURATION, NOT_FOUND_TEXT, kind='not_found')]
        key = card_key(card)
        entries = extract_todays_reports(card, user_id, self.field_id, self.tz, reference)
        if not entries:
            return [ReportLine(key, ZERO_DURATION, NO_ENTRY_TEXT, kind='empty')]
        return [ReportLine(key, format_duration(e.duration_ms), e.description) for e in entries]

    def aggregate(self, tokens: Sequence[str], user_id: str) -> ReportBody:
        reference = self.clock()
        lines: List[ReportLine] = []
        for token in tokens:
            lines.extend(self.lines_for_token(token, user_id, reference))
        return ReportBody(lines)
