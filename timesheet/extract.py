"""
Pull a user's logged time for "today" out of a card's time-tracking custom field.
"""
from collections.abc import Mapping
from datetime import datetime, time, timezone, tzinfo
from typing import List, Optional, Tuple, Union
from zoneinfo import ZoneInfo

from normalize.models import LoggedTimeSubRecord, RemoteItem

NO_DESCRIPTION = '(no description)'


def as_zone(tz: Union[str, tzinfo]) -> tzinfo:
    return ZoneInfo(tz) if isinstance(tz, str) else tz


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO-8601 createdAt value. Naive timestamps are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith('Z') or text.endswith('z'):
        text = text[:-1] + '+00:00'
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def day_bounds(reference: datetime, tz: Union[str, tzinfo]) -> Tuple[datetime, datetime]:
    """Closed [start, end] of the local calendar day containing reference."""
    zone = as_zone(tz)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)
    local_day = reference.astimezone(zone).date()
    start = datetime.combine(local_day, time.min, tzinfo=zone)
    end = datetime.combine(local_day, time.max, tzinfo=zone)
    return start, end


def is_same_local_day(value: Optional[datetime], reference: datetime, tz: Union[str, tzinfo]) -> bool:
    if value is None:
        return False
    start, end = day_bounds(reference, tz)
    return start <= value.astimezone(as_zone(tz)) <= end


def extract_todays_reports(
    item: RemoteItem,
    user_id: str,
    field_id: str,
    tz: Union[str, tzinfo],
    reference: Optional[datetime] = None,
) -> List[LoggedTimeSubRecord]:
    """
    Return user_id's entries in the card's time field whose createdAt falls on the
    reference day in tz, in stored order. A card without the field gives [].
    """
    field = item.custom_fields.get(field_id)
    reports = field.get('reports') if isinstance(field, Mapping) else None
    if not isinstance(reports, Mapping):
        return []
    entries = reports.get(user_id)
    if not isinstance(entries, list):
        return []
    reference = reference or datetime.now(timezone.utc)
    records: List[LoggedTimeSubRecord] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        created = parse_timestamp(entry.get('createdAt'))
        if not is_same_local_day(created, reference, tz):
            continue
        records.append(LoggedTimeSubRecord(
            duration_ms=int(entry.get('value') or 0),
            description=entry.get('description') or NO_DESCRIPTION,
            created_at=created,
        ))
    return records
