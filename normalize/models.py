"""
Normalized Favro entities and the persisted link/report records.
"""

from datetime import datetime
from typing import List, Optional, Dict, Any, Mapping
from types import MappingProxyType


class RemoteItem:
    """
    A resolved Favro card. Read-only once built; a card needed with more detail is fetched
    again rather than updated.
    """
    __slots__ = ('common_id', 'name', 'prefix', 'sequence', 'custom_fields', 'raw')

    def __init__(self, common_id: str, name: str, prefix: Optional[str], sequence: Optional[int], custom_fields: Mapping[str, Dict[str, Any]], raw: Optional[Dict[str, Any]] = None):
        object.__setattr__(self, 'common_id', common_id)
        object.__setattr__(self, 'name', name)
        object.__setattr__(self, 'prefix', prefix)
        object.__setattr__(self, 'sequence', sequence)
        object.__setattr__(self, 'custom_fields', MappingProxyType(dict(custom_fields)))  # customFieldId -> field payload
        object.__setattr__(self, 'raw', MappingProxyType(dict(raw or {})))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __eq__(self, other):
        return isinstance(other, RemoteItem) and other.common_id == self.common_id

    def __hash__(self):
        return hash(self.common_id)

    def __repr__(self):
        return f"RemoteItem(common_id={self.common_id!r}, prefix={self.prefix!r}, sequence={self.sequence!r})"


class LoggedTimeSubRecord:
    """
    One logged-time entry from a card's time-tracking field.
    """
    def __init__(self, duration_ms: int, description: str, created_at: datetime):
        self.duration_ms = duration_ms
        self.description = description
        self.created_at = created_at  # aware datetime

    def __eq__(self, other):
        return (
            isinstance(other, LoggedTimeSubRecord)
            and (other.duration_ms, other.description, other.created_at) == (self.duration_ms, self.description, self.created_at)
        )

    def __repr__(self):
        return f"LoggedTimeSubRecord({self.duration_ms!r}, {self.description!r}, {self.created_at.isoformat()!r})"


class FavroUser:
    def __init__(self, user_id: str, full_name: str, email: str):
        self.user_id = user_id
        self.full_name = full_name
        self.email = email

    @property
    def display_name(self) -> str:
        return self.full_name or self.email


class IdentityLink:
    """Caller id on the chat side mapped to a Favro userId."""
    def __init__(self, caller_id: str, user_id: str):
        self.caller_id = caller_id
        self.user_id = user_id


class LastReportRecord:
    def __init__(self, caller_id: str, channel_id: str, message_id: str):
        self.caller_id = caller_id
        self.channel_id = channel_id
        self.message_id = message_id


__all__: List[str] = ['RemoteItem', 'LoggedTimeSubRecord', 'FavroUser', 'IdentityLink', 'LastReportRecord']
