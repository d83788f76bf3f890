"""
Error types shared by the gateway, resolver and service layers.
"""
from typing import Optional, Dict, Any


class TimesheetError(Exception):
    """Base class for every error raised by this project."""


class UserFacingError(TimesheetError):
    """An error whose message is safe to show to the person who asked for the report."""


class UnlinkedCallerError(UserFacingError):
    def __init__(self, caller_id: str):
        super().__init__("You are not linked to Favro yet. Run `link --email <your-favro-email>` first.")
        self.caller_id = caller_id


class UserNotFoundError(UserFacingError):
    def __init__(self, email: str):
        super().__init__(f"Couldn't find a Favro user with email {email}. Check spelling or ask an admin.")
        self.email = email


class NothingToDeleteError(UserFacingError):
    def __init__(self, caller_id: str, channel_id: str):
        super().__init__("There is no report of yours in this channel to delete.")
        self.caller_id = caller_id
        self.channel_id = channel_id


class ConfigurationError(UserFacingError):
    """Raised when a required setting is missing."""


class ScopeDenied(TimesheetError):
    """A widget refused to list its cards (HTTP 403)."""

    def __init__(self, widget_id: str):
        super().__init__(f"Access denied to widget {widget_id}")
        self.widget_id = widget_id


class GatewayError(TimesheetError):
    """
    A Favro call failed for a reason other than a per-widget denial.

    status is None when no response was received (timeout, connection failure).
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        method: str = 'GET',
        endpoint: str = '',
        params: Optional[Dict[str, Any]] = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.status = status
        self.method = method
        self.endpoint = endpoint
        self.params = params or {}
        self.body = body

    def diagnostics(self) -> Dict[str, Any]:
        return {
            'status': self.status,
            'method': self.method,
            'endpoint': self.endpoint,
            'params': self.params,
            'body': self.body,
        }
