import sys
import os
from unittest.mock import Mock

import pytest

# Add project root to sys.path so tests can import top-level modules like 'resolve', 'ingest', 'timesheet', etc.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from errors import ScopeDenied  # noqa: E402


def make_response(status=200, payload=None, headers=None, text=''):
    resp = Mock()
    resp.status_code = status
    resp.headers = headers or {}
    resp.json.return_value = payload if payload is not None else {}
    resp.text = text
    return resp


class FakeFavro:
    """In-memory stand-in for FavroClient.

    widgets maps widget id -> list of pages (each a list of card dicts) or 'denied'.
    details maps cardCommonId -> detailed card dict.
    """

    def __init__(self, widgets=None, details=None, users=None, fail_on=None):
        self.widgets = widgets or {}
        self.details = details or {}
        self.users = users or []
        self.fail_on = fail_on
        self.calls = []

    def list_page(self, resource, query, cursor=None):
        widget = query.get('widgetCommonId')
        page = cursor if cursor is not None else 0
        self.calls.append(('list', widget, page))
        if self.fail_on is not None and self.fail_on(('list', widget, page)):
            from errors import GatewayError
            raise GatewayError('boom', status=500, endpoint='/cards')
        pages = self.widgets.get(widget, [[]])
        if pages == 'denied':
            raise ScopeDenied(widget)
        next_cursor = page + 1 if page + 1 < len(pages) else None
        return pages[page], next_cursor, len(pages)

    def get_by_common_id(self, resource, common_id, query=None):
        self.calls.append(('get', common_id))
        if self.fail_on is not None and self.fail_on(('get', common_id)):
            from errors import GatewayError
            raise GatewayError('boom', status=500, endpoint='/cards')
        return self.details.get(common_id)

    def find_user_by_email(self, email):
        from normalize.util import normalize_user
        self.calls.append(('users', email))
        for u in self.users:
            if u['email'].lower() == email.lower():
                return normalize_user(u)
        return None


def time_card(common_id, prefix, seq, reports, field_id='cf-time'):
    return {
        'cardCommonId': common_id,
        'name': f'{prefix}-{seq} card',
        'prefix': prefix,
        'sequentialId': seq,
        'customFields': [{'customFieldId': field_id, 'reports': reports}],
    }


@pytest.fixture
def fake_favro():
    return FakeFavro()
