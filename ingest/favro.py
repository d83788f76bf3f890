"""
Favro REST client used by the resolver and the link command.

Every request is authenticated with the account email and API token, scoped with the
organizationId header, and echoes the backend identifier Favro last handed out so that
paginated follow-up requests land on the same backend.
"""

import logging
from typing import List, Dict, Any, Optional, Tuple, Iterator

import requests

from errors import GatewayError, ScopeDenied
from normalize.models import FavroUser
from normalize.util import normalize_user

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://favro.com/api/v1"
BACKEND_HEADER = "X-Favro-Backend-Identifier"


class BackendAffinity:
    """Single slot holding the most recent backend identifier seen from Favro."""

    def __init__(self, value: Optional[str] = None):
        self.value = value

    def update(self, value: Optional[str]):
        if value:
            self.value = value


# lives as long as the process; clients share it unless given their own
PROCESS_AFFINITY = BackendAffinity()


class PageCursor:
    """Favro continuation: the requestId of the first page plus the page index to fetch."""

    def __init__(self, request_id: str, page: int):
        self.request_id = request_id
        self.page = page

    def __repr__(self):
        return f"PageCursor({self.request_id!r}, {self.page!r})"


class FavroClient:
    def __init__(
        self,
        email: str,
        token: str,
        organization_id: str,
        base_url: str = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
        affinity: Optional[BackendAffinity] = None,
    ):
        self.organization_id = organization_id
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip('/')
        self.timeout = timeout
        self.affinity = affinity if affinity is not None else PROCESS_AFFINITY
        self.session = session or requests.Session()
        self.session.auth = (email, token)
        self.session.headers.update({"Accept": "application/json"})

    def _headers(self) -> Dict[str, str]:
        headers = {"organizationId": self.organization_id}
        if self.affinity.value:
            headers[BACKEND_HEADER] = self.affinity.value
        return headers

    def _get(self, resource: str, params: Dict[str, Any]) -> requests.Response:
        url = f"{self.base_url}/{resource.lstrip('/')}"
        try:
            resp = self.session.get(url, params=params, headers=self._headers(), timeout=self.timeout)
        except requests.Timeout as ex:
            raise GatewayError(f"Favro request timed out: {ex}", endpoint=url, params=params) from ex
        except requests.ConnectionError as ex:
            raise GatewayError(f"Favro connection failed: {ex}", endpoint=url, params=params) from ex
        except requests.RequestException as ex:
            raise GatewayError(f"Favro request failed: {ex}", endpoint=url, params=params) from ex
        self.affinity.update((resp.headers or {}).get(BACKEND_HEADER))
        return resp

    @staticmethod
    def _body(resp: requests.Response):
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def _payload(self, resp: requests.Response, resource: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Decoded JSON object of a 2xx response; anything else is a GatewayError."""
        try:
            data = resp.json()
        except ValueError as ex:
            raise GatewayError(
                f"Favro sent a non-JSON body on {resource}",
                status=resp.status_code,
                endpoint=f"{self.base_url}/{resource.lstrip('/')}",
                params=params,
                body=resp.text,
            ) from ex
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise GatewayError(
                f"Favro sent an unexpected payload on {resource}",
                status=resp.status_code,
                endpoint=f"{self.base_url}/{resource.lstrip('/')}",
                params=params,
                body=data,
            )
        return data

    def _raise_for_status(self, resp: requests.Response, resource: str, params: Dict[str, Any]):
        if 200 <= resp.status_code < 300:
            return
        raise GatewayError(
            f"Favro error {resp.status_code} on {resource}",
            status=resp.status_code,
            endpoint=f"{self.base_url}/{resource.lstrip('/')}",
            params=params,
            body=self._body(resp),
        )

    def list_page(self, resource: str, query: Dict[str, Any], cursor: Optional[PageCursor] = None) -> Tuple[List[Dict[str, Any]], Optional[PageCursor], int]:
        """Fetch one page of a list endpoint.

        Returns (entities, next_cursor, total_pages); next_cursor is None after the last page.
        Raises ScopeDenied on 403 and GatewayError on any other failure.
        """
        params = dict(query)
        page = 0
        if cursor is not None:
            params["requestId"] = cursor.request_id
            params["page"] = cursor.page
            page = cursor.page
        resp = self._get(resource, params)
        if resp.status_code == 403:
            raise ScopeDenied(str(query.get("widgetCommonId") or resource))
        self._raise_for_status(resp, resource, params)
        data = self._payload(resp, resource, params)
        pages = int(data.get("pages") or 1)
        request_id = data.get("requestId")
        next_cursor = PageCursor(request_id, page + 1) if request_id and page + 1 < pages else None
        return data.get("entities") or [], next_cursor, pages

    def iter_entities(self, resource: str, query: Dict[str, Any], max_pages: Optional[int] = None) -> Iterator[Dict[str, Any]]:
        """Yield entities page by page, stopping after max_pages pages when given."""
        cursor = None
        fetched = 0
        while True:
            entities, cursor, _ = self.list_page(resource, query, cursor)
            fetched += 1
            for entity in entities:
                yield entity
            if cursor is None or (max_pages is not None and fetched >= max_pages):
                return

    def get_by_common_id(self, resource: str, common_id: str, query: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """Direct lookup by cardCommonId. A 403 means the card is outside our reach: None."""
        params = {"cardCommonId": common_id}
        params.update(query or {})
        resp = self._get(resource, params)
        if resp.status_code == 403:
            logger.debug("Direct lookup of %s denied", common_id)
            return None
        self._raise_for_status(resp, resource, params)
        entities = self._payload(resp, resource, params).get("entities") or []
        return entities[0] if entities else None

    def find_user_by_email(self, email: str) -> Optional[FavroUser]:
        wanted = (email or '').strip().lower()
        try:
            for raw in self.iter_entities("users", {}):
                if (raw.get("email") or '').lower() == wanted:
                    return normalize_user(raw)
        except ScopeDenied as ex:
            # /users is not widget-scoped
            raise GatewayError("Favro refused to list users", status=403, endpoint=f"{self.base_url}/users") from ex
        return None
