"""
Shopify Admin REST Client - Handles all REST endpoint interactions.

Every call is authenticated with the shop's offline access token via the
X-Shopify-Access-Token header. Paths are resource names relative to the
versioned Admin API root; the ".json" suffix is added here:

- GET  /admin/api/{version}/themes.json
- POST /admin/api/{version}/custom_collections.json
- PUT  /admin/api/{version}/themes/{id}/assets.json

Error classification:
    401, 403                          -> AuthenticationError
    409                               -> ConflictError
    422 "taken" / "already exists"    -> ConflictError
    any other non-2xx                 -> RemoteApiError
    connection error / timeout        -> RemoteApiError (status_code=None)

Pagination:
    List endpoints are cursor-paginated. The next page is announced in the
    Link header (rel="next") as a page_info token; get_all() follows it.
    A page_info request may only repeat "limit" and "fields".

No retries are made here; callers decide whether an error is tolerable.
"""

import requests
from typing import Dict, Any, List, Optional
from urllib.parse import parse_qs, urlparse

from .errors import RemoteApiError, ConflictError, AuthenticationError
from .session_store import Session

CONFLICT_MARKERS = ("taken", "already exists")
CURSOR_PARAMS = ("limit", "fields")


class StoreRESTClient:
    """Client for the Shopify Admin REST API bound to a single shop session.

    Attributes:
        shop: The *.myshopify.com domain every call goes to.
        api_version: Admin API version segment (e.g. "2024-01").
        base_url: https://{shop}/admin/api/{api_version}
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        session: Session,
        api_version: str = "2024-01",
        debug: bool = False,
        timeout: int = 30,
    ):
        """Initialize the client.

        Args:
            session: Shop and offline access token to authenticate with.
            api_version: Admin API version.
            debug: If True, print every request URL.
            timeout: Per-request timeout in seconds.
        """
        self.shop = session.shop
        self.api_version = api_version
        self.debug = debug
        self.timeout = timeout
        self.base_url = f"https://{self.shop}/admin/api/{api_version}"
        self._session = requests.Session()
        self._session.headers.update({
            "X-Shopify-Access-Token": session.access_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def get(self, path: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        """GET a resource.

        Args:
            path: Resource path without ".json" (e.g. "themes/42").
            params: Optional query parameters.

        Returns:
            The decoded JSON body ({} for an empty body).
        """
        return self._request("GET", path, params=params)

    def get_all(self, path: str, root_key: str, params: Optional[Dict] = None) -> List[Dict[str, Any]]:
        """GET every page of a list endpoint, following the Link cursor.

        Args:
            path: List resource path (e.g. "products").
            root_key: Key holding the list in each page (e.g. "products").
            params: Filters for the first page.

        Returns:
            The concatenated items of all pages.
        """
        items: List[Dict[str, Any]] = []
        params = dict(params or {})

        while True:
            response = self._send("GET", path, params=params)
            items.extend(self._decode(response).get(root_key, []))

            page_info = self._next_page_info(response)
            if not page_info:
                return items
            params = {k: v for k, v in params.items() if k in CURSOR_PARAMS}
            params["page_info"] = page_info
            if self.debug:
                print(f"  {path}: {len(items)} fetched, following next page")

    def post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST a JSON payload. Returns the decoded response body."""
        return self._request("POST", path, payload=payload)

    def put(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """PUT a JSON payload. Returns the decoded response body."""
        return self._request("PUT", path, payload=payload)

    def delete(self, path: str) -> Dict[str, Any]:
        return self._request("DELETE", path)

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.strip('/')}.json"

    def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict] = None,
        params: Optional[Dict] = None,
    ) -> Dict[str, Any]:
        return self._decode(self._send(method, path, payload, params))

    def _send(
        self,
        method: str,
        path: str,
        payload: Optional[Dict] = None,
        params: Optional[Dict] = None,
    ):
        url = self.url_for(path)

        if self.debug:
            print(f"  {method} {url}")

        try:
            response = self._session.request(
                method, url, json=payload, params=params, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise RemoteApiError(str(e), None, method, path) from e

        if response.status_code >= 400:
            raise self._classify(response, method, path)
        return response

    @staticmethod
    def _decode(response) -> Dict[str, Any]:
        if not response.content:
            return {}
        return response.json()

    @staticmethod
    def _next_page_info(response) -> Optional[str]:
        next_url = (response.links or {}).get("next", {}).get("url")
        if not next_url:
            return None
        values = parse_qs(urlparse(next_url).query).get("page_info")
        return values[0] if values else None

    def _classify(self, response, method: str, path: str) -> Exception:
        status = response.status_code
        message = self._error_message(response)

        if status in (401, 403):
            return AuthenticationError(
                f"{method} {path} rejected by {self.shop} ({status}): {message}"
            )
        if status == 409:
            return ConflictError(message, status, method, path)
        if status == 422 and any(m in message.lower() for m in CONFLICT_MARKERS):
            return ConflictError(message, status, method, path)
        return RemoteApiError(message, status, method, path)

    @staticmethod
    def _error_message(response) -> str:
        """Flatten Shopify's "errors" field (string, list or field -> messages dict)."""
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason or ""

        errors = body.get("errors", body.get("error")) if isinstance(body, dict) else None
        if errors is None:
            return response.text or ""
        if isinstance(errors, str):
            return errors
        if isinstance(errors, list):
            return "; ".join(str(e) for e in errors)
        if isinstance(errors, dict):
            parts = []
            for field, messages in errors.items():
                if isinstance(messages, list):
                    messages = ", ".join(str(m) for m in messages)
                parts.append(f"{field} {messages}")
            return "; ".join(parts)
        return str(errors)
