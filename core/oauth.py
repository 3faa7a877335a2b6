"""
Shopify OAuth - App install handshake (authorization code grant).

    begin_auth(shop)                 -> https://{shop}/admin/oauth/authorize?...
    complete_auth_callback(params)   -> Session

The callback is checked before the code is exchanged:
  - shop must be a *.myshopify.com domain
  - state must match a nonce issued by begin_auth less than STATE_TTL_SECONDS
    ago (single use; expired nonces are evicted on every call)
  - hmac must be the hex HMAC-SHA256 of the sorted query string, keyed with
    the app secret

Token exchange:
    POST https://{shop}/admin/oauth/access_token
    Body: {"client_id": ..., "client_secret": ..., "code": ...}
    Response: {"access_token": "shpat_...", "scope": "read_products,..."}

Every failure raises AuthenticationError.

Signed links:
    After install the merchant is sent to /setup with a query signed the same
    way Shopify signs its own app URLs (shop, timestamp, hmac). The setup page
    carries that query into POST /api/build-store, where verify_signed_query()
    is the proof that the caller is the merchant and may use the stored token.
"""

import hashlib
import hmac
import re
import secrets
import threading
import time
from typing import Callable, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

import requests

from .errors import AuthenticationError
from .session_store import Session

SHOP_DOMAIN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9\-]*\.myshopify\.com$")

STATE_TTL_SECONDS = 600
SIGNED_QUERY_MAX_AGE = 3600


def is_valid_shop(shop: str) -> bool:
    return bool(shop and SHOP_DOMAIN.match(shop))


def query_hmac(params: Mapping[str, str], secret: str) -> str:
    """Hex HMAC-SHA256 of the sorted "k=v&k=v" query, ignoring hmac/signature.

    Args:
        params: Query parameters as received (values already URL-decoded).
        secret: The app's API secret.

    Returns:
        The lowercase hex digest Shopify sends as the "hmac" parameter.
    """
    message = "&".join(
        f"{k}={v}" for k, v in sorted(params.items()) if k not in ("hmac", "signature")
    )
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def sign_query(params: Mapping[str, str], secret: str, now: Optional[float] = None) -> Dict[str, str]:
    """Return params plus a timestamp and the matching hmac."""
    signed = dict(params)
    signed["timestamp"] = str(int(now if now is not None else time.time()))
    signed["hmac"] = query_hmac(signed, secret)
    return signed


def verify_signed_query(
    params: Mapping[str, str],
    secret: str,
    max_age: float = SIGNED_QUERY_MAX_AGE,
    now: Optional[float] = None,
) -> bool:
    """Check a query signed by sign_query() or by Shopify itself.

    Args:
        params: The query, including "hmac" and "timestamp".
        secret: The app's API secret. An empty secret never verifies.
        max_age: Seconds a signed query stays valid.
        now: Current epoch seconds (defaults to time.time()).

    Returns:
        True only if the hmac matches and the timestamp is recent.
    """
    if not secret or not params.get("hmac"):
        return False
    if not hmac.compare_digest(query_hmac(params, secret), str(params["hmac"])):
        return False

    try:
        issued = int(params.get("timestamp", ""))
    except ValueError:
        return False
    now = now if now is not None else time.time()
    return 0 <= now - issued <= max_age


class ShopifyOAuth:
    """Offline-token OAuth flow for a single Shopify app.

    Attributes:
        api_key: App client id.
        api_secret: App client secret; also the HMAC key.
        scopes: Access scopes requested at install.
        host: Public host the callback is served on.
        state_ttl: Seconds an issued state nonce stays valid.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        scopes: List[str],
        host: str,
        callback_path: str = "/auth/callback",
        timeout: int = 30,
        state_ttl: float = STATE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        debug: bool = False,
    ):
        self.api_key = api_key
        self.api_secret = api_secret
        self.scopes = scopes
        self.host = host.rstrip("/")
        self.callback_path = callback_path
        self.timeout = timeout
        self.state_ttl = state_ttl
        self.debug = debug
        self._clock = clock
        # state -> (shop, issued_at)
        self._pending_states: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    @property
    def redirect_uri(self) -> str:
        host = self.host if self.host.startswith("http") else f"https://{self.host}"
        return f"{host}{self.callback_path}"

    @property
    def pending_state_count(self) -> int:
        with self._lock:
            return len(self._pending_states)

    def _evict_expired_states(self, now: float):
        expired = [s for s, (_, issued) in self._pending_states.items() if now - issued > self.state_ttl]
        for state in expired:
            del self._pending_states[state]

    def begin_auth(self, shop: str) -> str:
        """Issue a state nonce and build the consent URL.

        Args:
            shop: The shop's *.myshopify.com domain.

        Returns:
            The https://{shop}/admin/oauth/authorize URL to redirect to.

        Raises:
            ValueError: shop is not a valid myshopify domain.
        """
        if not is_valid_shop(shop):
            raise ValueError(f"Invalid shop domain: {shop!r}")

        state = secrets.token_urlsafe(16)
        now = self._clock()
        with self._lock:
            self._evict_expired_states(now)
            self._pending_states[state] = (shop, now)

        query = urlencode({
            "client_id": self.api_key,
            "scope": ",".join(self.scopes),
            "redirect_uri": self.redirect_uri,
            "state": state,
        })
        if self.debug:
            print(f"  Starting OAuth for {shop}")
        return f"https://{shop}/admin/oauth/authorize?{query}"

    def complete_auth_callback(self, params: Mapping[str, str]) -> Session:
        """Validate the callback query and exchange the code for a token.

        Args:
            params: Query parameters of GET /auth/callback.

        Returns:
            An offline Session for the shop.

        Raises:
            AuthenticationError: Any check or the token exchange failed.
        """
        shop = params.get("shop", "")
        if not is_valid_shop(shop):
            raise AuthenticationError(f"Invalid shop domain in callback: {shop!r}")

        now = self._clock()
        with self._lock:
            pending = self._pending_states.pop(params.get("state", ""), None)
            self._evict_expired_states(now)
        if pending is None or pending[0] != shop:
            raise AuthenticationError("OAuth state mismatch")
        if now - pending[1] > self.state_ttl:
            raise AuthenticationError("OAuth state expired; restart the install")

        if not hmac.compare_digest(query_hmac(params, self.api_secret), params.get("hmac", "")):
            raise AuthenticationError("OAuth callback HMAC validation failed")

        code = params.get("code")
        if not code:
            raise AuthenticationError("OAuth callback is missing the authorization code")

        return Session(shop=shop, is_online=False, **self._exchange_code(shop, code))

    def _exchange_code(self, shop: str, code: str) -> Dict[str, str]:
        url = f"https://{shop}/admin/oauth/access_token"
        payload = {
            "client_id": self.api_key,
            "client_secret": self.api_secret,
            "code": code,
        }

        try:
            response = requests.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise AuthenticationError(f"Access token exchange failed for {shop}: {e}") from e

        access_token = data.get("access_token")
        if not access_token:
            raise AuthenticationError("Token exchange response is missing access_token")

        if self.debug:
            print(f"  Access token acquired for {shop}")

        return {"access_token": access_token, "scope": data.get("scope", "")}
