"""
Webhook Registrar - Declares the event subscriptions automation depends on.

POST /admin/api/{version}/webhooks.json per topic. Shopify answers 422
"address for this topic has already been taken" for a duplicate, which the
client classifies as ConflictError; the registrar tolerates it. Nothing is
deduplicated client-side.

Also verifies the HMAC signature Shopify puts on webhook deliveries.
"""

import base64
import hashlib
import hmac
from dataclasses import dataclass
from typing import Iterable, List

from .errors import ConflictError
from .step_runner import ItemOutcome, run_idempotent

ORDER_CREATED_PATH = "/webhooks/order-created"
PRODUCT_CREATED_PATH = "/webhooks/product-created"


@dataclass(frozen=True)
class WebhookSubscription:
    topic: str
    address: str
    format: str = "json"


def default_subscriptions(app_url: str) -> List[WebhookSubscription]:
    """The subscriptions automation needs, addressed under app_url."""
    app_url = app_url.rstrip("/")
    return [
        WebhookSubscription("orders/create", f"{app_url}{ORDER_CREATED_PATH}"),
        WebhookSubscription("products/create", f"{app_url}{PRODUCT_CREATED_PATH}"),
    ]


class WebhookRegistrar:
    """Creates webhook subscriptions through a StoreRESTClient."""

    def __init__(self, client, debug: bool = False):
        self.client = client
        self.debug = debug

    def _create(self, subscription: WebhookSubscription):
        self.client.post("webhooks", {
            "webhook": {
                "topic": subscription.topic,
                "address": subscription.address,
                "format": subscription.format,
            }
        })

    def register(self, topic: str, address: str, format: str = "json") -> bool:
        """Create the subscription. Returns False if it already existed."""
        try:
            self._create(WebhookSubscription(topic, address, format))
        except ConflictError:
            if self.debug:
                print(f"  Webhook {topic} already registered")
            return False
        return True

    def register_all(self, subscriptions: Iterable[WebhookSubscription]) -> ItemOutcome:
        """Create every subscription, tolerating ones that already exist.

        Args:
            subscriptions: Topic and address pairs to register.

        Returns:
            ItemOutcome tallying created, existing and failed subscriptions.
        """
        return run_idempotent(
            subscriptions,
            create=self._create,
            label=lambda s: f"webhook {s.topic}",
            debug=self.debug,
        )


def verify_webhook_hmac(body: bytes, hmac_header: str, secret: str) -> bool:
    """Check X-Shopify-Hmac-Sha256 (base64 HMAC-SHA256 of the raw body)."""
    if not hmac_header or not secret:
        return False
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    expected = base64.b64encode(digest).decode("utf-8")
    return hmac.compare_digest(expected, hmac_header)
