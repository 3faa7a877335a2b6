"""
Maintenance - Jobs run by the scheduler after a store is built.

  sync_products          daily: refresh the product count for the shop
                         (supplier feeds are not wired in yet)
  cleanup_old_products   weekly: archive seed-vendor products older than
                         max_age_days (every page of the product list)
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from config import CLEANUP_MAX_AGE_DAYS

from .catalog import VENDOR


def sync_products(client) -> int:
    print(f"Syncing products for {client.shop}...")
    count = client.get("products/count").get("count", 0)
    print(f"  {client.shop} has {count} products")
    return count


def cleanup_old_products(
    client,
    max_age_days: int = CLEANUP_MAX_AGE_DAYS,
    vendor: str = VENDOR,
    now: Optional[datetime] = None,
) -> List[int]:
    """Archive products of `vendor` created more than max_age_days ago.

    Args:
        client: StoreRESTClient for the shop.
        max_age_days: Age after which a product is archived.
        vendor: Only products of this vendor are touched.
        now: Reference time (defaults to the current UTC time).

    Returns:
        Ids of the archived products.
    """
    print(f"Cleaning up old products for {client.shop}...")
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=max_age_days)

    products = client.get_all("products", "products", params={
        "vendor": vendor,
        "status": "active",
        "created_at_max": cutoff.isoformat(),
        "fields": "id,title,created_at",
        "limit": 250,
    })

    archived = []
    for product in products:
        client.put(f"products/{product['id']}", {
            "product": {"id": product["id"], "status": "archived"}
        })
        archived.append(product["id"])
        print(f"  Archived: {product.get('title', product['id'])}")

    print(f"  Archived {len(archived)} product(s) created before {cutoff:%Y-%m-%d}")
    return archived
