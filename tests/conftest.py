"""
Shared fixtures: an in-memory stand-in for the Shopify Admin REST API.

FakeStoreClient implements the StoreRESTClient surface (get/post/put/delete,
shop) against plain dicts, so orchestrator tests can run a full build twice
and inspect what the store ended up with. No HTTP is involved.
"""

import itertools
from typing import Dict, List, Optional

import pytest

from core.errors import ConflictError, RemoteApiError

LIST_RESOURCES = ("custom_collections", "smart_collections", "pages", "products", "webhooks")


class FakeStoreClient:
    def __init__(self, shop: str = "test-store.myshopify.com", processing_polls: int = 1):
        self.shop = shop
        self.processing_polls = processing_polls
        self.themes: List[Dict] = [{"id": 1, "name": "Dawn", "role": "main", "processing": False}]
        self.records: Dict[str, List[Dict]] = {name: [] for name in LIST_RESOURCES}
        self.shop_settings: Dict = {}
        self.assets: Dict[int, Dict] = {}
        self.calls: List[tuple] = []
        self.fail_paths: Dict[str, Exception] = {}
        self._ids = itertools.count(100)
        self._polls_left: Dict[int, int] = {}

    def _check_failure(self, method: str, path: str):
        error = self.fail_paths.get(f"{method} {path}")
        if error is not None:
            raise error

    def _theme(self, theme_id: int) -> Dict:
        for theme in self.themes:
            if theme["id"] == theme_id:
                return theme
        raise RemoteApiError("Not Found", 404, "GET", f"themes/{theme_id}")

    def get(self, path: str, params: Optional[Dict] = None) -> Dict:
        self.calls.append(("GET", path, params))
        self._check_failure("GET", path)
        params = params or {}

        if path == "themes":
            return {"themes": [dict(t) for t in self.themes]}
        if path.startswith("themes/"):
            theme_id = int(path.split("/")[1])
            theme = self._theme(theme_id)
            if self._polls_left.get(theme_id, 0) > 0:
                self._polls_left[theme_id] -= 1
            theme["processing"] = self._polls_left.get(theme_id, 0) > 0
            return {"theme": dict(theme)}
        if path == "products/count":
            return {"count": len(self.records["products"])}
        if path in self.records:
            items = self.records[path]
            if "handle" in params:
                items = [i for i in items if i.get("handle") == params["handle"]]
            return {path: items}
        raise RemoteApiError("Not Found", 404, "GET", path)

    def post(self, path: str, payload: Dict) -> Dict:
        self.calls.append(("POST", path, payload))
        self._check_failure("POST", path)

        if path == "themes":
            theme = dict(payload["theme"], id=next(self._ids), role="unpublished",
                         processing=self.processing_polls > 0)
            self._polls_left[theme["id"]] = self.processing_polls
            self.themes.append(theme)
            return {"theme": dict(theme)}

        (root_key, record), = payload.items()
        if path == "webhooks":
            for existing in self.records["webhooks"]:
                if existing["topic"] == record["topic"] and existing["address"] == record["address"]:
                    raise ConflictError("address for this topic has already been taken", 422,
                                        "POST", path)
        record = dict(record, id=next(self._ids))
        self.records[path].append(record)
        return {root_key: record}

    def put(self, path: str, payload: Dict) -> Dict:
        self.calls.append(("PUT", path, payload))
        self._check_failure("PUT", path)

        if path == "shop":
            self.shop_settings.update(payload["shop"])
            return {"shop": dict(self.shop_settings)}
        parts = path.split("/")
        if parts[0] == "themes" and len(parts) == 3 and parts[2] == "assets":
            self.assets[int(parts[1])] = payload["asset"]
            return {"asset": payload["asset"]}
        if parts[0] == "themes" and len(parts) == 2:
            theme = self._theme(int(parts[1]))
            if payload["theme"].get("role") == "main":
                for other in self.themes:
                    if other["role"] == "main":
                        other["role"] = "unpublished"
            theme.update(payload["theme"])
            return {"theme": dict(theme)}
        if parts[0] == "products" and len(parts) == 2:
            for product in self.records["products"]:
                if product["id"] == int(parts[1]):
                    product.update(payload["product"])
                    return {"product": dict(product)}
        raise RemoteApiError("Not Found", 404, "PUT", path)

    def get_all(self, path: str, root_key: str, params: Optional[Dict] = None) -> List[Dict]:
        return self.get(path, params).get(root_key, [])

    def set_processing_polls(self, theme_id: int, polls: int):
        """Make an existing theme report processing for the next `polls` GETs."""
        self._polls_left[theme_id] = polls
        self._theme(theme_id)["processing"] = polls > 0

    def delete(self, path: str) -> Dict:
        self.calls.append(("DELETE", path, None))
        return {}

    def paths_called(self, method: str) -> List[str]:
        return [path for m, path, _ in self.calls if m == method]


@pytest.fixture()
def fake_store():
    return FakeStoreClient()
