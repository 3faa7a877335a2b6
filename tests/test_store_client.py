"""Tests for core.store_client.StoreRESTClient.

The requests.Session is replaced with a MagicMock; no real HTTP calls are made.
"""

from unittest.mock import MagicMock

import pytest
import requests

from core.errors import AuthenticationError, ConflictError, RemoteApiError
from core.session_store import Session
from core.store_client import StoreRESTClient


def _response(status=200, body=None, text=""):
    resp = MagicMock()
    resp.status_code = status
    resp.reason = "Reason"
    if body is None:
        resp.content = text.encode()
        resp.text = text
        resp.json.side_effect = ValueError("no json")
    else:
        resp.content = b"{...}"
        resp.text = str(body)
        resp.json.return_value = body
    return resp


def _client(response=None, side_effect=None):
    client = StoreRESTClient(Session("shop.myshopify.com", "shpat_abc"), api_version="2024-01")
    client._session = MagicMock()
    if side_effect is not None:
        client._session.request.side_effect = side_effect
    else:
        client._session.request.return_value = response
    return client


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


def test_access_token_header_set():
    client = StoreRESTClient(Session("shop.myshopify.com", "shpat_abc"))
    assert client._session.headers["X-Shopify-Access-Token"] == "shpat_abc"


def test_url_for_appends_json_suffix():
    client = _client(_response(body={}))
    assert client.url_for("themes") == "https://shop.myshopify.com/admin/api/2024-01/themes.json"
    assert client.url_for("themes/42/assets") == (
        "https://shop.myshopify.com/admin/api/2024-01/themes/42/assets.json"
    )


def test_get_returns_decoded_body():
    client = _client(_response(body={"themes": [{"id": 1}]}))
    assert client.get("themes") == {"themes": [{"id": 1}]}
    method, url = client._session.request.call_args[0]
    assert method == "GET"
    assert url.endswith("/themes.json")


def test_post_sends_json_payload():
    client = _client(_response(201, body={"page": {"id": 5}}))
    client.post("pages", {"page": {"title": "About Us"}})
    kwargs = client._session.request.call_args[1]
    assert kwargs["json"] == {"page": {"title": "About Us"}}
    assert kwargs["timeout"] == 30


def test_put_and_params():
    client = _client(_response(body={}))
    client.get("products", params={"handle": "x"})
    assert client._session.request.call_args[1]["params"] == {"handle": "x"}
    client.put("shop", {"shop": {}})
    assert client._session.request.call_args[0][0] == "PUT"


def test_empty_body_returns_empty_dict():
    client = _client(_response(200, text=""))
    assert client.delete("webhooks/1") == {}


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------


class TestErrorClassification:
    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_rejections(self, status):
        client = _client(_response(status, body={"errors": "Invalid API key or access token"}))
        with pytest.raises(AuthenticationError, match="Invalid API key"):
            client.get("shop")

    def test_409_is_conflict(self):
        client = _client(_response(409, body={"errors": "Conflict"}))
        with pytest.raises(ConflictError) as exc:
            client.post("themes", {})
        assert exc.value.status_code == 409

    def test_422_taken_is_conflict(self):
        body = {"errors": {"address": ["for this topic has already been taken"]}}
        client = _client(_response(422, body=body))
        with pytest.raises(ConflictError) as exc:
            client.post("webhooks", {})
        assert exc.value.message == "address for this topic has already been taken"

    def test_422_other_is_plain_remote_error(self):
        client = _client(_response(422, body={"errors": {"title": ["can't be blank"]}}))
        with pytest.raises(RemoteApiError) as exc:
            client.post("products", {})
        assert not isinstance(exc.value, ConflictError)
        assert exc.value.status_code == 422
        assert exc.value.path == "products"

    def test_500_is_remote_error(self):
        client = _client(_response(500, text="Internal Server Error"))
        with pytest.raises(RemoteApiError) as exc:
            client.get("themes")
        assert exc.value.status_code == 500
        assert "Internal Server Error" in exc.value.message

    def test_list_errors_joined(self):
        client = _client(_response(400, body={"errors": ["one", "two"]}))
        with pytest.raises(RemoteApiError, match="one; two"):
            client.get("themes")

    def test_connection_error_wrapped(self):
        client = _client(side_effect=requests.ConnectionError("Connection refused"))
        with pytest.raises(RemoteApiError) as exc:
            client.get("themes")
        assert exc.value.status_code is None
        assert "Connection refused" in str(exc.value)

    def test_timeout_wrapped(self):
        client = _client(side_effect=requests.Timeout("read timed out"))
        with pytest.raises(RemoteApiError):
            client.post("pages", {})


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


def _page(items, next_page_info=None):
    resp = _response(body={"products": items})
    resp.links = {}
    if next_page_info:
        resp.links = {"next": {
            "url": f"https://shop.myshopify.com/admin/api/2024-01/products.json?limit=2&page_info={next_page_info}",
            "rel": "next",
        }}
    return resp


class TestGetAll:
    def test_follows_link_cursor_until_last_page(self):
        client = _client(side_effect=[
            _page([{"id": 1}, {"id": 2}], next_page_info="abc"),
            _page([{"id": 3}, {"id": 4}], next_page_info="def"),
            _page([{"id": 5}]),
        ])

        items = client.get_all("products", "products", params={
            "vendor": "GlamorousDesi", "limit": 2, "fields": "id",
        })

        assert [i["id"] for i in items] == [1, 2, 3, 4, 5]
        calls = client._session.request.call_args_list
        assert len(calls) == 3
        assert calls[0][1]["params"] == {"vendor": "GlamorousDesi", "limit": 2, "fields": "id"}
        assert calls[1][1]["params"] == {"limit": 2, "fields": "id", "page_info": "abc"}
        assert calls[2][1]["params"]["page_info"] == "def"

    def test_single_page(self):
        client = _client(_page([{"id": 1}]))
        assert client.get_all("products", "products") == [{"id": 1}]
        assert client._session.request.call_count == 1

    def test_error_on_later_page_propagates(self):
        client = _client(side_effect=[
            _page([{"id": 1}], next_page_info="abc"),
            _response(status=500, body={"errors": "Internal Server Error"}),
        ])
        with pytest.raises(RemoteApiError):
            client.get_all("products", "products")
