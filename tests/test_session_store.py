"""Tests for core.session_store.SessionStore."""

import json

from core.session_store import Session, SessionStore


def test_store_and_load_round_trip(tmp_path):
    store = SessionStore(str(tmp_path / "data" / "sessions.json"))
    store.store_session(Session("a.myshopify.com", "shpat_a", scope="read_products"))

    loaded = store.load_session("a.myshopify.com")
    assert loaded == Session("a.myshopify.com", "shpat_a", False, "read_products")


def test_missing_shop_returns_none(tmp_path):
    assert SessionStore(str(tmp_path / "sessions.json")).load_session("x.myshopify.com") is None


def test_store_replaces_existing_session(tmp_path):
    store = SessionStore(str(tmp_path / "sessions.json"))
    store.store_session(Session("a.myshopify.com", "old"))
    store.store_session(Session("a.myshopify.com", "new"))
    store.store_session(Session("b.myshopify.com", "other"))

    assert store.load_session("a.myshopify.com").access_token == "new"
    with open(tmp_path / "sessions.json") as f:
        assert set(json.load(f)["sessions"]) == {"a.myshopify.com", "b.myshopify.com"}


def test_delete_session(tmp_path):
    store = SessionStore(str(tmp_path / "sessions.json"))
    store.store_session(Session("a.myshopify.com", "t"))
    assert store.delete_session("a.myshopify.com") is True
    assert store.delete_session("a.myshopify.com") is False
    assert store.load_session("a.myshopify.com") is None


def test_corrupt_file_treated_as_empty(tmp_path):
    path = tmp_path / "sessions.json"
    path.write_text("{not json")
    assert SessionStore(str(path), debug=True).load_session("a.myshopify.com") is None
