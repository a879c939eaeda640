"""Unit tests for Supabase client query encoding and error normalization."""

from __future__ import annotations

import json
from io import BytesIO
from urllib.error import HTTPError

import pytest

from backend.db.supabase_client import SupabaseClient, SupabaseSettings


def _build_client() -> SupabaseClient:
    return SupabaseClient(
        SupabaseSettings(
            url="https://example.supabase.co",
            service_role_key="service-role",
            timeout_seconds=2.5,
        )
    )


class _Response:
    def __init__(self, body: bytes, headers: dict[str, str] | None = None) -> None:
        self._body = body
        self.headers = headers or {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def read(self) -> bytes:
        return self._body


def test_get_rows_uses_doseq_and_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request, timeout):
        assert timeout == 2.5
        assert "date_of_sale=gte.2022-03-01T00%3A00%3A00%2B00%3A00" in request.full_url
        assert "date_of_sale=lt.2022-04-01T00%3A00%3A00%2B00%3A00" in request.full_url
        return _Response(b"[]")

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows, total = client.get_rows(
        table="product_transactions",
        query=[
            ("date_of_sale", "gte.2022-03-01T00:00:00+00:00"),
            ("date_of_sale", "lt.2022-04-01T00:00:00+00:00"),
        ],
        with_count=False,
    )

    assert rows == []
    assert total is None


def test_get_rows_parses_exact_count(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request, timeout):
        assert request.get_header("Prefer") == "count=exact"
        return _Response(b'[{"id": 1}]', headers={"content-range": "0-0/42"})

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows, total = client.get_rows(table="product_transactions", query={"select": "id"}, with_count=True)

    assert rows == [{"id": 1}]
    assert total == 42


def test_get_rows_includes_status_and_body_on_http_error(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _raise_http_error(_request, timeout):
        raise HTTPError(
            url="https://example.supabase.co/rest/v1/product_transactions",
            code=400,
            msg="Bad Request",
            hdrs=None,
            fp=BytesIO(b"Bad Request from Supabase"),
        )

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _raise_http_error)

    with pytest.raises(RuntimeError, match="status 400") as error:
        client.get_rows(table="product_transactions", query={"select": "*"}, with_count=False)

    assert "Bad Request from Supabase" in str(error.value)


def test_post_rows_sends_json_body(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request, timeout):
        assert request.get_method() == "POST"
        assert request.full_url == "https://example.supabase.co/rest/v1/product_transactions"
        assert request.get_header("Content-type") == "application/json"
        return _Response(request.data)

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows = client.post_rows(table="product_transactions", payload=[{"id": 1}, {"id": 2}])

    assert rows == [{"id": 1}, {"id": 2}]


def test_delete_rows_returns_deleted_count(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request, timeout):
        assert request.get_method() == "DELETE"
        assert "id=not.is.null" in request.full_url
        return _Response(json.dumps([{"id": 1}, {"id": 2}, {"id": 3}]).encode("utf-8"))

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    assert client.delete_rows(table="product_transactions", query=[("id", "not.is.null")]) == 3


def test_missing_service_role_key_is_rejected() -> None:
    client = SupabaseClient(SupabaseSettings(url="https://example.supabase.co", service_role_key=""))

    with pytest.raises(ValueError, match="Missing Supabase service role key"):
        client.get_rows(table="product_transactions", query={}, with_count=False)
