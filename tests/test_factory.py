"""Tests for backend service composition."""

from __future__ import annotations

from backend.factory import build_report_tool_service, build_transaction_store
from backend.repositories.transactions_repository import InMemoryTransactionStore, SupabaseTransactionStore
from tests.fakes import build_store


def test_in_memory_store_without_supabase(monkeypatch) -> None:
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)

    assert isinstance(build_transaction_store(), InMemoryTransactionStore)


def test_supabase_store_when_configured(monkeypatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-role")
    monkeypatch.setenv("STORE_TIMEOUT_SECONDS", "3")

    store = build_transaction_store()

    assert isinstance(store, SupabaseTransactionStore)
    assert store._client.settings.timeout_seconds == 3.0


def test_report_service_uses_configured_limits(monkeypatch) -> None:
    monkeypatch.setenv("REPORT_MAX_WORKERS", "4")
    monkeypatch.setenv("STORE_TIMEOUT_SECONDS", "7")
    monkeypatch.setenv("SEED_DATA_URL", "https://example.com/seed.json")
    store = build_store()

    service = build_report_tool_service(store)

    assert service.store is store
    assert service.max_workers == 4
    assert service.timeout == 7.0
    assert service.seed_loader is not None
    assert service.seed_loader.default_url == "https://example.com/seed.json"
