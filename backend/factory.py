"""Composition root for backend services."""

from __future__ import annotations

import logging

from backend.db.supabase_client import SupabaseClient, SupabaseSettings
from backend.repositories.transactions_repository import (
    InMemoryTransactionStore,
    SupabaseTransactionStore,
    TransactionStore,
)
from backend.services.seed_loader import SeedLoader
from backend.services.tools import ReportToolService
from shared import config


logger = logging.getLogger(__name__)


def build_transaction_store() -> TransactionStore:
    """Return the Supabase store when configured, else an empty in-memory store."""

    supabase_url = config.supabase_url()
    supabase_key = config.supabase_service_role_key()
    if supabase_url and supabase_key:
        supabase_client = SupabaseClient(
            settings=SupabaseSettings(
                url=supabase_url,
                service_role_key=supabase_key,
                timeout_seconds=config.store_timeout_seconds(),
            )
        )
        logger.info("transaction_store=supabase table=%s", config.transactions_table())
        return SupabaseTransactionStore(client=supabase_client, table=config.transactions_table())

    logger.info("transaction_store=in_memory")
    return InMemoryTransactionStore()


def build_report_tool_service(store: TransactionStore | None = None) -> ReportToolService:
    """Build the report tool service over the given or configured store."""

    transaction_store = store if store is not None else build_transaction_store()
    timeout = config.store_timeout_seconds()
    return ReportToolService(
        store=transaction_store,
        seed_loader=SeedLoader(
            store=transaction_store,
            default_url=config.seed_data_url(),
            timeout=timeout,
        ),
        max_workers=config.report_max_workers(),
        timeout=timeout,
    )
