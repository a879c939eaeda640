"""Configuration helpers for environment variables."""

from __future__ import annotations

import os
import logging

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


DEFAULT_SEED_DATA_URL = "https://s3.amazonaws.com/roxiler.com/product_transaction.json"
_DEFAULT_STORE_TIMEOUT_SECONDS = 10.0
_DEFAULT_REPORT_MAX_WORKERS = 10


def _should_load_dotenv() -> bool:
    """Return whether local dotenv loading should run."""
    app_env = os.getenv("APP_ENV", "dev").strip().lower()
    return app_env in {"dev", "local"}


if _should_load_dotenv():
    load_dotenv()


def get_env(name: str, default: str | None = None) -> str | None:
    """Return a raw environment value or default."""
    return os.getenv(name, default)


def app_env() -> str:
    """Return the current application environment."""
    return (get_env("APP_ENV", "dev") or "dev").strip() or "dev"


def cors_allow_origins() -> list[str]:
    """Return CORS allowed origins from env with safe environment defaults."""
    raw_origins = get_env("CORS_ALLOW_ORIGINS", "") or ""
    parsed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]

    if parsed_origins:
        return parsed_origins

    if app_env().strip().lower() in {"dev", "local"}:
        return [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]

    ui_origin = (get_env("UI_ORIGIN", "") or "").strip()
    if ui_origin:
        return [ui_origin]

    logger.warning(
        "cors_allow_origins_empty_in_prod app_env=%s; define CORS_ALLOW_ORIGINS or UI_ORIGIN",
        app_env(),
    )

    return []


def supabase_url() -> str | None:
    """Return Supabase URL when configured."""
    return get_env("SUPABASE_URL")


def supabase_service_role_key() -> str | None:
    """Return Supabase service role key when configured."""
    return get_env("SUPABASE_SERVICE_ROLE_KEY")


def transactions_table() -> str:
    """Return the remote table holding product transactions."""
    return (get_env("TRANSACTIONS_TABLE", "") or "").strip() or "product_transactions"


def store_timeout_seconds() -> float:
    """Return the deadline applied to each store call and concurrent join."""
    raw_value = (get_env("STORE_TIMEOUT_SECONDS", "") or "").strip()
    if not raw_value:
        return _DEFAULT_STORE_TIMEOUT_SECONDS

    try:
        value = float(raw_value)
    except ValueError:
        value = 0.0

    if value <= 0:
        logger.warning("store_timeout_seconds_invalid value=%s; using default", raw_value)
        return _DEFAULT_STORE_TIMEOUT_SECONDS
    return value


def report_max_workers() -> int:
    """Return the thread pool size used for report fan-out."""
    raw_value = (get_env("REPORT_MAX_WORKERS", "") or "").strip()
    if not raw_value:
        return _DEFAULT_REPORT_MAX_WORKERS

    try:
        value = int(raw_value)
    except ValueError:
        value = 0

    if value < 1:
        logger.warning("report_max_workers_invalid value=%s; using default", raw_value)
        return _DEFAULT_REPORT_MAX_WORKERS
    return value


def seed_data_url() -> str:
    """Return the URL of the seed dataset."""
    return (get_env("SEED_DATA_URL", "") or "").strip() or DEFAULT_SEED_DATA_URL
