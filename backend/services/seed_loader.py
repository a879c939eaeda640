"""Replace the transaction collection with the published seed dataset."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.error import HTTPError
from urllib.request import Request, urlopen

from pydantic import TypeAdapter, ValidationError

from backend.errors import InternalQueryError, translate_store_errors
from backend.repositories.transactions_repository import TransactionStore
from shared.models import ProductTransaction, SeedResult


logger = logging.getLogger(__name__)

_SEED_ADAPTER = TypeAdapter(list[ProductTransaction])
_MAX_REPORTED_ERRORS = 3


def fetch_json(url: str, timeout: float) -> Any:
    """Download and decode a JSON document."""

    request = Request(url=url, headers={"Accept": "application/json"}, method="GET")
    try:
        with urlopen(request, timeout=timeout) as response:  # noqa: S310 - URL comes from env config or operator
            return json.loads(response.read().decode("utf-8"))
    except HTTPError as exc:
        raise RuntimeError(f"Seed download failed with status {exc.code}") from exc


@dataclass(slots=True)
class SeedLoader:
    store: TransactionStore
    default_url: str
    timeout: float = 10.0
    fetch: Callable[[str, float], Any] = field(default=fetch_json)

    def load(self, url: str | None = None) -> SeedResult:
        """Fetch the dataset and swap it in.

        Fetch failures, invalid rows and store write failures all surface as
        ``InternalQueryError``. The store is left untouched unless every row validates.
        """

        source_url = (url or "").strip() or self.default_url
        try:
            payload = self.fetch(source_url, self.timeout)
        except Exception as exc:
            raise InternalQueryError(f"Could not fetch seed data from {source_url}: {exc}") from exc

        try:
            records = _SEED_ADAPTER.validate_python(payload)
        except ValidationError as exc:
            raise InternalQueryError(
                f"Seed data failed validation: {_summarize(exc)}"
            ) from exc

        with translate_store_errors("seed_replace_all"):
            inserted = self.store.replace_all(records)

        logger.info("seed_data_loaded source_url=%s inserted_count=%s", source_url, inserted)
        return SeedResult(inserted_count=inserted, source_url=source_url)


def _summarize(exc: ValidationError) -> str:
    errors = exc.errors(include_url=False, include_context=False, include_input=False)
    parts = [
        f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
        for error in errors[:_MAX_REPORTED_ERRORS]
    ]
    if len(errors) > _MAX_REPORTED_ERRORS:
        parts.append(f"and {len(errors) - _MAX_REPORTED_ERRORS} more")
    return f"{exc.error_count()} invalid field(s) ({'; '.join(parts)})"
