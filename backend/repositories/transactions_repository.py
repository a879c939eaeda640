"""Transaction store interface and adapters.

The store only answers window-scoped reads for the report services. The whole
collection is replaced at once by the seed loader through ``replace_all``.
"""

from __future__ import annotations

import threading
from collections import Counter
from collections.abc import Iterable
from decimal import Decimal
from operator import attrgetter
from typing import Any, Protocol

from backend.db.supabase_client import SupabaseClient
from shared.models import MonthWindow, ProductTransaction, TransactionPredicate


ORDER_KEYS = frozenset({"id", "date_of_sale", "price"})
SUM_FIELDS = frozenset({"price"})
GROUP_FIELDS = frozenset({"category"})


def _check_field(name: str, allowed: frozenset[str], kind: str) -> None:
    if name not in allowed:
        raise ValueError(f"Unsupported {kind} field: {name}")


class TransactionStore(Protocol):
    def find_in_window(
        self,
        window: MonthWindow,
        predicate: TransactionPredicate,
        *,
        skip: int,
        limit: int,
        order_key: str = "id",
    ) -> list[ProductTransaction]:
        """Return one slice of matching records in a stable order."""

    def count_in_window(self, window: MonthWindow, predicate: TransactionPredicate) -> int:
        """Return the number of matching records."""

    def sum_in_window(
        self, window: MonthWindow, predicate: TransactionPredicate, field: str
    ) -> Decimal:
        """Return the sum of ``field`` over matching records, zero when none match."""

    def group_count_in_window(self, window: MonthWindow, group_field: str) -> dict[str, int]:
        """Return record counts keyed by the value of ``group_field``."""

    def replace_all(self, records: Iterable[ProductTransaction]) -> int:
        """Replace the whole collection and return the stored record count."""

    def snapshot(self) -> "TransactionStore":
        """Return a handle whose reads all observe the same data state."""


class InMemoryTransactionStore:
    """In-memory store used for local dev/tests when Supabase is not configured.

    Records are held in an immutable tuple. ``replace_all`` swaps the tuple, so
    a snapshot keeps reading the records it was taken from.
    """

    def __init__(self, records: Iterable[ProductTransaction] = ()) -> None:
        self._records: tuple[ProductTransaction, ...] = tuple(records)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def _matching(
        self, window: MonthWindow, predicate: TransactionPredicate | None = None
    ) -> list[ProductTransaction]:
        records = self._records
        return [
            item
            for item in records
            if window.contains(item.date_of_sale) and (predicate is None or predicate.matches(item))
        ]

    def find_in_window(
        self,
        window: MonthWindow,
        predicate: TransactionPredicate,
        *,
        skip: int,
        limit: int,
        order_key: str = "id",
    ) -> list[ProductTransaction]:
        _check_field(order_key, ORDER_KEYS, "order")
        # sorted() is stable: duplicate keys keep insertion order.
        rows = sorted(self._matching(window, predicate), key=attrgetter(order_key))
        return rows[skip : skip + limit]

    def count_in_window(self, window: MonthWindow, predicate: TransactionPredicate) -> int:
        return len(self._matching(window, predicate))

    def sum_in_window(
        self, window: MonthWindow, predicate: TransactionPredicate, field: str
    ) -> Decimal:
        _check_field(field, SUM_FIELDS, "sum")
        return sum(
            (getattr(item, field) for item in self._matching(window, predicate)),
            Decimal("0"),
        )

    def group_count_in_window(self, window: MonthWindow, group_field: str) -> dict[str, int]:
        _check_field(group_field, GROUP_FIELDS, "group")
        return dict(Counter(str(getattr(item, group_field)) for item in self._matching(window)))

    def replace_all(self, records: Iterable[ProductTransaction]) -> int:
        new_records = tuple(records)
        with self._lock:
            self._records = new_records
        return len(new_records)

    def snapshot(self) -> "InMemoryTransactionStore":
        return InMemoryTransactionStore(self._records)


def _like_value(text: str) -> str:
    """Return a quoted PostgREST ``ilike`` operand matching ``text`` as a substring.

    PostgREST rewrites every ``*`` to ``%`` and offers no escape for it, so a
    literal ``*`` becomes the single character wildcard ``_``. Search text with
    ``*`` can therefore match slightly more rows here than in memory, never fewer.
    """

    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_").replace("*", "_")
    pattern = f"*{escaped}*"
    return '"' + pattern.replace("\\", "\\\\").replace('"', '\\"') + '"'


class SupabaseTransactionStore:
    """Supabase store reading product transactions through PostgREST.

    Sum and group counts rely on PostgREST aggregate functions, which must be
    enabled on the project (``db-aggregates-enabled``). PostgREST has no
    multi-request snapshot, so ``snapshot`` returns the store itself and
    concurrent reads may observe different data states if the table changes
    mid-request.
    """

    _INSERT_BATCH_SIZE = 500

    def __init__(self, client: SupabaseClient, table: str = "product_transactions") -> None:
        self._client = client
        self._table = table

    def _build_query(
        self, window: MonthWindow, predicate: TransactionPredicate | None = None
    ) -> list[tuple[str, str | int]]:
        query: list[tuple[str, str | int]] = [
            ("date_of_sale", f"gte.{window.start.isoformat()}"),
            ("date_of_sale", f"lt.{window.end.isoformat()}"),
        ]
        if predicate is None:
            return query

        search_terms: list[str] = []
        if predicate.search_text is not None:
            operand = _like_value(predicate.search_text)
            search_terms.append(f"title.ilike.{operand}")
            search_terms.append(f"description.ilike.{operand}")
        if predicate.search_price is not None:
            search_terms.append(f"price.eq.{predicate.search_price}")
        if search_terms:
            query.append(("or", f"({','.join(search_terms)})"))

        if predicate.sold is not None:
            query.append(("sold", "is.true" if predicate.sold else "is.false"))
        if predicate.price_min is not None:
            query.append(("price", f"gte.{predicate.price_min}"))
        if predicate.price_max is not None:
            query.append(("price", f"lt.{predicate.price_max}"))
        return query

    def find_in_window(
        self,
        window: MonthWindow,
        predicate: TransactionPredicate,
        *,
        skip: int,
        limit: int,
        order_key: str = "id",
    ) -> list[ProductTransaction]:
        _check_field(order_key, ORDER_KEYS, "order")
        order_columns = [order_key] + [key for key in ("id", "date_of_sale") if key != order_key]
        query = self._build_query(window, predicate)
        query.extend(
            [
                ("select", "*"),
                ("order", ",".join(f"{column}.asc" for column in order_columns)),
                ("offset", skip),
                ("limit", limit),
            ]
        )
        rows, _ = self._client.get_rows(table=self._table, query=query, with_count=False)
        return [ProductTransaction.model_validate(row) for row in rows]

    def count_in_window(self, window: MonthWindow, predicate: TransactionPredicate) -> int:
        query = self._build_query(window, predicate)
        query.extend([("select", "id"), ("limit", 1)])
        _, total = self._client.get_rows(table=self._table, query=query, with_count=True)
        if total is None:
            raise RuntimeError("Supabase response did not include an exact row count")
        return total

    def sum_in_window(
        self, window: MonthWindow, predicate: TransactionPredicate, field: str
    ) -> Decimal:
        _check_field(field, SUM_FIELDS, "sum")
        query = self._build_query(window, predicate)
        query.append(("select", f"total:{field}.sum()"))
        rows, _ = self._client.get_rows(table=self._table, query=query, with_count=False)
        if not rows or rows[0].get("total") is None:
            return Decimal("0")
        return Decimal(str(rows[0]["total"]))

    def group_count_in_window(self, window: MonthWindow, group_field: str) -> dict[str, int]:
        _check_field(group_field, GROUP_FIELDS, "group")
        query = self._build_query(window)
        query.append(("select", f"{group_field},count()"))
        rows, _ = self._client.get_rows(table=self._table, query=query, with_count=False)

        groups: dict[str, int] = {}
        for row in rows:
            key = str(row.get(group_field))
            groups[key] = groups.get(key, 0) + int(row.get("count") or 0)
        return groups

    def replace_all(self, records: Iterable[ProductTransaction]) -> int:
        payload: list[dict[str, Any]] = [record.model_dump(mode="json") for record in records]
        self._client.delete_rows(table=self._table, query=[("id", "not.is.null")])

        inserted = 0
        for start in range(0, len(payload), self._INSERT_BATCH_SIZE):
            batch = payload[start : start + self._INSERT_BATCH_SIZE]
            inserted += len(self._client.post_rows(table=self._table, payload=batch))
        return inserted

    def snapshot(self) -> "SupabaseTransactionStore":
        return self
