"""Fixed-bucket price histogram for one month window.

Each bucket includes its lower bound and excludes its upper bound. The bounds
follow the published ranges (``0-100``, ``101-200``, ...), so prices in
``[100, 101)``, ``[200, 201)`` ... ``[900, 901)`` land in no bucket.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from functools import partial

from backend.errors import translate_store_errors
from backend.repositories.transactions_repository import TransactionStore
from backend.services.fan_out import run_concurrently
from shared.models import MonthWindow, PriceRangeCount, TransactionPredicate


@dataclass(frozen=True, slots=True)
class PriceBucket:
    label: str
    minimum: Decimal
    maximum: Decimal | None = None

    def contains(self, price: Decimal) -> bool:
        return price >= self.minimum and (self.maximum is None or price < self.maximum)

    def predicate(self) -> TransactionPredicate:
        return TransactionPredicate(price_min=self.minimum, price_max=self.maximum)


PRICE_BUCKETS: tuple[PriceBucket, ...] = (
    PriceBucket("0-100", Decimal("0"), Decimal("100")),
    PriceBucket("101-200", Decimal("101"), Decimal("200")),
    PriceBucket("201-300", Decimal("201"), Decimal("300")),
    PriceBucket("301-400", Decimal("301"), Decimal("400")),
    PriceBucket("401-500", Decimal("401"), Decimal("500")),
    PriceBucket("501-600", Decimal("501"), Decimal("600")),
    PriceBucket("601-700", Decimal("601"), Decimal("700")),
    PriceBucket("701-800", Decimal("701"), Decimal("800")),
    PriceBucket("801-900", Decimal("801"), Decimal("900")),
    PriceBucket("901-above", Decimal("901")),
)


def bucket_for_price(price: Decimal) -> PriceBucket | None:
    """Return the bucket holding ``price``, or None inside a boundary gap."""

    return next((bucket for bucket in PRICE_BUCKETS if bucket.contains(price)), None)


@dataclass(slots=True)
class PriceHistogram:
    store: TransactionStore
    max_workers: int = len(PRICE_BUCKETS)
    timeout: float | None = None

    def _count_bucket(self, window: MonthWindow, bucket: PriceBucket) -> PriceRangeCount:
        with translate_store_errors(f"price_histogram[{bucket.label}]"):
            count = self.store.count_in_window(window, bucket.predicate())
        return PriceRangeCount(range=bucket.label, count=count)

    def run(self, window: MonthWindow) -> list[PriceRangeCount]:
        tasks = [(bucket.label, partial(self._count_bucket, window, bucket)) for bucket in PRICE_BUCKETS]
        return run_concurrently(tasks, max_workers=self.max_workers, timeout=self.timeout)
