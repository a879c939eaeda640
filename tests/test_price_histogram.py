"""Tests for the fixed-bucket price histogram."""

from __future__ import annotations

import time
from decimal import Decimal

import pytest

from backend.errors import InternalQueryError
from backend.reporting import PRICE_BUCKETS, PriceHistogram, bucket_for_price
from backend.services.fan_out import FanOutTimeout
from backend.services.month_window import resolve_month_window
from tests.fakes import (
    FIXED_TRANSACTIONS,
    BlockingCountStore,
    FailingTransactionStore,
    SlowLowBucketStore,
    build_store,
)


MARCH = resolve_month_window("2022-03")
EXPECTED_LABELS = [
    "0-100",
    "101-200",
    "201-300",
    "301-400",
    "401-500",
    "501-600",
    "601-700",
    "701-800",
    "801-900",
    "901-above",
]


def test_histogram_counts_for_march() -> None:
    histogram = PriceHistogram(build_store()).run(MARCH)

    assert [bucket.range for bucket in histogram] == EXPECTED_LABELS
    assert {bucket.range: bucket.count for bucket in histogram if bucket.count} == {
        "0-100": 2,
        "101-200": 1,
        "901-above": 1,
    }


def test_buckets_plus_boundary_gap_cover_the_window() -> None:
    in_window = [item for item in FIXED_TRANSACTIONS if MARCH.contains(item.date_of_sale)]
    gap = [item for item in in_window if bucket_for_price(item.price) is None]

    histogram = PriceHistogram(build_store()).run(MARCH)

    assert [item.price for item in gap] == [Decimal("200"), Decimal("100")]
    assert sum(bucket.count for bucket in histogram) + len(gap) == len(in_window)


@pytest.mark.parametrize(
    ("price", "label"),
    [
        ("0", "0-100"),
        ("99.99", "0-100"),
        ("100", None),
        ("100.50", None),
        ("101", "101-200"),
        ("199.99", "101-200"),
        ("900", None),
        ("901", "901-above"),
        ("15000", "901-above"),
    ],
)
def test_bucket_bounds(price: str, label: str | None) -> None:
    bucket = bucket_for_price(Decimal(price))

    assert (bucket.label if bucket else None) == label


def test_buckets_do_not_overlap() -> None:
    for previous, current in zip(PRICE_BUCKETS, PRICE_BUCKETS[1:]):
        assert previous.maximum is not None
        assert previous.maximum <= current.minimum


def test_results_keep_declared_order_regardless_of_completion_order() -> None:
    store = SlowLowBucketStore(FIXED_TRANSACTIONS)

    histogram = PriceHistogram(store, max_workers=10).run(MARCH)

    assert [bucket.range for bucket in histogram] == EXPECTED_LABELS


def test_bucket_failure_fails_the_histogram() -> None:
    store = FailingTransactionStore(failing={"count_in_window"})

    with pytest.raises(InternalQueryError, match="price_histogram"):
        PriceHistogram(store).run(MARCH)


def test_slow_store_hits_the_deadline() -> None:
    store = BlockingCountStore()
    started = time.monotonic()
    try:
        with pytest.raises(FanOutTimeout) as error:
            PriceHistogram(store, timeout=0.05).run(MARCH)
    finally:
        store.release.set()

    assert time.monotonic() - started < 2
    assert isinstance(error.value, InternalQueryError)
    assert "0-100" in error.value.pending
