"""Tests for the combined monthly report."""

from __future__ import annotations

import pytest

from backend.errors import PartialDependencyFailure, QueryValidationError
from backend.reporting import CombinedReportBuilder, TransactionQuery
from backend.services.month_window import resolve_month_window
from tests.fakes import BlockingCountStore, FailingTransactionStore, build_store


def test_combined_report_merges_all_views() -> None:
    report = CombinedReportBuilder(build_store()).run("2022-03")

    assert report.transactions.total == 6
    assert report.transactions.per_page == 10
    assert report.statistics.total_sold_items == 3
    assert len(report.bar_chart) == 10
    assert [entry.category for entry in report.pie_chart] == ["electronics", "jewelery", "men's clothing"]

    payload = report.model_dump(mode="json", by_alias=True)
    assert set(payload) == {"transactions", "statistics", "barChart", "pieChart"}
    assert set(payload["transactions"]) == {"transactions", "total", "page", "perPage"}


def test_sold_plus_unsold_equals_unfiltered_total() -> None:
    store = build_store()

    report = CombinedReportBuilder(store).run("2022-03")
    listing = TransactionQuery(store).run(resolve_month_window("2022-03"))

    statistics = report.statistics
    assert statistics.total_sold_items + statistics.total_not_sold_items == listing.total
    assert sum(entry.count for entry in report.pie_chart) == listing.total


def test_combined_report_reads_one_snapshot() -> None:
    store = build_store()
    builder = CombinedReportBuilder(store)

    original_snapshot = store.snapshot

    def snapshot_then_wipe():
        snapshot = original_snapshot()
        store.replace_all([])
        return snapshot

    store.snapshot = snapshot_then_wipe

    report = builder.run("2022-03")

    assert report.transactions.total == 6
    assert report.statistics.total_sold_items + report.statistics.total_not_sold_items == 6


def test_invalid_month_fails_before_fan_out() -> None:
    store = FailingTransactionStore(failing={"find_in_window", "count_in_window"})

    with pytest.raises(QueryValidationError):
        CombinedReportBuilder(store).run("2022/03")


@pytest.mark.parametrize(
    ("failing", "component"),
    [
        ({"find_in_window"}, "transactions"),
        ({"sum_in_window"}, "statistics"),
        ({"group_count_in_window"}, "pieChart"),
    ],
)
def test_any_branch_failure_fails_the_whole_report(failing: set[str], component: str) -> None:
    store = FailingTransactionStore(failing=failing)

    with pytest.raises(PartialDependencyFailure) as error:
        CombinedReportBuilder(store).run("2022-03")

    assert error.value.component == component


def test_timeout_is_reported_as_dependency_failure() -> None:
    store = BlockingCountStore()
    try:
        with pytest.raises(PartialDependencyFailure) as error:
            CombinedReportBuilder(store, timeout=0.05).run("2022-03")
    finally:
        store.release.set()

    assert "Timed out" in str(error.value)
