"""Combined monthly report assembled from the four report components."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from backend.errors import PartialDependencyFailure
from backend.repositories.transactions_repository import TransactionStore
from backend.reporting.category_distribution import CategoryDistribution
from backend.reporting.price_histogram import PriceHistogram
from backend.reporting.statistics import SummaryStatistics
from backend.reporting.transaction_query import TransactionQuery
from backend.services.fan_out import FanOutTimeout, run_concurrently
from backend.services.month_window import resolve_month_window
from shared.models import CombinedReport


T = TypeVar("T")


def _as_dependency(component: str, compute: Callable[[], T]) -> Callable[[], T]:
    def run() -> T:
        try:
            return compute()
        except Exception as exc:
            raise PartialDependencyFailure(component, f"{component} failed: {exc}") from exc

    return run


@dataclass(slots=True)
class CombinedReportBuilder:
    """Runs the four monthly views concurrently over one store snapshot."""

    store: TransactionStore
    max_workers: int = 10
    timeout: float | None = None

    def run(self, month: str | None) -> CombinedReport:
        window = resolve_month_window(month)
        snapshot = self.store.snapshot()

        histogram = PriceHistogram(snapshot, max_workers=self.max_workers, timeout=self.timeout)
        tasks = [
            ("transactions", _as_dependency("transactions", lambda: TransactionQuery(snapshot).run(window))),
            ("statistics", _as_dependency("statistics", lambda: SummaryStatistics(snapshot).run(window))),
            ("barChart", _as_dependency("barChart", lambda: histogram.run(window))),
            ("pieChart", _as_dependency("pieChart", lambda: CategoryDistribution(snapshot).run(window))),
        ]

        try:
            transactions, statistics, bar_chart, pie_chart = run_concurrently(
                tasks, max_workers=len(tasks), timeout=self.timeout
            )
        except FanOutTimeout as exc:
            raise PartialDependencyFailure(", ".join(exc.pending), str(exc)) from exc

        return CombinedReport(
            transactions=transactions,
            statistics=statistics,
            bar_chart=bar_chart,
            pie_chart=pie_chart,
        )
