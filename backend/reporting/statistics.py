"""Monthly sale totals."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from backend.errors import translate_store_errors
from backend.repositories.transactions_repository import TransactionStore
from shared.models import MonthWindow, SalesStatistics, TransactionPredicate


_SOLD = TransactionPredicate(sold=True)
_NOT_SOLD = TransactionPredicate(sold=False)


@dataclass(slots=True)
class SummaryStatistics:
    store: TransactionStore

    def run(self, window: MonthWindow) -> SalesStatistics:
        with translate_store_errors("summary_statistics"):
            total_amount = self.store.sum_in_window(window, _SOLD, "price")
            sold_count = self.store.count_in_window(window, _SOLD)
            not_sold_count = self.store.count_in_window(window, _NOT_SOLD)

        return SalesStatistics(
            total_sale_amount=total_amount if total_amount is not None else Decimal("0"),
            total_sold_items=sold_count,
            total_not_sold_items=not_sold_count,
        )
