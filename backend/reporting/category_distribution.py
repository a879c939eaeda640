"""Record counts per category for one month window."""

from __future__ import annotations

from dataclasses import dataclass

from backend.errors import translate_store_errors
from backend.repositories.transactions_repository import TransactionStore
from shared.models import CategoryCount, MonthWindow


@dataclass(slots=True)
class CategoryDistribution:
    store: TransactionStore

    def run(self, window: MonthWindow) -> list[CategoryCount]:
        with translate_store_errors("category_distribution"):
            groups = self.store.group_count_in_window(window, "category")

        return [
            CategoryCount(category=category, count=count)
            for category, count in sorted(groups.items())
            if count > 0
        ]
