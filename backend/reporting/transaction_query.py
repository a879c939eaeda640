"""Paginated, searchable transaction listing for one month window."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from backend.errors import translate_store_errors
from backend.repositories.transactions_repository import TransactionStore
from shared.models import (
    DEFAULT_PAGE,
    DEFAULT_PER_PAGE,
    MonthWindow,
    TransactionPredicate,
    TransactionsPage,
)


# Prices are non-negative, so this never equals a stored price.
NO_PRICE_MATCH = Decimal("-1")


def parse_search_price(search: str) -> Decimal:
    """Return ``search`` as a price, or ``NO_PRICE_MATCH`` when it is not a finite number."""

    try:
        value = Decimal(search.strip())
    except InvalidOperation:
        return NO_PRICE_MATCH
    if not value.is_finite():
        return NO_PRICE_MATCH
    return value


def build_search_predicate(search: str) -> TransactionPredicate:
    """Build the search filter. Leading and trailing whitespace is ignored for both branches."""

    needle = (search or "").strip()
    if not needle:
        return TransactionPredicate()
    return TransactionPredicate(search_text=needle, search_price=parse_search_price(needle))


@dataclass(slots=True)
class TransactionQuery:
    store: TransactionStore
    order_key: str = "id"

    def run(
        self,
        window: MonthWindow,
        *,
        search: str = "",
        page: int = DEFAULT_PAGE,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> TransactionsPage:
        page = page if page >= 1 else DEFAULT_PAGE
        per_page = per_page if per_page >= 1 else DEFAULT_PER_PAGE
        predicate = build_search_predicate(search)

        with translate_store_errors("transaction_query"):
            items = self.store.find_in_window(
                window,
                predicate,
                skip=(page - 1) * per_page,
                limit=per_page,
                order_key=self.order_key,
            )
            total = self.store.count_in_window(window, predicate)

        return TransactionsPage(transactions=items, total=total, page=page, per_page=per_page)
