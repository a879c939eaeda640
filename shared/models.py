"""Pydantic contracts shared across backend and API layers."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator


DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100

# Decimal in Python, plain JSON number on the wire.
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ToolErrorCode(str, Enum):
    """Stable error codes for report contracts across layers."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_QUERY_ERROR = "INTERNAL_QUERY_ERROR"
    PARTIAL_DEPENDENCY_FAILURE = "PARTIAL_DEPENDENCY_FAILURE"


class ToolError(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: ToolErrorCode
    message: str
    details: dict[str, object] | None = None


class ProductTransaction(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: int
    title: str
    description: str = ""
    price: Amount = Field(ge=0)
    date_of_sale: datetime = Field(alias="dateOfSale")
    category: str
    sold: bool
    image: str | None = None

    @field_validator("date_of_sale")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class MonthWindow(BaseModel):
    """Half-open interval ``[start, end)`` covering one calendar month."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    month: str
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


class TransactionPredicate(BaseModel):
    """Filter applied on top of the month window.

    ``search_text`` matches title or description (case-insensitive substring),
    ``search_price`` matches price equality. Both are OR-ed together. The
    remaining fields are AND-ed.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    search_text: str | None = None
    search_price: Decimal | None = None
    sold: bool | None = None
    price_min: Decimal | None = None
    price_max: Decimal | None = None

    def matches(self, item: ProductTransaction) -> bool:
        if self.search_text is not None or self.search_price is not None:
            needle = (self.search_text or "").lower()
            text_hit = self.search_text is not None and (
                needle in item.title.lower() or needle in item.description.lower()
            )
            price_hit = self.search_price is not None and item.price == self.search_price
            if not (text_hit or price_hit):
                return False

        if self.sold is not None and item.sold is not self.sold:
            return False
        if self.price_min is not None and item.price < self.price_min:
            return False
        if self.price_max is not None and item.price >= self.price_max:
            return False
        return True


def _coerce_positive_int(value: object, default: int) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, bool):
        raise ValueError("must be an integer")
    if isinstance(value, str):
        value = int(value.strip())
    elif not isinstance(value, int):
        raise ValueError("must be an integer")
    return value if value >= 1 else default


class MonthQuery(BaseModel):
    model_config = ConfigDict(extra="ignore")

    month: str | None = None


class TransactionsQuery(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    month: str | None = None
    search: str = ""
    page: int = DEFAULT_PAGE
    per_page: int = Field(default=DEFAULT_PER_PAGE, alias="perPage")

    @field_validator("search", mode="before")
    @classmethod
    def normalize_search(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("page", mode="before")
    @classmethod
    def normalize_page(cls, value: object) -> int:
        return _coerce_positive_int(value, DEFAULT_PAGE)

    @field_validator("per_page", mode="before")
    @classmethod
    def normalize_per_page(cls, value: object) -> int:
        return min(_coerce_positive_int(value, DEFAULT_PER_PAGE), MAX_PER_PAGE)


class TransactionsPage(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    transactions: list[ProductTransaction]
    total: int
    page: int
    per_page: int = Field(alias="perPage")


class SalesStatistics(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    total_sale_amount: Amount = Field(alias="totalSaleAmount")
    total_sold_items: int = Field(alias="totalSoldItems")
    total_not_sold_items: int = Field(alias="totalNotSoldItems")


class PriceRangeCount(BaseModel):
    model_config = ConfigDict(extra="forbid")

    range: str
    count: int


class CategoryCount(BaseModel):
    model_config = ConfigDict(extra="forbid")

    category: str
    count: int


class CombinedReport(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    transactions: TransactionsPage
    statistics: SalesStatistics
    bar_chart: list[PriceRangeCount] = Field(alias="barChart")
    pie_chart: list[CategoryCount] = Field(alias="pieChart")


class SeedRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str | None = None


class SeedResult(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    inserted_count: int = Field(alias="insertedCount")
    source_url: str = Field(alias="sourceUrl")
