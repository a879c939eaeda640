"""Report tool service.

Validates raw request payloads, runs the report components and normalizes
every failure into a ``ToolError`` at the contract boundary.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from pydantic import ValidationError

from backend.errors import InternalQueryError, PartialDependencyFailure, QueryValidationError
from backend.repositories.transactions_repository import TransactionStore
from backend.reporting import (
    CategoryDistribution,
    CombinedReportBuilder,
    PriceHistogram,
    SummaryStatistics,
    TransactionQuery,
)
from backend.services.month_window import resolve_month_window
from backend.services.seed_loader import SeedLoader
from shared.models import (
    CategoryCount,
    CombinedReport,
    MonthQuery,
    PriceRangeCount,
    SalesStatistics,
    SeedRequest,
    SeedResult,
    ToolError,
    ToolErrorCode,
    TransactionsPage,
    TransactionsQuery,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class ReportToolService:
    store: TransactionStore
    seed_loader: SeedLoader | None = None
    max_workers: int = 10
    timeout: float | None = None

    def _execute(self, tool_name: str, action: Callable[[], T]) -> T | ToolError:
        try:
            return action()
        except ValidationError as exc:
            logger.warning("report_tool_invalid_payload tool=%s", tool_name)
            return ToolError(
                code=ToolErrorCode.VALIDATION_ERROR,
                message=f"Invalid payload for {tool_name}",
                details={
                    "validation_errors": exc.errors(
                        include_url=False, include_context=False, include_input=False
                    )
                },
            )
        except QueryValidationError as exc:
            logger.warning("report_tool_validation_error tool=%s message=%s", tool_name, exc)
            return ToolError(code=ToolErrorCode.VALIDATION_ERROR, message=str(exc))
        except PartialDependencyFailure as exc:
            logger.exception("report_tool_dependency_failed tool=%s component=%s", tool_name, exc.component)
            return ToolError(
                code=ToolErrorCode.PARTIAL_DEPENDENCY_FAILURE,
                message=str(exc),
                details={"component": exc.component},
            )
        except InternalQueryError as exc:
            logger.exception("report_tool_query_failed tool=%s", tool_name)
            return ToolError(code=ToolErrorCode.INTERNAL_QUERY_ERROR, message=str(exc))
        except Exception as exc:
            logger.exception("report_tool_unexpected_error tool=%s", tool_name)
            return ToolError(code=ToolErrorCode.INTERNAL_QUERY_ERROR, message=str(exc))

    def transactions_list(self, payload: dict[str, object]) -> TransactionsPage | ToolError:
        def action() -> TransactionsPage:
            query = TransactionsQuery.model_validate(payload)
            window = resolve_month_window(query.month)
            return TransactionQuery(self.store).run(
                window,
                search=query.search,
                page=query.page,
                per_page=query.per_page,
            )

        return self._execute("transactions_list", action)

    def statistics(self, payload: dict[str, object]) -> SalesStatistics | ToolError:
        def action() -> SalesStatistics:
            window = resolve_month_window(MonthQuery.model_validate(payload).month)
            return SummaryStatistics(self.store).run(window)

        return self._execute("statistics", action)

    def bar_chart(self, payload: dict[str, object]) -> list[PriceRangeCount] | ToolError:
        def action() -> list[PriceRangeCount]:
            window = resolve_month_window(MonthQuery.model_validate(payload).month)
            histogram = PriceHistogram(self.store, max_workers=self.max_workers, timeout=self.timeout)
            return histogram.run(window)

        return self._execute("bar_chart", action)

    def pie_chart(self, payload: dict[str, object]) -> list[CategoryCount] | ToolError:
        def action() -> list[CategoryCount]:
            window = resolve_month_window(MonthQuery.model_validate(payload).month)
            return CategoryDistribution(self.store).run(window)

        return self._execute("pie_chart", action)

    def combined(self, payload: dict[str, object]) -> CombinedReport | ToolError:
        def action() -> CombinedReport:
            month = MonthQuery.model_validate(payload).month
            builder = CombinedReportBuilder(self.store, max_workers=self.max_workers, timeout=self.timeout)
            return builder.run(month)

        return self._execute("combined", action)

    def seed(self, payload: dict[str, object]) -> SeedResult | ToolError:
        def action() -> SeedResult:
            if self.seed_loader is None:
                raise InternalQueryError("Seed loader unavailable")
            return self.seed_loader.load(SeedRequest.model_validate(payload).url)

        return self._execute("seed", action)
