"""Month selector parsing."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from backend.errors import QueryValidationError
from shared.models import MonthWindow


_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def resolve_month_window(month: str | None) -> MonthWindow:
    """Turn a ``YYYY-MM`` selector into the half-open UTC window of that month."""

    if month is None or not month.strip():
        raise QueryValidationError("month is required. Expected YYYY-MM")

    selector = month.strip()
    match = _MONTH_PATTERN.match(selector)
    if match is None:
        raise QueryValidationError(f"Invalid month format: {selector!r}. Expected YYYY-MM")

    year, month_number = int(match.group(1)), int(match.group(2))
    if not 1 <= month_number <= 12 or year < 1:
        raise QueryValidationError(f"Invalid month value: {selector!r}. Expected YYYY-MM")

    start = datetime(year, month_number, 1, tzinfo=timezone.utc)
    if month_number == 12:
        if year == 9999:
            raise QueryValidationError(f"Invalid month value: {selector!r}. Expected YYYY-MM")
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month_number + 1, 1, tzinfo=timezone.utc)

    return MonthWindow(month=selector, start=start, end=end)
