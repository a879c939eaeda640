"""Exceptions raised by the report services."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager


class QueryValidationError(ValueError):
    """Raised when a month selector or pagination parameter is malformed."""


class InternalQueryError(RuntimeError):
    """Raised when the transaction store is unavailable or a query fails."""


class PartialDependencyFailure(RuntimeError):
    """Raised when one branch of the combined report fails."""

    def __init__(self, component: str, message: str) -> None:
        super().__init__(message)
        self.component = component


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """Re-raise any store failure inside the block as ``InternalQueryError``."""

    try:
        yield
    except (InternalQueryError, QueryValidationError):
        raise
    except Exception as exc:
        raise InternalQueryError(f"{operation} failed: {exc}") from exc
