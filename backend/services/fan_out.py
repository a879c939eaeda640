"""Run independent callables concurrently and collect their results in order."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import TypeVar

from backend.errors import InternalQueryError


logger = logging.getLogger(__name__)

T = TypeVar("T")


class FanOutTimeout(InternalQueryError):
    """Raised when the join deadline expires before every task finished."""

    def __init__(self, pending: list[str], timeout: float | None) -> None:
        super().__init__(f"Timed out after {timeout}s waiting for: {', '.join(pending)}")
        self.pending = pending


def run_concurrently(
    tasks: Sequence[tuple[str, Callable[[], T]]],
    *,
    max_workers: int,
    timeout: float | None,
) -> list[T]:
    """Run named tasks on a thread pool and return results in declared order.

    The first failing task's exception is re-raised and tasks not yet started
    are cancelled. Running tasks are abandoned, not waited on. A join exceeding
    ``timeout`` raises ``FanOutTimeout``.
    """

    if not tasks:
        return []

    executor = ThreadPoolExecutor(
        max_workers=max(1, min(max_workers, len(tasks))),
        thread_name_prefix="report-fan-out",
    )
    try:
        futures: list[Future[T]] = [executor.submit(task) for _, task in tasks]
        done, not_done = wait(futures, timeout=timeout, return_when=FIRST_EXCEPTION)

        for (name, _), future in zip(tasks, futures):
            if future in done and future.exception() is not None:
                error = future.exception()
                logger.warning(
                    "fan_out_task_failed task=%s error_type=%s",
                    name,
                    type(error).__name__,
                )
                raise error

        if not_done:
            pending = [name for (name, _), future in zip(tasks, futures) if future in not_done]
            logger.warning("fan_out_timeout timeout=%s pending=%s", timeout, pending)
            raise FanOutTimeout(pending, timeout)

        return [future.result() for future in futures]
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
