"""Bounded task scheduler.

Runs coroutine factories with at most ``limit`` in flight, keeping results in
submission order. Every task settles before a failure is surfaced, so no run
is left dangling when another one fails.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from promptcheck.errors import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TaskFactory = Callable[[], Awaitable[T]]


async def limit_concurrency(
    tasks: Sequence[TaskFactory[T]],
    limit: int,
    *,
    return_exceptions: bool = False,
) -> list[Any]:
    """Run task factories with bounded concurrency.

    Args:
        tasks: Zero-argument callables returning awaitables, in submission order.
        limit: Maximum number of tasks in flight.
        return_exceptions: Put exceptions in their result slot instead of raising.

    Returns:
        One result per task, in submission order.

    Raises:
        ValidationError: If limit is not a positive integer.
        Exception: The first failure in submission order, once all tasks have
            settled, unless return_exceptions is set.

    """
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ValidationError(
            f"Concurrency limit must be a positive integer, got {limit!r}",
            code="INVALID_CONCURRENCY",
            limit=limit,
        )

    semaphore = asyncio.Semaphore(limit)

    async def _bounded(factory: TaskFactory[T]) -> T:
        async with semaphore:
            return await factory()

    logger.debug(f"Scheduling {len(tasks)} task(s) with limit {limit}")
    results = await asyncio.gather(*(_bounded(factory) for factory in tasks), return_exceptions=True)

    if not return_exceptions:
        for result in results:
            if isinstance(result, BaseException):
                raise result
    return results
