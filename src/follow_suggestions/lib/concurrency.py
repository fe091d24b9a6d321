"""Fan-out/fan-in helpers with per-task error isolation."""

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _bounded(aw: Awaitable[T], semaphore: asyncio.Semaphore) -> T:
    async with semaphore:
        return await aw


async def gather_isolated(
    aws: Iterable[Awaitable[T]],
    default: T,
    label: str = "task",
    limit: int | None = None,
) -> list[T]:
    """Await every awaitable and return their results in order.

    A failing awaitable contributes *default* instead of raising, so one bad
    lookup never takes down its siblings.  When *limit* is set at most that
    many awaitables run at once.
    """
    aws = list(aws)
    if not aws:
        return []
    if limit is not None:
        semaphore = asyncio.Semaphore(limit)
        aws = [_bounded(aw, semaphore) for aw in aws]

    results = await asyncio.gather(*aws, return_exceptions=True)

    out: list[T] = []
    for result in results:
        if isinstance(result, BaseException):
            if isinstance(result, asyncio.CancelledError):
                raise result
            logger.warning("%s failed: %r", label, result)
            out.append(default)
        else:
            out.append(result)
    return out


def chunked(items: list[T], size: int) -> list[list[T]]:
    """Split *items* into consecutive lists of at most *size* elements."""
    if size < 1:
        raise ValueError("size must be positive")
    return [items[i:i + size] for i in range(0, len(items), size)]
