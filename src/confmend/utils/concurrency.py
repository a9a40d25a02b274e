"""Async concurrency primitives used by the multi-document reader."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Iterable

T = TypeVar("T")


class BoundedSemaphore:
    """``asyncio.Semaphore`` that counts held permits and remembers the high-water mark."""

    def __init__(self, limit: int) -> None:
        if limit <= 0:
            raise ValueError("limit must be > 0")
        self._limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self._in_use = 0
        self._peak = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def in_use(self) -> int:
        return self._in_use

    @property
    def peak(self) -> int:
        """Highest number of permits held at once since construction."""
        return self._peak

    async def acquire(self) -> None:
        # A wait cancelled here never holds a permit.
        await self._semaphore.acquire()
        self._in_use += 1
        self._peak = max(self._peak, self._in_use)

    def release(self) -> None:
        if self._in_use <= 0:
            raise RuntimeError("release called more times than acquire")
        self._in_use -= 1
        self._semaphore.release()

    @asynccontextmanager
    async def permit(self) -> AsyncIterator[None]:
        await self.acquire()
        try:
            yield
        finally:
            self.release()


async def gather_bounded(
    awaitables: Iterable[Awaitable[T]],
    limit: int,
    *,
    semaphore: BoundedSemaphore | None = None,
) -> list[T | BaseException]:
    """Await every item with at most ``limit`` in flight; results keep input order.

    Exceptions are returned in place of results so one failure never cancels
    its siblings.
    """

    gate = semaphore or BoundedSemaphore(limit)

    async def _run_one(awaitable: Awaitable[T]) -> T:
        async with gate.permit():
            return await awaitable

    return await asyncio.gather(
        *(_run_one(item) for item in awaitables),
        return_exceptions=True,
    )


__all__ = ["BoundedSemaphore", "gather_bounded"]
