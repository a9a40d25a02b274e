"""Unit tests for bounded async fan-out."""

from __future__ import annotations

import asyncio

import pytest

from confmend.utils import BoundedSemaphore, gather_bounded


async def _echo(value: int, delay: float) -> int:
    await asyncio.sleep(delay)
    return value


async def _boom(message: str) -> int:
    await asyncio.sleep(0)
    raise ValueError(message)


def test_limit_must_be_positive() -> None:
    with pytest.raises(ValueError, match="limit must be > 0"):
        BoundedSemaphore(0)


def test_release_without_acquire_is_rejected() -> None:
    semaphore = BoundedSemaphore(1)

    with pytest.raises(RuntimeError):
        semaphore.release()


async def test_results_keep_input_order_and_respect_limit() -> None:
    semaphore = BoundedSemaphore(2)
    delays = [0.03, 0.01, 0.02, 0.0, 0.01]

    results = await gather_bounded(
        (_echo(index, delay) for index, delay in enumerate(delays)),
        2,
        semaphore=semaphore,
    )

    assert results == [0, 1, 2, 3, 4]
    assert semaphore.peak == 2
    assert semaphore.in_use == 0


async def test_failures_are_returned_in_place() -> None:
    results = await gather_bounded([_echo(1, 0), _boom("bad"), _echo(3, 0)], 1)

    assert results[0] == 1
    assert isinstance(results[1], ValueError)
    assert str(results[1]) == "bad"
    assert results[2] == 3


async def test_permit_is_released_on_error() -> None:
    semaphore = BoundedSemaphore(1)

    with pytest.raises(ValueError):
        async with semaphore.permit():
            raise ValueError("inside")

    assert semaphore.in_use == 0


async def test_empty_input_returns_empty_list() -> None:
    assert await gather_bounded([], 4) == []
