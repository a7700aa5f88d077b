"""
Tests unitarios para gather_bounded.
"""
import asyncio

import pytest

from zoho_sync.shared.utils.concurrency import gather_bounded


@pytest.mark.asyncio
async def test_preserves_order_and_respects_limit() -> None:
    in_flight = 0
    peak = 0

    async def work(i: int) -> int:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01 * (5 - i))
        in_flight -= 1
        return i

    results = await gather_bounded(2, (work(i) for i in range(5)))

    assert results == [0, 1, 2, 3, 4]
    assert peak <= 2


@pytest.mark.asyncio
async def test_failure_cancels_the_rest() -> None:
    finished = []

    async def ok(i: int) -> int:
        await asyncio.sleep(0.05)
        finished.append(i)
        return i

    async def boom() -> int:
        raise ValueError("boom")

    with pytest.raises(ValueError):
        await gather_bounded(1, [boom(), ok(1), ok(2)])

    assert finished == []


@pytest.mark.asyncio
async def test_empty_input() -> None:
    assert await gather_bounded(3, []) == []
