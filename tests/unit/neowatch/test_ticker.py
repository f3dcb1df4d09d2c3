"""
Tests for the periodic ticker in `neowatch/services/ticker.py`.

Covers:
- Sync and async callbacks
- Failing callbacks do not stop the ticker
- Start/stop lifecycle and the running() context
"""

import asyncio

import pytest

from neowatch.services.ticker import PeriodicTicker


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError, match="positive"):
        PeriodicTicker(0, lambda: None)


async def test_sync_callback_runs_repeatedly() -> None:
    calls: list[int] = []
    ticker = PeriodicTicker(0.01, lambda: calls.append(1), name="sync")

    async with ticker.running():
        await asyncio.sleep(0.1)
        assert ticker.is_running

    assert not ticker.is_running
    assert len(calls) >= 3
    assert ticker.tick_count == len(calls)


async def test_async_callback_is_awaited() -> None:
    done: list[str] = []

    async def callback() -> None:
        await asyncio.sleep(0)
        done.append("tick")

    ticker = PeriodicTicker(0.01, callback, name="async")
    async with ticker.running():
        while ticker.tick_count < 2:
            await asyncio.sleep(0.005)

    assert len(done) >= 2


async def test_failing_callback_keeps_ticking() -> None:
    def boom() -> None:
        raise RuntimeError("sensor glitch")

    ticker = PeriodicTicker(0.01, boom, name="failing")
    async with ticker.running():
        while ticker.tick_count < 3:
            await asyncio.sleep(0.005)

    assert ticker.tick_count >= 3


async def test_start_twice_is_rejected() -> None:
    ticker = PeriodicTicker(1.0, lambda: None, name="once")
    ticker.start()
    try:
        with pytest.raises(RuntimeError, match="already running"):
            ticker.start()
    finally:
        await ticker.stop()


async def test_stop_without_start_is_noop() -> None:
    ticker = PeriodicTicker(1.0, lambda: None)
    await ticker.stop()
    assert ticker.tick_count == 0


async def test_no_ticks_after_stop() -> None:
    ticker = PeriodicTicker(0.01, lambda: None)
    async with ticker.running():
        await asyncio.sleep(0.05)
    count = ticker.tick_count
    await asyncio.sleep(0.05)
    assert ticker.tick_count == count


async def test_stop_propagates_cancellation_of_the_caller() -> None:
    ticker = PeriodicTicker(0.01, lambda: None, name="teardown")
    ticker.start()

    async def teardown() -> str:
        await ticker.stop()
        return "completed"

    task = asyncio.create_task(teardown())
    await asyncio.sleep(0)  # teardown is now awaiting the ticker task
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert not ticker.is_running


@pytest.mark.performance
async def test_overrun_skips_missed_ticks_instead_of_bursting() -> None:
    loop = asyncio.get_running_loop()
    called_at: list[float] = []

    async def callback() -> None:
        called_at.append(loop.time())
        if len(called_at) == 1:
            await asyncio.sleep(0.05)  # overruns five intervals

    ticker = PeriodicTicker(0.01, callback, name="slow")
    async with ticker.running():
        while len(called_at) < 4:
            await asyncio.sleep(0.005)

    gaps = [later - earlier for earlier, later in zip(called_at[1:], called_at[2:])]
    assert all(gap >= 0.005 for gap in gaps)
