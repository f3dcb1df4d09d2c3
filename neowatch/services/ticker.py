"""
Periodic callbacks on the asyncio event loop.

One ticker drives the simulated sensor, another refreshes relative-time
labels. Both live on the same cooperative loop; stopping a ticker cancels
its task, the equivalent of clearing a timer on teardown.
"""

import asyncio
import inspect
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from neowatch.services.results import logger

TickCallback = Callable[[], object] | Callable[[], Awaitable[object]]


class PeriodicTicker:
    """Call `callback` every `interval_seconds` until stopped."""

    def __init__(self, interval_seconds: float, callback: TickCallback, name: str = "ticker") -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.interval_seconds = interval_seconds
        self.callback = callback
        self.name = name
        self.tick_count = 0
        self._task: asyncio.Task[None] | None = None
        self.logger = logger.bind(component="ticker", ticker=name)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            raise RuntimeError(f"Ticker {self.name} already running")
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)
        self.logger.info("ticker_started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            # Our own cancellation of the ticker task is expected; the caller's is not
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                self.logger.info("ticker_stop_cancelled", ticks=self.tick_count)
                raise
        self.logger.info("ticker_stopped", ticks=self.tick_count)

    @asynccontextmanager
    async def running(self) -> AsyncIterator["PeriodicTicker"]:
        self.start()
        try:
            yield self
        finally:
            await self.stop()

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + self.interval_seconds
        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            try:
                result = self.callback()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.logger.exception("tick_callback_failed", error=str(e))
            self.tick_count += 1

            # Slots missed while the callback overran are dropped, not replayed
            next_at += self.interval_seconds
            now = loop.time()
            if next_at <= now:
                skipped = int((now - next_at) // self.interval_seconds) + 1
                next_at += skipped * self.interval_seconds
                self.logger.warning("ticks_skipped", skipped=skipped)
