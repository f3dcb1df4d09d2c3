"""
Synthetic neonatal vital-sign generator with a rolling history window.

Key patterns:
- Bounded random walk per channel (uniform delta, clamp, round)
- Fixed-capacity history that drops the oldest sample
- Async context manager for the monitoring session lifecycle
- Async generator for a lazy, fixed-cadence stream of readings
- Observer callbacks so several consumers share one sensor
"""

import asyncio
import random
import time
from collections import deque
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from neowatch.domain.models import Channel, HistoryPoint, Severity, VitalReading
from neowatch.domain.thresholds import (
    DEFAULT_BANDS,
    ChannelBand,
    classify_activity,
    classify_severity,
)
from neowatch.services.results import logger

ReadingCallback = Callable[[VitalReading], None]


def _local_now() -> datetime:
    return datetime.now().astimezone()


def round_to(value: float, decimals: int) -> float:
    """Round half away from zero, the way a display would."""
    quantum = Decimal(1).scaleb(-decimals)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if decimals == 0 else float(rounded)


def fluctuate(
    value: float,
    step: float,
    minimum: float,
    maximum: float,
    decimals: int = 0,
    rng: random.Random | None = None,
) -> float:
    """Apply one bounded random-walk step: uniform delta in [-step, step], clamp, round."""
    rng = rng or random.Random()
    delta = (rng.random() - 0.5) * 2 * step
    clamped = max(minimum, min(maximum, value + delta))
    return max(minimum, min(maximum, round_to(clamped, decimals)))


class ChannelSpec(BaseModel):
    """Random-walk parameters for one channel."""

    model_config = ConfigDict(frozen=True)

    initial: float
    minimum: float
    maximum: float
    step: float = Field(gt=0.0, description="Max change per live tick")
    seed_step: float = Field(gt=0.0, description="Max change between seeded history points")
    decimals: int = Field(default=0, ge=0, le=3)

    @model_validator(mode="after")
    def initial_within_bounds(self) -> "ChannelSpec":
        if self.minimum > self.maximum:
            raise ValueError("minimum must not exceed maximum")
        if not self.minimum <= self.initial <= self.maximum:
            raise ValueError(f"initial value {self.initial} outside [{self.minimum}, {self.maximum}]")
        return self


def default_channels() -> dict[Channel, ChannelSpec]:
    return {
        Channel.HEART_RATE: ChannelSpec(
            initial=138, minimum=110, maximum=170, step=5, seed_step=8, decimals=0
        ),
        Channel.OXYGEN: ChannelSpec(
            initial=98, minimum=94, maximum=100, step=0.8, seed_step=1.5, decimals=1
        ),
        Channel.TEMPERATURE: ChannelSpec(
            initial=36.8, minimum=36.0, maximum=37.8, step=0.1, seed_step=0.2, decimals=1
        ),
    }


class VitalMonitorConfig(BaseModel):
    """
    Configuration with validation and smart defaults.
    """

    tick_interval_seconds: float = Field(
        default=3.0, gt=0.0, description="Interval between simulated sensor readings."
    )
    history_size: int = Field(default=24, gt=0, description="Max points kept in the history.")
    seed_interval_minutes: float = Field(
        default=30.0, gt=0.0, description="Spacing of the pre-seeded history points."
    )
    channels: dict[Channel, ChannelSpec] = Field(default_factory=default_channels)
    bands: dict[Channel, ChannelBand] = Field(default_factory=lambda: dict(DEFAULT_BANDS))

    @model_validator(mode="after")
    def all_channels_present(self) -> "VitalMonitorConfig":
        missing = set(Channel) - set(self.channels)
        if missing:
            raise ValueError(f"missing channel specs: {sorted(c.value for c in missing)}")
        missing = set(Channel) - set(self.bands)
        if missing:
            raise ValueError(f"missing channel bands: {sorted(c.value for c in missing)}")
        return self


class SimulatedVitalSource:
    """
    Simulated neonatal sensor.

    Holds the current value of each channel and advances them by one bounded
    random-walk step per reading. It never fails.
    """

    def __init__(
        self,
        source_name: str,
        config: VitalMonitorConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.source_name = source_name
        self.config = config or VitalMonitorConfig()
        self.rng = rng or random.Random()
        self.values: dict[Channel, float] = {
            channel: spec.initial for channel, spec in self.config.channels.items()
        }
        self.logger = logger.bind(source=source_name)

    def _step(self, channel: Channel, value: float, seed: bool = False) -> float:
        spec = self.config.channels[channel]
        step = spec.seed_step if seed else spec.step
        return fluctuate(value, step, spec.minimum, spec.maximum, spec.decimals, self.rng)

    def classify(self, values: dict[Channel, float], recorded_at: datetime) -> VitalReading:
        heart_rate = int(values[Channel.HEART_RATE])
        oxygen = values[Channel.OXYGEN]
        temperature = values[Channel.TEMPERATURE]
        return VitalReading(
            heart_rate=heart_rate,
            oxygen=oxygen,
            temperature=temperature,
            activity=classify_activity(heart_rate),
            severity=classify_severity(heart_rate, oxygen, temperature, self.config.bands),
            connected=True,
            recorded_at=recorded_at,
        )

    def current_reading(self, recorded_at: datetime) -> VitalReading:
        return self.classify(self.values, recorded_at)

    def next_reading(self, recorded_at: datetime) -> VitalReading:
        self.values = {channel: self._step(channel, value) for channel, value in self.values.items()}
        return self.classify(self.values, recorded_at)

    def seed_history(self, count: int, interval: timedelta, end: datetime) -> list[HistoryPoint]:
        """
        Generate `count` past points ending at `end`, using the wider seed steps.

        The seed walk is independent of the live channel values.
        """
        values = {channel: spec.initial for channel, spec in self.config.channels.items()}
        points: list[HistoryPoint] = []
        for i in range(count - 1, -1, -1):
            values = {channel: self._step(channel, value, seed=True) for channel, value in values.items()}
            points.append(HistoryPoint.from_reading(self.classify(values, end - i * interval)))
        return points


class VitalMonitor:
    """
    Drives a vital source on a fixed cadence and keeps the rolling history.

    Design principles:
    - History never grows past `history_size` (oldest samples are dropped)
    - Consumers either pull with `stream()` or register with `subscribe()`
    - A session, once ended, cannot be restarted
    """

    def __init__(
        self,
        config: VitalMonitorConfig | None = None,
        source: SimulatedVitalSource | None = None,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self.config = config or VitalMonitorConfig()
        self.source = source or SimulatedVitalSource("simulated-sensor", self.config)
        self.clock = clock
        self.logger = logger.bind(component="vital_monitor", source=self.source.source_name)

        now = self.clock()
        self._history: deque[HistoryPoint] = deque(
            self.source.seed_history(
                self.config.history_size,
                timedelta(minutes=self.config.seed_interval_minutes),
                now,
            ),
            maxlen=self.config.history_size,
        )
        self._latest: VitalReading = self.source.current_reading(now)
        self._subscribers: list[ReadingCallback] = []
        self._is_running = False
        self._stopped = False

    @property
    def latest(self) -> VitalReading:
        return self._latest

    @property
    def history(self) -> tuple[HistoryPoint, ...]:
        """Snapshot of the rolling history, oldest first."""
        return tuple(self._history)

    @property
    def is_running(self) -> bool:
        return self._is_running

    def subscribe(self, callback: ReadingCallback) -> Callable[[], None]:
        """Register a callback for every new reading. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def tick(self) -> VitalReading:
        """Produce the next reading, append it to the history and notify subscribers."""
        reading = self.source.next_reading(self.clock())
        self._latest = reading
        self._history.append(HistoryPoint.from_reading(reading))

        self.logger.debug(
            "vital_tick",
            heart_rate=reading.heart_rate,
            oxygen=reading.oxygen,
            temperature=reading.temperature,
            severity=reading.severity.value,
            history_size=len(self._history),
        )
        if reading.severity != Severity.NORMAL:
            self.logger.info(
                "vital_severity_raised",
                severity=reading.severity.value,
                heart_rate=reading.heart_rate,
                oxygen=reading.oxygen,
                temperature=reading.temperature,
            )

        for callback in list(self._subscribers):
            try:
                callback(reading)
            except Exception as e:
                self.logger.exception("subscriber_failed", error=str(e))
        return reading

    @asynccontextmanager
    async def monitoring_session(self) -> AsyncIterator["VitalMonitor"]:
        """
        Async context manager for the monitoring lifecycle.

        Leaving the block stops the stream for good.
        """
        if self._stopped:
            raise RuntimeError("Monitor session already ended - create a new VitalMonitor")
        self.logger.info("monitoring_session_started")
        self._is_running = True
        try:
            yield self
        finally:
            self._is_running = False
            self._stopped = True
            self.logger.info("monitoring_session_ended")

    async def stream(self) -> AsyncIterator[VitalReading]:
        """
        Yield one reading per tick interval while the session is running.

        Time spent by the consumer between readings counts against the interval.
        """
        if not self._is_running:
            raise RuntimeError("Monitor not running - use monitoring_session()")

        self.logger.info("vital_stream_started", interval_seconds=self.config.tick_interval_seconds)
        while self._is_running:
            tick_start = time.perf_counter()
            yield self.tick()

            elapsed = time.perf_counter() - tick_start
            sleep_time = max(0.0, self.config.tick_interval_seconds - elapsed)
            if sleep_time > 0:
                await asyncio.sleep(sleep_time)
            else:
                self.logger.warning(
                    "vital_consumer_slower_than_interval",
                    elapsed_seconds=round(elapsed, 3),
                    interval_seconds=self.config.tick_interval_seconds,
                )
