"""
Domain models for neonatal vital-sign monitoring.

These models represent the core monitoring concepts and are framework-agnostic.
They use Pydantic for validation and are immutable once created.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Channel(str, Enum):
    """Vital signs the sensor reports."""

    HEART_RATE = "heart_rate"
    OXYGEN = "oxygen"
    TEMPERATURE = "temperature"


class Activity(str, Enum):
    """Activity state inferred from heart rate."""

    ASLEEP = "asleep"
    CALM = "calm"
    ACTIVE = "active"
    CRYING = "crying"


class Severity(str, Enum):
    """Coarse classification of a reading."""

    NORMAL = "normal"
    CAUTION = "caution"
    ALERT = "alert"


class Trend(str, Enum):
    """Direction of a channel over a window of history."""

    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


CHANNEL_UNITS: dict[Channel, str] = {
    Channel.HEART_RATE: "bpm",
    Channel.OXYGEN: "%",
    Channel.TEMPERATURE: "°C",
}


class VitalReading(BaseModel):
    """Latest classified sample produced by the sensor."""

    model_config = ConfigDict(frozen=True)

    heart_rate: int = Field(description="Beats per minute")
    oxygen: float = Field(description="Oxygen saturation (SpO2) in percent")
    temperature: float = Field(description="Body temperature in Celsius")
    activity: Activity
    severity: Severity
    connected: bool = True
    recorded_at: datetime

    def value(self, channel: Channel) -> float:
        return float(getattr(self, channel.value))


class HistoryPoint(BaseModel):
    """One entry of the rolling history, labelled with its wall-clock time."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(pattern=r"^\d{2}:\d{2}$", description="HH:MM")
    heart_rate: int
    oxygen: float
    temperature: float
    recorded_at: datetime

    def value(self, channel: Channel) -> float:
        return float(getattr(self, channel.value))

    @classmethod
    def from_reading(cls, reading: VitalReading) -> "HistoryPoint":
        return cls(
            label=reading.recorded_at.strftime("%H:%M"),
            heart_rate=reading.heart_rate,
            oxygen=reading.oxygen,
            temperature=reading.temperature,
            recorded_at=reading.recorded_at,
        )
