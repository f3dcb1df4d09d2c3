"""
Window statistics over the rolling vital-sign history.

Turns the history buffer into what a caregiver needs at a glance:
- per-channel mean / min / max / deviation and trend
- share of time spent in normal, caution and alert zones
- activity distribution derived from heart rate
- a wellness score for the latest reading
- discrete out-of-range events and plain-language insights

All functions are pure; nothing here touches the clock or randomness.
"""

import math
from collections.abc import Sequence
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from neowatch.domain.models import (
    CHANNEL_UNITS,
    Activity,
    Channel,
    HistoryPoint,
    Severity,
    Trend,
    VitalReading,
)
from neowatch.domain.thresholds import DEFAULT_BANDS, ChannelBand, classify_activity
from neowatch.services.vital_monitor import round_to

TREND_THRESHOLD_RATIO = 0.015
MAX_EVENTS = 10

CHANNEL_DECIMALS: dict[Channel, int] = {
    Channel.HEART_RATE: 0,
    Channel.OXYGEN: 1,
    Channel.TEMPERATURE: 1,
}


class Period(str, Enum):
    """Analysis window, expressed as how much recent history to keep."""

    LAST_HOUR = "1h"
    SIX_HOURS = "6h"
    DAY = "24h"

    @property
    def points(self) -> int:
        return {"1h": 2, "6h": 8, "24h": 24}[self.value]


WellnessLabel = Literal["excellent", "good", "fair", "attention"]


class ZoneDistribution(BaseModel):
    normal: int = Field(ge=0, le=100)
    caution: int = Field(ge=0, le=100)
    alert: int = Field(ge=0, le=100)


class ChannelSummary(BaseModel):
    channel: Channel
    unit: str
    current: float
    mean: float
    minimum: float
    maximum: float
    std_dev: float
    trend: Trend
    zones: ZoneDistribution


class WellnessScore(BaseModel):
    heart_rate: int
    oxygen: int
    temperature: int
    overall: int = Field(ge=0, le=100)
    label: WellnessLabel


class HealthEvent(BaseModel):
    label: str
    kind: Literal[Severity.CAUTION, Severity.ALERT]
    channel: Channel
    value: float
    detail: str


class Insight(BaseModel):
    title: str
    text: str
    recommendation: str
    tone: Literal["positive", "watch", "warning"]


class HealthSummary(BaseModel):
    period: Period
    channels: dict[Channel, ChannelSummary]
    activity: dict[Activity, int]
    wellness: WellnessScore
    events: list[HealthEvent]
    insights: list[Insight]


def window(history: Sequence[HistoryPoint], period: Period) -> list[HistoryPoint]:
    return list(history[-period.points :])


def mean(values: Sequence[float], decimals: int = 0) -> float:
    if not values:
        return 0
    return round_to(sum(values) / len(values), decimals)


def std_dev(values: Sequence[float]) -> float:
    """Population standard deviation around the mean rounded to 2 decimals."""
    if len(values) < 2:
        return 0.0
    center = mean(values, 2)
    return math.sqrt(sum((v - center) ** 2 for v in values) / len(values))


def trend(values: Sequence[float]) -> Trend:
    """Compare the mean of the second half against the first half."""
    if len(values) < 3:
        return Trend.STABLE
    half = len(values) // 2
    first = mean(values[:half], 1)
    second = mean(values[half:], 1)
    diff = second - first
    threshold = first * TREND_THRESHOLD_RATIO
    if diff > threshold:
        return Trend.RISING
    if diff < -threshold:
        return Trend.FALLING
    return Trend.STABLE


def _percent(count: int, total: int) -> int:
    return int(round_to(count / (total or 1) * 100, 0))


def zone_distribution(values: Sequence[float], band: ChannelBand) -> ZoneDistribution:
    counts = {severity: 0 for severity in Severity}
    for value in values:
        counts[band.zone(value)] += 1
    total = len(values)
    return ZoneDistribution(
        normal=_percent(counts[Severity.NORMAL], total),
        caution=_percent(counts[Severity.CAUTION], total),
        alert=_percent(counts[Severity.ALERT], total),
    )


def activity_distribution(heart_rates: Sequence[float]) -> dict[Activity, int]:
    counts = {activity: 0 for activity in Activity}
    for heart_rate in heart_rates:
        counts[classify_activity(heart_rate)] += 1
    return {activity: _percent(count, len(heart_rates)) for activity, count in counts.items()}


def wellness_score(reading: VitalReading) -> WellnessScore:
    hr, o2, temp = reading.heart_rate, reading.oxygen, reading.temperature

    hr_score = 100 if 100 <= hr <= 160 else 70 if 90 <= hr <= 170 else 40
    o2_score = 100 if o2 >= 95 else 60 if o2 >= 92 else 30
    temp_score = 100 if 36.5 <= temp <= 37.5 else 65 if 36.0 <= temp <= 38.0 else 30
    overall = int(round_to((hr_score + o2_score + temp_score) / 3, 0))

    label: WellnessLabel
    if overall >= 85:
        label = "excellent"
    elif overall >= 65:
        label = "good"
    elif overall >= 45:
        label = "fair"
    else:
        label = "attention"

    return WellnessScore(
        heart_rate=hr_score, oxygen=o2_score, temperature=temp_score, overall=overall, label=label
    )


def _event_detail(channel: Channel, value: float, band: ChannelBand) -> str:
    low = value < band.normal_min
    if channel is Channel.HEART_RATE:
        condition = "bradycardia" if low else "tachycardia"
        return (
            f"Heart rate of {value:g} bpm is {'below' if low else 'above'} the neonatal normal "
            f"range ({band.normal_min:g}-{band.normal_max:g} bpm); possible {condition}."
        )
    if channel is Channel.OXYGEN:
        return (
            f"SpO2 of {value:g}% is below the ideal threshold (>={band.normal_min:g}%). "
            f"Values under {band.alert_min:g}% need immediate attention; check sensor position."
        )
    condition = "hypothermia" if low else "hyperthermia"
    return (
        f"Temperature of {value:g}°C is outside neonatal normothermia "
        f"({band.normal_min:g}-{band.normal_max:g}°C); possible {condition}."
    )


def detect_events(
    points: Sequence[HistoryPoint], bands: dict[Channel, ChannelBand] | None = None
) -> list[HealthEvent]:
    """One event per channel outside its normal zone, newest first, capped at MAX_EVENTS."""
    bands = bands or DEFAULT_BANDS
    events: list[HealthEvent] = []
    for point in points:
        for channel in Channel:
            value = point.value(channel)
            zone = bands[channel].zone(value)
            if zone is Severity.NORMAL:
                continue
            events.append(
                HealthEvent(
                    label=point.label,
                    kind=zone,
                    channel=channel,
                    value=value,
                    detail=_event_detail(channel, value, bands[channel]),
                )
            )
    return list(reversed(events[-MAX_EVENTS:]))


def build_insights(points: Sequence[HistoryPoint]) -> list[Insight]:
    heart_rates = [p.heart_rate for p in points]
    oxygen = [p.oxygen for p in points]
    temperatures = [p.temperature for p in points]
    insights: list[Insight] = []

    hr_dev = std_dev(heart_rates)
    if hr_dev < 8:
        insights.append(
            Insight(
                title="Stable heart rate",
                text=f"Low variability (±{round_to(hr_dev, 0)} bpm) points to a balanced, comfortable state.",
                recommendation="Keep the environment calm; cardiac stability is a sign of wellbeing.",
                tone="positive",
            )
        )
    elif hr_dev > 15:
        insights.append(
            Insight(
                title="High heart-rate variability",
                text=f"Deviation of ±{round_to(hr_dev, 0)} bpm may reflect sleep-wake cycles or crying.",
                recommendation="Check whether it follows activity changes; consult a pediatrician if it persists.",
                tone="watch",
            )
        )

    min_o2 = min(oxygen) if oxygen else 98
    max_o2 = max(oxygen) if oxygen else 98
    if min_o2 >= 96:
        insights.append(
            Insight(
                title="Optimal respiratory function",
                text=f"SpO2 held between {min_o2:g}% and {max_o2:g}%.",
                recommendation="No action needed.",
                tone="positive",
            )
        )
    elif min_o2 < 94:
        insights.append(
            Insight(
                title="Oxygenation to watch",
                text=f"SpO2 values of {min_o2:g}% were recorded; newborns need at least 95%.",
                recommendation="Check the oximeter position and contact a professional if it stays below 94%.",
                tone="warning",
            )
        )

    max_temp = max(temperatures) if temperatures else 36.8
    min_temp = min(temperatures) if temperatures else 36.8
    if max_temp <= 37.5 and min_temp >= 36.5:
        insights.append(
            Insight(
                title="Adequate thermoregulation",
                text=f"Range recorded: {min_temp:.1f}°C - {max_temp:.1f}°C.",
                recommendation="Keep the room between 22 and 26°C.",
                tone="positive",
            )
        )
    elif max_temp > 37.8:
        insights.append(
            Insight(
                title="Elevated temperature",
                text=f"Maximum recorded: {max_temp:.1f}°C, above neonatal normothermia (36.5-37.5°C).",
                recommendation="Remove extra layers; see a pediatrician if above 38°C or lasting 30 minutes.",
                tone="warning",
            )
        )
    elif min_temp < 36.0:
        insights.append(
            Insight(
                title="Risk of hypothermia",
                text=f"Minimum recorded: {min_temp:.1f}°C.",
                recommendation="Use skin-to-skin contact and a warm room; seek care if it stays below 36°C.",
                tone="warning",
            )
        )

    activity = activity_distribution(heart_rates)
    if activity[Activity.ASLEEP] > 50:
        insights.append(
            Insight(
                title="Long sleep pattern",
                text=f"Asleep {activity[Activity.ASLEEP]}% of the analysed time.",
                recommendation="Normal in the first weeks; feed every 2-3 hours.",
                tone="positive",
            )
        )
    elif activity[Activity.CRYING] > 20:
        insights.append(
            Insight(
                title="Frequent crying",
                text=f"Crying detected {activity[Activity.CRYING]}% of the period.",
                recommendation="Check feeding, diaper, position and room temperature.",
                tone="watch",
            )
        )

    if all(trend(values) is Trend.STABLE for values in (heart_rates, oxygen, temperatures)):
        insights.append(
            Insight(
                title="Overall stability confirmed",
                text="All three vital signs hold a stable trend.",
                recommendation="No action needed.",
                tone="positive",
            )
        )

    return insights


def summarize_channel(
    channel: Channel, points: Sequence[HistoryPoint], current: float, band: ChannelBand
) -> ChannelSummary:
    values = [p.value(channel) for p in points]
    decimals = CHANNEL_DECIMALS[channel]
    return ChannelSummary(
        channel=channel,
        unit=CHANNEL_UNITS[channel],
        current=current,
        mean=mean(values, decimals),
        minimum=min(values) if values else 0,
        maximum=max(values) if values else 0,
        std_dev=round_to(std_dev(values), decimals + 1),
        trend=trend(values),
        zones=zone_distribution(values, band),
    )


def summarize(
    history: Sequence[HistoryPoint],
    latest: VitalReading,
    period: Period = Period.DAY,
    bands: dict[Channel, ChannelBand] | None = None,
) -> HealthSummary:
    """Full analysis of the last `period` of history plus the latest reading."""
    bands = bands or DEFAULT_BANDS
    points = window(history, period)
    return HealthSummary(
        period=period,
        channels={
            channel: summarize_channel(channel, points, latest.value(channel), bands[channel])
            for channel in Channel
        },
        activity=activity_distribution([p.heart_rate for p in points]),
        wellness=wellness_score(latest),
        events=detect_events(points, bands),
        insights=build_insights(points),
    )
