"""
Threshold tables and pure classifiers for neonatal vital signs.

Every function here is a pure function of its inputs: the same values always
map to the same label.
"""

from pydantic import BaseModel, ConfigDict, model_validator

from neowatch.domain.models import Activity, Channel, Severity

# Heart-rate upper bounds (exclusive) for each activity state
ASLEEP_BELOW_BPM = 125
CALM_BELOW_BPM = 135
ACTIVE_BELOW_BPM = 150


class ChannelBand(BaseModel):
    """
    Normal range plus alert extremes for one channel.

    Values inside [normal_min, normal_max] are normal, values below alert_min
    or above alert_max are alerts, anything in between is caution.
    """

    model_config = ConfigDict(frozen=True)

    normal_min: float
    normal_max: float
    alert_min: float
    alert_max: float

    @model_validator(mode="after")
    def bands_are_nested(self) -> "ChannelBand":
        if self.normal_min > self.normal_max:
            raise ValueError("normal_min must not exceed normal_max")
        if self.alert_min > self.normal_min or self.alert_max < self.normal_max:
            raise ValueError("alert bounds must enclose the normal range")
        return self

    def zone(self, value: float) -> Severity:
        if self.normal_min <= value <= self.normal_max:
            return Severity.NORMAL
        if value < self.alert_min or value > self.alert_max:
            return Severity.ALERT
        return Severity.CAUTION


DEFAULT_BANDS: dict[Channel, ChannelBand] = {
    Channel.HEART_RATE: ChannelBand(normal_min=100, normal_max=160, alert_min=90, alert_max=170),
    Channel.OXYGEN: ChannelBand(normal_min=95, normal_max=100, alert_min=93, alert_max=100),
    Channel.TEMPERATURE: ChannelBand(
        normal_min=36.5, normal_max=37.5, alert_min=35.5, alert_max=38.0
    ),
}


def classify_activity(heart_rate: float) -> Activity:
    """Map heart rate to the baby's likely activity."""
    if heart_rate < ASLEEP_BELOW_BPM:
        return Activity.ASLEEP
    if heart_rate < CALM_BELOW_BPM:
        return Activity.CALM
    if heart_rate < ACTIVE_BELOW_BPM:
        return Activity.ACTIVE
    return Activity.CRYING


def classify_channel(
    channel: Channel, value: float, bands: dict[Channel, ChannelBand] | None = None
) -> Severity:
    return (bands or DEFAULT_BANDS)[channel].zone(value)


def classify_severity(
    heart_rate: float,
    oxygen: float,
    temperature: float,
    bands: dict[Channel, ChannelBand] | None = None,
) -> Severity:
    """
    Combine the three channels into one severity label.

    Any channel in its alert zone makes the reading an alert; otherwise any
    channel in its caution zone makes it a caution.
    """
    zones = {
        classify_channel(Channel.HEART_RATE, heart_rate, bands),
        classify_channel(Channel.OXYGEN, oxygen, bands),
        classify_channel(Channel.TEMPERATURE, temperature, bands),
    }
    if Severity.ALERT in zones:
        return Severity.ALERT
    if Severity.CAUTION in zones:
        return Severity.CAUTION
    return Severity.NORMAL
