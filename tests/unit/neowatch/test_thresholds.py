"""
Tests for the threshold tables and classifiers in `neowatch/domain/thresholds.py`.

Covers:
- Activity labels from heart rate boundaries
- Per-channel zones, including the asymmetric oxygen band
- Combined severity for the documented examples
- Purity of classification
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from neowatch.domain.models import Activity, Channel, Severity
from neowatch.domain.thresholds import (
    DEFAULT_BANDS,
    ChannelBand,
    classify_activity,
    classify_channel,
    classify_severity,
)


@pytest.mark.parametrize(
    "heart_rate,expected",
    [
        (110, Activity.ASLEEP),
        (124, Activity.ASLEEP),
        (125, Activity.CALM),
        (134, Activity.CALM),
        (135, Activity.ACTIVE),
        (149, Activity.ACTIVE),
        (150, Activity.CRYING),
        (170, Activity.CRYING),
    ],
)
def test_activity_thresholds(heart_rate: int, expected: Activity) -> None:
    assert classify_activity(heart_rate) is expected


class TestSeverity:
    def test_heart_rate_in_caution_band(self) -> None:
        assert classify_severity(165, 96, 37.0) is Severity.CAUTION

    def test_multiple_channels_in_alert(self) -> None:
        assert classify_severity(90, 90, 38.5) is Severity.ALERT

    def test_default_sensor_values_are_normal(self) -> None:
        assert classify_severity(138, 98, 36.8) is Severity.NORMAL

    def test_single_alert_channel_wins_over_cautions(self) -> None:
        # heart rate caution, temperature caution, oxygen alert
        assert classify_severity(165, 92.5, 37.8) is Severity.ALERT

    @pytest.mark.parametrize(
        "heart_rate,oxygen,temperature",
        [(95, 98, 36.8), (138, 94, 36.8), (138, 98, 36.2), (138, 98, 37.9)],
    )
    def test_single_caution_channel(self, heart_rate: int, oxygen: float, temperature: float) -> None:
        assert classify_severity(heart_rate, oxygen, temperature) is Severity.CAUTION

    @given(
        heart_rate=st.integers(min_value=40, max_value=250),
        oxygen=st.floats(min_value=70, max_value=100),
        temperature=st.floats(min_value=33, max_value=41),
    )
    def test_classification_is_pure(self, heart_rate: int, oxygen: float, temperature: float) -> None:
        first = classify_severity(heart_rate, oxygen, temperature)
        second = classify_severity(heart_rate, oxygen, temperature)
        assert first is second


class TestChannelBand:
    def test_band_edges_are_normal(self) -> None:
        band = DEFAULT_BANDS[Channel.HEART_RATE]
        assert band.zone(100) is Severity.NORMAL
        assert band.zone(160) is Severity.NORMAL
        assert band.zone(90) is Severity.CAUTION
        assert band.zone(170) is Severity.CAUTION
        assert band.zone(89) is Severity.ALERT
        assert band.zone(171) is Severity.ALERT

    def test_oxygen_has_no_upper_caution(self) -> None:
        assert classify_channel(Channel.OXYGEN, 100) is Severity.NORMAL
        assert classify_channel(Channel.OXYGEN, 94) is Severity.CAUTION
        assert classify_channel(Channel.OXYGEN, 92.9) is Severity.ALERT

    def test_custom_bands_override_defaults(self) -> None:
        bands = {
            **DEFAULT_BANDS,
            Channel.HEART_RATE: ChannelBand(normal_min=120, normal_max=140, alert_min=100, alert_max=180),
        }
        assert classify_severity(150, 98, 36.8, bands) is Severity.CAUTION

    def test_invalid_band_rejected(self) -> None:
        with pytest.raises(ValueError, match="enclose"):
            ChannelBand(normal_min=100, normal_max=160, alert_min=110, alert_max=170)
