from datetime import UTC, datetime, timedelta

import pytest

from neowatch.services.relative_time import format_countdown, format_elapsed, format_stopwatch

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    "elapsed,expected",
    [
        (timedelta(seconds=0), "just now"),
        (timedelta(seconds=59), "just now"),
        (timedelta(minutes=1), "1 min ago"),
        (timedelta(minutes=59, seconds=59), "59 min ago"),
        (timedelta(hours=1), "1h ago"),
        (timedelta(hours=2, minutes=5), "2h 5m ago"),
    ],
)
def test_format_elapsed(elapsed: timedelta, expected: str) -> None:
    assert format_elapsed(NOW - elapsed, NOW) == expected


def test_format_elapsed_without_record() -> None:
    assert format_elapsed(None, NOW) == "no records"


@pytest.mark.parametrize(
    "elapsed,expected",
    [
        (timedelta(seconds=5), "0:05"),
        (timedelta(minutes=12, seconds=30), "12:30"),
        (timedelta(hours=1, minutes=2, seconds=3), "1:02:03"),
        (timedelta(seconds=-10), "0:00"),
    ],
)
def test_format_stopwatch(elapsed: timedelta, expected: str) -> None:
    assert format_stopwatch(NOW - elapsed, NOW) == expected


def test_format_stopwatch_not_started() -> None:
    assert format_stopwatch(None, NOW) == "0:00"


def test_format_countdown() -> None:
    start = NOW - timedelta(minutes=10)
    assert format_countdown(start, 15, NOW) == "5:00"
    assert format_countdown(start, 10.5, NOW) == "0:30"
    assert format_countdown(start, 10, NOW) == "time to wake up!"
