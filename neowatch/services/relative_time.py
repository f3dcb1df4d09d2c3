"""Human-readable elapsed and remaining time labels."""

from datetime import datetime, timedelta


def format_elapsed(since: datetime | None, now: datetime) -> str:
    if since is None:
        return "no records"
    minutes = int((now - since).total_seconds() // 60)
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes} min ago"
    hours, rest = divmod(minutes, 60)
    return f"{hours}h {rest}m ago" if rest else f"{hours}h ago"


def format_stopwatch(since: datetime | None, now: datetime) -> str:
    if since is None:
        return "0:00"
    seconds = max(0, int((now - since).total_seconds()))
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def format_countdown(start: datetime, minutes: float, now: datetime) -> str:
    """Time left until `minutes` after `start`."""
    remaining = int((start + timedelta(minutes=minutes) - now).total_seconds())
    if remaining <= 0:
        return "time to wake up!"
    return f"{remaining // 60}:{remaining % 60:02d}"
