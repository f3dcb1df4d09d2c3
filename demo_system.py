"""
Console demo of the monitoring pipeline.

This script shows:
1. Configuration loading (falls back to simulator defaults without a backend)
2. The simulated sensor driven by a periodic ticker
3. A second ticker refreshing the relative "last update" label
4. History analysis: trends, zones, wellness score, events and insights

Run with: uv run python demo_system.py
"""

import asyncio
from collections.abc import Callable
from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from neowatch.config import (
    SimulatorConfig,
    get_config,
    get_monitor_config,
    print_config_summary,
    setup_logging,
)
from neowatch.domain.models import Severity, VitalReading
from neowatch.services import (
    PeriodicTicker,
    Period,
    VitalMonitor,
    VitalMonitorConfig,
    configure_logging,
    summarize,
)
from neowatch.services.relative_time import format_elapsed

console = Console()

SEVERITY_STYLE = {
    Severity.NORMAL: "green",
    Severity.CAUTION: "yellow",
    Severity.ALERT: "bold red",
}


def load_settings() -> tuple[VitalMonitorConfig, SimulatorConfig]:
    """Monitor and simulator settings; logging is configured as a side effect."""
    try:
        setup_logging(get_config())
        print_config_summary()
        return get_monitor_config(), get_config().simulator
    except ValueError as e:
        configure_logging(log_format="console")
        console.print(f"[yellow]Backend not configured ({e}); using simulator defaults[/yellow]")
        return VitalMonitorConfig(tick_interval_seconds=0.5), SimulatorConfig(tick_interval_seconds=0.5)


def build_tickers(
    monitor: VitalMonitor,
    simulator: SimulatorConfig,
    refresh_label: Callable[[], None],
) -> tuple[PeriodicTicker, PeriodicTicker]:
    """The sensor ticker and the relative-time label ticker."""
    sensor = PeriodicTicker(monitor.config.tick_interval_seconds, monitor.tick, name="sensor")
    labels = PeriodicTicker(
        simulator.relative_time_refresh_seconds, refresh_label, name="relative-time"
    )
    return sensor, labels


def render_reading(reading: VitalReading) -> None:
    style = SEVERITY_STYLE[reading.severity]
    console.print(
        f"[{style}]{reading.recorded_at:%H:%M:%S}  "
        f"HR {reading.heart_rate:>3} bpm  SpO2 {reading.oxygen:>5.1f}%  "
        f"Temp {reading.temperature:>4.1f}°C  {reading.activity.value:<7} "
        f"{reading.severity.value}[/{style}]"
    )


def render_summary(monitor: VitalMonitor) -> None:
    summary = summarize(monitor.history, monitor.latest, Period.DAY)

    table = Table(title=f"Last {summary.period.value}")
    for column in ("Channel", "Current", "Mean", "Min", "Max", "Std", "Trend", "Normal %"):
        table.add_column(column)
    for channel, s in summary.channels.items():
        table.add_row(
            channel.value,
            f"{s.current:g} {s.unit}",
            f"{s.mean:g}",
            f"{s.minimum:g}",
            f"{s.maximum:g}",
            f"{s.std_dev:g}",
            s.trend.value,
            str(s.zones.normal),
        )
    console.print(table)

    console.print(
        Panel(
            f"Wellness {summary.wellness.overall}/100 ({summary.wellness.label})\n"
            + "\n".join(f"- {i.title}: {i.text}" for i in summary.insights),
            title="Insights",
        )
    )
    for event in summary.events:
        console.print(f"[yellow]{event.label} {event.kind.value}: {event.detail}[/yellow]")


async def run_demo(ticks: int = 6) -> None:
    config, simulator = load_settings()
    monitor = VitalMonitor(config)
    last_update: dict[str, datetime] = {}

    def on_reading(reading: VitalReading) -> None:
        last_update["at"] = reading.recorded_at
        render_reading(reading)

    def refresh_label() -> None:
        console.print(f"[dim]last update: {format_elapsed(last_update.get('at'), datetime.now().astimezone())}[/dim]")

    unsubscribe = monitor.subscribe(on_reading)
    sensor, labels = build_tickers(monitor, simulator, refresh_label)

    console.print(Panel("Live simulated readings", style="blue"))
    async with sensor.running(), labels.running():
        while sensor.tick_count < ticks:
            await asyncio.sleep(config.tick_interval_seconds / 2)
    unsubscribe()
    refresh_label()

    render_summary(monitor)


if __name__ == "__main__":
    asyncio.run(run_demo())
