"""
Core services for the application.

This package contains the simulated sensor, its tick runner, history
analysis and the shared Result / logging plumbing.
"""

from .health_analysis import HealthSummary, Period, summarize
from .results import Result, capture, configure_logging
from .ticker import PeriodicTicker
from .vital_monitor import (
    ChannelSpec,
    SimulatedVitalSource,
    VitalMonitor,
    VitalMonitorConfig,
)

__all__ = [
    "ChannelSpec",
    "HealthSummary",
    "Period",
    "PeriodicTicker",
    "Result",
    "SimulatedVitalSource",
    "VitalMonitor",
    "VitalMonitorConfig",
    "capture",
    "configure_logging",
    "summarize",
]
