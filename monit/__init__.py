"""Periodic process metrics reporting for long-running services."""

from monit.accumulator import Accumulator, Snapshot
from monit.config import ReportConfig
from monit.errors import ConfigResolutionError, DeliveryError, MonitError, SerializationError
from monit.monitor import Monitor, MonitorState

__version__ = "0.1.0"

__all__ = [
    "Accumulator",
    "ConfigResolutionError",
    "DeliveryError",
    "Monitor",
    "MonitError",
    "MonitorState",
    "ReportConfig",
    "SerializationError",
    "Snapshot",
]
