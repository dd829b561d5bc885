"""TP-Link Easy Smart switch state synchronization.

Polls TP-Link Easy Smart switches through their web console, normalizes the
scraped pages into snapshots and reports the differences as change events.
"""

from .config import DeviceConfig, validate_device_config
from .connectivity import LoggingConnectivityReporter, format_downtime
from .const import DOMAIN, VERSION
from .diagnostics import get_monitor_diagnostics
from .diff import diff_snapshots
from .easy_smart_client import SwitchClient
from .history import (
    ChangeEvent,
    ChangeKind,
    ConnectivityReporter,
    EntityType,
    EventDispatcher,
    HistoryRecorder,
)
from .monitor import LoopState, MonitoringLoop
from .scheduler import MonitorScheduler, SessionRegistry

__version__ = VERSION

__all__ = [
    "DOMAIN",
    "VERSION",
    "ChangeEvent",
    "ChangeKind",
    "ConnectivityReporter",
    "DeviceConfig",
    "EntityType",
    "EventDispatcher",
    "HistoryRecorder",
    "LoggingConnectivityReporter",
    "LoopState",
    "MonitorScheduler",
    "MonitoringLoop",
    "SessionRegistry",
    "SwitchClient",
    "diff_snapshots",
    "format_downtime",
    "get_monitor_diagnostics",
    "validate_device_config",
]
