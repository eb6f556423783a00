"""Configuration - process settings and the per-cycle monitor file."""

from projects_notifier.config.monitor import (
    MonitorConfig,
    SourceConfig,
    SourceId,
    load_monitor_config,
)
from projects_notifier.config.settings import Settings, get_settings

__all__ = [
    "MonitorConfig",
    "Settings",
    "SourceConfig",
    "SourceId",
    "get_settings",
    "load_monitor_config",
]
