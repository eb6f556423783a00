"""Services that drive collection and remote control."""

from projects_notifier.services.collector_service import CollectorService, CycleReport
from projects_notifier.services.heartbeat import HeartbeatScheduler
from projects_notifier.services.monitor import ProjectsMonitor, create_monitor, create_sink

__all__ = [
    "CollectorService",
    "CycleReport",
    "HeartbeatScheduler",
    "ProjectsMonitor",
    "create_monitor",
    "create_sink",
]
