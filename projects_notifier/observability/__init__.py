"""Observability layer - logging and metrics."""

from projects_notifier.observability.logging import get_logger, setup_logging
from projects_notifier.observability.metrics import MetricsCollector, get_metrics

__all__ = ["setup_logging", "get_logger", "MetricsCollector", "get_metrics"]
