"""
Prometheus metrics for monitoring the collection pipeline.

Defines and exposes metrics for:
- Listings collected and newly seen per source
- Notification delivery outcomes
- Source failures
- Cycle latency
- Pause state

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

from projects_notifier.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for cycle latency (in seconds)
LATENCY_BUCKETS = (0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0)


class MetricsCollector:
    """
    Prometheus metrics collector for the projects notifier.

    Usage:
        metrics = MetricsCollector()
        metrics.start_server()

        metrics.record_source(source="fl_ru", collected=12)
        metrics.record_new(2)
        metrics.record_notification(success=True)
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """
        Initialize Prometheus metrics.

        Args:
            registry: Registry to register with. A private registry keeps
                repeated instantiation (tests) from colliding.
        """
        self.registry = registry or CollectorRegistry()

        self.listings_collected = Counter(
            "projects_notifier_listings_collected_total",
            "Listings that passed the source relevance filter",
            ["source"],
            registry=self.registry,
        )

        self.listings_new = Counter(
            "projects_notifier_listings_new_total",
            "Listings not seen before (after deduplication)",
            registry=self.registry,
        )

        self.notifications = Counter(
            "projects_notifier_notifications_total",
            "Notification send attempts",
            ["status"],  # status: sent, failed
            registry=self.registry,
        )

        self.source_errors = Counter(
            "projects_notifier_source_errors_total",
            "Source failures that disabled a source",
            ["source", "error_type"],
            registry=self.registry,
        )

        self.cycle_latency = Histogram(
            "projects_notifier_cycle_latency_seconds",
            "Time to run one collection cycle",
            buckets=LATENCY_BUCKETS,
            registry=self.registry,
        )

        self.paused = Gauge(
            "projects_notifier_paused",
            "Collection pause state (1=paused, 0=running)",
            registry=self.registry,
        )

        self._server_started = False

    def start_server(self, port: int | None = None) -> None:
        """
        Start HTTP server for Prometheus scraping.

        Args:
            port: Port to listen on (default from settings)
        """
        if self._server_started:
            return
        port = port or get_settings().metrics_port
        start_http_server(port, registry=self.registry)
        self._server_started = True
        logger.info(f"Metrics server started on port {port}")

    def record_source(self, source: str, collected: int) -> None:
        """Record listings kept by a source's filter."""
        self.listings_collected.labels(source=source).inc(collected)

    def record_new(self, count: int) -> None:
        """Record listings that survived deduplication."""
        self.listings_new.inc(count)

    def record_notification(self, success: bool) -> None:
        """Record one notification attempt."""
        self.notifications.labels(status="sent" if success else "failed").inc()

    def record_source_error(self, source: str, error_type: str) -> None:
        """Record a source failure."""
        self.source_errors.labels(source=source, error_type=error_type).inc()

    def record_cycle(self, latency: float) -> None:
        """Record the duration of a completed cycle."""
        self.cycle_latency.observe(latency)

    def set_paused(self, paused: bool) -> None:
        """Record the current pause state."""
        self.paused.set(1 if paused else 0)


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
