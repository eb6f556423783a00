"""Notification helpers used by the collector.

Wraps a NotificationSink and applies the delivery policy: a failed
send is logged and reported as False, never raised, never retried.
"""

import structlog

from projects_notifier.errors import DeliveryError, ParseError, SourceError
from projects_notifier.ingestion.schemas import Listing
from projects_notifier.notifications.channels import NotificationSink
from projects_notifier.observability.metrics import MetricsCollector

HELLO_SUBJECT = "Hello from Projects Notifier"
HELLO_BODY = "Have a nice day"


class Notifier:
    """Sends listings, greetings and operator alerts through one sink."""

    def __init__(
        self,
        sink: NotificationSink,
        snapshot_chars: int = 10_000,
        metrics: MetricsCollector | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._sink = sink
        self._snapshot_chars = snapshot_chars
        self._metrics = metrics
        self._log = logger or structlog.get_logger(__name__)

    @property
    def sink(self) -> NotificationSink:
        return self._sink

    async def notify(self, subject: str, body: str) -> bool:
        """Send one notification, swallowing delivery failures.

        Returns:
            True if the sink accepted the notification.
        """
        try:
            await self._sink.send(subject, body)
        except DeliveryError as e:
            self._log.error(
                "Notification delivery failed",
                sink=self._sink.name,
                subject=subject,
                error=str(e),
            )
            self._record(False)
            return False

        self._record(True)
        return True

    async def hello(self) -> bool:
        return await self.notify(HELLO_SUBJECT, HELLO_BODY)

    async def listing(self, listing: Listing) -> bool:
        return await self.notify(listing.subject, listing.to_body())

    async def source_failure(self, error: SourceError) -> bool:
        """Tell the operator that a source was disabled."""
        subject = f"PM: {error.kind} error for {error.identifier}"
        body = f"{type(error).__name__}: {error}"
        if error.endpoint:
            body += f"\nEndpoint: {error.endpoint}"
        if isinstance(error, ParseError) and error.document and self._snapshot_chars:
            body += "\n\nDocument:\n" + error.document[: self._snapshot_chars]
        return await self.notify(subject, body)

    def _record(self, success: bool) -> None:
        if self._metrics is not None:
            self._metrics.record_notification(success)
