"""
Projects monitor - runs the collector and the command listener together.

Both loops run for the lifetime of the process. If either one fails,
the other is cancelled and the error propagates to the caller, so the
process never keeps running half of the system.
"""

import asyncio

import structlog

from projects_notifier.config.settings import Settings
from projects_notifier.control.channel import ControlChannel, ImapControlChannel
from projects_notifier.control.listener import ControlListener
from projects_notifier.control.state import PauseFlag
from projects_notifier.notifications.channels import EmailSink, NotificationSink, WebhookSink
from projects_notifier.notifications.notifier import Notifier
from projects_notifier.observability.metrics import MetricsCollector
from projects_notifier.services.collector_service import CollectorService

logger = structlog.get_logger(__name__)


class ProjectsMonitor:
    """
    Supervisor for the two long-running tasks.

    Usage:
        monitor = create_monitor(get_settings())
        await monitor.run()  # Returns only on cancellation or failure
    """

    def __init__(
        self,
        collector: CollectorService,
        listener: ControlListener,
        flag: PauseFlag,
    ):
        self.collector = collector
        self.listener = listener
        self.flag = flag
        self._tasks: list[asyncio.Task] = []

    async def run(self) -> None:
        """
        Run both tasks until one fails or run() is cancelled.

        Raises:
            Exception: Whatever ended the first failing task
        """
        logger.info("Start ProjectsMonitor")
        self._tasks = [
            asyncio.create_task(self.collector.start(), name="collector"),
            asyncio.create_task(self.listener.start(), name="command_listener"),
        ]

        try:
            done, _ = await asyncio.wait(self._tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            await self._cancel_all()

        for task in done:
            if task.cancelled():
                continue
            error = task.exception()
            if error is not None:
                logger.error(
                    "Task failed, shutting down",
                    task=task.get_name(),
                    error_type=type(error).__name__,
                    error=str(error),
                )
                raise error

        logger.info("ProjectsMonitor stopped")

    async def stop(self) -> None:
        """Cancel both tasks."""
        logger.info("Stopping ProjectsMonitor")
        await self._cancel_all()

    async def _cancel_all(self) -> None:
        for task in self._tasks:
            if not task.done():
                task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)


def create_sink(settings: Settings) -> NotificationSink:
    """Webhook delivery when `webhook_url` is set, mail otherwise."""
    if settings.webhook_url:
        return WebhookSink(settings.webhook_url, timeout=settings.fetch_timeout_seconds)
    return EmailSink(
        host=settings.smtp_host,
        port=settings.smtp_port,
        login=settings.mail_login,
        password=settings.mail_password,
        recipient=settings.notify_address,
        send_delay=settings.send_delay_seconds,
    )


def create_monitor(
    settings: Settings,
    sink: NotificationSink | None = None,
    channel: ControlChannel | None = None,
    metrics: MetricsCollector | None = None,
) -> ProjectsMonitor:
    """Wire the monitor from settings, with the IMAP command channel by default."""
    flag = PauseFlag()

    sink = sink or create_sink(settings)
    channel = channel or ImapControlChannel(
        host=settings.imap_host,
        port=settings.imap_port,
        login=settings.mail_login,
        password=settings.mail_password,
        stop_token=settings.stop_command,
        start_token=settings.start_command,
    )

    notifier = Notifier(sink, snapshot_chars=settings.error_snapshot_chars, metrics=metrics)
    collector = CollectorService(settings, notifier, flag, metrics=metrics)
    listener = ControlListener(
        channel,
        flag,
        poll_interval=settings.command_poll_seconds,
        start_delay=settings.command_start_delay_seconds,
        metrics=metrics,
    )
    return ProjectsMonitor(collector, listener, flag)
