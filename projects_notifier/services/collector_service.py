"""
Collector service - the poll cycle.

Each cycle (while not paused):
1. Re-read the monitor file and refresh one adapter per enabled source
2. Send the daily greeting when due
3. Fetch, parse and filter every source in file order
4. Suppress listings already notified (the first cycle only seeds the
   cache, so a fresh start does not replay the whole page)
5. Notify each remaining listing
6. Sleep `sleep_time` seconds, or `paused_poll_seconds` while paused

A source that fails to fetch or parse is disabled for the rest of the
cycle and reported to the operator. It is rebuilt from the monitor file
and tried again on the next cycle. Other sources in the same cycle are
unaffected. ConfigError is never caught here.
"""

import asyncio
import time
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from enum import Enum

import structlog

from projects_notifier.config.monitor import MonitorConfig, SourceConfig, SourceId, load_monitor_config
from projects_notifier.config.settings import Settings
from projects_notifier.control.state import PauseFlag
from projects_notifier.errors import ParseError, SourceError
from projects_notifier.ingestion.base_adapter import SourceAdapter
from projects_notifier.ingestion.deduplication import DedupCache
from projects_notifier.ingestion.http_client import HTTPClient
from projects_notifier.ingestion.registry import create_adapter
from projects_notifier.ingestion.schemas import Listing
from projects_notifier.notifications.notifier import Notifier
from projects_notifier.observability.metrics import MetricsCollector
from projects_notifier.services.heartbeat import HeartbeatScheduler

AdapterFactory = Callable[[SourceConfig, HTTPClient, float], SourceAdapter]


class CollectorState(str, Enum):
    RUNNING = "running"
    PAUSED = "paused"


@dataclass
class CycleReport:
    """Outcome of one collection cycle."""

    collected: int = 0
    new: int = 0
    sent: int = 0
    seeded: bool = False
    failed_sources: list[str] = field(default_factory=list)
    listings: list[Listing] = field(default_factory=list)


class CollectorService:
    """
    Drives the source adapters, the dedup cache and the notifier.

    Usage:
        service = CollectorService(settings, notifier, flag)
        await service.start()  # Runs until cancelled
    """

    def __init__(
        self,
        settings: Settings,
        notifier: Notifier,
        flag: PauseFlag,
        config_loader: Callable[[], MonitorConfig] | None = None,
        cache: DedupCache | None = None,
        heartbeat: HeartbeatScheduler | None = None,
        adapter_factory: AdapterFactory | None = None,
        client_factory: Callable[[], AbstractAsyncContextManager[HTTPClient]] | None = None,
        seed_first_cycle: bool = True,
        metrics: MetricsCollector | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ):
        """
        Initialize collector service.

        Args:
            settings: Process settings
            notifier: Notification delivery
            flag: Pause flag shared with the command listener
            config_loader: Returns the current monitor file contents
            cache: Dedup cache (a new 100-entry cache by default)
            heartbeat: Greeting schedule (built from the first config)
            adapter_factory: Builds an adapter for a source entry
            client_factory: Opens the HTTP client used for one cycle
            seed_first_cycle: Record the first cycle's listings without
                notifying them
            metrics: Optional metrics collector
            logger: Optional bound logger
        """
        self._settings = settings
        self._notifier = notifier
        self._flag = flag
        self._load_config = config_loader or (
            lambda: load_monitor_config(settings.monitor_config_path)
        )
        self._cache = cache if cache is not None else DedupCache()
        self._heartbeat = heartbeat
        self._adapter_factory = adapter_factory or create_adapter
        self._client_factory = client_factory or (
            lambda: HTTPClient(timeout=settings.fetch_timeout_seconds)
        )
        self._metrics = metrics
        self._log = logger or structlog.get_logger(__name__)

        self._adapters: dict[SourceId, SourceAdapter] = {}
        self._seeded = not seed_first_cycle
        self._sleep_time: float = 600.0

    @property
    def state(self) -> CollectorState:
        return CollectorState.PAUSED if self._flag.is_paused else CollectorState.RUNNING

    @property
    def cache(self) -> DedupCache:
        return self._cache

    @property
    def adapters(self) -> dict[SourceId, SourceAdapter]:
        """Adapters of the last cycle, keyed by identifier."""
        return dict(self._adapters)

    @property
    def sleep_time(self) -> float:
        return self._sleep_time

    async def start(self) -> None:
        """Run cycles until cancelled. ConfigError ends the loop."""
        self._log.info("Collector started")
        while True:
            if self._flag.is_paused:
                self._log.info("Collection paused", recheck_in=self._settings.paused_poll_seconds)
                await asyncio.sleep(self._settings.paused_poll_seconds)
                continue

            await self.run_cycle()
            await asyncio.sleep(self._sleep_time)

    async def run_cycle(self, notify: bool = True) -> CycleReport:
        """
        Run one collection cycle.

        Args:
            notify: Send notifications. When False the cycle still
                updates the cache and returns the new listings.
        """
        started = time.monotonic()
        self._log.info("Collect projects")

        config = self._load_config()
        self._sleep_time = config.sleep_time
        if self._heartbeat is None:
            self._heartbeat = HeartbeatScheduler(config.hello_threshold)
        else:
            self._heartbeat.hello_time = config.hello_threshold

        report = CycleReport()

        async with self._client_factory() as client:
            adapters = self._refresh_adapters(config, client)

            if notify and self._heartbeat.check():
                await self._notifier.hello()

            listings = await self._collect(adapters, report, notify)

        report.collected = len(listings)

        if not self._seeded:
            for listing in listings:
                self._cache.record(listing.description)
            self._seeded = True
            report.seeded = True
            self._log.info("Seeded dedup cache", listings=len(listings))
        else:
            fresh = [listing for listing in listings if self._cache.admit(listing.description)]
            report.new = len(fresh)
            report.listings = fresh
            self._log.info("Receives projects", collected=len(listings), new=len(fresh))

            if notify:
                for listing in fresh:
                    if await self._notifier.listing(listing):
                        report.sent += 1

        if self._metrics is not None:
            self._metrics.record_new(report.new)
            self._metrics.record_cycle(time.monotonic() - started)

        return report

    def _refresh_adapters(self, config: MonitorConfig, client: HTTPClient) -> list[SourceAdapter]:
        """
        Build one adapter per enabled monitor entry, in file order.

        Adapters are rebuilt from the reloaded entries every cycle, so a
        source disabled after a failure is tried again on the next cycle.
        """
        self._adapters = {
            source.identifier: self._adapter_factory(
                source, client, self._settings.fetch_timeout_seconds
            )
            for source in config.enabled_sources
        }
        return list(self._adapters.values())

    async def _collect(
        self,
        adapters: list[SourceAdapter],
        report: CycleReport,
        notify: bool,
    ) -> list[Listing]:
        listings: list[Listing] = []

        for adapter in adapters:
            log = self._log.bind(source=adapter.name)
            log.info("Process source")

            try:
                found = await adapter.collect()
            except SourceError as e:
                self._disable(adapter, e, log)
                report.failed_sources.append(adapter.name)
                if notify:
                    await self._notifier.source_failure(e)
                continue

            log.info(
                "Source processed",
                listings=len(found),
                filtered=adapter.stats.listings_filtered,
            )
            if self._metrics is not None:
                self._metrics.record_source(adapter.name, len(found))
            listings.extend(found)

        return listings

    def _disable(
        self,
        adapter: SourceAdapter,
        error: SourceError,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        adapter.enabled = False
        log.error(
            f"{error.kind} error, source disabled",
            endpoint=adapter.endpoint,
            error_type=type(error).__name__,
            error=str(error),
        )
        if isinstance(error, ParseError) and error.document:
            log.debug(
                "Unparsed document",
                document=error.document[: self._settings.error_snapshot_chars],
            )
        if self._metrics is not None:
            self._metrics.record_source_error(adapter.name, type(error).__name__)
