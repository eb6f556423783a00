"""
Command-line interface for projects-notifier.

Usage:
    projects-notifier run            # Run collector and command listener
    projects-notifier run --dry-run  # Log notifications instead of mailing
    projects-notifier run-once       # One cycle, print new listings
    projects-notifier check-config   # Validate the monitor file
    projects-notifier hello          # Send the greeting (mail smoke test)
"""

import asyncio
import os
import signal
import sys
from pathlib import Path

import click

from projects_notifier.config.monitor import load_monitor_config
from projects_notifier.config.settings import get_settings
from projects_notifier.errors import ConfigError
from projects_notifier.observability.logging import setup_logging
from projects_notifier.observability.metrics import get_metrics


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Monitor file (overrides MONITOR_CONFIG_PATH)",
)
def main(debug: bool, config_path: Path | None) -> None:
    """Projects Notifier - watch freelance marketplaces and mail new projects."""
    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"
    if config_path is not None:
        os.environ["MONITOR_CONFIG_PATH"] = str(config_path)
    get_settings.cache_clear()

    setup_logging()


@main.command()
@click.option("--dry-run", is_flag=True, help="Log notifications instead of sending mail")
@click.option("--metrics/--no-metrics", default=False, help="Enable metrics server")
def run(dry_run: bool, metrics: bool) -> None:
    """Run the collector and the command listener."""
    from projects_notifier.notifications.channels import LogSink
    from projects_notifier.services.monitor import create_monitor

    settings = get_settings()
    _require_config(settings.monitor_config_path)

    async def run_monitor():
        collector_metrics = None
        if metrics:
            collector_metrics = get_metrics()
            collector_metrics.start_server(port=settings.metrics_port)

        monitor = create_monitor(
            settings,
            sink=LogSink() if dry_run else None,
            metrics=collector_metrics,
        )

        # Handle shutdown signals
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, lambda: asyncio.create_task(monitor.stop()))

        await monitor.run()

    try:
        asyncio.run(run_monitor())
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)


@main.command("run-once")
@click.option("--notify/--no-notify", default=False, help="Send notifications for listings")
def run_once(notify: bool) -> None:
    """Run a single cycle without seeding the dedup cache."""
    from projects_notifier.control.state import PauseFlag
    from projects_notifier.notifications.channels import LogSink
    from projects_notifier.notifications.notifier import Notifier
    from projects_notifier.services.collector_service import CollectorService
    from projects_notifier.services.monitor import create_sink

    settings = get_settings()
    _require_config(settings.monitor_config_path)

    sink = create_sink(settings) if notify else LogSink()

    service = CollectorService(
        settings,
        Notifier(sink, snapshot_chars=settings.error_snapshot_chars),
        PauseFlag(),
        seed_first_cycle=False,
    )

    try:
        report = asyncio.run(service.run_cycle(notify=notify))
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)

    click.echo(f"Collected: {report.collected}  New: {report.new}  Sent: {report.sent}")
    if report.failed_sources:
        click.echo(f"Failed sources: {', '.join(report.failed_sources)}")
    if not notify:
        for listing in report.listings:
            click.echo("")
            click.echo(listing.subject)
            click.echo(listing.to_body())


@main.command("check-config")
def check_config() -> None:
    """Validate the monitor file and list its sources."""
    from projects_notifier.ingestion.registry import ADAPTERS

    settings = get_settings()
    config = _require_config(settings.monitor_config_path)

    click.echo(f"Monitor file: {settings.monitor_config_path}")
    click.echo(f"  sleep_time: {config.sleep_time}s")
    click.echo(f"  hello_time: {config.hello_time}")
    click.echo("")
    for source in config.sources:
        status = "enabled" if source.enabled else "disabled"
        criteria = ", ".join(source.skills or source.keywords) or "-"
        click.echo(
            f"  {source.identifier.value:<16} {status:<9} "
            f"{ADAPTERS[source.identifier].__name__:<20} {source.endpoint}"
        )
        click.echo(f"  {'':<16} criteria: {criteria}")


@main.command()
def hello() -> None:
    """Send the daily greeting once."""
    from projects_notifier.notifications.notifier import Notifier
    from projects_notifier.services.monitor import create_sink

    settings = get_settings()
    if not (settings.webhook_url or settings.mail_configured):
        click.echo(
            "Mail credentials are not configured (MAIL_LOGIN, MAIL_PASSWORD) "
            "and no WEBHOOK_URL is set",
            err=True,
        )
        sys.exit(2)

    sink = create_sink(settings)
    ok = asyncio.run(Notifier(sink).hello())
    if ok:
        click.echo(f"Greeting sent via {sink.name}")
    else:
        click.echo("Greeting could not be delivered", err=True)
        sys.exit(1)


def _require_config(path: Path):
    try:
        return load_monitor_config(path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)


if __name__ == "__main__":
    main()
