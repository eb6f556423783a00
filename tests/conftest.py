"""Pytest fixtures for projects-notifier tests."""

import json
from pathlib import Path

import pytest

from projects_notifier.config.monitor import MonitorConfig, SourceConfig, SourceId
from projects_notifier.config.settings import Settings
from projects_notifier.errors import DeliveryError
from projects_notifier.ingestion.schemas import Listing, SourceTag
from projects_notifier.notifications.channels import NotificationSink


class RecordingSink(NotificationSink):
    """Sink that remembers what it was asked to send."""

    def __init__(self, fail: bool = False) -> None:
        self.sent: list[tuple[str, str]] = []
        self.fail = fail

    @property
    def name(self) -> str:
        return "recording"

    async def send(self, subject: str, body: str) -> None:
        if self.fail:
            raise DeliveryError("relay refused")
        self.sent.append((subject, body))

    @property
    def subjects(self) -> list[str]:
        return [subject for subject, _ in self.sent]


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings configured for testing."""
    return Settings(
        _env_file=None,
        environment="development",
        log_level="DEBUG",
        monitor_config_path=tmp_path / "projects_notif.json",
        mail_login="notifier@example.com",
        mail_password="secret",
        send_delay_seconds=0,
        fetch_timeout_seconds=5,
        paused_poll_seconds=0.01,
        command_poll_seconds=0.01,
        command_start_delay_seconds=0,
    )


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def failing_sink() -> RecordingSink:
    return RecordingSink(fail=True)


@pytest.fixture
def source_config() -> SourceConfig:
    return SourceConfig(
        identifier=SourceId.FREELANCER,
        endpoint="https://www.freelancer.com/jobs/",
        skills=("python", "go"),
    )


@pytest.fixture
def monitor_config(source_config: SourceConfig) -> MonitorConfig:
    return MonitorConfig(sleep_time=60, hello_time="09:00", sources=(source_config,))


@pytest.fixture
def write_monitor_file(test_settings: Settings):
    """Write a monitor file at the path the settings point to."""

    def _write(data: dict) -> Path:
        path = test_settings.monitor_config_path
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_listing() -> Listing:
    return Listing(
        title="Scrape product catalogue",
        url="https://www.freelancer.com/projects/python/scrape-catalogue",
        description="Need a Python developer to scrape a product catalogue daily.",
        bid_count="12",
        skill_tags=("Python", "Web Scraping"),
        price="$30 - $250",
        source_tag=SourceTag.FR,
    )
