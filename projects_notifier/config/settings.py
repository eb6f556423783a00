"""Application settings using Pydantic Settings for environment-based configuration."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Process-level configuration for the projects notifier.

    Read once at start-up. Source definitions, the poll interval and the
    greeting time live in the monitor file instead, which is re-read on
    every cycle (see projects_notifier.config.monitor).

    All settings can be overridden via environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: Path | None = None
    debug: bool = False

    # Monitor file (sources, sleep_time, hello_time)
    monitor_config_path: Path = Path("projects_notif.json")

    # Mail account used for both notifications and commands
    mail_login: str = ""
    mail_password: str = ""
    mail_to: str | None = None
    smtp_host: str = "localhost"
    smtp_port: int = 587
    imap_host: str = "localhost"
    imap_port: int = 143

    # Delivery (a webhook URL replaces mail delivery when set)
    webhook_url: str | None = None
    send_delay_seconds: float = Field(default=1.0, ge=0.0)
    error_snapshot_chars: int = Field(default=10_000, ge=0)

    # Collection
    fetch_timeout_seconds: float = Field(default=30.0, gt=0.0, le=600.0)
    paused_poll_seconds: float = Field(default=30.0, gt=0.0)

    # Command channel
    command_poll_seconds: float = Field(default=300.0, gt=0.0)
    command_start_delay_seconds: float = Field(default=5.0, ge=0.0)
    stop_command: str = "stop"
    start_command: str = "start"

    # Observability
    metrics_port: int = 8000

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def mail_configured(self) -> bool:
        """Check if mail credentials are present."""
        return bool(self.mail_login and self.mail_password)

    @property
    def notify_address(self) -> str:
        """Recipient of notifications, the mailbox owner unless overridden."""
        return self.mail_to or self.mail_login


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    Clear cache with get_settings.cache_clear() if needed.
    """
    return Settings()
