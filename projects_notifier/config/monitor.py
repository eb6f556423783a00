"""
Monitor file: the source list and schedule, re-read at every cycle.

Operators edit this file to enable or disable sources, change endpoints
and relevance criteria, or move the greeting time, without restarting
the process.

Example:
    {
        "sleep_time": 600,
        "hello_time": "09:00",
        "sources": [
            {"identifier": "freelancer", "enabled": true,
             "endpoint": "https://www.freelancer.com/jobs/",
             "skills": "Python, Django"},
            {"identifier": "fl_ru", "enabled": true,
             "endpoint": "https://www.fl.ru",
             "keywords": ["python", "парсер"]}
        ]
    }
"""

import json
import re
from datetime import time
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from projects_notifier.errors import ConfigError


class SourceId(str, Enum):
    """Closed set of supported sources."""

    FL_RU = "fl_ru"
    FREELANCER = "freelancer"
    FREELANCER_JSON = "freelancer_json"
    UPWORK = "upwork"


def _split_list(value: object) -> object:
    """Accept "a, b, c" as well as a JSON list."""
    if isinstance(value, str):
        return [item.strip() for item in re.split(r",\s*", value) if item.strip()]
    return value


class SourceConfig(BaseModel):
    """One source entry of the monitor file."""

    model_config = {"frozen": True}

    identifier: SourceId
    enabled: bool = True
    endpoint: str = Field(..., min_length=1)
    skills: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()

    @field_validator("skills", "keywords", mode="before")
    @classmethod
    def split_comma_separated(cls, v: object) -> object:
        return _split_list(v)

    @field_validator("keywords")
    @classmethod
    def keywords_compile(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid keyword pattern {pattern!r}: {e}") from e
        return v


class MonitorConfig(BaseModel):
    """Parsed monitor file."""

    model_config = {"frozen": True}

    sleep_time: int = Field(default=600, gt=0, description="Seconds between cycles")
    hello_time: str = Field(default="09:00", description="Local HH:MM of the daily greeting")
    sources: tuple[SourceConfig, ...] = ()

    @field_validator("hello_time")
    @classmethod
    def validate_hello_time(cls, v: str) -> str:
        parse_hello_time(v)
        return v

    @model_validator(mode="after")
    def unique_identifiers(self) -> "MonitorConfig":
        seen: set[SourceId] = set()
        for source in self.sources:
            if source.identifier in seen:
                raise ValueError(f"duplicate source identifier: {source.identifier.value}")
            seen.add(source.identifier)
        return self

    @property
    def enabled_sources(self) -> list[SourceConfig]:
        """Enabled entries in file order."""
        return [s for s in self.sources if s.enabled]

    @property
    def hello_threshold(self) -> time:
        return parse_hello_time(self.hello_time)


def parse_hello_time(value: str) -> time:
    """Parse "HH:MM" into a time of day."""
    match = re.fullmatch(r"(\d{1,2}):(\d{2})", value.strip())
    if not match:
        raise ValueError(f"hello_time must be HH:MM, got {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"hello_time out of range: {value!r}")
    return time(hour, minute)


def load_monitor_config(path: Path | str) -> MonitorConfig:
    """
    Read and validate the monitor file.

    Raises:
        ConfigError: If the file is missing, is not valid JSON, or fails
            validation (unknown identifier, bad hello_time, bad pattern).
    """
    config_path = Path(path)
    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Monitor file not found: {config_path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Monitor file {config_path} is not valid JSON: {e}") from e
    except OSError as e:
        raise ConfigError(f"Unable to read monitor file {config_path}: {e}") from e

    try:
        return MonitorConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid monitor file {config_path}: {e}") from e
