"""
Listing schema shared by every source adapter.

A Listing is produced only by SourceAdapter.parse(), never mutated, and
dropped once it has been notified or found to be a duplicate. The
description is the deduplication key.
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class SourceTag(str, Enum):
    """Short tag used as the notification subject prefix."""

    FL = "FL"
    FR = "FR"
    UP = "UP"


class Listing(BaseModel):
    """One normalized job/project record extracted from a source."""

    model_config = {"frozen": True}

    title: str = Field(..., description="Listing title")
    url: str = Field(default="", description="Absolute listing URL")
    description: str = Field(default="", description="Body text, also the dedup key")
    bid_count: str | int = Field(default="", description="Bids so far as shown by the site")
    skill_tags: tuple[str, ...] = Field(
        default=(),
        description="Matched skill tags, ordered, without duplicates",
    )
    price: str = Field(default="", description="Price or budget text")
    source_tag: SourceTag

    @field_validator("title", "url", "description", "price")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @field_validator("skill_tags")
    @classmethod
    def dedupe_tags(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        seen: list[str] = []
        for tag in v:
            tag = tag.strip()
            if tag and tag not in seen:
                seen.append(tag)
        return tuple(seen)

    @property
    def subject(self) -> str:
        """Notification subject, "<SOURCE_TAG>: <title>"."""
        return f"{self.source_tag.value}: {self.title}"

    def to_body(self) -> str:
        """Render the notification body, skipping blank fields."""
        fields = [
            ("Price", self.price),
            ("Skills", ", ".join(self.skill_tags)),
            ("Url", self.url),
            ("Bids", str(self.bid_count).strip()),
            ("Desc", self.description),
        ]
        return "\n".join(f"{name}: {value}" for name, value in fields if value)
