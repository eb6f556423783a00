"""
Marketplace page adapter for data embedded as JavaScript literals.

The page carries two JSON documents inside inline script text:

    var jobInfo = {"3": {"name": "PHP"}, "13": {"name": "Python"}, ...};
    var aaData = [{"title": ..., "job_ids": [13, 3], "budget": {...}}, ...];

jobInfo maps skill ids to names; aaData lists the projects. Skill ids
of each project are resolved through jobInfo and intersected with the
configured skills.
"""

import json
from typing import Any
from urllib.parse import urljoin

from pydantic import BaseModel, Field, ValidationError

from projects_notifier.ingestion.base_adapter import SourceAdapter, clean_text, match_skills
from projects_notifier.ingestion.schemas import Listing, SourceTag

JOB_INFO_MARKER = "var jobInfo = "
PROJECTS_MARKER = "var aaData = "


class Budget(BaseModel):
    min: float | int | None = None
    max: float | int | None = None


class ProjectRecord(BaseModel):
    """One entry of aaData."""

    model_config = {"extra": "ignore"}

    title: str
    url: str = ""
    description: str = ""
    bid_count: int | str = ""
    job_ids: list[int | str] = Field(default_factory=list)
    budget: Budget | None = None


def extract_json(text: str, marker: str) -> Any:
    """
    Decode the JSON value assigned right after `marker`.

    Raises:
        ValueError: If the marker is missing or the value is not JSON
    """
    start = text.find(marker)
    if start == -1:
        raise ValueError(f"marker {marker.strip()!r} not found")

    index = start + len(marker)
    while index < len(text) and text[index].isspace():
        index += 1

    value, _ = json.JSONDecoder().raw_decode(text, index)
    return value


def skill_lookup(job_info: Any) -> dict[str, str]:
    """Build a skill id -> name table from jobInfo."""
    if not isinstance(job_info, dict):
        raise ValueError("jobInfo is not an object")

    table = {}
    for skill_id, entry in job_info.items():
        if isinstance(entry, dict):
            name = entry.get("name")
        else:
            name = entry
        if isinstance(name, str) and name:
            table[str(skill_id)] = name
    return table


def format_budget(budget: Budget | None) -> str:
    """Render a budget as "min - max", one side if only one is known."""
    if budget is None:
        return ""
    parts = [_format_amount(v) for v in (budget.min, budget.max) if v is not None]
    return " - ".join(parts)


def _format_amount(value: float | int) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


class EmbeddedJsonAdapter(SourceAdapter):
    """Skill-filtered adapter for pages embedding jobInfo/aaData."""

    @property
    def source_tag(self) -> SourceTag:
        return SourceTag.FR

    async def _fetch_document(self) -> str:
        response = await self.client.get(self.endpoint)
        return response.text

    def _parse_document(self, document: str) -> list[Listing]:
        try:
            skills_by_id = skill_lookup(extract_json(document, JOB_INFO_MARKER))
            projects = extract_json(document, PROJECTS_MARKER)
        except json.JSONDecodeError as e:
            raise self.parse_error(f"embedded JSON is malformed: {e}") from e
        except ValueError as e:
            raise self.parse_error(str(e)) from e

        if not isinstance(projects, list):
            raise self.parse_error("aaData is not a list")

        listings = []
        for raw in projects:
            self._stats.listings_parsed += 1
            try:
                record = ProjectRecord.model_validate(raw)
            except ValidationError as e:
                raise self.parse_error(f"unexpected project record: {e}") from e

            tags = [skills_by_id[str(i)] for i in record.job_ids if str(i) in skills_by_id]
            skills = match_skills(tags, self.config.skills)
            if not skills:
                continue

            listings.append(
                Listing(
                    title=clean_text(record.title),
                    url=urljoin(self.endpoint, record.url) if record.url else "",
                    description=clean_text(record.description),
                    bid_count=record.bid_count,
                    skill_tags=tuple(skills),
                    price=format_budget(record.budget),
                    source_tag=self.source_tag,
                )
            )

        return listings
