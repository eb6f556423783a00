"""Tests for the embedded-JSON page adapter."""

import json

import pytest

from projects_notifier.config.monitor import SourceConfig, SourceId
from projects_notifier.errors import ParseError
from projects_notifier.ingestion.embedded_json_adapter import (
    Budget,
    EmbeddedJsonAdapter,
    extract_json,
    format_budget,
    skill_lookup,
)
from projects_notifier.ingestion.http_client import HTTPClient
from projects_notifier.ingestion.schemas import SourceTag

JOB_INFO = {
    "3": {"name": "PHP"},
    "13": {"name": "Python"},
    "21": {"name": "Go"},
    "44": "Java",
}


def _page(projects: list[dict], job_info: dict | None = None) -> str:
    return (
        "<html><head><script type=\"text/javascript\">\n"
        f"var jobInfo = {json.dumps(job_info if job_info is not None else JOB_INFO)};\n"
        "var pageSize = 50;\n"
        f"var aaData = {json.dumps(projects)};\n"
        "</script></head><body></body></html>"
    )


@pytest.fixture
def adapter() -> EmbeddedJsonAdapter:
    config = SourceConfig(
        identifier=SourceId.FREELANCER_JSON,
        endpoint="https://www.freelancer.com/jobs/1/",
        skills=("python", "go"),
    )
    return EmbeddedJsonAdapter(config, HTTPClient())


class TestExtractJson:
    def test_value_after_marker(self):
        text = 'var a = 1; var jobInfo = {"k": "x;y"}; var b = 2;'
        assert extract_json(text, "var jobInfo = ") == {"k": "x;y"}

    def test_missing_marker(self):
        with pytest.raises(ValueError, match="not found"):
            extract_json("var other = 1;", "var aaData = ")


class TestHelpers:
    def test_skill_lookup_accepts_names_and_objects(self):
        assert skill_lookup(JOB_INFO) == {"3": "PHP", "13": "Python", "21": "Go", "44": "Java"}

    def test_format_budget(self):
        assert format_budget(Budget(min=30, max=250)) == "30 - 250"
        assert format_budget(Budget(min=30.0, max=None)) == "30"
        assert format_budget(Budget(min=None, max=99.5)) == "99.5"
        assert format_budget(None) == ""


class TestParse:
    """Tests for EmbeddedJsonAdapter.parse()."""

    def test_skills_resolved_and_filtered(self, adapter):
        document = _page(
            [
                {
                    "title": "Python scraper",
                    "url": "/projects/python/scraper.html",
                    "description": "Scrape listings",
                    "bid_count": 7,
                    "job_ids": [3, 13],
                    "budget": {"min": 30, "max": 250},
                },
                {
                    "title": "Java app",
                    "url": "/projects/java/app.html",
                    "description": "Swing UI",
                    "bid_count": 2,
                    "job_ids": [44],
                },
            ]
        )

        listings = adapter.parse(document)

        assert len(listings) == 1
        listing = listings[0]
        assert listing.title == "Python scraper"
        assert listing.url == "https://www.freelancer.com/projects/python/scraper.html"
        assert listing.skill_tags == ("Python",)
        assert listing.bid_count == 7
        assert listing.price == "30 - 250"
        assert listing.source_tag == SourceTag.FR

    def test_price_blank_without_budget(self, adapter):
        document = _page([{"title": "Go CLI", "job_ids": ["21"]}])
        assert adapter.parse(document)[0].price == ""

    def test_unknown_skill_ids_skipped(self, adapter):
        document = _page([{"title": "Mystery", "job_ids": [999, 21]}])
        assert adapter.parse(document)[0].skill_tags == ("Go",)

    def test_missing_marker_is_parse_error(self, adapter):
        with pytest.raises(ParseError, match="aaData"):
            adapter.parse('<script>var jobInfo = {"1": "PHP"};</script>')

    def test_malformed_json_is_parse_error(self, adapter):
        document = "<script>var jobInfo = {\"1\": \"PHP\"};\nvar aaData = [{broken;</script>"
        with pytest.raises(ParseError) as exc_info:
            adapter.parse(document)
        assert exc_info.value.document == document

    def test_unexpected_record_is_parse_error(self, adapter):
        with pytest.raises(ParseError, match="unexpected project record"):
            adapter.parse(_page([{"job_ids": [13]}]))

    def test_aadata_not_a_list(self, adapter):
        with pytest.raises(ParseError, match="not a list"):
            adapter.parse(_page({"title": "x"}))  # type: ignore[arg-type]
