"""
Syndication feed adapter (Upwork RSS).

Every feed item becomes a Listing; the feed URL itself carries the
search query, so there is no local relevance filter. The site appends
its brand to each title, which is stripped. Bids, skills and price are
not part of the feed.
"""

import html
from typing import Any

import feedparser
from bs4 import BeautifulSoup

from projects_notifier.ingestion.base_adapter import SourceAdapter, clean_text
from projects_notifier.ingestion.schemas import Listing, SourceTag

TITLE_SUFFIX = " - Upwork"
BIDS_PLACEHOLDER = "-"


class FeedAdapter(SourceAdapter):
    """RSS/Atom adapter mapping feed items 1:1 to listings."""

    @property
    def source_tag(self) -> SourceTag:
        return SourceTag.UP

    async def _fetch_document(self) -> str:
        response = await self.client.get(
            self.endpoint,
            headers={"User-Agent": "projects-notifier/0.1.0 (RSS Reader)"},
        )
        return response.text

    def _parse_document(self, document: str) -> list[Listing]:
        feed = feedparser.parse(document)

        entries = feed.get("entries", [])
        if feed.get("bozo") and not entries:
            raise self.parse_error(f"not a valid feed: {feed.get('bozo_exception')}")

        listings = []
        for entry in entries:
            self._stats.listings_parsed += 1
            listings.append(self._transform(entry))
        return listings

    def _transform(self, entry: dict[str, Any]) -> Listing:
        """Transform a feed entry to a Listing."""
        title = entry.get("title", "")
        if not title:
            raise self.parse_error("feed entry without title")

        return Listing(
            title=strip_title_suffix(clean_text(title)),
            url=entry.get("link", ""),
            description=self._clean_html_content(entry.get("summary", "")),
            bid_count=BIDS_PLACEHOLDER,
            source_tag=self.source_tag,
        )

    def _clean_html_content(self, html_content: str) -> str:
        """
        Extract clean text from HTML content.

        Args:
            html_content: Raw HTML string

        Returns:
            Clean text content
        """
        if not html_content:
            return ""

        soup = BeautifulSoup(html_content, "html.parser")

        # Item descriptions use <br /> between the budget/skills lines
        for br in soup.find_all("br"):
            br.replace_with("\n")

        text = html.unescape(soup.get_text())

        lines = [clean_text(line) for line in text.splitlines()]
        return "\n".join(line for line in lines if line)


def strip_title_suffix(title: str) -> str:
    """Drop the site branding appended to item titles."""
    if title.endswith(TITLE_SUFFIX):
        return title[: -len(TITLE_SUFFIX)].rstrip()
    return title
