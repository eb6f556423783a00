"""
Blog-style listing page adapter (fl.ru).

The origin site rejects non-browser user agents, serves windows-1251,
and wraps the real markup of the project list in a
document.write('...') script. The wrapper fragments are stripped before
the HTML is parsed.

A listing is kept when its description matches at least one configured
keyword pattern (regular expression, case-insensitive).
"""

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from projects_notifier.config.monitor import SourceConfig
from projects_notifier.ingestion.base_adapter import SourceAdapter, clean_text
from projects_notifier.ingestion.http_client import HTTPClient
from projects_notifier.ingestion.schemas import Listing, SourceTag

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/38.0.2125.101 YaBrowser/14.12.2125.8016 Safari/537.36"
)
SOURCE_ENCODING = "windows-1251"
INJECTED_FRAGMENTS = (
    "');</script>",
    "<script type=\"text/javascript\">document.write('",
)


class HtmlListAdapter(SourceAdapter):
    """
    Keyword-filtered adapter for the fl.ru project feed page.

    Page structure:
        div#projects-list
            div.b-post
                h2 a                                  title, relative href
                div.b-post__body                      description
                a.b-post__link_bold.b-page__desktop   bid count
                .b-post__price                        price
    """

    listing_path = "/projects/"

    def __init__(
        self,
        config: SourceConfig,
        client: HTTPClient,
        fetch_timeout: float = 30.0,
    ):
        super().__init__(config, client, fetch_timeout=fetch_timeout)
        self._patterns = [re.compile(k, re.IGNORECASE) for k in config.keywords]

    @property
    def source_tag(self) -> SourceTag:
        return SourceTag.FL

    @property
    def page_url(self) -> str:
        return self.endpoint.rstrip("/") + self.listing_path

    async def _fetch_document(self) -> str:
        response = await self.client.get(
            self.page_url,
            headers={"User-Agent": BROWSER_USER_AGENT},
        )
        text = response.content.decode(SOURCE_ENCODING, errors="replace")
        return strip_injected_fragments(text)

    def matches(self, description: str) -> bool:
        """True if any keyword pattern occurs in the description."""
        return any(p.search(description) for p in self._patterns)

    def _parse_document(self, document: str) -> list[Listing]:
        soup = BeautifulSoup(document, "html.parser")

        container = soup.select_one("div#projects-list")
        if container is None:
            raise self.parse_error("project list container div#projects-list not found")

        listings = []
        for post in container.select("div.b-post"):
            self._stats.listings_parsed += 1

            link = post.select_one("h2 a")
            if link is None or not link.get("href"):
                raise self.parse_error("project post without h2 title link")

            body = post.select_one("div.b-post__body")
            description = clean_text(body.get_text(" ")) if body else ""

            if not self.matches(description):
                continue

            bids = post.select_one("a.b-post__link_bold.b-page__desktop")
            price = post.select_one(".b-post__price")

            listings.append(
                Listing(
                    title=clean_text(link.get_text()),
                    url=urljoin(self.page_url, link["href"]),
                    description=description,
                    bid_count=clean_text(bids.get_text()) if bids else "",
                    price=clean_text(price.get_text()) if price else "",
                    source_tag=self.source_tag,
                )
            )

        return listings


def strip_injected_fragments(text: str) -> str:
    """Remove the document.write wrapper around the project list markup."""
    for fragment in INJECTED_FRAGMENTS:
        text = text.replace(fragment, "")
    return text
