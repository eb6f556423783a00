"""Tests for the keyword-filtered listing page adapter."""

import httpx
import pytest
import respx

from projects_notifier.config.monitor import SourceConfig, SourceId
from projects_notifier.errors import FetchError, ParseError
from projects_notifier.ingestion.html_list_adapter import (
    BROWSER_USER_AGENT,
    HtmlListAdapter,
    strip_injected_fragments,
)
from projects_notifier.ingestion.http_client import HTTPClient
from projects_notifier.ingestion.schemas import SourceTag


def _post(title: str, href: str, body: str, bids: str = "3 ответа", price: str = "5000 руб.") -> str:
    return f"""
    <div class="b-post">
      <h2><a href="{href}">{title}</a></h2>
      <div class="b-post__body"> {body} </div>
      <a class="b-post__link_bold b-page__desktop" href="{href}">{bids}</a>
      <div class="b-post__price"> {price} </div>
    </div>
    """


def _page(*posts: str) -> str:
    return (
        "<html><body>"
        "<script type=\"text/javascript\">document.write('"
        f"<div id=\"projects-list\">{''.join(posts)}</div>"
        "');</script>"
        "</body></html>"
    )


@pytest.fixture
def config() -> SourceConfig:
    return SourceConfig(
        identifier=SourceId.FL_RU,
        endpoint="https://www.fl.ru",
        keywords=("urgent", "python"),
    )


@pytest.fixture
def adapter(config) -> HtmlListAdapter:
    return HtmlListAdapter(config, HTTPClient())


class TestKeywordFilter:
    """Listings are kept iff the description matches a keyword."""

    def test_match_is_case_insensitive(self, adapter):
        assert adapter.matches("Need a Python dev") is True
        assert adapter.matches("URGENT: fix my site") is True

    def test_no_match(self, adapter):
        assert adapter.matches("Graphic design job") is False

    def test_keywords_are_patterns(self):
        config = SourceConfig(
            identifier=SourceId.FL_RU,
            endpoint="https://www.fl.ru",
            keywords=(r"парс(ер|инг)",),
        )
        adapter = HtmlListAdapter(config, HTTPClient())

        assert adapter.matches("Нужен ПАРСЕР сайта") is True
        assert adapter.matches("Нужен дизайн") is False


class TestParse:
    """Tests for HtmlListAdapter.parse()."""

    def test_extracts_matching_posts(self, adapter):
        document = strip_injected_fragments(
            _page(
                _post("Python bot", "/projects/101/bot.html", "Need a Python dev for a bot"),
                _post("Logo", "/projects/102/logo.html", "Graphic design job"),
            )
        )

        listings = adapter.parse(document)

        assert len(listings) == 1
        listing = listings[0]
        assert listing.title == "Python bot"
        assert listing.url == "https://www.fl.ru/projects/101/bot.html"
        assert listing.description == "Need a Python dev for a bot"
        assert listing.bid_count == "3 ответа"
        assert listing.price == "5000 руб."
        assert listing.source_tag == SourceTag.FL
        assert adapter.stats.listings_parsed == 2
        assert adapter.stats.listings_filtered == 1

    def test_missing_optional_fields_are_blank(self, adapter):
        document = (
            '<div id="projects-list"><div class="b-post">'
            '<h2><a href="/projects/1/">Urgent task</a></h2>'
            '<div class="b-post__body">urgent</div>'
            "</div></div>"
        )

        listing = adapter.parse(document)[0]

        assert listing.bid_count == ""
        assert listing.price == ""

    def test_missing_container_is_parse_error(self, adapter):
        with pytest.raises(ParseError) as exc_info:
            adapter.parse("<html><body><p>Access denied</p></body></html>")

        error = exc_info.value
        assert error.identifier == "fl_ru"
        assert error.endpoint == "https://www.fl.ru"
        assert "Access denied" in error.document

    def test_post_without_title_link_is_parse_error(self, adapter):
        document = (
            '<div id="projects-list"><div class="b-post">'
            '<div class="b-post__body">python</div></div></div>'
        )
        with pytest.raises(ParseError):
            adapter.parse(document)


class TestFetch:
    """Tests for HtmlListAdapter.fetch()."""

    def test_strip_injected_fragments(self):
        assert strip_injected_fragments(_page()) == (
            '<html><body><div id="projects-list"></div></body></html>'
        )

    @pytest.mark.asyncio
    async def test_fetch_transcodes_and_unwraps(self, config):
        page = _page(_post("Парсер на Python", "/projects/7/", "Нужен python парсер"))

        with respx.mock:
            route = respx.get("https://www.fl.ru/projects/").mock(
                return_value=httpx.Response(200, content=page.encode("windows-1251"))
            )
            async with HTTPClient() as client:
                adapter = HtmlListAdapter(config, client)
                listings = await adapter.collect()

        assert route.calls.last.request.headers["User-Agent"] == BROWSER_USER_AGENT
        assert [listing.title for listing in listings] == ["Парсер на Python"]
        assert listings[0].url == "https://www.fl.ru/projects/7/"

    @pytest.mark.asyncio
    async def test_fetch_error_on_server_error(self, config):
        with respx.mock:
            respx.get("https://www.fl.ru/projects/").mock(return_value=httpx.Response(503))
            async with HTTPClient() as client:
                adapter = HtmlListAdapter(config, client)
                with pytest.raises(FetchError) as exc_info:
                    await adapter.fetch()

        assert exc_info.value.identifier == "fl_ru"
        assert "503" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_undecodable_bytes_are_replaced(self, config):
        page = _page(_post("Python bot", "/projects/8/", "python бот")).encode("windows-1251")
        # 0x98 has no mapping in windows-1251
        page = page.replace(b"</body>", b"\x98</body>")

        with respx.mock:
            respx.get("https://www.fl.ru/projects/").mock(
                return_value=httpx.Response(200, content=page)
            )
            async with HTTPClient() as client:
                listings = await HtmlListAdapter(config, client).collect()

        assert [listing.title for listing in listings] == ["Python bot"]
