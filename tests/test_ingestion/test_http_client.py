"""Tests for the HTTP client used by adapters."""

import httpx
import pytest
import respx

from projects_notifier.ingestion.http_client import HTTPClient, HTTPClientError


class TestHTTPClient:
    """Tests for HTTPClient."""

    @pytest.mark.asyncio
    async def test_requires_context_manager(self):
        client = HTTPClient()
        with pytest.raises(RuntimeError, match="context manager"):
            await client.get("https://example.com")

    @pytest.mark.asyncio
    async def test_successful_get(self):
        with respx.mock:
            respx.get("https://example.com/jobs").mock(
                return_value=httpx.Response(200, text="ok")
            )
            async with HTTPClient() as client:
                response = await client.get("https://example.com/jobs")

        assert response.text == "ok"

    @pytest.mark.asyncio
    async def test_sends_extra_headers(self):
        with respx.mock:
            route = respx.get("https://example.com/jobs").mock(
                return_value=httpx.Response(200)
            )
            async with HTTPClient() as client:
                await client.get("https://example.com/jobs", headers={"User-Agent": "Browser"})

        assert route.calls.last.request.headers["User-Agent"] == "Browser"

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        with respx.mock:
            respx.get("https://example.com/jobs").mock(
                return_value=httpx.Response(404, text="missing")
            )
            async with HTTPClient() as client:
                with pytest.raises(HTTPClientError) as exc_info:
                    await client.get("https://example.com/jobs")

        assert exc_info.value.status_code == 404
        assert exc_info.value.response_body == "missing"

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        with respx.mock:
            respx.get("https://example.com/jobs").mock(
                side_effect=httpx.ReadTimeout("timed out")
            )
            async with HTTPClient(timeout=1.5) as client:
                with pytest.raises(HTTPClientError, match="timed out after 1.5s"):
                    await client.get("https://example.com/jobs")

    @pytest.mark.asyncio
    async def test_connect_error_raises(self):
        with respx.mock:
            respx.get("https://example.com/jobs").mock(
                side_effect=httpx.ConnectError("refused")
            )
            async with HTTPClient() as client:
                with pytest.raises(HTTPClientError, match="ConnectError"):
                    await client.get("https://example.com/jobs")


    @pytest.mark.asyncio
    async def test_no_retry(self):
        with respx.mock:
            route = respx.get("https://example.com/jobs").mock(
                return_value=httpx.Response(503)
            )
            async with HTTPClient() as client:
                with pytest.raises(HTTPClientError):
                    await client.get("https://example.com/jobs")

        assert route.call_count == 1
