"""
HTTP infrastructure layer used by the source adapters.

Provides:
- HTTPClient: Async HTTP client with a per-request timeout
- HTTPClientError: Raised for transport failures and error statuses

No retries: a failed source stays disabled until its configuration
changes (see CollectorService).
"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "projects-notifier/0.1.0"


class HTTPClientError(Exception):
    """Base exception for HTTP client errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class HTTPClient:
    """
    Async HTTP client shared by all adapters during a cycle.

    Features:
    - One bounded timeout per request
    - Redirect following
    - Transport errors and >= 400 statuses raised as HTTPClientError
    - Context manager for proper resource cleanup

    Example:
        async with HTTPClient(timeout=30.0) as client:
            response = await client.get(
                "https://www.fl.ru/projects/",
                headers={"User-Agent": "Mozilla/5.0"},
            )
    """

    def __init__(self, timeout: float = 30.0, transport: httpx.AsyncBaseTransport | None = None):
        """
        Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests).
        """
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HTTPClient":
        """Enter async context manager, create client."""
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": DEFAULT_USER_AGENT},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager, close client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Perform a GET request.

        Args:
            url: Request URL
            headers: Extra request headers

        Returns:
            httpx.Response on success

        Raises:
            HTTPClientError: On timeout, connection failure or error status
        """
        if not self._client:
            raise RuntimeError("HTTPClient must be used as async context manager")

        try:
            response = await self._client.get(url, headers=headers)
        except httpx.TimeoutException as e:
            raise HTTPClientError(f"Request to {url} timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise HTTPClientError(f"Request to {url} failed: {type(e).__name__}: {e}") from e

        if response.status_code >= 400:
            raise HTTPClientError(
                f"Request to {url} failed with status {response.status_code}",
                status_code=response.status_code,
                response_body=response.text,
            )

        logger.debug(f"GET {url} -> {response.status_code} ({len(response.content)} bytes)")
        return response
