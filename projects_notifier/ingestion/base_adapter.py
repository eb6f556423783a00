"""
Base adapter interface and shared functionality for source adapters.

Each source adapter implements fetch() and parse():
- fetch(): retrieve the raw document (transport quirks live here)
- parse(): turn the document into Listings and apply the source's
  relevance filter

The base class provides:
- Error mapping (transport failures -> FetchError, shape
  mismatches -> ParseError)
- A bounded timeout around each fetch
- The runtime enabled bit
- Common text helpers
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from projects_notifier.config.monitor import SourceConfig, SourceId
from projects_notifier.errors import FetchError, ParseError
from projects_notifier.ingestion.http_client import HTTPClient, HTTPClientError
from projects_notifier.ingestion.schemas import Listing, SourceTag

logger = logging.getLogger(__name__)


@dataclass
class AdapterStats:
    """Statistics for an adapter run."""

    listings_parsed: int = 0
    listings_kept: int = 0

    @property
    def listings_filtered(self) -> int:
        return self.listings_parsed - self.listings_kept


class SourceAdapter(ABC):
    """
    Abstract base class for source adapters.

    Subclasses must implement:
        - source_tag: SourceTag used in notification subjects
        - _fetch_document(): Retrieve the raw document text
        - _parse_document(): Extract and filter Listings

    Callers only use collect(), fetch() and parse(); they never branch
    on the concrete adapter type.
    """

    def __init__(
        self,
        config: SourceConfig,
        client: HTTPClient,
        fetch_timeout: float = 30.0,
    ):
        """
        Initialize adapter.

        Args:
            config: Monitor file entry this adapter was built from
            client: Shared HTTP client
            fetch_timeout: Upper bound in seconds for one fetch
        """
        self._config = config
        self._client = client
        self._fetch_timeout = fetch_timeout
        self._stats = AdapterStats()
        self.enabled = config.enabled

    @property
    @abstractmethod
    def source_tag(self) -> SourceTag:
        """Return the tag prefixed to notification subjects."""
        ...

    @property
    def identifier(self) -> SourceId:
        return self._config.identifier

    @property
    def name(self) -> str:
        """Human-readable adapter name."""
        return self._config.identifier.value

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    @property
    def config(self) -> SourceConfig:
        return self._config

    @property
    def client(self) -> HTTPClient:
        return self._client

    @property
    def stats(self) -> AdapterStats:
        """Get statistics of the last parse."""
        return self._stats

    @abstractmethod
    async def _fetch_document(self) -> str:
        """
        Retrieve the raw document.

        May raise HTTPClientError; fetch() converts it to FetchError.
        """
        ...

    @abstractmethod
    def _parse_document(self, document: str) -> list[Listing]:
        """
        Extract listings that pass the relevance filter, in page order.

        Raise ParseError (or let LookupError/ValueError escape) when the
        document does not have the expected shape.
        """
        ...

    async def fetch(self) -> str:
        """
        Fetch the source document, bounded by the fetch timeout.

        Raises:
            FetchError: On transport failure or timeout
        """
        try:
            return await asyncio.wait_for(self._fetch_document(), timeout=self._fetch_timeout)
        except HTTPClientError as e:
            raise self._fetch_error(str(e)) from e
        except asyncio.TimeoutError as e:
            raise self._fetch_error(f"fetch exceeded {self._fetch_timeout}s") from e
        except UnicodeDecodeError as e:
            raise self._fetch_error(f"cannot decode response: {e}") from e

    def parse(self, document: str) -> list[Listing]:
        """
        Parse a fetched document into filtered Listings.

        Raises:
            ParseError: If the document does not match the expected shape
        """
        self._stats = AdapterStats()
        try:
            listings = self._parse_document(document)
        except ParseError as e:
            e.identifier = e.identifier or self.name
            e.endpoint = e.endpoint or self.endpoint
            if e.document is None:
                e.document = document
            raise
        except (LookupError, ValueError, TypeError, AttributeError) as e:
            raise self.parse_error(f"{type(e).__name__}: {e}", document) from e

        self._stats.listings_kept = len(listings)
        logger.debug(
            f"{self.name} parsed: kept={self._stats.listings_kept}, "
            f"filtered={self._stats.listings_filtered}"
        )
        return listings

    async def collect(self) -> list[Listing]:
        """Fetch then parse."""
        document = await self.fetch()
        return self.parse(document)

    def parse_error(self, message: str, document: str | None = None) -> ParseError:
        return ParseError(message, identifier=self.name, endpoint=self.endpoint, document=document)

    def _fetch_error(self, message: str) -> FetchError:
        return FetchError(message, identifier=self.name, endpoint=self.endpoint)


# Common text helpers used across adapters

def clean_text(text: str) -> str:
    """
    Clean text content by removing excessive whitespace and normalizing.

    Args:
        text: Raw text content

    Returns:
        Cleaned text
    """
    # Remove excessive whitespace
    text = " ".join(text.split())

    # Remove null bytes and other control characters
    text = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)

    return text.strip()


def match_skills(row_tags: list[str], required: tuple[str, ...]) -> list[str]:
    """
    Intersect a listing's tags with the configured skills.

    Comparison is case-insensitive; the listing's order and spelling
    are kept.
    """
    wanted = {skill.casefold() for skill in required}
    return [tag for tag in row_tags if tag.casefold() in wanted]
