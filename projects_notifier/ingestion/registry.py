"""Closed mapping from source identifiers to adapter classes."""

from projects_notifier.config.monitor import SourceConfig, SourceId
from projects_notifier.errors import ConfigError
from projects_notifier.ingestion.base_adapter import SourceAdapter
from projects_notifier.ingestion.embedded_json_adapter import EmbeddedJsonAdapter
from projects_notifier.ingestion.feed_adapter import FeedAdapter
from projects_notifier.ingestion.html_list_adapter import HtmlListAdapter
from projects_notifier.ingestion.html_table_adapter import HtmlTableAdapter
from projects_notifier.ingestion.http_client import HTTPClient

ADAPTERS: dict[SourceId, type[SourceAdapter]] = {
    SourceId.FL_RU: HtmlListAdapter,
    SourceId.FREELANCER: HtmlTableAdapter,
    SourceId.FREELANCER_JSON: EmbeddedJsonAdapter,
    SourceId.UPWORK: FeedAdapter,
}


def create_adapter(
    config: SourceConfig,
    client: HTTPClient,
    fetch_timeout: float = 30.0,
) -> SourceAdapter:
    """
    Build the adapter for a monitor file entry.

    Raises:
        ConfigError: If no adapter exists for the identifier
    """
    try:
        adapter_cls = ADAPTERS[SourceId(config.identifier)]
    except (KeyError, ValueError) as e:
        raise ConfigError(f"Unknown source identifier: {config.identifier!r}") from e
    return adapter_cls(config, client, fetch_timeout=fetch_timeout)
