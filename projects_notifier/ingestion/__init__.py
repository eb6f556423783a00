"""Listing collection - source adapters, schemas, and deduplication."""

from projects_notifier.ingestion.base_adapter import SourceAdapter
from projects_notifier.ingestion.deduplication import DedupCache
from projects_notifier.ingestion.registry import create_adapter
from projects_notifier.ingestion.schemas import Listing, SourceTag

__all__ = [
    "DedupCache",
    "Listing",
    "SourceAdapter",
    "SourceTag",
    "create_adapter",
]
