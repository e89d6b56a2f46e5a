"""Metadata store adapters."""

import logging
from pathlib import Path

from search_schema.config_manager import StoreConfig
from search_schema.exceptions import InvalidConfigurationError
from search_schema.store.base import (
    CrawledProperty,
    CrawledPropertyCategory,
    FullTextIndex,
    FullTextIndexMapping,
    ManagedProperty,
    MetadataStore,
)
from search_schema.store.json_file import JsonFileMetadataStore
from search_schema.store.memory import InMemoryMetadataStore
from search_schema.store.rest import RestMetadataStore

logger = logging.getLogger(__name__)


def create_store(config: StoreConfig) -> MetadataStore:
    """Pick the adapter matching the configured store URL."""
    url = config.url.strip()
    if url == "memory://":
        logger.warning("Using an in-memory metadata store; changes are discarded on exit")
        return InMemoryMetadataStore()
    if url.startswith("file://"):
        return JsonFileMetadataStore(Path(url[len("file://") :]))
    if url.endswith(".json") and "://" not in url:
        return JsonFileMetadataStore(Path(url))
    if config.is_remote:
        return RestMetadataStore(
            base_url=url,
            search_application=config.search_application,
            api_key=config.api_key,
            timeout=config.timeout,
        )
    raise InvalidConfigurationError(
        f"Unsupported metadata store URL: {config.get_safe_url()}",
        config_section="store",
    )


__all__ = [
    "CrawledProperty",
    "CrawledPropertyCategory",
    "FullTextIndex",
    "FullTextIndexMapping",
    "InMemoryMetadataStore",
    "JsonFileMetadataStore",
    "ManagedProperty",
    "MetadataStore",
    "RestMetadataStore",
    "create_store",
]
