"""
Search client registry and factory.

Usage:
    from showcase.catalog.registry import get_search_client

    client = get_search_client()
    response = client.search({"q": "maps", "rows": "10"})
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

if TYPE_CHECKING:
    from showcase.catalog.client import SearchIndexClient

logger = logging.getLogger(__name__)

BACKEND_ALIASES = {
    "solr": "showcase.catalog.solr.SolrSearchClient",
    "memory": "showcase.catalog.memory.InMemorySearchClient",
}


@lru_cache(maxsize=1)
def get_search_client() -> SearchIndexClient:
    """
    Get the configured search index client.

    Configuration:
        SEARCH_INDEX_BACKEND: "solr", "memory" or a dotted class path
        SEARCH_INDEX_OPTIONS: Dict of options passed to the client constructor

    Example settings:
        SEARCH_INDEX_BACKEND = "solr"
        SEARCH_INDEX_OPTIONS = {"url": "http://127.0.0.1:8983/solr/blacklight-core"}
    """
    backend_setting = getattr(settings, "SEARCH_INDEX_BACKEND", "solr")
    options = getattr(settings, "SEARCH_INDEX_OPTIONS", {})
    backend_class_path = BACKEND_ALIASES.get(backend_setting, backend_setting)

    logger.info("Initializing search index client: %s", backend_class_path)

    try:
        backend_class = import_string(backend_class_path)
    except ImportError as e:
        msg = f"Could not import search index backend '{backend_class_path}': {e}"
        raise ImproperlyConfigured(msg) from e

    try:
        return backend_class(**options)
    except TypeError as e:
        msg = f"Invalid SEARCH_INDEX_OPTIONS for '{backend_class_path}': {e}"
        raise ImproperlyConfigured(msg) from e


def clear_search_client_cache() -> None:
    """Forget the cached client, e.g. after settings change in tests."""
    get_search_client.cache_clear()
