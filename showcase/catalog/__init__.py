"""
Search index access for exhibits.

This package holds no models. It talks to the search index every exhibit
browses (Solr in production, an in-memory index in development and tests)
and shapes index documents for display.

Usage:
    from showcase.catalog import get_search_client

    client = get_search_client()
    response = client.search({"q": "maps", "fq": ["exhibit_maps_bsi:true"]})
"""

from showcase.catalog.client import SearchIndexClient
from showcase.catalog.client import SearchResponse
from showcase.catalog.client import UpstreamSearchError
from showcase.catalog.registry import get_search_client

__all__ = [
    "SearchIndexClient",
    "SearchResponse",
    "UpstreamSearchError",
    "get_search_client",
]
