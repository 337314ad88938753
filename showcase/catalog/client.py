"""
Interface to the search index that holds an exhibit's documents.

Callers build a flat parameter mapping (``{"q": "maps", "fq": [...]}``) and
get back a ``SearchResponse``. Backends translate failures into
``UpstreamSearchError``; nothing here retries or caches.
"""

from __future__ import annotations

from abc import ABC
from abc import abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from http import HTTPStatus
from typing import Any

SearchParams = Mapping[str, str | list[str]]

MATCH_ALL = "*:*"


class UpstreamSearchError(Exception):
    """The search index could not answer a query."""

    status_code = HTTPStatus.BAD_GATEWAY

    def __init__(self, message: str, *, upstream_status: int | None = None):
        super().__init__(message)
        self.message = message
        self.upstream_status = upstream_status

    @property
    def payload(self) -> dict[str, Any]:
        return {"detail": self.message, "code": "search_unavailable"}


@dataclass
class SearchResponse:
    metadata: dict[str, Any] = field(default_factory=dict)
    documents: list[dict[str, Any]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return int(self.metadata.get("numFound", len(self.documents)))

    @property
    def start(self) -> int:
        return int(self.metadata.get("start", 0))

    @property
    def facets(self) -> dict[str, Any]:
        return self.metadata.get("facet_counts", {})


class SearchIndexClient(ABC):
    @abstractmethod
    def search(self, params: SearchParams) -> SearchResponse:
        """
        Run a query.

        Args:
            params: Flat index parameters. List values are sent as repeated
                parameters (``fq`` usually is one).

        Raises:
            UpstreamSearchError: The index was unreachable or answered with
                an error or an unreadable body.
        """
