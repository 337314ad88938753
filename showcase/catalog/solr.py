from __future__ import annotations

import logging

import requests

from showcase.catalog.client import SearchIndexClient
from showcase.catalog.client import SearchParams
from showcase.catalog.client import SearchResponse
from showcase.catalog.client import UpstreamSearchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


def flatten_params(params: SearchParams) -> list[tuple[str, str]]:
    """Expand list values into repeated ``(key, value)`` pairs."""
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        if isinstance(value, (list, tuple)):
            pairs.extend((key, str(item)) for item in value)
        elif value is not None:
            pairs.append((key, str(value)))
    return pairs


class SolrSearchClient(SearchIndexClient):
    """Queries a Solr core's ``/select`` handler over HTTP."""

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def search(self, params: SearchParams) -> SearchResponse:
        query = [*flatten_params(params), ("wt", "json")]
        select_url = f"{self.url}/select"
        logger.debug("Solr query %s %s", select_url, query)
        try:
            response = self.session.get(select_url, params=query, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Solr request to %s failed: %s", select_url, exc)
            msg = f"Search index unreachable: {exc}"
            raise UpstreamSearchError(msg) from exc

        if not response.ok:
            logger.warning(
                "Solr returned HTTP %s for %s: %s",
                response.status_code,
                select_url,
                response.text[:500],
            )
            msg = f"Search index returned HTTP {response.status_code}."
            raise UpstreamSearchError(msg, upstream_status=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            msg = "Search index returned a body that is not JSON."
            raise UpstreamSearchError(msg) from exc

        body = payload.get("response") if isinstance(payload, dict) else None
        if not isinstance(body, dict):
            msg = "Search index response has no 'response' section."
            raise UpstreamSearchError(msg)

        documents = list(body.get("docs") or [])
        metadata = {
            "numFound": body.get("numFound", len(documents)),
            "start": body.get("start", 0),
            "facet_counts": payload.get("facet_counts", {}),
            "responseHeader": payload.get("responseHeader", {}),
        }
        return SearchResponse(metadata=metadata, documents=documents)
