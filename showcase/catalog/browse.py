"""
Browse categories: running an exhibit's saved searches against the index.

A browse category is a published ``Search``. Its stored ``query_params`` use
the same shape visitors send in the query string::

    {"q": "maps", "f": {"genre_ssim": ["Atlas"]}, "sort": "title"}

Request parameters are merged over the stored ones, turned into flat index
parameters by ``SearchBuilder`` and sent to the configured search client.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING
from typing import Any

from showcase.catalog.client import MATCH_ALL
from showcase.catalog.conf import get_catalog_settings
from showcase.catalog.documents import SearchDocument
from showcase.catalog.registry import get_search_client

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from showcase.catalog.client import SearchIndexClient
    from showcase.catalog.client import SearchResponse
    from showcase.exhibits.models import Exhibit
    from showcase.exhibits.models import Search

logger = logging.getLogger(__name__)

SCALAR_PARAMS = ("q", "sort", "page", "per_page", "search_field", "view")

# ``f.genre_ssim=Atlas`` and ``f[genre_ssim][]=Atlas`` both name a facet filter.
_FACET_PARAM = re.compile(r"^f(?:\.(?P<dotted>.+)|\[(?P<bracketed>[^\]]+)\](?:\[\])?)$")

# Facet names go into filter clauses unquoted.
_FIELD_NAME = re.compile(r"[\w.]+")


def list_categories(exhibit: Exhibit) -> QuerySet[Search]:
    """Published browse categories of ``exhibit``, in weight order."""
    return exhibit.searches.published().order_by("weight", "id")


def merge_query_params(stored: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """
    Merge request parameters over a search's stored parameters.

    The merge is shallow: an override replaces the stored value for its key
    outright, so ``{"f": {...}}`` in the request replaces every stored facet
    filter.
    """
    return {**(stored or {}), **(overrides or {})}


def query_params_from_request(query_dict) -> dict[str, Any]:
    """
    Normalize a request's query string into stored ``query_params`` shape.

    Accepts a Django ``QueryDict`` or a plain mapping of lists or strings.
    """
    params: dict[str, Any] = {}
    facets: dict[str, list[str]] = {}
    for key in query_dict:
        if hasattr(query_dict, "getlist"):
            values = query_dict.getlist(key)
        else:
            raw = query_dict[key]
            values = list(raw) if isinstance(raw, (list, tuple)) else [raw]
        facet = _FACET_PARAM.match(key)
        if facet is not None:
            name = facet["dotted"] or facet["bracketed"]
            facets.setdefault(name, []).extend(str(v) for v in values)
        elif key in SCALAR_PARAMS and values:
            params[key] = values[-1]
    if facets:
        params["f"] = facets
    return params


def _escape(value: str) -> str:
    return str(value).replace("\\", "\\\\").replace('"', '\\"')


def _positive_int(value, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


class SearchBuilder:
    """
    Turns browse parameters into flat search index parameters for one
    exhibit.

    Every query is limited to documents indexed for the exhibit. Unless
    ``include_private`` is set, documents curators marked private are
    excluded too.
    """

    def __init__(self, exhibit: Exhibit, *, include_private: bool = False, catalog=None):
        self.exhibit = exhibit
        self.include_private = include_private
        self.catalog = catalog or get_catalog_settings()
        # Local import: the catalog package does not import models at load.
        from showcase.exhibits.models import SearchConfiguration

        self.configuration = SearchConfiguration.objects.filter(exhibit=exhibit).first()

    def default_per_page(self) -> int:
        if self.configuration is not None and self.configuration.default_per_page:
            return self.configuration.default_per_page
        return self.catalog.default_per_page

    def facet_fields(self) -> list[str]:
        if self.configuration is not None and self.configuration.facet_fields:
            return self.configuration.enabled(self.configuration.facet_fields)
        return list(self.catalog.facet_fields)

    def resolve_sort(self, sort) -> str | None:
        """
        Accept a configured sort key (``"title"``) or one of the configured
        sort expressions; anything else is dropped.
        """
        if not sort:
            return None
        configured = self.catalog.sort_fields
        if sort in configured:
            return configured[sort].sort
        if sort in {option.sort for option in configured.values()}:
            return sort
        logger.debug("Ignoring unknown sort %r for exhibit %s", sort, self.exhibit.slug)
        return None

    def filters(self, facets) -> list[str]:
        fq = [f"{self.exhibit.index_field_name}:true"]
        if not self.include_private:
            fq.append(f"-{self.exhibit.public_field_name}:false")
        if isinstance(facets, Mapping):
            for name, values in facets.items():
                if not _FIELD_NAME.fullmatch(str(name)):
                    logger.debug("Ignoring facet filter on invalid field name %r", name)
                    continue
                values = values if isinstance(values, (list, tuple)) else [values]
                fq.extend(f'{name}:"{_escape(value)}"' for value in values)
        elif facets:
            logger.debug("Ignoring malformed facet filters %r", facets)
        return fq

    def build(self, query_params: Mapping[str, Any]) -> dict[str, str | list[str]]:
        per_page = min(
            _positive_int(query_params.get("per_page"), self.default_per_page()),
            self.catalog.max_per_page,
        )
        page = _positive_int(query_params.get("page"), 1)
        q = str(query_params.get("q") or "").strip()

        params: dict[str, str | list[str]] = {
            "q": q or MATCH_ALL,
            "fq": self.filters(query_params.get("f")),
            "rows": str(per_page),
            "start": str((page - 1) * per_page),
        }
        sort = self.resolve_sort(query_params.get("sort"))
        if sort:
            params["sort"] = sort
        facet_fields = self.facet_fields()
        if facet_fields:
            params["facet"] = "true"
            params["facet.field"] = facet_fields
        return params


@dataclass
class BrowseResult:
    search: Search
    query_params: dict[str, Any]
    response: SearchResponse
    documents: list[SearchDocument] = field(default_factory=list)

    @property
    def masthead(self):
        return self.search.displayable_masthead()


def run_search(
    exhibit: Exhibit,
    search: Search,
    request_params: Mapping[str, Any],
    *,
    client: SearchIndexClient | None = None,
    include_private: bool = False,
) -> BrowseResult:
    """
    Run a browse category with the visitor's parameters applied on top.

    Raises ``UpstreamSearchError`` when the index cannot answer.
    """
    params = merge_query_params(search.query_params, request_params)
    index_params = SearchBuilder(exhibit, include_private=include_private).build(params)
    client = client or get_search_client()
    response = client.search(index_params)
    logger.info(
        "Browse %s/%s returned %d of %d documents",
        exhibit.slug,
        search.slug,
        len(response.documents),
        response.total,
    )
    return BrowseResult(
        search=search,
        query_params=params,
        response=response,
        documents=[SearchDocument(doc) for doc in response.documents],
    )
