"""
In-process search index for development and tests.

Understands the subset of Solr syntax ``SearchBuilder`` emits: ``q`` as a
case-insensitive substring match over string values, ``fq`` clauses of the
form ``field:value`` or ``field:"value"`` (a leading ``-`` negates), ``sort``
as comma-separated ``field asc|desc`` pairs, and ``rows``/``start``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

from showcase.catalog.client import MATCH_ALL
from showcase.catalog.client import SearchIndexClient
from showcase.catalog.client import SearchParams
from showcase.catalog.client import SearchResponse

logger = logging.getLogger(__name__)

_FILTER = re.compile(r'^(?P<negate>-)?(?P<field>[^:\s]+):(?P<value>"(?:[^"\\]|\\.)*"|\S+)$')


def _as_strings(value) -> list[str]:
    values = value if isinstance(value, list) else [value]
    strings = []
    for item in values:
        if isinstance(item, bool):
            strings.append("true" if item else "false")
        elif item is not None:
            strings.append(str(item))
    return strings


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return re.sub(r"\\(.)", r"\1", value[1:-1])
    return value


def _as_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


class InMemorySearchClient(SearchIndexClient):
    def __init__(self, documents: Iterable[dict[str, Any]] | None = None):
        self.documents: list[dict[str, Any]] = list(documents or [])

    def add(self, *documents: dict[str, Any]) -> None:
        self.documents.extend(documents)

    def clear(self) -> None:
        self.documents.clear()

    def search(self, params: SearchParams) -> SearchResponse:
        matches = [doc for doc in self.documents if self._matches_query(doc, params.get("q"))]
        for clause in _as_list(params.get("fq")):
            matches = [doc for doc in matches if self._matches_filter(doc, clause)]
        matches = self._sorted(matches, params.get("sort"))

        start = int(params.get("start") or 0)
        rows = int(params.get("rows") or 10)
        page = matches[start : start + rows]
        logger.debug("In-memory search %s matched %d documents", dict(params), len(matches))
        return SearchResponse(
            metadata={"numFound": len(matches), "start": start},
            documents=[dict(doc) for doc in page],
        )

    def _matches_query(self, doc, q) -> bool:
        q = (q or "").strip()
        if not q or q == MATCH_ALL:
            return True
        needle = q.lower()
        return any(
            needle in text.lower()
            for value in doc.values()
            for text in _as_strings(value)
        )

    def _matches_filter(self, doc, clause: str) -> bool:
        match = _FILTER.match(clause.strip())
        if match is None:
            logger.warning("Ignoring unsupported filter clause %r", clause)
            return True
        expected = _unquote(match["value"])
        found = expected in _as_strings(doc.get(match["field"]))
        return not found if match["negate"] else found

    def _sorted(self, docs: list[dict], sort) -> list[dict]:
        if not sort:
            return docs
        for clause in reversed(str(sort).split(",")):
            parts = clause.split()
            if not parts or parts[0] == "score":
                continue
            name = parts[0]
            descending = len(parts) > 1 and parts[1].lower() == "desc"
            docs = sorted(
                docs,
                key=lambda doc, name=name: (_as_strings(doc.get(name)) or [""])[0],
                reverse=descending,
            )
        return docs
