"""
Typed view of the ``SHOWCASE_CATALOG`` setting.

The catalog settings describe the search index every exhibit browses: which
index fields exist (and their default labels), which can be faceted or
sorted on, the result views on offer and the page sizes. Exhibits override
labels and enabled flags in their ``SearchConfiguration``.

Usage::

    from showcase.catalog.conf import get_catalog_settings

    catalog = get_catalog_settings()
    catalog.sort_fields["title"].sort  # "title_ssort asc"
"""

from __future__ import annotations

from functools import lru_cache

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError


class SortField(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    sort: str
    """Index sort expression, e.g. ``"score desc, title_ssort asc"``."""


class CatalogSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    index_fields: dict[str, str] = Field(default_factory=dict)
    """Index field name to default label, in display order."""

    facet_fields: dict[str, str] = Field(default_factory=dict)
    sort_fields: dict[str, SortField] = Field(default_factory=dict)
    view_types: list[str] = Field(default_factory=lambda: ["list", "gallery", "slideshow"])
    per_page: list[int] = Field(default_factory=lambda: [10, 20, 50, 100])
    default_per_page: int = 10
    max_per_page: int = 100


@lru_cache(maxsize=1)
def get_catalog_settings() -> CatalogSettings:
    raw = getattr(settings, "SHOWCASE_CATALOG", {})
    try:
        return CatalogSettings.model_validate(raw)
    except ValidationError as exc:
        msg = f"SHOWCASE_CATALOG is invalid: {exc}"
        raise ImproperlyConfigured(msg) from exc


def clear_catalog_settings_cache() -> None:
    get_catalog_settings.cache_clear()
