"""
Named image derivatives of index documents.

An index document stores each derivative of an item's images (full size,
thumbnail, square crop...) in its own multi-valued field. The configured
derivatives map a version name to that field::

    SHOWCASE_IMAGE_DERIVATIVES = [
        {"field": "full_image_url_ssm"},            # version "full"
        {"version": "thumb", "field": "thumbnail_url_ssm"},
    ]

The table is built once from settings and is read-only afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from functools import lru_cache
from types import MappingProxyType
from typing import Any

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import ValidationError

DEFAULT_VERSION_NAME = "full"

DEFAULT_IMAGE_DERIVATIVES = (
    {"field": "full_image_url_ssm"},
    {"version": "thumb", "field": "thumbnail_url_ssm"},
    {"version": "square", "field": "thumbnail_square_url_ssm"},
)


class ImageDerivative(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    version: str | None = None

    @property
    def version_name(self) -> str:
        return self.version or DEFAULT_VERSION_NAME


def build_derivative_table(
    config: Iterable[ImageDerivative | Mapping[str, Any]],
) -> Mapping[str, str]:
    """
    Build the read-only ``{version name: document field}`` table.

    Raises ``ImproperlyConfigured`` for malformed entries and for two
    entries resolving to the same version name.
    """
    table: dict[str, str] = {}
    for index, entry in enumerate(config):
        if isinstance(entry, ImageDerivative):
            derivative = entry
        else:
            try:
                derivative = ImageDerivative.model_validate(entry)
            except ValidationError as exc:
                msg = f"Image derivative #{index} is invalid: {exc}"
                raise ImproperlyConfigured(msg) from exc
        name = derivative.version_name
        if name in table:
            msg = f"Image derivative version {name!r} is configured more than once."
            raise ImproperlyConfigured(msg)
        table[name] = derivative.field
    return MappingProxyType(table)


@lru_cache(maxsize=1)
def get_derivative_table() -> Mapping[str, str]:
    config = getattr(settings, "SHOWCASE_IMAGE_DERIVATIVES", DEFAULT_IMAGE_DERIVATIVES)
    return build_derivative_table(config)


def _as_list(value) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class ImageVersions:
    """
    The image derivatives of one index document.

    ``versions["thumb"]`` returns the document's values for that version (an
    empty list when the document lacks the field). Unknown version names
    raise ``KeyError``.
    """

    def __init__(self, document: Mapping[str, Any], table: Mapping[str, str] | None = None):
        self.document = document
        self.table = get_derivative_table() if table is None else table

    @property
    def versions(self) -> list[str]:
        return list(self.table)

    def __getitem__(self, name: str) -> list:
        return _as_list(self.document.get(self.table[name]))

    def image_versions(self, *names: str) -> list[dict[str, Any]]:
        """
        Group the named versions image by image.

        Returns one dict per image, ``{"full": ..., "thumb": ...}``, pairing
        the Nth value of every named version. All versions are used when no
        names are given. Versions with fewer values cut the result short.
        """
        names = names or tuple(self.table)
        columns = [self[name] for name in names]
        return [dict(zip(names, row, strict=True)) for row in zip(*columns, strict=False)]
