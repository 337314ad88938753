from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from showcase.catalog.images import ImageVersions


class SearchDocument(Mapping):
    """A read-only index document, with its image derivatives attached."""

    def __init__(self, data: Mapping[str, Any], *, id_field: str = "id"):
        self._data = dict(data)
        self.id_field = id_field
        self.image_versions = ImageVersions(self._data)

    def __getitem__(self, key):
        return self._data[key]

    def __iter__(self):
        return iter(self._data)

    def __len__(self):
        return len(self._data)

    def __repr__(self):
        return f"SearchDocument({self.id!r})"

    @property
    def id(self) -> str | None:
        value = self._data.get(self.id_field)
        return None if value is None else str(value)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self._data,
            "image_versions": self.image_versions.image_versions(),
        }
