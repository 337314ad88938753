"""
Serialize an exhibit into a self-contained JSON document.

The document carries no database ids or timestamps, so it can be imported
into the exhibit it came from or into any other exhibit.
"""

from __future__ import annotations

import logging
from typing import Any

from showcase.exhibits.exchange.serializers import ExhibitExportSerializer
from showcase.exhibits.models import Exhibit

logger = logging.getLogger(__name__)


def serialize_exhibit(exhibit: Exhibit) -> dict[str, Any]:
    data = ExhibitExportSerializer(exhibit).data
    logger.info("Exported exhibit %s", exhibit.slug)
    return data


def export_filename(exhibit: Exhibit) -> str:
    return f"{exhibit.slug}-export.json"
