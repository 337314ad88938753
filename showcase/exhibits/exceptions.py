"""
Errors raised while importing an exhibit document.

Each error names the document path that caused it (for example
``resources[uid=6f1c…].type``) so a failed import can be traced back to the
offending entry. Views turn ``payload`` and ``status_code`` into the API
response.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any


class ExhibitImportError(Exception):
    """Base class for import failures. Nothing is written when one is raised."""

    status_code = HTTPStatus.BAD_REQUEST
    code = "import_failed"

    def __init__(self, message: str, *, path: str = "$", errors: Any = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.errors = errors

    def __str__(self):
        return f"{self.path}: {self.message}"

    @property
    def payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "detail": self.message,
            "code": self.code,
            "path": self.path,
        }
        if self.errors:
            payload["errors"] = self.errors
        return payload


class ImportValidationError(ExhibitImportError):
    """Malformed input: bad shape, bad base64, unknown resource type..."""

    code = "invalid_import"


class TagConflictError(ExhibitImportError):
    """A tag could not be created or found after retrying a unique conflict."""

    status_code = HTTPStatus.CONFLICT
    code = "tag_conflict"
