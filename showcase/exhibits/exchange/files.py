"""
Embedded files in exhibit documents.

A file field is exported as an object::

    {"filename": "map.png", "content_type": "image/png", "content": "<base64>"}

or ``null`` when the field is empty. Content is standard base64 with no line
wrapping; decoding is strict and rejects anything else.

Only the bytes and the filename are stored. An imported ``content_type`` is
checked but not kept: exports derive it from the filename again, so a file
whose extension implies no type comes back as ``application/octet-stream``.
"""

from __future__ import annotations

import base64
import binascii
import logging
import uuid
from dataclasses import dataclass
from functools import cached_property
from pathlib import PurePosixPath

from django.core.files.base import ContentFile
from django.db import transaction
from rest_framework import serializers

from showcase.core.filesafety import guess_content_type
from showcase.core.filesafety import sanitize_filename
from showcase.core.filesafety import sha256_hexdigest
from showcase.exhibits.exceptions import ImportValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmbeddedFile:
    filename: str
    content_type: str
    content: bytes

    @cached_property
    def checksum(self) -> str:
        return sha256_hexdigest(self.content)


def encode_embedded_file(field_file) -> dict | None:
    """Return the document form of a ``FieldFile``, or None when it is empty."""
    if not field_file:
        return None
    with field_file.open("rb") as fh:
        data = fh.read()
    filename = PurePosixPath(field_file.name).name
    return {
        "filename": filename,
        "content_type": guess_content_type(filename),
        "content": base64.b64encode(data).decode("ascii"),
    }


def decode_embedded_file(payload, *, path: str = "$") -> EmbeddedFile:
    """
    Parse the document form of a file.

    Raises ``ImportValidationError`` naming the offending key when the payload
    is not an object, lacks a filename, or carries content that is not valid
    base64.
    """
    if not isinstance(payload, dict):
        raise ImportValidationError(
            "Embedded files must be objects with filename, content_type and content.",
            path=path,
        )
    filename = payload.get("filename")
    if not isinstance(filename, str) or not filename.strip():
        raise ImportValidationError(
            "Embedded files need a filename.",
            path=f"{path}.filename",
        )
    content = payload.get("content")
    if not isinstance(content, str):
        raise ImportValidationError(
            "Embedded file content must be a base64 string.",
            path=f"{path}.content",
        )
    try:
        data = base64.b64decode(content.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise ImportValidationError(
            "File content is not valid base64.",
            path=f"{path}.content",
        ) from exc

    safe_name = sanitize_filename(filename)
    content_type = payload.get("content_type") or guess_content_type(safe_name)
    if not isinstance(content_type, str):
        raise ImportValidationError(
            "content_type must be a string.",
            path=f"{path}.content_type",
        )
    return EmbeddedFile(filename=safe_name, content_type=content_type, content=data)


class EmbeddedFileField(serializers.Field):
    """Serializer field for a model ``FileField`` carried inline as base64."""

    def to_representation(self, value):
        return encode_embedded_file(value)

    def to_internal_value(self, data):
        try:
            return decode_embedded_file(data, path=self.field_name)
        except ImportValidationError as exc:
            raise serializers.ValidationError(exc.message) from exc


def _stored_checksum(field_file) -> str | None:
    try:
        with field_file.open("rb") as fh:
            return sha256_hexdigest(fh.read())
    except FileNotFoundError:
        logger.warning("Stored file %s is missing; it will be rewritten", field_file.name)
        return None


def _replacement_name(instance, field_name: str, storage, filename: str) -> str:
    """
    Storage name for a new file that keeps ``filename`` as its basename.

    When the usual upload path is taken (typically by the file being
    replaced), the file goes into a fresh subdirectory beside it.
    """
    field = instance._meta.get_field(field_name)
    name = field.generate_filename(instance, filename)
    if storage.exists(name):
        path = PurePosixPath(name)
        name = str(path.parent / uuid.uuid4().hex[:12] / path.name)
    return name


def store_embedded_file(instance, field_name: str, embedded: EmbeddedFile) -> bool:
    """
    Write ``embedded`` into ``instance.<field_name>`` without saving the row.

    Returns False when the stored file already has the same name and
    content. Stored files are never overwritten: the new file is written
    under a storage name of its own and the file it replaces is removed once
    the surrounding transaction commits, so a rolled back import leaves the
    old file intact.
    """
    current = getattr(instance, field_name)
    storage = current.storage
    old_name = current.name if current else None
    if old_name:
        same_name = PurePosixPath(old_name).name == embedded.filename
        if same_name and _stored_checksum(current) == embedded.checksum:
            return False

    name = _replacement_name(instance, field_name, storage, embedded.filename)
    name = storage.save(name, ContentFile(embedded.content))
    setattr(instance, field_name, name)
    if old_name and old_name != name:
        transaction.on_commit(lambda: storage.delete(old_name))
    logger.debug(
        "Stored %s for %s #%s as %s",
        field_name,
        instance._meta.label_lower,
        instance.pk,
        name,
    )
    return True
