"""
File safety helpers shared by uploads and exhibit imports.

Embedded files in an exhibit export carry a filename chosen by whoever
produced the document, so every name is reduced to a flat, storage-safe
basename before it reaches a storage backend. The helpers here are plain
functions with no ORM imports so models, serializers and the import pipeline
can all use them.

Typical usage::

    from showcase.core.filesafety import guess_content_type
    from showcase.core.filesafety import sanitize_filename

    name = sanitize_filename(payload["filename"], fallback="attachment")
    content_type = guess_content_type(name)
"""

import hashlib
import mimetypes
import re
import unicodedata
from pathlib import PurePosixPath

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# allow common filename chars; collapse whitespace; drop control chars
_FILENAME_SAFE = re.compile(r"[^A-Za-z0-9._\-()+=,@ ]+")

_ASCII_MIN_PRINTABLE = 32
_ASCII_MAX_EXCLUSIVE = 127

MAX_FILENAME_LENGTH = 100


def sanitize_filename(candidate: str, *, fallback: str = "file") -> str:
    """
    Return a safe, storage-friendly version of an untrusted filename.

    Directory components (both ``/`` and ``\\`` separated) are dropped, the
    name is NFKC-normalized, control characters are removed and anything
    outside a conservative character set becomes ``_``. Leading and trailing
    dots are stripped and the result is capped at ``MAX_FILENAME_LENGTH``
    characters, keeping the extension.

    Examples::

        >>> sanitize_filename("../../etc/passwd")
        'passwd'
        >>> sanitize_filename("C:\\\\images\\\\x.png")
        'x.png'
        >>> sanitize_filename("")
        'file'
    """
    candidate = candidate or fallback
    name = PurePosixPath(candidate.replace("\\", "/")).name
    name = unicodedata.normalize("NFKC", name)

    name = "".join(
        ch for ch in name if _ASCII_MIN_PRINTABLE <= ord(ch) < _ASCII_MAX_EXCLUSIVE
    )
    name = _FILENAME_SAFE.sub("_", name)
    name = re.sub(r"\s+", " ", name).strip()

    name = name.lstrip(".").rstrip(".")
    if not name:
        return fallback

    if len(name) > MAX_FILENAME_LENGTH:
        path = PurePosixPath(name)
        suffix = path.suffix[:10]
        name = f"{path.stem[: MAX_FILENAME_LENGTH - len(suffix)]}{suffix}"
    return name


def guess_content_type(filename: str) -> str:
    """Return the MIME type implied by ``filename``'s extension."""
    content_type, _ = mimetypes.guess_type(filename, strict=False)
    return content_type or DEFAULT_CONTENT_TYPE


def sha256_hexdigest(data: bytes) -> str:
    """
    Return the SHA-256 hex digest of ``data``.

    Used to decide whether an imported file differs from the stored one.
    """
    h = hashlib.sha256()
    h.update(data)
    return h.hexdigest()
