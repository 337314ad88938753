"""
Tests for core file safety utilities.

Covers:
- sanitize_filename: path traversal, control chars, dotfiles, length
- guess_content_type: extension lookup with a binary fallback
- sha256_hexdigest: checksum computation
"""

from __future__ import annotations

import hashlib

from showcase.core.filesafety import DEFAULT_CONTENT_TYPE
from showcase.core.filesafety import MAX_FILENAME_LENGTH
from showcase.core.filesafety import guess_content_type
from showcase.core.filesafety import sanitize_filename
from showcase.core.filesafety import sha256_hexdigest


class TestSanitizeFilename:
    def test_simple_name_unchanged(self):
        assert sanitize_filename("x.png") == "x.png"

    def test_strips_directory_components(self):
        """Path traversal attempts are reduced to basename only."""
        assert sanitize_filename("../../etc/passwd") == "passwd"
        assert sanitize_filename("/var/data/secret.txt") == "secret.txt"

    def test_strips_windows_directory_components(self):
        assert sanitize_filename("C:\\images\\map.png") == "map.png"

    def test_replaces_unsafe_characters(self):
        assert sanitize_filename("my*map?.png") == "my_map_.png"

    def test_drops_control_characters(self):
        assert sanitize_filename("ma\x00p\x1f.png") == "map.png"

    def test_strips_leading_dots(self):
        assert sanitize_filename(".htaccess") == "htaccess"

    def test_empty_uses_fallback(self):
        assert sanitize_filename("") == "file"
        assert sanitize_filename("...", fallback="attachment") == "attachment"

    def test_long_names_keep_extension(self):
        name = sanitize_filename("a" * 300 + ".jpeg")
        assert len(name) == MAX_FILENAME_LENGTH
        assert name.endswith(".jpeg")


class TestGuessContentType:
    def test_known_extension(self):
        assert guess_content_type("x.png") == "image/png"
        assert guess_content_type("notes.json") == "application/json"

    def test_unknown_extension_falls_back(self):
        assert guess_content_type("blob.unknownext") == DEFAULT_CONTENT_TYPE
        assert guess_content_type("noext") == DEFAULT_CONTENT_TYPE


def test_sha256_hexdigest_matches_hashlib():
    data = b"exhibit bytes"
    assert sha256_hexdigest(data) == hashlib.sha256(data).hexdigest()
