import pytest
from django.core.exceptions import ImproperlyConfigured

from showcase.catalog.documents import SearchDocument
from showcase.catalog.images import DEFAULT_VERSION_NAME
from showcase.catalog.images import ImageDerivative
from showcase.catalog.images import ImageVersions
from showcase.catalog.images import build_derivative_table
from showcase.catalog.images import get_derivative_table

TABLE = build_derivative_table(
    [
        {"field": "full_image_url_ssm"},
        {"version": "thumb", "field": "thumbnail_url_ssm"},
    ],
)


class TestBuildDerivativeTable:
    def test_version_defaults_to_full(self):
        assert dict(TABLE) == {
            DEFAULT_VERSION_NAME: "full_image_url_ssm",
            "thumb": "thumbnail_url_ssm",
        }

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            TABLE["square"] = "thumbnail_square_url_ssm"  # type: ignore[index]

    def test_accepts_models(self):
        table = build_derivative_table([ImageDerivative(field="f", version="v")])

        assert dict(table) == {"v": "f"}

    def test_duplicate_versions_are_rejected(self):
        with pytest.raises(ImproperlyConfigured, match="more than once"):
            build_derivative_table([{"field": "a"}, {"field": "b", "version": "full"}])

    def test_invalid_entries_are_rejected(self):
        with pytest.raises(ImproperlyConfigured, match="#1"):
            build_derivative_table([{"field": "a"}, {"version": "thumb"}])


def test_table_is_built_from_settings(settings):
    settings.SHOWCASE_IMAGE_DERIVATIVES = [{"version": "tiny", "field": "tiny_ssm"}]

    assert dict(get_derivative_table()) == {"tiny": "tiny_ssm"}


class TestImageVersions:
    def test_lookup_by_version_name(self):
        versions = ImageVersions(
            {"full_image_url_ssm": ["a.jpg", "b.jpg"], "thumbnail_url_ssm": "a-t.jpg"},
            table=TABLE,
        )

        assert versions.versions == ["full", "thumb"]
        assert versions["full"] == ["a.jpg", "b.jpg"]
        assert versions["thumb"] == ["a-t.jpg"]

    def test_unknown_version_raises_key_error(self):
        with pytest.raises(KeyError):
            ImageVersions({}, table=TABLE)["square"]

    def test_missing_fields_are_empty(self):
        assert ImageVersions({}, table=TABLE)["thumb"] == []

    def test_image_versions_pair_values_by_position(self):
        versions = ImageVersions(
            {
                "full_image_url_ssm": ["a.jpg", "b.jpg"],
                "thumbnail_url_ssm": ["a-t.jpg", "b-t.jpg"],
            },
            table=TABLE,
        )

        assert versions.image_versions() == [
            {"full": "a.jpg", "thumb": "a-t.jpg"},
            {"full": "b.jpg", "thumb": "b-t.jpg"},
        ]
        assert versions.image_versions("thumb") == [{"thumb": "a-t.jpg"}, {"thumb": "b-t.jpg"}]

    def test_shorter_version_lists_truncate(self):
        versions = ImageVersions(
            {"full_image_url_ssm": ["a.jpg", "b.jpg"], "thumbnail_url_ssm": ["a-t.jpg"]},
            table=TABLE,
        )

        assert versions.image_versions() == [{"full": "a.jpg", "thumb": "a-t.jpg"}]


def test_search_document_attaches_image_versions(settings):
    settings.SHOWCASE_IMAGE_DERIVATIVES = [{"field": "full_image_url_ssm"}]
    document = SearchDocument({"id": 42, "full_image_url_ssm": ["a.jpg"]})

    assert document.id == "42"
    assert document["full_image_url_ssm"] == ["a.jpg"]
    assert document.to_dict() == {
        "id": 42,
        "full_image_url_ssm": ["a.jpg"],
        "image_versions": [{"full": "a.jpg"}],
    }
