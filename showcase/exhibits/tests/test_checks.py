from django.core.checks import Error

from showcase.exhibits.checks import check_export_manifests
from showcase.exhibits.exchange import manifest
from showcase.exhibits.exchange.manifest import EntityManifest


def test_shipped_manifests_pass():
    assert check_export_manifests() == []


def test_unknown_and_non_file_fields_are_reported(monkeypatch):
    broken = EntityManifest(
        document_key="searches",
        model="exhibits.Search",
        fields=("slug", "subtitle"),
        file_fields=("title",),
    )
    monkeypatch.setattr("showcase.exhibits.checks.ALL_MANIFESTS", (broken,))

    errors = check_export_manifests()

    assert [error.id for error in errors] == ["exhibits.E001", "exhibits.E002"]
    assert all(isinstance(error, Error) for error in errors)
    assert "subtitle" in errors[0].msg


def test_every_collection_has_an_identity():
    assert all(entity.identity for entity in manifest.COLLECTIONS)
