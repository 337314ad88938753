"""
Tests for importing exhibit documents.

Covers:
- round trip into the source exhibit and into a fresh exhibit
- idempotent re-import (no duplicates, no file churn)
- all-or-nothing behavior for parse and apply failures
- matching rules: identity keys, duplicate entries, blank contact emails
- feature page nesting
"""

from __future__ import annotations

import base64
import copy
import uuid

import pytest
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from showcase.exhibits.constants import DEFAULT_BROWSE_SLUG
from showcase.exhibits.constants import ResourceKind
from showcase.exhibits.exceptions import ImportValidationError
from showcase.exhibits.exceptions import TagConflictError
from showcase.exhibits.exchange import ExhibitImporter
from showcase.exhibits.exchange import import_exhibit
from showcase.exhibits.exchange import serialize_exhibit
from showcase.exhibits.models import Attachment
from showcase.exhibits.models import Contact
from showcase.exhibits.models import ContactEmail
from showcase.exhibits.models import FeaturePage
from showcase.exhibits.models import Resource
from showcase.exhibits.models import Search
from showcase.exhibits.models import Tag
from showcase.exhibits.models import Tagging
from showcase.exhibits.tests.factories import AboutPageFactory
from showcase.exhibits.tests.factories import AttachmentFactory
from showcase.exhibits.tests.factories import ContactEmailFactory
from showcase.exhibits.tests.factories import ContactFactory
from showcase.exhibits.tests.factories import CustomFieldFactory
from showcase.exhibits.tests.factories import DocumentSidecarFactory
from showcase.exhibits.tests.factories import ExhibitFactory
from showcase.exhibits.tests.factories import FeaturePageFactory
from showcase.exhibits.tests.factories import ResourceFactory
from showcase.exhibits.tests.factories import SearchFactory
from showcase.exhibits.tests.factories import TagFactory
from showcase.exhibits.tests.factories import TaggingFactory

pytestmark = pytest.mark.django_db


def embedded(filename: str, content: bytes, content_type: str = "image/png") -> dict:
    return {
        "filename": filename,
        "content_type": content_type,
        "content": base64.b64encode(content).decode("ascii"),
    }


@pytest.fixture
def populated_exhibit():
    exhibit = ExhibitFactory(title="Maps of the Pacific", subtitle="Charts")
    exhibit.featured_image.save("cover.jpg", ContentFile(b"cover"))
    SearchFactory(exhibit=exhibit, title="Atlases", query_params={"f": {"genre_ssim": ["Atlas"]}})
    AboutPageFactory(exhibit=exhibit, title="About the collection")
    voyages = FeaturePageFactory(exhibit=exhibit, title="Voyages")
    FeaturePageFactory(exhibit=exhibit, title="Cook", parent=voyages)
    CustomFieldFactory(exhibit=exhibit, label="Scale")
    contact = ContactFactory(exhibit=exhibit, name="Ada Curator")
    contact.avatar.save("ada.jpg", ContentFile(b"avatar"))
    ContactEmailFactory(exhibit=exhibit, email="desk@example.org")
    DocumentSidecarFactory(exhibit=exhibit, document_id="bd742gh9395", data={"scale": "1:5"})
    TaggingFactory(exhibit=exhibit, tag=TagFactory(name="pacific"), taggable_id="bd742gh9395")
    attachment = AttachmentFactory(exhibit=exhibit)
    attachment.file.save("x.png", ContentFile(b"png bytes"))
    resource = ResourceFactory(exhibit=exhibit, type=ResourceKind.UPLOAD, url="")
    resource.upload.save("scan.tiff", ContentFile(b"tiff bytes"))
    exhibit.refresh_from_db()
    return exhibit


def without_title(document: dict) -> dict:
    document = copy.deepcopy(document)
    document.pop("title")
    return document


class TestRoundTrip:
    def test_import_into_source_reproduces_it(self, populated_exhibit):
        document = serialize_exhibit(populated_exhibit)

        import_exhibit(document, populated_exhibit)

        assert serialize_exhibit(populated_exhibit) == document

    def test_import_into_fresh_exhibit_copies_content(self, populated_exhibit):
        document = serialize_exhibit(populated_exhibit)
        target = ExhibitFactory(title="Copy")

        result = import_exhibit(document, target)

        assert result.pk == target.pk
        assert serialize_exhibit(target) == document
        # New rows, same slugs.
        source_ids = set(populated_exhibit.searches.values_list("pk", flat=True))
        assert not source_ids & set(target.searches.values_list("pk", flat=True))
        assert sorted(target.searches.values_list("slug", flat=True)) == sorted(
            populated_exhibit.searches.values_list("slug", flat=True),
        )
        copied = Attachment.objects.get(exhibit=target)
        with copied.file.open("rb") as fh:
            assert fh.read() == b"png bytes"
        assert copied.file.name.startswith(f"exhibits/{target.slug}/attachments/")

    def test_reimport_is_idempotent(self, populated_exhibit):
        document = serialize_exhibit(populated_exhibit)
        target = ExhibitFactory()

        import_exhibit(document, target)
        counts = {
            "searches": target.searches.count(),
            "pages": target.pages.count(),
            "contacts": target.contacts.count(),
            "taggings": target.owned_taggings.count(),
            "attachments": target.attachments.count(),
            "resources": target.resources.count(),
        }
        file_names = list(Attachment.objects.filter(exhibit=target).values_list("file", flat=True))

        import_exhibit(document, target)

        assert counts == {
            "searches": target.searches.count(),
            "pages": target.pages.count(),
            "contacts": target.contacts.count(),
            "taggings": target.owned_taggings.count(),
            "attachments": target.attachments.count(),
            "resources": target.resources.count(),
        }
        assert counts["pages"] == 4
        assert file_names == list(
            Attachment.objects.filter(exhibit=target).values_list("file", flat=True),
        )
        assert serialize_exhibit(target) == document

    def test_summary_counts_creates_and_updates(self, populated_exhibit):
        document = serialize_exhibit(populated_exhibit)
        importer = ExhibitImporter(ExhibitFactory())

        importer.run(document)

        assert importer.summary["searches"] == {"created": 1, "updated": 1}
        assert importer.summary["feature_pages"] == {"created": 2, "updated": 0}
        assert importer.summary["home_page"] == {"created": 0, "updated": 1}


def test_reimport_reverts_local_changes_and_keeps_one_attachment():
    exhibit = ExhibitFactory()
    search = exhibit.searches.get(slug=DEFAULT_BROWSE_SLUG)
    assert (search.title, search.published) == ("All Exhibit Items", True)
    attachment = AttachmentFactory(exhibit=exhibit)
    attachment.file.save("x.png", ContentFile(b"\x89PNG"))
    document = serialize_exhibit(exhibit)
    assert document["attachments"][0]["file"]["content_type"] == "image/png"

    search.title = "Changed"
    search.save()
    import_exhibit(document, exhibit)

    search.refresh_from_db()
    assert search.title == "All Exhibit Items"
    attachments = Attachment.objects.filter(exhibit=exhibit)
    assert attachments.count() == 1
    assert attachments.get().file.name.rsplit("/", 1)[-1] == "x.png"


def test_import_is_additive():
    exhibit = ExhibitFactory()
    local = SearchFactory(exhibit=exhibit, title="Local only")
    local_page = AboutPageFactory(exhibit=exhibit)
    document = serialize_exhibit(ExhibitFactory())

    import_exhibit(document, exhibit)

    assert Search.objects.filter(pk=local.pk).exists()
    assert exhibit.about_pages.filter(pk=local_page.pk).exists()


class TestAtomicity:
    def test_unknown_resource_type_rejects_whole_import(self):
        exhibit = ExhibitFactory()
        existing = ResourceFactory(exhibit=exhibit, type=ResourceKind.URL)
        document = serialize_exhibit(exhibit)
        document["title"] = "Should not be applied"
        document["searches"].append({"slug": "new-search", "title": "New"})
        document["resources"][0]["type"] = "NotARealType"

        with pytest.raises(ImportValidationError) as excinfo:
            import_exhibit(document, exhibit)

        assert excinfo.value.path == f"resources[uid={existing.uid}].type"
        exhibit.refresh_from_db()
        assert exhibit.title != "Should not be applied"
        assert not exhibit.searches.filter(slug="new-search").exists()
        existing.refresh_from_db()
        assert existing.type == ResourceKind.URL
        assert list(exhibit.resources.all()) == [existing]

    def test_invalid_base64_rejects_whole_import(self):
        exhibit = ExhibitFactory()
        document = {
            "searches": [{"slug": "new-search", "title": "New"}],
            "attachments": [
                {"uid": str(uuid.uuid4()), "file": embedded("x.png", b"png") | {"content": "%%%"}},
            ],
        }

        with pytest.raises(ImportValidationError) as excinfo:
            import_exhibit(document, exhibit)

        assert excinfo.value.path.startswith("attachments[uid=")
        assert excinfo.value.path.endswith("].file")
        assert not exhibit.searches.filter(slug="new-search").exists()
        assert not exhibit.attachments.exists()

    def test_failure_while_applying_rolls_back_rows_and_files(self, monkeypatch):
        exhibit = ExhibitFactory()
        document = {
            "contacts": [{"slug": "ada", "name": "Ada", "avatar": embedded("ada.png", b"a")}],
            "taggings": [{"taggable_id": "doc-1", "tag": "maps"}],
        }
        written = []
        original_save = default_storage.save

        def tracking_save(name, content, *args, **kwargs):
            stored = original_save(name, content, *args, **kwargs)
            written.append(stored)
            return stored

        def conflict(name, *, path="$"):
            raise TagConflictError("conflict", path=path)

        monkeypatch.setattr(default_storage, "save", tracking_save)
        monkeypatch.setattr("showcase.exhibits.exchange.importer.find_or_create_tag", conflict)

        with pytest.raises(TagConflictError):
            import_exhibit(document, exhibit)

        assert not Contact.objects.filter(exhibit=exhibit).exists()
        assert written
        assert not any(default_storage.exists(name) for name in written)

    def test_failure_while_applying_keeps_replaced_file_with_same_name(self, monkeypatch):
        exhibit = ExhibitFactory()
        contact = ContactFactory(exhibit=exhibit, name="Ada")
        contact.avatar.save("ada.png", ContentFile(b"OLD"))
        stored_name = contact.avatar.name
        document = {
            "contacts": [
                {"slug": contact.slug, "name": "Ada", "avatar": embedded("ada.png", b"NEW")},
            ],
            "taggings": [{"taggable_id": "doc-1", "tag": "maps"}],
        }

        def conflict(name, *, path="$"):
            raise TagConflictError("conflict", path=path)

        monkeypatch.setattr("showcase.exhibits.exchange.importer.find_or_create_tag", conflict)

        with pytest.raises(TagConflictError):
            import_exhibit(document, exhibit)

        contact.refresh_from_db()
        assert contact.avatar.name == stored_name
        with default_storage.open(stored_name, "rb") as fh:
            assert fh.read() == b"OLD"


class TestMatching:
    def test_entries_are_matched_by_slug(self):
        exhibit = ExhibitFactory()
        search = SearchFactory(exhibit=exhibit, title="Atlases", weight=3)

        import_exhibit({"searches": [{"slug": search.slug, "title": "Renamed"}]}, exhibit)

        search.refresh_from_db()
        assert search.title == "Renamed"
        assert search.weight == 3

    def test_duplicate_entries_merge_last_write_wins(self):
        exhibit = ExhibitFactory()

        import_exhibit(
            {
                "searches": [
                    {"slug": "maps", "title": "First", "weight": 5},
                    {"slug": "maps", "title": "Second"},
                ],
            },
            exhibit,
        )

        search = exhibit.searches.get(slug="maps")
        assert (search.title, search.weight) == ("Second", 5)

    def test_uids_match_regardless_of_spelling(self):
        exhibit = ExhibitFactory()
        attachment = AttachmentFactory(exhibit=exhibit, name="Old")

        import_exhibit(
            {"attachments": [{"uid": str(attachment.uid).upper(), "name": "New"}]},
            exhibit,
        )

        attachment.refresh_from_db()
        assert attachment.name == "New"
        assert exhibit.attachments.count() == 1

    def test_contact_emails_match_by_address_and_blank_ones_are_skipped(self):
        exhibit = ExhibitFactory()
        ContactEmailFactory(exhibit=exhibit, email="desk@example.org")

        import_exhibit(
            {
                "contact_emails": [
                    {"email": "desk@example.org"},
                    {"email": ""},
                    {"email": None},
                    {"email": "new@example.org"},
                ],
            },
            exhibit,
        )

        assert sorted(
            ContactEmail.objects.filter(exhibit=exhibit).values_list("email", flat=True),
        ) == ["desk@example.org", "new@example.org"]

    def test_unknown_keys_are_ignored(self):
        exhibit = ExhibitFactory()

        import_exhibit(
            {
                "spotlight_version": "3.0",
                "searches": [{"slug": "maps", "title": "Maps", "id": 999, "legacy": True}],
            },
            exhibit,
        )

        assert exhibit.searches.filter(slug="maps").exists()

    def test_null_file_leaves_stored_file_alone(self):
        exhibit = ExhibitFactory()
        attachment = AttachmentFactory(exhibit=exhibit)
        attachment.file.save("x.png", ContentFile(b"keep me"))
        stored_name = attachment.file.name

        import_exhibit(
            {"attachments": [{"uid": str(attachment.uid), "file": None}]},
            exhibit,
        )

        attachment.refresh_from_db()
        assert attachment.file.name == stored_name

    def test_resource_type_defaults_to_base_kind(self):
        exhibit = ExhibitFactory()
        uid = uuid.uuid4()

        import_exhibit({"resources": [{"uid": str(uid), "url": "https://example.org"}]}, exhibit)

        assert Resource.objects.get(exhibit=exhibit, uid=uid).type == ResourceKind.RESOURCE

    def test_configuration_and_home_page_are_updated_in_place(self):
        exhibit = ExhibitFactory()
        home = exhibit.home_page

        import_exhibit(
            {
                "search_configuration": {
                    "facet_fields": {"genre_ssim": {"enabled": "1", "label": "Genre"}},
                    "default_per_page": 20,
                },
                "home_page": {"title": "Welcome"},
            },
            exhibit,
        )

        configuration = exhibit.search_configuration
        configuration.refresh_from_db()
        assert configuration.facet_fields == {"genre_ssim": {"enabled": True, "label": "Genre"}}
        assert configuration.default_per_page == 20
        home.refresh_from_db()
        assert home.title == "Welcome"
        assert exhibit.pages.filter(page_type="home").count() == 1


class TestTags:
    def test_existing_tags_are_reused(self):
        exhibit = ExhibitFactory()
        TagFactory(name="maps")

        import_exhibit(
            {
                "taggings": [
                    {"taggable_id": "doc-1", "tag": "maps"},
                    {"taggable_id": "doc-2", "tag": "maps"},
                ],
            },
            exhibit,
        )

        assert Tag.objects.filter(name="maps").count() == 1
        assert Tagging.objects.filter(exhibit=exhibit, tag__name="maps").count() == 2

    def test_same_tagging_twice_is_one_row(self):
        exhibit = ExhibitFactory()
        entry = {"taggable_id": "doc-1", "tag": "maps"}

        import_exhibit({"taggings": [entry, dict(entry)]}, exhibit)
        import_exhibit({"taggings": [entry]}, exhibit)

        assert Tagging.objects.filter(exhibit=exhibit).count() == 1


class TestFeaturePages:
    def test_nested_pages_are_created_under_their_parents(self):
        exhibit = ExhibitFactory()

        import_exhibit(
            {
                "feature_pages": [
                    {
                        "slug": "voyages",
                        "title": "Voyages",
                        "child_pages": [
                            {
                                "slug": "cook",
                                "title": "Cook",
                                "child_pages": [{"slug": "endeavour", "title": "Endeavour"}],
                            },
                        ],
                    },
                ],
            },
            exhibit,
        )

        pages = {page.slug: page for page in FeaturePage.objects.filter(exhibit=exhibit)}
        assert pages["voyages"].parent is None
        assert pages["cook"].parent_id == pages["voyages"].pk
        assert pages["endeavour"].parent_id == pages["cook"].pk

    def test_pages_without_slugs_can_still_nest(self):
        exhibit = ExhibitFactory()

        import_exhibit(
            {"feature_pages": [{"title": "Voyages", "child_pages": [{"title": "Cook"}]}]},
            exhibit,
        )

        child = FeaturePage.objects.get(exhibit=exhibit, title="Cook")
        assert child.parent.title == "Voyages"

    def test_child_listed_before_its_parent_is_rejected(self):
        exhibit = ExhibitFactory()
        document = {
            "feature_pages": [
                {"slug": "cook", "title": "Cook"},
                {"slug": "voyages", "title": "Voyages", "child_pages": [{"slug": "cook"}]},
            ],
        }

        with pytest.raises(ImportValidationError) as excinfo:
            import_exhibit(document, exhibit)

        assert excinfo.value.path == "feature_pages[slug=cook]"
        assert not FeaturePage.objects.filter(exhibit=exhibit).exists()


class TestDocumentShape:
    @pytest.mark.parametrize("version", [0, 2, "1", True, None])
    def test_unsupported_format_versions(self, version):
        with pytest.raises(ImportValidationError) as excinfo:
            import_exhibit({"format_version": version}, ExhibitFactory())

        assert excinfo.value.path == "format_version"

    def test_document_must_be_an_object(self):
        with pytest.raises(ImportValidationError):
            import_exhibit(["not", "a", "document"], ExhibitFactory())

    def test_collections_must_be_lists_of_objects(self):
        exhibit = ExhibitFactory()

        with pytest.raises(ImportValidationError) as excinfo:
            import_exhibit({"searches": {"slug": "maps"}}, exhibit)
        assert excinfo.value.path == "searches"

        with pytest.raises(ImportValidationError) as excinfo:
            import_exhibit({"searches": ["maps"]}, exhibit)
        assert excinfo.value.path == "searches[0]"

    def test_field_errors_name_the_entry_and_field(self):
        exhibit = ExhibitFactory()

        with pytest.raises(ImportValidationError) as excinfo:
            import_exhibit(
                {"searches": [{"slug": "maps", "title": "Maps", "weight": "heavy"}]},
                exhibit,
            )

        assert excinfo.value.path == "searches[slug=maps].weight"
        assert "weight" in excinfo.value.payload["errors"]
