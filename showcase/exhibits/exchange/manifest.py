"""
Field manifests for the exhibit export document.

Each manifest lists, for one entity type, the scalar fields copied into the
document, the file fields embedded as base64, and the identity fields used to
match document entries against existing rows on import. The lists are
explicit: adding a model field does not export it until it is added here and
``EXPORT_FORMAT_VERSION`` is reviewed. ``showcase.exhibits.checks`` verifies
at startup that every name below exists on its model.
"""

from __future__ import annotations

from dataclasses import dataclass

EXPORT_FORMAT_VERSION = 1

FORMAT_VERSION_KEY = "format_version"
CHILD_PAGES_KEY = "child_pages"


@dataclass(frozen=True)
class EntityManifest:
    document_key: str
    model: str
    fields: tuple[str, ...]
    file_fields: tuple[str, ...] = ()
    identity: tuple[str, ...] = ()

    @property
    def exported_fields(self) -> tuple[str, ...]:
        return (*self.fields, *self.file_fields)


EXHIBIT = EntityManifest(
    document_key="exhibit",
    model="exhibits.Exhibit",
    fields=("title", "subtitle", "description", "published"),
    file_fields=("featured_image",),
)

SEARCH_CONFIGURATION = EntityManifest(
    document_key="search_configuration",
    model="exhibits.SearchConfiguration",
    fields=(
        "facet_fields",
        "index_fields",
        "sort_fields",
        "search_fields",
        "per_page",
        "default_per_page",
        "document_index_view_types",
    ),
)

SEARCHES = EntityManifest(
    document_key="searches",
    model="exhibits.Search",
    fields=(
        "slug",
        "title",
        "short_description",
        "long_description",
        "query_params",
        "published",
        "weight",
        "masthead_display",
    ),
    identity=("slug",),
)

PAGE_FIELDS = (
    "slug",
    "title",
    "content",
    "weight",
    "published",
    "display_sidebar",
    "display_title",
)

ABOUT_PAGES = EntityManifest(
    document_key="about_pages",
    model="exhibits.AboutPage",
    fields=PAGE_FIELDS,
    identity=("slug",),
)

FEATURE_PAGES = EntityManifest(
    document_key="feature_pages",
    model="exhibits.FeaturePage",
    fields=PAGE_FIELDS,
    identity=("slug",),
)

HOME_PAGE = EntityManifest(
    document_key="home_page",
    model="exhibits.HomePage",
    fields=PAGE_FIELDS,
)

CUSTOM_FIELDS = EntityManifest(
    document_key="custom_fields",
    model="exhibits.CustomField",
    fields=(
        "slug",
        "label",
        "short_description",
        "field",
        "field_type",
        "readonly_field",
        "configuration",
    ),
    identity=("slug",),
)

CONTACTS = EntityManifest(
    document_key="contacts",
    model="exhibits.Contact",
    fields=(
        "slug",
        "name",
        "email",
        "title",
        "location",
        "telephone",
        "show_in_sidebar",
        "weight",
    ),
    file_fields=("avatar",),
    identity=("slug",),
)

CONTACT_EMAILS = EntityManifest(
    document_key="contact_emails",
    model="exhibits.ContactEmail",
    fields=("email",),
    identity=("email",),
)

DOCUMENT_SIDECARS = EntityManifest(
    document_key="document_sidecars",
    model="exhibits.DocumentSidecar",
    fields=("document_id", "document_type", "public", "data"),
    identity=("document_type", "document_id"),
)

# ``tag`` is exported as the tag's name rather than its id.
TAGGINGS = EntityManifest(
    document_key="taggings",
    model="exhibits.Tagging",
    fields=("taggable_type", "taggable_id", "context", "tag"),
    identity=("taggable_type", "taggable_id", "context", "tag"),
)

ATTACHMENTS = EntityManifest(
    document_key="attachments",
    model="exhibits.Attachment",
    fields=("uid", "name"),
    file_fields=("file",),
    identity=("uid",),
)

RESOURCES = EntityManifest(
    document_key="resources",
    model="exhibits.Resource",
    fields=("uid", "type", "url", "data", "indexed_at"),
    file_fields=("upload",),
    identity=("uid",),
)

# Collections matched entry-by-entry on import, in document order.
COLLECTIONS: tuple[EntityManifest, ...] = (
    SEARCHES,
    ABOUT_PAGES,
    FEATURE_PAGES,
    CUSTOM_FIELDS,
    CONTACTS,
    CONTACT_EMAILS,
    DOCUMENT_SIDECARS,
    TAGGINGS,
    ATTACHMENTS,
    RESOURCES,
)

ALL_MANIFESTS: tuple[EntityManifest, ...] = (
    EXHIBIT,
    SEARCH_CONFIGURATION,
    HOME_PAGE,
    *COLLECTIONS,
)
