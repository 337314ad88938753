from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

import bleach
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.text import slugify
from django.utils.translation import gettext_lazy as _
from model_utils.models import TimeStampedModel

from showcase.core.filesafety import sanitize_filename
from showcase.exhibits.constants import DEFAULT_BROWSE_CATEGORY
from showcase.exhibits.constants import DEFAULT_EXHIBIT_TITLE
from showcase.exhibits.constants import DEFAULT_MAIN_NAVIGATION
from showcase.exhibits.constants import DEFAULT_TAGGABLE_TYPE
from showcase.exhibits.constants import HOME_PAGE_SLUG
from showcase.exhibits.constants import HOME_PAGE_TITLE
from showcase.exhibits.constants import TAGGING_CONTEXT
from showcase.exhibits.constants import CustomFieldType
from showcase.exhibits.constants import NavType
from showcase.exhibits.constants import PageType
from showcase.exhibits.constants import ResourceKind

if TYPE_CHECKING:
    from showcase.users.models import User

logger = logging.getLogger(__name__)

TRUTHY_FLAGS = frozenset({"1", "true", "on", "yes"})


def _generate_unique_slug(queryset, base: str, *, exclude_pk=None) -> str:
    base_slug = slugify(base)[:240] or uuid.uuid4().hex[:10]
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)
    slug = base_slug
    counter = 2
    while queryset.filter(slug=slug).exists():
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug


def _exhibit_file_path(instance, kind: str, identity, filename: str) -> str:
    exhibit_slug = instance.exhibit.slug
    return f"exhibits/{exhibit_slug}/{kind}/{identity}/{sanitize_filename(filename)}"


def exhibit_featured_image_path(instance: Exhibit, filename: str) -> str:
    return f"exhibits/{instance.slug}/featured/{sanitize_filename(filename)}"


def search_masthead_path(instance: Search, filename: str) -> str:
    return _exhibit_file_path(instance, "mastheads", instance.slug, filename)


def contact_avatar_path(instance: Contact, filename: str) -> str:
    return _exhibit_file_path(instance, "contacts", instance.slug, filename)


def attachment_file_path(instance: Attachment, filename: str) -> str:
    return _exhibit_file_path(instance, "attachments", instance.uid, filename)


def resource_upload_path(instance: Resource, filename: str) -> str:
    return _exhibit_file_path(instance, "resources", instance.uid, filename)


def normalize_field_settings(value) -> dict[str, dict]:
    """
    Normalize a ``{field_name: {enabled, label, ...}}`` map.

    Form-style enabled flags (``"1"``, ``"0"``, ``"true"``...) become
    booleans. Other keys are kept as submitted.
    """
    if not isinstance(value, dict):
        raise ValidationError(_("Field settings must be an object."))
    normalized: dict[str, dict] = {}
    for name, options in value.items():
        if not isinstance(options, dict):
            raise ValidationError(
                _("Settings for field '%(name)s' must be an object."),
                params={"name": name},
            )
        options = dict(options)
        if "enabled" in options:
            enabled = options["enabled"]
            if isinstance(enabled, str):
                enabled = enabled.strip().lower() in TRUTHY_FLAGS
            options["enabled"] = bool(enabled)
        normalized[str(name)] = options
    return normalized


class SlugHistory(models.Model):
    """
    Previous slugs of exhibits, searches and pages.

    Rows are keyed by model label and object id rather than a foreign key so
    they outlive renames and deletions; lookups that miss on the current slug
    fall back to this table (see ``find_by_slug``).
    """

    model_label = models.CharField(max_length=64)
    object_id = models.PositiveBigIntegerField()
    slug = models.SlugField(max_length=255)
    created = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        indexes = [
            models.Index(
                fields=["model_label", "slug"],
                name="slug_history_label_slug_idx",
            ),
        ]
        ordering = ["-created", "-id"]
        verbose_name_plural = "Slug history"

    def __str__(self):
        return f"{self.model_label}#{self.object_id}: {self.slug}"


def find_by_slug(queryset, slug: str):
    """
    Return the object in ``queryset`` whose current or previous slug is ``slug``.

    Raises ``queryset.model.DoesNotExist`` when neither matches.
    """
    model = queryset.model
    match = queryset.filter(slug=slug).first()
    if match is not None:
        return match
    previous_ids = SlugHistory.objects.filter(
        model_label=model._meta.label_lower,
        slug=slug,
    ).values_list("object_id", flat=True)
    for object_id in previous_ids:
        match = queryset.filter(pk=object_id).first()
        if match is not None:
            return match
    msg = f"No {model._meta.object_name} with slug {slug!r}."
    raise model.DoesNotExist(msg)


class SluggedModel(TimeStampedModel):
    """
    Abstract base for models with a title-derived slug.

    Subclasses name the field the slug is generated from and the queryset the
    slug must be unique within. Slug changes are written to ``SlugHistory``.
    """

    slug_source_field = "title"

    class Meta:
        abstract = True

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        loaded = dict(zip(field_names, values, strict=False))
        slug = loaded.get("slug")
        instance._loaded_slug = None if slug is models.DEFERRED else slug
        return instance

    def slug_scope(self):
        raise NotImplementedError

    def save(self, *args, **kwargs):
        if not self.slug:
            source = getattr(self, self.slug_source_field, "") or ""
            self.slug = _generate_unique_slug(
                self.slug_scope(),
                source,
                exclude_pk=self.pk,
            )
        previous = getattr(self, "_loaded_slug", None)
        super().save(*args, **kwargs)
        if previous and previous != self.slug:
            SlugHistory.objects.create(
                model_label=self._meta.label_lower,
                object_id=self.pk,
                slug=previous,
            )
            logger.info(
                "Slug of %s #%s changed from %s to %s",
                self._meta.label_lower,
                self.pk,
                previous,
                self.slug,
            )
        self._loaded_slug = self.slug


class ExhibitQuerySet(models.QuerySet):
    def published(self):
        return self.filter(published=True)

    def visible_to(self, user: User | None):
        """Published exhibits plus those the user holds a role in."""
        if user is not None and getattr(user, "is_superuser", False):
            return self.all()
        if user is None or not getattr(user, "is_authenticated", False):
            return self.published()
        return self.filter(Q(published=True) | Q(roles__user=user)).distinct()


class Exhibit(SluggedModel):
    """
    A curated exhibit: the root that owns pages, browse categories, search
    configuration, contacts, custom fields, attachments and resources.
    """

    objects = ExhibitQuerySet.as_manager()

    title = models.CharField(max_length=255)
    subtitle = models.CharField(max_length=255, blank=True, default="")
    description = models.TextField(blank=True, default="")
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    published = models.BooleanField(default=True)
    is_default = models.BooleanField(default=False, editable=False)
    featured_image = models.FileField(
        upload_to=exhibit_featured_image_path,
        blank=True,
        max_length=500,
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["is_default"],
                condition=Q(is_default=True),
                name="uq_exhibit_single_default",
            ),
        ]
        ordering = ["id"]

    def __str__(self):
        return self.title

    def slug_scope(self):
        return Exhibit.objects.all()

    @classmethod
    def get_default(cls) -> Exhibit:
        """Find or create the installation's default exhibit."""
        exhibit, created = cls.objects.get_or_create(
            is_default=True,
            defaults={"title": DEFAULT_EXHIBIT_TITLE},
        )
        if created:
            logger.info("Created default exhibit %s", exhibit.slug)
        return exhibit

    def clean(self):
        super().clean()
        if not (self.title or "").strip():
            raise ValidationError({"title": _("Exhibits need a title.")})

    def save(self, *args, **kwargs):
        self.description = bleach.clean(self.description or "", tags=set(), strip=True)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        was_default = self.is_default
        result = super().delete(*args, **kwargs)
        if not was_default:
            # Bump the default exhibit so caches keyed on it see the change.
            default = Exhibit.get_default()
            default.save(update_fields=["modified"])
        return result

    # Page collections, filtered by page type.

    @property
    def about_pages(self):
        return AboutPage.objects.filter(exhibit=self)

    @property
    def feature_pages(self):
        return FeaturePage.objects.filter(exhibit=self)

    @property
    def top_level_feature_pages(self):
        return self.feature_pages.at_top_level()

    @property
    def home_page(self) -> HomePage | None:
        return HomePage.objects.filter(exhibit=self).first()

    @property
    def main_about_page(self) -> AboutPage | None:
        return self.about_pages.published().first()

    def has_browse_categories(self) -> bool:
        return self.searches.published().exists()

    @property
    def index_field_name(self) -> str:
        fields = settings.SHOWCASE_INDEX_FIELDS
        return f"{fields['prefix']}exhibit_{self.slug}{fields['boolean_suffix']}"

    def index_data(self) -> dict[str, bool]:
        """Index fields that mark a document as belonging to this exhibit."""
        return {self.index_field_name: True}

    @property
    def public_field_name(self) -> str:
        fields = settings.SHOWCASE_INDEX_FIELDS
        return (
            f"{fields['prefix']}exhibit_{self.slug}_public{fields['boolean_suffix']}"
        )

    def initialize_defaults(self) -> None:
        """
        Build the records every exhibit starts with.

        Called once, right after the exhibit is first saved.
        """
        if self.home_page is None:
            HomePage.objects.create(
                exhibit=self,
                title=HOME_PAGE_TITLE,
                slug=HOME_PAGE_SLUG,
                published=True,
            )
        SearchConfiguration.objects.get_or_create(exhibit=self)
        if not self.searches.exists():
            Search.objects.create(exhibit=self, **DEFAULT_BROWSE_CATEGORY)
        for weight, nav_type in enumerate(DEFAULT_MAIN_NAVIGATION):
            MainNavigation.objects.get_or_create(
                exhibit=self,
                nav_type=nav_type,
                defaults={"weight": weight},
            )


class SearchConfiguration(TimeStampedModel):
    """
    Per-exhibit search settings: which facet, index (metadata), sort and
    search fields are enabled and how they are labelled, plus appearance
    settings for result lists.
    """

    exhibit = models.OneToOneField(
        Exhibit,
        on_delete=models.CASCADE,
        related_name="search_configuration",
    )
    facet_fields = models.JSONField(default=dict, blank=True)
    index_fields = models.JSONField(default=dict, blank=True)
    sort_fields = models.JSONField(default=dict, blank=True)
    search_fields = models.JSONField(default=dict, blank=True)
    per_page = models.JSONField(default=list, blank=True)
    default_per_page = models.PositiveIntegerField(null=True, blank=True)
    document_index_view_types = models.JSONField(default=list, blank=True)

    class Meta:
        verbose_name = "Search configuration"

    def __str__(self):
        return f"SearchConfiguration<{self.exhibit_id}>"

    def clean(self):
        super().clean()
        errors = {}
        for name in ("facet_fields", "index_fields", "sort_fields", "search_fields"):
            try:
                setattr(self, name, normalize_field_settings(getattr(self, name)))
            except ValidationError as exc:
                errors[name] = exc.messages
        if errors:
            raise ValidationError(errors)

    @staticmethod
    def enabled(field_settings: dict[str, dict]) -> list[str]:
        return [
            name
            for name, options in field_settings.items()
            if options.get("enabled", True)
        ]


class PageQuerySet(models.QuerySet):
    def published(self):
        return self.filter(published=True)

    def at_top_level(self):
        return self.filter(parent__isnull=True)


class PageTypeManager(models.Manager):
    """Manager restricted to a single page type."""

    def __init__(self, page_type: str):
        super().__init__()
        self.page_type = page_type

    def get_queryset(self):
        return PageQuerySet(self.model, using=self._db).filter(
            page_type=self.page_type,
        )


class Page(SluggedModel):
    """
    Exhibit content page. About and home pages are flat; feature pages may
    be nested under a parent feature page.
    """

    default_page_type: str = ""

    objects = PageQuerySet.as_manager()

    exhibit = models.ForeignKey(
        Exhibit,
        on_delete=models.CASCADE,
        related_name="pages",
    )
    page_type = models.CharField(max_length=16, choices=PageType.choices)
    parent = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="child_pages",
    )
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, blank=True)
    content = models.JSONField(default=list, blank=True)
    weight = models.IntegerField(default=0)
    published = models.BooleanField(default=False)
    display_sidebar = models.BooleanField(default=True)
    display_title = models.BooleanField(default=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["exhibit", "page_type", "slug"],
                name="uq_page_exhibit_type_slug",
            ),
            models.UniqueConstraint(
                fields=["exhibit"],
                condition=Q(page_type=PageType.HOME),
                name="uq_page_single_home",
            ),
        ]
        ordering = ["weight", "id"]

    def __str__(self):
        return self.title

    def slug_scope(self):
        return Page.objects.filter(exhibit_id=self.exhibit_id, page_type=self.page_type)

    def nests_under_itself(self, parent) -> bool:
        """Whether ``parent`` is this page or one of the pages nested under it."""
        if self.pk is None:
            return False
        seen = set()
        node = parent
        while node is not None and node.pk not in seen:
            if node.pk == self.pk:
                return True
            seen.add(node.pk)
            node = node.parent
        return False

    def clean(self):
        super().clean()
        if self.parent_id is None:
            return
        if self.page_type != PageType.FEATURE:
            raise ValidationError({"parent": _("Only feature pages can be nested.")})
        parent = self.parent
        if parent.pk == self.pk:
            raise ValidationError({"parent": _("A page cannot be its own parent.")})
        if self.nests_under_itself(parent):
            raise ValidationError(
                {"parent": _("A page cannot be nested under one of its own subpages.")},
            )
        if parent.exhibit_id != self.exhibit_id or parent.page_type != PageType.FEATURE:
            raise ValidationError(
                {"parent": _("Parent must be a feature page of the same exhibit.")},
            )

    def save(self, *args, **kwargs):
        if not self.page_type and self.default_page_type:
            self.page_type = self.default_page_type
        super().save(*args, **kwargs)


class AboutPage(Page):
    default_page_type = PageType.ABOUT

    objects = PageTypeManager(PageType.ABOUT)

    class Meta:
        proxy = True


class FeaturePage(Page):
    default_page_type = PageType.FEATURE

    objects = PageTypeManager(PageType.FEATURE)

    class Meta:
        proxy = True


class HomePage(Page):
    default_page_type = PageType.HOME

    objects = PageTypeManager(PageType.HOME)

    class Meta:
        proxy = True


class SearchQuerySet(models.QuerySet):
    def published(self):
        return self.filter(published=True)


class Search(SluggedModel):
    """
    A saved query presented to visitors as a browse category.
    """

    objects = SearchQuerySet.as_manager()

    exhibit = models.ForeignKey(
        Exhibit,
        on_delete=models.CASCADE,
        related_name="searches",
    )
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, blank=True)
    short_description = models.CharField(max_length=255, blank=True, default="")
    long_description = models.TextField(blank=True, default="")
    query_params = models.JSONField(default=dict, blank=True)
    published = models.BooleanField(default=False)
    weight = models.IntegerField(default=0)
    masthead = models.FileField(
        upload_to=search_masthead_path,
        blank=True,
        max_length=500,
    )
    masthead_display = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["exhibit", "slug"],
                name="uq_search_exhibit_slug",
            ),
        ]
        ordering = ["weight", "id"]
        verbose_name_plural = "searches"

    def __str__(self):
        return self.title

    def slug_scope(self):
        return Search.objects.filter(exhibit_id=self.exhibit_id)

    def displayable_masthead(self):
        if self.masthead and self.masthead_display:
            return self.masthead
        return None


class CustomField(SluggedModel):
    """
    Exhibit-specific metadata field curators can fill in on sidecars.
    """

    slug_source_field = "label"

    exhibit = models.ForeignKey(
        Exhibit,
        on_delete=models.CASCADE,
        related_name="custom_fields",
    )
    slug = models.SlugField(max_length=255, blank=True)
    label = models.CharField(max_length=255)
    short_description = models.CharField(max_length=255, blank=True, default="")
    field = models.CharField(max_length=255, blank=True, default="")
    field_type = models.CharField(
        max_length=16,
        choices=CustomFieldType.choices,
        default=CustomFieldType.TEXT,
    )
    readonly_field = models.BooleanField(default=False)
    configuration = models.JSONField(default=dict, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["exhibit", "slug"],
                name="uq_custom_field_exhibit_slug",
            ),
        ]
        ordering = ["id"]

    def __str__(self):
        return self.label

    def slug_scope(self):
        return CustomField.objects.filter(exhibit_id=self.exhibit_id)

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        if not self.field:
            prefix = settings.SHOWCASE_INDEX_FIELDS["prefix"]
            self.field = f"{prefix}exhibit_{self.exhibit.slug}_{self.slug}_tesim"
            CustomField.objects.filter(pk=self.pk).update(field=self.field)


class Contact(SluggedModel):
    """A person shown in the exhibit sidebar."""

    slug_source_field = "name"

    exhibit = models.ForeignKey(
        Exhibit,
        on_delete=models.CASCADE,
        related_name="contacts",
    )
    slug = models.SlugField(max_length=255, blank=True)
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, default="")
    title = models.CharField(max_length=255, blank=True, default="")
    location = models.CharField(max_length=255, blank=True, default="")
    telephone = models.CharField(max_length=64, blank=True, default="")
    show_in_sidebar = models.BooleanField(default=True)
    weight = models.IntegerField(default=0)
    avatar = models.FileField(
        upload_to=contact_avatar_path,
        blank=True,
        max_length=500,
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["exhibit", "slug"],
                name="uq_contact_exhibit_slug",
            ),
        ]
        ordering = ["weight", "id"]

    def __str__(self):
        return self.name

    def slug_scope(self):
        return Contact.objects.filter(exhibit_id=self.exhibit_id)


class ContactEmail(TimeStampedModel):
    """An address that receives the exhibit's "Contact us" messages."""

    exhibit = models.ForeignKey(
        Exhibit,
        on_delete=models.CASCADE,
        related_name="contact_emails",
    )
    email = models.EmailField()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["exhibit", "email"],
                name="uq_contact_email_exhibit_email",
            ),
        ]
        ordering = ["id"]

    def __str__(self):
        return self.email


class MainNavigation(TimeStampedModel):
    exhibit = models.ForeignKey(
        Exhibit,
        on_delete=models.CASCADE,
        related_name="main_navigations",
    )
    nav_type = models.CharField(max_length=32, choices=NavType.choices)
    label = models.CharField(max_length=255, blank=True, default="")
    weight = models.IntegerField(default=0)
    display = models.BooleanField(default=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["exhibit", "nav_type"],
                name="uq_main_navigation_exhibit_type",
            ),
        ]
        ordering = ["weight", "id"]

    def __str__(self):
        return self.label_or_default()

    def label_or_default(self) -> str:
        return self.label or str(NavType(self.nav_type).label)


class DocumentSidecar(TimeStampedModel):
    """
    Exhibit-local data stored next to an index document: visibility and
    custom field values.
    """

    exhibit = models.ForeignKey(
        Exhibit,
        on_delete=models.CASCADE,
        related_name="document_sidecars",
    )
    document_id = models.CharField(max_length=255)
    document_type = models.CharField(max_length=64, default=DEFAULT_TAGGABLE_TYPE)
    public = models.BooleanField(default=True)
    data = models.JSONField(default=dict, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["exhibit", "document_type", "document_id"],
                name="uq_sidecar_exhibit_document",
            ),
        ]
        ordering = ["id"]

    def __str__(self):
        return f"{self.document_type}:{self.document_id}"


class Tag(models.Model):
    """Globally shared tag, deduplicated by name."""

    name = models.CharField(max_length=255, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Tagging(TimeStampedModel):
    """Links a tag to an indexed document, owned by the tagging exhibit."""

    tag = models.ForeignKey(Tag, on_delete=models.CASCADE, related_name="taggings")
    exhibit = models.ForeignKey(
        Exhibit,
        on_delete=models.CASCADE,
        related_name="owned_taggings",
    )
    taggable_type = models.CharField(max_length=64, default=DEFAULT_TAGGABLE_TYPE)
    taggable_id = models.CharField(max_length=255)
    context = models.CharField(max_length=64, default=TAGGING_CONTEXT)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["tag", "exhibit", "taggable_type", "taggable_id", "context"],
                name="uq_tagging_identity",
            ),
        ]
        ordering = ["id"]

    def __str__(self):
        return f"{self.tag} → {self.taggable_type}:{self.taggable_id}"


class Attachment(TimeStampedModel):
    """A file curators embed in pages."""

    exhibit = models.ForeignKey(
        Exhibit,
        on_delete=models.CASCADE,
        related_name="attachments",
    )
    uid = models.UUIDField(default=uuid.uuid4)
    name = models.CharField(max_length=255, blank=True, default="")
    file = models.FileField(upload_to=attachment_file_path, blank=True, max_length=500)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["exhibit", "uid"],
                name="uq_attachment_exhibit_uid",
            ),
        ]
        ordering = ["id"]

    def __str__(self):
        return self.name or str(self.uid)


class Resource(TimeStampedModel):
    """
    An externally sourced item added to the exhibit: an upload, a IIIF
    manifest, a web page... ``type`` records which kind.
    """

    exhibit = models.ForeignKey(
        Exhibit,
        on_delete=models.CASCADE,
        related_name="resources",
    )
    uid = models.UUIDField(default=uuid.uuid4)
    type = models.CharField(
        max_length=16,
        choices=ResourceKind.choices,
        default=ResourceKind.RESOURCE,
    )
    url = models.URLField(max_length=2000, blank=True, default="")
    data = models.JSONField(default=dict, blank=True)
    indexed_at = models.DateTimeField(null=True, blank=True)
    upload = models.FileField(upload_to=resource_upload_path, blank=True, max_length=500)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["exhibit", "uid"],
                name="uq_resource_exhibit_uid",
            ),
        ]
        ordering = ["id"]

    def __str__(self):
        return f"{self.type}:{self.url or self.uid}"

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind(self.type)
