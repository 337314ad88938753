import uuid

import django.db.models.deletion
import django.utils.timezone
import model_utils.fields
from django.db import migrations
from django.db import models

import showcase.exhibits.models

PAGE_TYPES = [
    ("about", "About page"),
    ("feature", "Feature page"),
    ("home", "Home page"),
]


def _timestamps():
    return [
        (
            "created",
            model_utils.fields.AutoCreatedField(
                default=django.utils.timezone.now,
                editable=False,
                verbose_name="created",
            ),
        ),
        (
            "modified",
            model_utils.fields.AutoLastModifiedField(
                default=django.utils.timezone.now,
                editable=False,
                verbose_name="modified",
            ),
        ),
    ]


def _id():
    return (
        "id",
        models.BigAutoField(
            auto_created=True,
            primary_key=True,
            serialize=False,
            verbose_name="ID",
        ),
    )


def _exhibit_fk(related_name):
    return (
        "exhibit",
        models.ForeignKey(
            on_delete=django.db.models.deletion.CASCADE,
            related_name=related_name,
            to="exhibits.exhibit",
        ),
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="SlugHistory",
            fields=[
                _id(),
                ("model_label", models.CharField(max_length=64)),
                ("object_id", models.PositiveBigIntegerField()),
                ("slug", models.SlugField(max_length=255)),
                (
                    "created",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        editable=False,
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Slug history",
                "ordering": ["-created", "-id"],
                "indexes": [
                    models.Index(
                        fields=["model_label", "slug"],
                        name="slug_history_label_slug_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Tag",
            fields=[
                _id(),
                ("name", models.CharField(max_length=255, unique=True)),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Exhibit",
            fields=[
                _id(),
                *_timestamps(),
                ("title", models.CharField(max_length=255)),
                (
                    "subtitle",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("description", models.TextField(blank=True, default="")),
                (
                    "slug",
                    models.SlugField(blank=True, max_length=255, unique=True),
                ),
                ("published", models.BooleanField(default=True)),
                ("is_default", models.BooleanField(default=False, editable=False)),
                (
                    "featured_image",
                    models.FileField(
                        blank=True,
                        max_length=500,
                        upload_to=showcase.exhibits.models.exhibit_featured_image_path,
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_default", True)),
                        fields=("is_default",),
                        name="uq_exhibit_single_default",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SearchConfiguration",
            fields=[
                _id(),
                *_timestamps(),
                ("facet_fields", models.JSONField(blank=True, default=dict)),
                ("index_fields", models.JSONField(blank=True, default=dict)),
                ("sort_fields", models.JSONField(blank=True, default=dict)),
                ("search_fields", models.JSONField(blank=True, default=dict)),
                ("per_page", models.JSONField(blank=True, default=list)),
                (
                    "default_per_page",
                    models.PositiveIntegerField(blank=True, null=True),
                ),
                (
                    "document_index_view_types",
                    models.JSONField(blank=True, default=list),
                ),
                (
                    "exhibit",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="search_configuration",
                        to="exhibits.exhibit",
                    ),
                ),
            ],
            options={"verbose_name": "Search configuration"},
        ),
        migrations.CreateModel(
            name="Page",
            fields=[
                _id(),
                *_timestamps(),
                ("page_type", models.CharField(choices=PAGE_TYPES, max_length=16)),
                ("title", models.CharField(max_length=255)),
                ("slug", models.SlugField(blank=True, max_length=255)),
                ("content", models.JSONField(blank=True, default=list)),
                ("weight", models.IntegerField(default=0)),
                ("published", models.BooleanField(default=False)),
                ("display_sidebar", models.BooleanField(default=True)),
                ("display_title", models.BooleanField(default=True)),
                _exhibit_fk("pages"),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="child_pages",
                        to="exhibits.page",
                    ),
                ),
            ],
            options={
                "ordering": ["weight", "id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("exhibit", "page_type", "slug"),
                        name="uq_page_exhibit_type_slug",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("page_type", "home")),
                        fields=("exhibit",),
                        name="uq_page_single_home",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AboutPage",
            fields=[],
            options={"proxy": True, "indexes": [], "constraints": []},
            bases=("exhibits.page",),
        ),
        migrations.CreateModel(
            name="FeaturePage",
            fields=[],
            options={"proxy": True, "indexes": [], "constraints": []},
            bases=("exhibits.page",),
        ),
        migrations.CreateModel(
            name="HomePage",
            fields=[],
            options={"proxy": True, "indexes": [], "constraints": []},
            bases=("exhibits.page",),
        ),
        migrations.CreateModel(
            name="Search",
            fields=[
                _id(),
                *_timestamps(),
                ("title", models.CharField(max_length=255)),
                ("slug", models.SlugField(blank=True, max_length=255)),
                (
                    "short_description",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("long_description", models.TextField(blank=True, default="")),
                ("query_params", models.JSONField(blank=True, default=dict)),
                ("published", models.BooleanField(default=False)),
                ("weight", models.IntegerField(default=0)),
                (
                    "masthead",
                    models.FileField(
                        blank=True,
                        max_length=500,
                        upload_to=showcase.exhibits.models.search_masthead_path,
                    ),
                ),
                ("masthead_display", models.BooleanField(default=False)),
                _exhibit_fk("searches"),
            ],
            options={
                "verbose_name_plural": "searches",
                "ordering": ["weight", "id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("exhibit", "slug"),
                        name="uq_search_exhibit_slug",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CustomField",
            fields=[
                _id(),
                *_timestamps(),
                ("slug", models.SlugField(blank=True, max_length=255)),
                ("label", models.CharField(max_length=255)),
                (
                    "short_description",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("field", models.CharField(blank=True, default="", max_length=255)),
                (
                    "field_type",
                    models.CharField(
                        choices=[
                            ("text", "Free text"),
                            ("vocab", "Controlled vocabulary"),
                        ],
                        default="text",
                        max_length=16,
                    ),
                ),
                ("readonly_field", models.BooleanField(default=False)),
                ("configuration", models.JSONField(blank=True, default=dict)),
                _exhibit_fk("custom_fields"),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("exhibit", "slug"),
                        name="uq_custom_field_exhibit_slug",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Contact",
            fields=[
                _id(),
                *_timestamps(),
                ("slug", models.SlugField(blank=True, max_length=255)),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("title", models.CharField(blank=True, default="", max_length=255)),
                (
                    "location",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                (
                    "telephone",
                    models.CharField(blank=True, default="", max_length=64),
                ),
                ("show_in_sidebar", models.BooleanField(default=True)),
                ("weight", models.IntegerField(default=0)),
                (
                    "avatar",
                    models.FileField(
                        blank=True,
                        max_length=500,
                        upload_to=showcase.exhibits.models.contact_avatar_path,
                    ),
                ),
                _exhibit_fk("contacts"),
            ],
            options={
                "ordering": ["weight", "id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("exhibit", "slug"),
                        name="uq_contact_exhibit_slug",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ContactEmail",
            fields=[
                _id(),
                *_timestamps(),
                ("email", models.EmailField(max_length=254)),
                _exhibit_fk("contact_emails"),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("exhibit", "email"),
                        name="uq_contact_email_exhibit_email",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="MainNavigation",
            fields=[
                _id(),
                *_timestamps(),
                (
                    "nav_type",
                    models.CharField(
                        choices=[
                            ("curated_features", "Curated Features"),
                            ("browse", "Browse"),
                            ("about", "About"),
                        ],
                        max_length=32,
                    ),
                ),
                ("label", models.CharField(blank=True, default="", max_length=255)),
                ("weight", models.IntegerField(default=0)),
                ("display", models.BooleanField(default=True)),
                _exhibit_fk("main_navigations"),
            ],
            options={
                "ordering": ["weight", "id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("exhibit", "nav_type"),
                        name="uq_main_navigation_exhibit_type",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DocumentSidecar",
            fields=[
                _id(),
                *_timestamps(),
                ("document_id", models.CharField(max_length=255)),
                (
                    "document_type",
                    models.CharField(default="SolrDocument", max_length=64),
                ),
                ("public", models.BooleanField(default=True)),
                ("data", models.JSONField(blank=True, default=dict)),
                _exhibit_fk("document_sidecars"),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("exhibit", "document_type", "document_id"),
                        name="uq_sidecar_exhibit_document",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Tagging",
            fields=[
                _id(),
                *_timestamps(),
                (
                    "taggable_type",
                    models.CharField(default="SolrDocument", max_length=64),
                ),
                ("taggable_id", models.CharField(max_length=255)),
                ("context", models.CharField(default="tags", max_length=64)),
                _exhibit_fk("owned_taggings"),
                (
                    "tag",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="taggings",
                        to="exhibits.tag",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=(
                            "tag",
                            "exhibit",
                            "taggable_type",
                            "taggable_id",
                            "context",
                        ),
                        name="uq_tagging_identity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Attachment",
            fields=[
                _id(),
                *_timestamps(),
                ("uid", models.UUIDField(default=uuid.uuid4)),
                ("name", models.CharField(blank=True, default="", max_length=255)),
                (
                    "file",
                    models.FileField(
                        blank=True,
                        max_length=500,
                        upload_to=showcase.exhibits.models.attachment_file_path,
                    ),
                ),
                _exhibit_fk("attachments"),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("exhibit", "uid"),
                        name="uq_attachment_exhibit_uid",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Resource",
            fields=[
                _id(),
                *_timestamps(),
                ("uid", models.UUIDField(default=uuid.uuid4)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("resource", "Resource"),
                            ("upload", "Uploaded item"),
                            ("iiif", "IIIF manifest"),
                            ("url", "Web page"),
                        ],
                        default="resource",
                        max_length=16,
                    ),
                ),
                ("url", models.URLField(blank=True, default="", max_length=2000)),
                ("data", models.JSONField(blank=True, default=dict)),
                ("indexed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "upload",
                    models.FileField(
                        blank=True,
                        max_length=500,
                        upload_to=showcase.exhibits.models.resource_upload_path,
                    ),
                ),
                _exhibit_fk("resources"),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("exhibit", "uid"),
                        name="uq_resource_exhibit_uid",
                    ),
                ],
            },
        ),
    ]
