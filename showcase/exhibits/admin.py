from django.contrib import admin

from showcase.exhibits.models import Attachment
from showcase.exhibits.models import Contact
from showcase.exhibits.models import ContactEmail
from showcase.exhibits.models import CustomField
from showcase.exhibits.models import DocumentSidecar
from showcase.exhibits.models import Exhibit
from showcase.exhibits.models import MainNavigation
from showcase.exhibits.models import Page
from showcase.exhibits.models import Resource
from showcase.exhibits.models import Search
from showcase.exhibits.models import SearchConfiguration
from showcase.exhibits.models import SlugHistory
from showcase.exhibits.models import Tag
from showcase.exhibits.models import Tagging


@admin.register(Exhibit)
class ExhibitAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "title",
        "slug",
        "published",
        "is_default",
        "created",
        "modified",
    )
    list_filter = ("published",)
    search_fields = (
        "title",
        "slug",
    )
    ordering = ("title",)


@admin.register(SearchConfiguration)
class SearchConfigurationAdmin(admin.ModelAdmin):
    list_display = ("id", "exhibit", "default_per_page", "modified")


@admin.register(Page)
class PageAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "exhibit",
        "page_type",
        "title",
        "slug",
        "parent",
        "weight",
        "published",
    )
    list_filter = ("page_type", "published")
    search_fields = (
        "title",
        "slug",
        "exhibit__title",
    )
    ordering = ("exhibit", "page_type", "weight")


@admin.register(Search)
class SearchAdmin(admin.ModelAdmin):
    list_display = ("id", "exhibit", "title", "slug", "weight", "published")
    list_filter = ("published",)
    search_fields = ("title", "slug")
    ordering = ("exhibit", "weight")


@admin.register(CustomField)
class CustomFieldAdmin(admin.ModelAdmin):
    list_display = ("id", "exhibit", "label", "field", "field_type", "readonly_field")
    search_fields = ("label", "field")


@admin.register(Contact)
class ContactAdmin(admin.ModelAdmin):
    list_display = ("id", "exhibit", "name", "email", "show_in_sidebar", "weight")
    search_fields = ("name", "email")


@admin.register(ContactEmail)
class ContactEmailAdmin(admin.ModelAdmin):
    list_display = ("id", "exhibit", "email", "created")
    search_fields = ("email",)


@admin.register(MainNavigation)
class MainNavigationAdmin(admin.ModelAdmin):
    list_display = ("id", "exhibit", "nav_type", "label", "weight", "display")
    list_filter = ("nav_type",)


@admin.register(DocumentSidecar)
class DocumentSidecarAdmin(admin.ModelAdmin):
    list_display = ("id", "exhibit", "document_type", "document_id", "public")
    list_filter = ("public", "document_type")
    search_fields = ("document_id",)


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ("id", "name")
    search_fields = ("name",)


@admin.register(Tagging)
class TaggingAdmin(admin.ModelAdmin):
    list_display = ("id", "tag", "exhibit", "taggable_type", "taggable_id", "context")
    search_fields = ("tag__name", "taggable_id")


@admin.register(Attachment)
class AttachmentAdmin(admin.ModelAdmin):
    list_display = ("id", "exhibit", "uid", "name", "file")
    search_fields = ("name",)


@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    list_display = ("id", "exhibit", "uid", "type", "url", "indexed_at")
    list_filter = ("type",)
    search_fields = ("url",)


@admin.register(SlugHistory)
class SlugHistoryAdmin(admin.ModelAdmin):
    list_display = ("model_label", "object_id", "slug", "created")
    list_filter = ("model_label",)
    search_fields = ("slug",)
