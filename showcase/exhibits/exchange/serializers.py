"""
Serializers for the exhibit export document.

Every serializer takes its field list from ``manifest`` so export and import
always agree on what a document contains. The same classes validate document
entries on import.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from showcase.exhibits.constants import ResourceKind
from showcase.exhibits.constants import parse_resource_kind
from showcase.exhibits.exchange import manifest
from showcase.exhibits.exchange.files import EmbeddedFileField
from showcase.exhibits.models import AboutPage
from showcase.exhibits.models import Attachment
from showcase.exhibits.models import Contact
from showcase.exhibits.models import ContactEmail
from showcase.exhibits.models import CustomField
from showcase.exhibits.models import DocumentSidecar
from showcase.exhibits.models import Exhibit
from showcase.exhibits.models import FeaturePage
from showcase.exhibits.models import HomePage
from showcase.exhibits.models import Resource
from showcase.exhibits.models import Search
from showcase.exhibits.models import SearchConfiguration
from showcase.exhibits.models import Tagging
from showcase.exhibits.models import normalize_field_settings


class ResourceKindField(serializers.Field):
    """The resource ``type`` discriminator. Unknown values are rejected."""

    def to_representation(self, value):
        return str(ResourceKind(value))

    def to_internal_value(self, data):
        try:
            return parse_resource_kind(data)
        except ValueError as exc:
            raise serializers.ValidationError(str(exc)) from exc


class ExhibitScalarSerializer(serializers.ModelSerializer):
    featured_image = EmbeddedFileField(required=False, allow_null=True)

    class Meta:
        model = Exhibit
        fields = list(manifest.EXHIBIT.exported_fields)


class SearchConfigurationExportSerializer(serializers.ModelSerializer):
    class Meta:
        model = SearchConfiguration
        fields = list(manifest.SEARCH_CONFIGURATION.fields)

    def _normalize(self, value):
        try:
            return normalize_field_settings(value)
        except DjangoValidationError as exc:
            raise serializers.ValidationError(exc.messages) from exc

    def validate_facet_fields(self, value):
        return self._normalize(value)

    def validate_index_fields(self, value):
        return self._normalize(value)

    def validate_sort_fields(self, value):
        return self._normalize(value)

    def validate_search_fields(self, value):
        return self._normalize(value)

    def validate_per_page(self, value):
        if not isinstance(value, list) or not all(
            isinstance(item, int) and item > 0 for item in value
        ):
            msg = "per_page must be a list of positive integers."
            raise serializers.ValidationError(msg)
        return value

    def validate_document_index_view_types(self, value):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            msg = "document_index_view_types must be a list of view names."
            raise serializers.ValidationError(msg)
        return value


class SearchExportSerializer(serializers.ModelSerializer):
    class Meta:
        model = Search
        fields = list(manifest.SEARCHES.fields)
        # Uniqueness is resolved by matching on slug, not by rejecting entries.
        validators = []


class PageExportSerializer(serializers.ModelSerializer):
    class Meta:
        model = AboutPage
        fields = list(manifest.PAGE_FIELDS)
        validators = []


class HomePageExportSerializer(PageExportSerializer):
    class Meta(PageExportSerializer.Meta):
        model = HomePage


class FeaturePageExportSerializer(PageExportSerializer):
    """Feature pages export their children recursively under ``child_pages``."""

    child_pages = serializers.SerializerMethodField()

    class Meta(PageExportSerializer.Meta):
        model = FeaturePage
        fields = [*manifest.PAGE_FIELDS, manifest.CHILD_PAGES_KEY]

    def get_child_pages(self, obj):
        return FeaturePageExportSerializer(
            obj.child_pages.all(),
            many=True,
            context=self.context,
        ).data


class CustomFieldExportSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomField
        fields = list(manifest.CUSTOM_FIELDS.fields)
        validators = []


class ContactExportSerializer(serializers.ModelSerializer):
    avatar = EmbeddedFileField(required=False, allow_null=True)

    class Meta:
        model = Contact
        fields = list(manifest.CONTACTS.exported_fields)
        validators = []


class ContactEmailExportSerializer(serializers.ModelSerializer):
    class Meta:
        model = ContactEmail
        fields = list(manifest.CONTACT_EMAILS.fields)
        validators = []


class DocumentSidecarExportSerializer(serializers.ModelSerializer):
    class Meta:
        model = DocumentSidecar
        fields = list(manifest.DOCUMENT_SIDECARS.fields)
        validators = []


class TaggingExportSerializer(serializers.ModelSerializer):
    tag = serializers.CharField(source="tag.name", max_length=255)

    class Meta:
        model = Tagging
        fields = list(manifest.TAGGINGS.fields)
        validators = []


class AttachmentExportSerializer(serializers.ModelSerializer):
    file = EmbeddedFileField(required=False, allow_null=True)

    class Meta:
        model = Attachment
        fields = list(manifest.ATTACHMENTS.exported_fields)
        validators = []


class ResourceExportSerializer(serializers.ModelSerializer):
    type = ResourceKindField(required=False)
    upload = EmbeddedFileField(required=False, allow_null=True)

    class Meta:
        model = Resource
        fields = list(manifest.RESOURCES.exported_fields)
        validators = []


# Serializer used for each collection key of the document.
COLLECTION_SERIALIZERS: dict[str, type[serializers.ModelSerializer]] = {
    manifest.SEARCHES.document_key: SearchExportSerializer,
    manifest.ABOUT_PAGES.document_key: PageExportSerializer,
    manifest.FEATURE_PAGES.document_key: FeaturePageExportSerializer,
    manifest.CUSTOM_FIELDS.document_key: CustomFieldExportSerializer,
    manifest.CONTACTS.document_key: ContactExportSerializer,
    manifest.CONTACT_EMAILS.document_key: ContactEmailExportSerializer,
    manifest.DOCUMENT_SIDECARS.document_key: DocumentSidecarExportSerializer,
    manifest.TAGGINGS.document_key: TaggingExportSerializer,
    manifest.ATTACHMENTS.document_key: AttachmentExportSerializer,
    manifest.RESOURCES.document_key: ResourceExportSerializer,
}


class ExhibitExportSerializer(serializers.ModelSerializer):
    """
    The full exhibit document. Key order is fixed by ``Meta.fields``.
    """

    format_version = serializers.SerializerMethodField()
    featured_image = EmbeddedFileField(required=False, allow_null=True)
    search_configuration = SearchConfigurationExportSerializer()
    searches = SearchExportSerializer(many=True)
    about_pages = PageExportSerializer(many=True)
    feature_pages = FeaturePageExportSerializer(
        many=True,
        source="top_level_feature_pages",
    )
    home_page = HomePageExportSerializer(allow_null=True)
    custom_fields = CustomFieldExportSerializer(many=True)
    contacts = ContactExportSerializer(many=True)
    contact_emails = ContactEmailExportSerializer(many=True)
    document_sidecars = DocumentSidecarExportSerializer(many=True)
    taggings = TaggingExportSerializer(many=True, source="owned_taggings")
    attachments = AttachmentExportSerializer(many=True)
    resources = ResourceExportSerializer(many=True)

    class Meta:
        model = Exhibit
        fields = [
            manifest.FORMAT_VERSION_KEY,
            *manifest.EXHIBIT.exported_fields,
            manifest.SEARCH_CONFIGURATION.document_key,
            manifest.SEARCHES.document_key,
            manifest.ABOUT_PAGES.document_key,
            manifest.FEATURE_PAGES.document_key,
            manifest.HOME_PAGE.document_key,
            manifest.CUSTOM_FIELDS.document_key,
            manifest.CONTACTS.document_key,
            manifest.CONTACT_EMAILS.document_key,
            manifest.DOCUMENT_SIDECARS.document_key,
            manifest.TAGGINGS.document_key,
            manifest.ATTACHMENTS.document_key,
            manifest.RESOURCES.document_key,
        ]

    def get_format_version(self, obj) -> int:
        return manifest.EXPORT_FORMAT_VERSION
