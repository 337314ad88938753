from __future__ import annotations

from rest_framework import serializers

from showcase.catalog.conf import get_catalog_settings
from showcase.exhibits.constants import PageType
from showcase.exhibits.exchange.serializers import SearchConfigurationExportSerializer
from showcase.exhibits.models import TRUTHY_FLAGS
from showcase.exhibits.models import Exhibit
from showcase.exhibits.models import FeaturePage
from showcase.exhibits.models import Page
from showcase.exhibits.models import Search
from showcase.exhibits.models import SearchConfiguration
from showcase.users.models import ExhibitRole
from showcase.users.models import User


class ExhibitSerializer(serializers.ModelSerializer):
    featured_image = serializers.FileField(read_only=True)

    class Meta:
        model = Exhibit
        fields = [
            "slug",
            "title",
            "subtitle",
            "description",
            "published",
            "is_default",
            "featured_image",
            "created",
            "modified",
        ]
        read_only_fields = ["is_default", "created", "modified"]
        extra_kwargs = {"slug": {"required": False}}


class ExhibitScopedSlugMixin:
    """Checks a writable ``slug`` is free within the exhibit in context."""

    def slug_queryset(self):
        raise NotImplementedError

    def validate_slug(self, value):
        if not value:
            return value
        queryset = self.slug_queryset().filter(slug=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            msg = "This slug is already used in this exhibit."
            raise serializers.ValidationError(msg)
        return value


class SearchSerializer(ExhibitScopedSlugMixin, serializers.ModelSerializer):
    """A browse category as curators edit it."""

    masthead = serializers.FileField(read_only=True)

    class Meta:
        model = Search
        fields = [
            "slug",
            "title",
            "short_description",
            "long_description",
            "query_params",
            "published",
            "weight",
            "masthead",
            "masthead_display",
            "created",
            "modified",
        ]
        read_only_fields = ["created", "modified"]
        validators = []

    def slug_queryset(self):
        return Search.objects.filter(exhibit=self.context["exhibit"])

    def validate_query_params(self, value):
        if not isinstance(value, dict):
            msg = "query_params must be an object."
            raise serializers.ValidationError(msg)
        return value


class PageSerializer(ExhibitScopedSlugMixin, serializers.ModelSerializer):
    """
    About and feature pages. The home page is returned with
    ``page_type: "home"`` and can be updated, but pages of that type cannot
    be created through the API.
    """

    page_type = serializers.ChoiceField(
        choices=[PageType.ABOUT, PageType.FEATURE],
        required=False,
    )
    parent = serializers.SlugRelatedField(
        slug_field="slug",
        queryset=FeaturePage.objects.none(),
        allow_null=True,
        required=False,
    )

    class Meta:
        model = Page
        fields = [
            "slug",
            "page_type",
            "title",
            "content",
            "weight",
            "published",
            "display_sidebar",
            "display_title",
            "parent",
            "created",
            "modified",
        ]
        read_only_fields = ["created", "modified"]
        validators = []

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        exhibit = self.context.get("exhibit")
        if exhibit is not None:
            self.fields["parent"].queryset = FeaturePage.objects.filter(exhibit=exhibit)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["page_type"] = instance.page_type
        return data

    def _page_type(self, attrs) -> str | None:
        if self.instance is not None:
            return self.instance.page_type
        return attrs.get("page_type")

    def slug_queryset(self):
        page_type = self._page_type(getattr(self, "initial_data", {}) or {})
        queryset = Page.objects.filter(exhibit=self.context["exhibit"])
        if page_type:
            queryset = queryset.filter(page_type=page_type)
        return queryset

    def validate_content(self, value):
        if not isinstance(value, list):
            msg = "content must be a list of blocks."
            raise serializers.ValidationError(msg)
        return value

    def validate(self, attrs):
        page_type = self._page_type(attrs)
        if page_type is None:
            raise serializers.ValidationError({"page_type": "This field is required."})
        if self.instance is not None and attrs.get("page_type", page_type) != page_type:
            raise serializers.ValidationError(
                {"page_type": "The type of an existing page cannot be changed."},
            )
        parent = attrs.get("parent")
        if parent is not None:
            if page_type != PageType.FEATURE:
                raise serializers.ValidationError(
                    {"parent": "Only feature pages can be nested."},
                )
            if self.instance is not None and parent.pk == self.instance.pk:
                raise serializers.ValidationError(
                    {"parent": "A page cannot be its own parent."},
                )
            if self.instance is not None and self.instance.nests_under_itself(parent):
                raise serializers.ValidationError(
                    {"parent": "A page cannot be nested under one of its own subpages."},
                )
        return attrs


class SearchConfigurationSerializer(SearchConfigurationExportSerializer):
    class Meta(SearchConfigurationExportSerializer.Meta):
        fields = ["facet_fields", "index_fields", "sort_fields", "search_fields"]


class ViewTypesField(serializers.Field):
    """
    Enabled result views.

    Accepts a list of view names or a form-style map of flags
    (``{"list": "1", "gallery": "0"}``). Stored in catalog order.
    """

    def to_representation(self, value):
        return list(value or [])

    def to_internal_value(self, data):
        if isinstance(data, dict):
            names = [
                name
                for name, flag in data.items()
                if str(flag).strip().lower() in TRUTHY_FLAGS
            ]
        elif isinstance(data, list) and all(isinstance(name, str) for name in data):
            names = data
        else:
            msg = "Expected a list of view names or a map of view flags."
            raise serializers.ValidationError(msg)
        available = get_catalog_settings().view_types
        unknown = sorted(set(names) - set(available))
        if unknown:
            msg = f"Unknown view types: {', '.join(unknown)}."
            raise serializers.ValidationError(msg)
        return [name for name in available if name in names]


class AppearanceSerializer(serializers.ModelSerializer):
    document_index_view_types = ViewTypesField(required=False)
    default_per_page = serializers.IntegerField(
        min_value=1,
        allow_null=True,
        required=False,
    )

    class Meta:
        model = SearchConfiguration
        fields = ["document_index_view_types", "default_per_page", "per_page"]
        read_only_fields = ["per_page"]

    def validate_default_per_page(self, value):
        if value is None:
            return value
        choices = (self.instance.per_page if self.instance else None) or (
            get_catalog_settings().per_page
        )
        if value not in choices:
            msg = f"Choose one of: {', '.join(str(c) for c in choices)}."
            raise serializers.ValidationError(msg)
        return value


class ExhibitRoleSerializer(serializers.ModelSerializer):
    user = serializers.SlugRelatedField(
        slug_field="username",
        queryset=User.objects.all(),
    )

    class Meta:
        model = ExhibitRole
        fields = ["id", "user", "role", "created"]
        read_only_fields = ["id", "created"]
        validators = []
