"""
Exhibit-scoped API viewsets.

    /api/v1/exhibits/
    /api/v1/exhibits/<exhibit_slug>/
    /api/v1/exhibits/<exhibit_slug>/export/
    /api/v1/exhibits/<exhibit_slug>/import/
    /api/v1/exhibits/<exhibit_slug>/searches/
    /api/v1/exhibits/<exhibit_slug>/pages/
    /api/v1/exhibits/<exhibit_slug>/configuration/
    /api/v1/exhibits/<exhibit_slug>/appearance/
    /api/v1/exhibits/<exhibit_slug>/browse/
    /api/v1/exhibits/<exhibit_slug>/roles/
"""

from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import TYPE_CHECKING

from django.http import Http404
from rest_framework import exceptions
from rest_framework import mixins
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser
from rest_framework.parsers import JSONParser
from rest_framework.parsers import MultiPartParser
from rest_framework.response import Response as APIResponse

from showcase.catalog.browse import list_categories
from showcase.catalog.browse import query_params_from_request
from showcase.catalog.browse import run_search
from showcase.catalog.client import UpstreamSearchError
from showcase.catalog.conf import get_catalog_settings
from showcase.core.api.exhibit_scoped import ExhibitScopedMixin
from showcase.exhibits.constants import PageType
from showcase.exhibits.exceptions import ExhibitImportError
from showcase.exhibits.exchange import ExhibitImporter
from showcase.exhibits.exchange import export_filename
from showcase.exhibits.exchange import serialize_exhibit
from showcase.exhibits.models import Exhibit
from showcase.exhibits.models import Page
from showcase.exhibits.models import SearchConfiguration
from showcase.exhibits.models import find_by_slug
from showcase.exhibits.permissions import ExhibitPermission
from showcase.exhibits.serializers import AppearanceSerializer
from showcase.exhibits.serializers import ExhibitRoleSerializer
from showcase.exhibits.serializers import ExhibitSerializer
from showcase.exhibits.serializers import PageSerializer
from showcase.exhibits.serializers import SearchConfigurationSerializer
from showcase.exhibits.serializers import SearchSerializer
from showcase.users.constants import PermissionCode
from showcase.users.constants import RoleCode
from showcase.users.models import ExhibitRole

if TYPE_CHECKING:
    from django.db.models import QuerySet

logger = logging.getLogger(__name__)

SLUG_REGEX = r"[^/.]+"


def _get_by_slug(queryset, slug):
    try:
        return find_by_slug(queryset, slug)
    except queryset.model.DoesNotExist as exc:
        raise Http404(str(exc)) from exc


class ExhibitViewSet(ExhibitScopedMixin, viewsets.ModelViewSet):
    """
    Exhibits visible to the current user.

    Creating an exhibit makes the creator its admin. Changing, deleting,
    exporting and importing an exhibit need the manage permission.
    """

    serializer_class = ExhibitSerializer
    permission_classes = [ExhibitPermission]
    lookup_field = "slug"
    lookup_url_kwarg = "exhibit_slug"
    lookup_value_regex = SLUG_REGEX
    required_permissions = {
        "create": PermissionCode.EXHIBIT_CREATE,
        "update": PermissionCode.EXHIBIT_MANAGE,
        "partial_update": PermissionCode.EXHIBIT_MANAGE,
        "destroy": PermissionCode.EXHIBIT_MANAGE,
        "export": PermissionCode.EXHIBIT_MANAGE,
        "import_document": PermissionCode.EXHIBIT_MANAGE,
    }

    def get_queryset(self) -> QuerySet[Exhibit]:
        return Exhibit.objects.visible_to(self.request.user)

    def get_object(self) -> Exhibit:
        exhibit = self.get_exhibit()
        self.check_object_permissions(self.request, exhibit)
        return exhibit

    def perform_create(self, serializer):
        exhibit = serializer.save()
        ExhibitRole.grant(self.request.user, exhibit, RoleCode.ADMIN)
        logger.info("User %s created exhibit %s", self.request.user, exhibit.slug)

    @action(detail=True, methods=["get"])
    def export(self, request, *args, **kwargs):
        """Download the exhibit as a JSON document, files embedded."""
        exhibit = self.get_object()
        response = APIResponse(serialize_exhibit(exhibit))
        response["Content-Disposition"] = (
            f'attachment; filename="{export_filename(exhibit)}"'
        )
        return response

    @action(
        detail=True,
        methods=["post"],
        url_path="import",
        url_name="import",
        parser_classes=[JSONParser, MultiPartParser, FormParser],
    )
    def import_document(self, request, *args, **kwargs):
        """
        Import an exhibit document into this exhibit.

        **Request format:** the document as the JSON body, or
        `multipart/form-data` with the document in a `file` field.

        **Response:** the updated exhibit and a per-collection count of
        created and updated entries. Nothing is written when the document is
        rejected; the error names the offending `path`.
        """
        exhibit = self.get_object()
        if request.content_type.startswith(("multipart/", "application/x-www-form")):
            upload = request.FILES.get("file")
            if upload is None:
                return APIResponse(
                    {"detail": "Upload the document in a 'file' field.", "path": "$"},
                    status=HTTPStatus.BAD_REQUEST,
                )
            try:
                document = json.load(upload)
            except (ValueError, UnicodeDecodeError) as exc:
                return APIResponse(
                    {
                        "detail": f"The uploaded file is not valid JSON: {exc}",
                        "code": "invalid_import",
                        "path": "$",
                    },
                    status=HTTPStatus.BAD_REQUEST,
                )
        else:
            document = request.data

        importer = ExhibitImporter(exhibit)
        try:
            exhibit = importer.run(document)
        except ExhibitImportError as exc:
            logger.info(
                "Import into exhibit %s rejected at %s: %s",
                exhibit.slug,
                exc.path,
                exc.message,
            )
            return APIResponse(exc.payload, status=exc.status_code)

        serializer = self.get_serializer(exhibit)
        return APIResponse({"exhibit": serializer.data, "summary": importer.summary})


class ExhibitChildViewSet(ExhibitScopedMixin, viewsets.ModelViewSet):
    """Base for collections owned by an exhibit, looked up by slug."""

    permission_classes = [ExhibitPermission]
    lookup_field = "slug"
    lookup_value_regex = SLUG_REGEX

    def get_object(self):
        obj = _get_by_slug(self.get_queryset(), self.kwargs[self.lookup_field])
        self.check_object_permissions(self.request, obj)
        return obj

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["exhibit"] = self.get_exhibit()
        return context

    def perform_create(self, serializer):
        serializer.save(exhibit=self.get_exhibit())


class SearchViewSet(ExhibitChildViewSet):
    """Browse categories. Visitors see published ones only."""

    serializer_class = SearchSerializer

    def get_queryset(self):
        queryset = self.get_exhibit().searches.all()
        if not self.user_can(PermissionCode.EXHIBIT_CURATE):
            queryset = queryset.published()
        return queryset


class PageViewSet(ExhibitChildViewSet):
    """
    About, feature and home pages. Filter with `?type=about|feature|home`.
    """

    serializer_class = PageSerializer

    def get_queryset(self):
        queryset = Page.objects.filter(exhibit=self.get_exhibit())
        if not self.user_can(PermissionCode.EXHIBIT_CURATE):
            queryset = queryset.published()
        page_type = self.request.query_params.get("type")
        if page_type:
            if page_type not in PageType.values:
                raise exceptions.ValidationError({"type": f"Unknown page type {page_type!r}."})
            queryset = queryset.filter(page_type=page_type)
        return queryset

    def perform_destroy(self, instance):
        if instance.page_type == PageType.HOME:
            raise exceptions.MethodNotAllowed(
                "DELETE",
                detail="The home page cannot be deleted.",
            )
        instance.delete()


class SearchConfigurationViewSet(ExhibitScopedMixin, viewsets.GenericViewSet):
    """
    The exhibit's search configuration: which facet, index, sort and search
    fields are enabled and how they are labelled.
    """

    permission_classes = [ExhibitPermission]
    serializer_class = SearchConfigurationSerializer

    def get_required_permission(self, request):
        return PermissionCode.EXHIBIT_CURATE

    def get_object(self) -> SearchConfiguration:
        configuration, _ = SearchConfiguration.objects.get_or_create(
            exhibit=self.get_exhibit(),
        )
        return configuration

    def retrieve(self, request, *args, **kwargs):
        return APIResponse(self.get_serializer(self.get_object()).data)

    def partial_update(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("Updated search configuration of exhibit %s", self.get_exhibit().slug)
        return APIResponse(serializer.data)

    @action(detail=False, methods=["get"], url_path="metadata-fields")
    def metadata_fields(self, request, *args, **kwargs):
        """Index fields in catalog order, with this exhibit's labels and flags."""
        configuration = self.get_object()
        fields = []
        for name, default_label in get_catalog_settings().index_fields.items():
            options = dict(configuration.index_fields.get(name, {}))
            options.setdefault("enabled", True)
            options["label"] = options.get("label") or default_label
            fields.append({"field": name, **options})
        return APIResponse(fields)

    @action(detail=False, methods=["get"], url_path="search-views")
    def search_views(self, request, *args, **kwargs):
        """Result views on offer and the ones this exhibit enables."""
        configuration = self.get_object()
        available = get_catalog_settings().view_types
        enabled = configuration.document_index_view_types or available
        return APIResponse(
            [{"view": name, "enabled": name in enabled} for name in available],
        )


class AppearanceViewSet(SearchConfigurationViewSet):
    """Result list appearance: enabled views and the default page size."""

    serializer_class = AppearanceSerializer


class BrowseViewSet(ExhibitScopedMixin, viewsets.GenericViewSet):
    """
    Browse categories as visitors see them. Running a category accepts the
    usual query string (`q`, `f.<field>`, `sort`, `page`, `per_page`).
    """

    permission_classes = [ExhibitPermission]
    serializer_class = SearchSerializer
    lookup_field = "slug"
    lookup_value_regex = SLUG_REGEX

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["exhibit"] = self.get_exhibit()
        return context

    def get_queryset(self):
        exhibit = self.get_exhibit()
        if self.user_can(PermissionCode.EXHIBIT_CURATE):
            return exhibit.searches.all()
        return list_categories(exhibit)

    def list(self, request, *args, **kwargs):
        categories = list_categories(self.get_exhibit())
        return APIResponse(self.get_serializer(categories, many=True).data)

    def retrieve(self, request, *args, **kwargs):
        exhibit = self.get_exhibit()
        search = _get_by_slug(self.get_queryset(), kwargs[self.lookup_field])
        try:
            result = run_search(
                exhibit,
                search,
                query_params_from_request(request.query_params),
                include_private=self.user_can(PermissionCode.EXHIBIT_CURATE),
            )
        except UpstreamSearchError as exc:
            logger.warning("Browse %s/%s failed: %s", exhibit.slug, search.slug, exc)
            return APIResponse(exc.payload, status=exc.status_code)

        masthead = result.masthead
        return APIResponse(
            {
                "search": self.get_serializer(search).data,
                "query_params": result.query_params,
                "total": result.response.total,
                "start": result.response.start,
                "facets": result.response.facets,
                "masthead": masthead.url if masthead else None,
                "documents": [document.to_dict() for document in result.documents],
            },
        )


class ExhibitRoleViewSet(
    ExhibitScopedMixin,
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Role grants in the exhibit. Granting a user a new role replaces the old one."""

    permission_classes = [ExhibitPermission]
    serializer_class = ExhibitRoleSerializer

    def get_required_permission(self, request):
        return PermissionCode.EXHIBIT_MANAGE

    def get_queryset(self):
        return self.get_exhibit().roles.select_related("user")

    def perform_create(self, serializer):
        exhibit = self.get_exhibit()
        serializer.instance = ExhibitRole.grant(
            serializer.validated_data["user"],
            exhibit,
            serializer.validated_data.get("role", RoleCode.CURATOR),
        )
        logger.info(
            "Granted %s the %s role in exhibit %s",
            serializer.instance.user,
            serializer.instance.role,
            exhibit.slug,
        )
