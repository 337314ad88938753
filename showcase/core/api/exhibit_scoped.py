"""
Mixin for exhibit-scoped API viewsets.

Viewsets nested under an exhibit (``/api/v1/exhibits/<exhibit_slug>/...``)
resolve the exhibit from the URL once per request. Previous slugs still
resolve through the exhibit's slug history.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.http import Http404
from rest_framework import permissions

from showcase.users.constants import PermissionCode

if TYPE_CHECKING:
    from showcase.exhibits.models import Exhibit


class ExhibitScopedMixin:
    """
    Resolves ``self.exhibit`` from the ``exhibit_slug`` URL kwarg.

    ``required_permissions`` maps viewset actions to the permission needed to
    run them. Actions not listed need nothing beyond seeing the exhibit when
    they are read-only, and ``default_write_permission`` otherwise.

    Usage:
        class SearchViewSet(ExhibitScopedMixin, viewsets.ModelViewSet):
            def get_queryset(self):
                return self.get_exhibit().searches.all()
    """

    exhibit_url_kwarg = "exhibit_slug"
    required_permissions: dict[str, PermissionCode] = {}
    default_write_permission = PermissionCode.EXHIBIT_CURATE

    _exhibit: Exhibit | None = None

    def has_exhibit_in_url(self) -> bool:
        return self.exhibit_url_kwarg in self.kwargs

    def get_exhibit(self) -> Exhibit:
        """
        Return the exhibit named in the URL.

        Raises Http404 if no exhibit has (or had) that slug.
        """
        if self._exhibit is None:
            from showcase.exhibits.models import Exhibit
            from showcase.exhibits.models import find_by_slug

            slug = self.kwargs.get(self.exhibit_url_kwarg)
            try:
                self._exhibit = find_by_slug(Exhibit.objects.all(), slug)
            except Exhibit.DoesNotExist as exc:
                raise Http404(str(exc)) from exc
        return self._exhibit

    @property
    def exhibit(self) -> Exhibit:
        return self.get_exhibit()

    def get_required_permission(self, request) -> PermissionCode | None:
        action = getattr(self, "action", None)
        if action in self.required_permissions:
            return self.required_permissions[action]
        if request.method in permissions.SAFE_METHODS:
            return None
        return self.default_write_permission

    def user_can(self, perm: PermissionCode) -> bool:
        return self.request.user.has_perm(f"exhibits.{perm.value}", self.get_exhibit())
