from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import exceptions
from rest_framework import permissions

from showcase.users.constants import PermissionCode

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView

    from showcase.exhibits.models import Exhibit


def can_see_exhibit(user, exhibit: Exhibit) -> bool:
    """Published exhibits are public; unpublished ones need ``exhibit_view``."""
    if exhibit.published:
        return True
    return user.has_perm(f"exhibits.{PermissionCode.EXHIBIT_VIEW.value}", exhibit)


class ExhibitPermission(permissions.BasePermission):
    """
    Permission class for viewsets using ``ExhibitScopedMixin``.

    An exhibit the user may not see answers 404 so its existence is not
    revealed. Otherwise the permission the view requires for the current
    action is checked against the user's role in that exhibit.
    """

    message = "You do not have permission to change this exhibit."

    def has_permission(self, request: Request, view: APIView) -> bool:
        required = view.get_required_permission(request)

        if not view.has_exhibit_in_url():
            if required is None:
                return True
            return request.user.has_perm(f"exhibits.{required.value}")

        exhibit = view.get_exhibit()
        if not can_see_exhibit(request.user, exhibit):
            raise exceptions.NotFound
        if required is None:
            return True
        return view.user_can(required)
