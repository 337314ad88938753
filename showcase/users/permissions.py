from __future__ import annotations

import logging
from dataclasses import dataclass

from django.contrib.auth.backends import BaseBackend

from showcase.users.constants import PermissionCode
from showcase.users.constants import RoleCode
from showcase.users.models import ExhibitRole
from showcase.users.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PermissionDefinition:
    """
    Declarative schema for a permission code and its role bindings.
    """

    code: PermissionCode
    name: str
    roles: frozenset[str]


PERMISSION_DEFINITIONS: tuple[PermissionDefinition, ...] = (
    PermissionDefinition(
        code=PermissionCode.EXHIBIT_VIEW,
        name="Can view unpublished exhibit content",
        roles=frozenset((RoleCode.ADMIN, RoleCode.CURATOR)),
    ),
    PermissionDefinition(
        code=PermissionCode.EXHIBIT_CURATE,
        name="Can curate exhibit pages, searches and configuration",
        roles=frozenset((RoleCode.ADMIN, RoleCode.CURATOR)),
    ),
    PermissionDefinition(
        code=PermissionCode.EXHIBIT_MANAGE,
        name="Can manage exhibit settings, roles, import and export",
        roles=frozenset((RoleCode.ADMIN,)),
    ),
    # Creating exhibits is a site-level action; only superusers hold it.
    PermissionDefinition(
        code=PermissionCode.EXHIBIT_CREATE,
        name="Can create exhibits",
        roles=frozenset(),
    ),
)

PERMISSIONS_BY_CODE = {
    definition.code: definition for definition in PERMISSION_DEFINITIONS
}


def normalize_perm_code(perm: str | PermissionCode) -> PermissionCode | None:
    """
    Accept plain codenames (``exhibit_curate``), Django-style strings
    (``exhibits.exhibit_curate``), or ``PermissionCode`` instances and
    normalize to a ``PermissionCode`` enum.
    """

    if isinstance(perm, PermissionCode):
        return perm
    if not isinstance(perm, str):
        return None
    _, _, codename = perm.rpartition(".")
    candidate = codename or perm
    if candidate in PermissionCode.values:
        return PermissionCode(candidate)
    return None


def roles_for_permission(perm: PermissionCode) -> frozenset[str]:
    """Return the role codes that grant the provided permission."""
    definition = PERMISSIONS_BY_CODE.get(perm)
    return definition.roles if definition else frozenset()


class ExhibitPermissionBackend(BaseBackend):
    """
    Permission backend that evaluates Django ``has_perm`` calls against
    exhibit-scoped roles.

    Callers pass the exhibit itself, or any object carrying an ``exhibit`` or
    ``exhibit_id`` attribute (a Search, Page, Attachment...), as ``obj``.
    """

    supports_object_permissions = True

    def authenticate(self, request, username=None, password=None, **kwargs):
        return None

    def has_perm(self, user: User, perm: str, obj=None) -> bool:
        if not user or not getattr(user, "is_authenticated", False):
            return False
        if not getattr(user, "is_active", True):
            return False
        if getattr(user, "is_superuser", False):
            return True

        perm_code = normalize_perm_code(perm)
        if not perm_code:
            return False

        exhibit_id = self._resolve_exhibit_id(obj)
        if exhibit_id is None:
            return False

        role = (
            ExhibitRole.objects.filter(user=user, exhibit_id=exhibit_id)
            .values_list("role", flat=True)
            .first()
        )
        if role is None:
            return False
        return role in roles_for_permission(perm_code)

    def get_all_permissions(self, user_obj: User, obj=None) -> set[str]:
        if not user_obj or not getattr(user_obj, "is_authenticated", False):
            return set()
        exhibit_id = self._resolve_exhibit_id(obj)
        if exhibit_id is None:
            return set()
        role = (
            ExhibitRole.objects.filter(user=user_obj, exhibit_id=exhibit_id)
            .values_list("role", flat=True)
            .first()
        )
        if role is None:
            return set()
        return {
            f"exhibits.{definition.code.value}"
            for definition in PERMISSION_DEFINITIONS
            if role in definition.roles
        }

    def _resolve_exhibit_id(self, obj) -> int | None:
        if obj is None:
            return None
        # Local import: the exhibits app depends on users for its roles.
        from showcase.exhibits.models import Exhibit

        if isinstance(obj, Exhibit):
            return obj.pk
        exhibit_id = getattr(obj, "exhibit_id", None)
        if exhibit_id:
            return exhibit_id
        logger.debug("Cannot resolve exhibit for permission check on %r", obj)
        return None
