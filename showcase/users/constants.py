from django.db import models
from django.utils.translation import gettext_lazy as _


class RoleCode(models.TextChoices):
    """
    Roles a user can hold within a single exhibit.
    """

    # Full control of the exhibit: settings, roles, import/export, deletion.
    ADMIN = "admin", _("Admin")

    # Curates content: pages, browse categories, search configuration.
    CURATOR = "curator", _("Curator")


class PermissionCode(models.TextChoices):
    """
    Canonical permission codes used by the exhibit-scoped RBAC layer.
    """

    EXHIBIT_VIEW = "exhibit_view", _("View unpublished exhibit content")
    EXHIBIT_CURATE = "exhibit_curate", _("Curate exhibit pages and searches")
    EXHIBIT_MANAGE = "exhibit_manage", _("Manage exhibit settings and roles")
    EXHIBIT_CREATE = "exhibit_create", _("Create exhibits")
