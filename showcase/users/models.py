from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import CharField
from django.utils.translation import gettext_lazy as _
from model_utils.models import TimeStampedModel

from showcase.users.constants import RoleCode


class User(AbstractUser):
    """
    Default custom user model for Showcase.
    """

    # First and last name do not cover name patterns around the globe
    name = CharField(_("Name of User"), blank=True, max_length=255)

    first_name = None  # type: ignore[assignment]

    last_name = None  # type: ignore[assignment]

    def __str__(self):
        return self.name or self.username

    def exhibit_roles(self) -> dict[int, str]:
        """Map exhibit id to the role code this user holds there."""
        return dict(self.exhibit_role_grants.values_list("exhibit_id", "role"))


class ExhibitRole(TimeStampedModel):
    """
    Grants a user a role within one exhibit.

    A user holds at most one role per exhibit; granting a different role
    replaces the previous one (see ``grant``).
    """

    exhibit = models.ForeignKey(
        "exhibits.Exhibit",
        on_delete=models.CASCADE,
        related_name="roles",
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="exhibit_role_grants",
    )
    role = models.CharField(
        max_length=16,
        choices=RoleCode.choices,
        default=RoleCode.CURATOR,
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["exhibit", "user"],
                name="uq_exhibit_role_exhibit_user",
            ),
        ]
        ordering = ["exhibit", "user__username"]

    def __str__(self):
        return f"{self.user} ({self.role}) @ {self.exhibit_id}"

    @classmethod
    def grant(cls, user: User, exhibit, role: RoleCode | str) -> ExhibitRole:
        grant, _ = cls.objects.update_or_create(
            exhibit=exhibit,
            user=user,
            defaults={"role": role},
        )
        return grant
