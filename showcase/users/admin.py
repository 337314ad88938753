from django.contrib import admin
from django.contrib.auth import admin as auth_admin
from django.utils.translation import gettext_lazy as _

from showcase.users.models import ExhibitRole
from showcase.users.models import User


@admin.register(User)
class UserAdmin(auth_admin.UserAdmin):
    fieldsets = (
        (None, {"fields": ("username", "password")}),
        (_("Personal info"), {"fields": ("name", "email")}),
        (
            _("Permissions"),
            {
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                ),
            },
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined")}),
    )
    list_display = ["username", "name", "is_superuser"]
    search_fields = ["name", "username", "email"]
    ordering = ["username"]


@admin.register(ExhibitRole)
class ExhibitRoleAdmin(admin.ModelAdmin):
    list_display = ["user", "exhibit", "role"]
    list_filter = ["role"]
    search_fields = ["user__username", "user__name", "exhibit__title"]
