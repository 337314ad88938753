import contextlib

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class ExhibitsConfig(AppConfig):
    name = "showcase.exhibits"
    verbose_name = _("Exhibits")
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        with contextlib.suppress(ImportError):
            import showcase.exhibits.signals  # noqa: F401
        import showcase.exhibits.checks  # noqa: F401
