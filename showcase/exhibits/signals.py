from __future__ import annotations

from django.db.models.signals import post_save
from django.dispatch import receiver

from showcase.exhibits.models import Exhibit


@receiver(post_save, sender=Exhibit)
def initialize_exhibit(sender, instance: Exhibit, created: bool, raw: bool, **kwargs):  # noqa: FBT001
    # Fixture loading (raw) brings its own related rows.
    if not created or raw:
        return
    instance.initialize_defaults()
