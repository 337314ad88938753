"""
System checks for the exhibit export manifests.

A manifest naming a field its model lacks would only fail when someone
exports an exhibit, so it is checked at startup instead.
"""

from django.apps import apps
from django.core import checks
from django.core.exceptions import FieldDoesNotExist
from django.db import models

from showcase.exhibits.exchange.manifest import ALL_MANIFESTS


@checks.register(checks.Tags.models)
def check_export_manifests(app_configs=None, **kwargs):
    errors = []
    for entity in ALL_MANIFESTS:
        model = apps.get_model(entity.model)
        for name in (*entity.exported_fields, *entity.identity):
            try:
                model_field = model._meta.get_field(name)
            except FieldDoesNotExist:
                errors.append(
                    checks.Error(
                        f"Export manifest '{entity.document_key}' names unknown "
                        f"field '{name}'.",
                        obj=model,
                        id="exhibits.E001",
                    ),
                )
                continue
            if name in entity.file_fields and not isinstance(
                model_field,
                models.FileField,
            ):
                errors.append(
                    checks.Error(
                        f"Export manifest '{entity.document_key}' lists '{name}' "
                        "as a file field but it is not a FileField.",
                        obj=model,
                        id="exhibits.E002",
                    ),
                )
    return errors
