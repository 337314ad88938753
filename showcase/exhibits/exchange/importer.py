"""
Import an exhibit document into an existing exhibit.

Import runs in two phases:

1. ``prepare`` parses the whole document without writing anything. Every
   entry is matched against the target exhibit's rows (see ``reconcile``),
   validated with the export serializers, and its embedded files are decoded.
   Any problem raises ``ImportValidationError`` naming the entry.
2. ``apply`` writes the prepared changes inside one transaction. A failure
   there rolls back every row, and files written by the failed import are
   removed again.

Import only adds and updates. Rows the document does not mention are left
alone, and fields an entry omits keep their stored values.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from functools import partial
from typing import Any

from django.apps import apps
from django.db import transaction

from showcase.exhibits.exceptions import ImportValidationError
from showcase.exhibits.exchange import manifest
from showcase.exhibits.exchange.files import EmbeddedFile
from showcase.exhibits.exchange.files import store_embedded_file
from showcase.exhibits.exchange.manifest import EntityManifest
from showcase.exhibits.exchange.reconcile import ChangeAction
from showcase.exhibits.exchange.reconcile import PlannedChange
from showcase.exhibits.exchange.reconcile import reconcile
from showcase.exhibits.exchange.serializers import COLLECTION_SERIALIZERS
from showcase.exhibits.exchange.serializers import ExhibitScalarSerializer
from showcase.exhibits.exchange.serializers import HomePageExportSerializer
from showcase.exhibits.exchange.serializers import SearchConfigurationExportSerializer
from showcase.exhibits.models import Exhibit
from showcase.exhibits.models import HomePage
from showcase.exhibits.models import SearchConfiguration
from showcase.exhibits.tagging import find_or_create_tag

logger = logging.getLogger(__name__)

# Feature pages are flattened before matching; each flattened entry remembers
# which entry it was nested under.
_PARENT_KEY = "_parent"


def _identity_value(name: str, value) -> str | None:
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return str(value)
    value = str(value).strip()
    if name == "uid":
        try:
            return str(uuid.UUID(value))
        except ValueError:
            return value
    return value or None


def row_identity(entity: EntityManifest, row) -> tuple[str | None, ...]:
    """Identity key of a stored row, e.g. ``("all-exhibit-items",)``."""
    return tuple(_identity_value(name, getattr(row, name)) for name in entity.identity)


def fragment_identity(
    entity: EntityManifest,
    fragment: Mapping,
    defaults: Mapping[str, Any] | None = None,
) -> tuple | None:
    """
    Identity key of a document entry, or None when any part is missing.

    ``defaults`` fill identity parts the entry omits, so an entry without
    ``context`` matches a stored tagging whose context is the default one.
    """
    values = []
    for name in entity.identity:
        raw = fragment.get(name)
        if raw is None and defaults:
            raw = defaults.get(name)
        value = _identity_value(name, raw)
        if value is None:
            return None
        values.append(value)
    return tuple(values)


def identity_defaults(entity: EntityManifest, model) -> dict[str, Any]:
    """Static model defaults of ``entity``'s identity fields."""
    defaults = {}
    for name in entity.identity:
        model_field = model._meta.get_field(name)
        if model_field.has_default() and not callable(model_field.default):
            defaults[name] = model_field.default
    return defaults


def _first_message(errors) -> str:
    value = errors
    while isinstance(value, (dict, list)):
        if not value:
            return "Invalid entry."
        value = next(iter(value.values())) if isinstance(value, dict) else value[0]
    return str(value)


def _join_path(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


@dataclass
class PreparedEntry:
    path: str
    instance: Any | None
    values: dict[str, Any]
    files: dict[str, EmbeddedFile] = field(default_factory=dict)
    # Matching token for this entry and, for nested feature pages, its parent's.
    token: Any = None
    parent: Any = None

    @property
    def action(self) -> ChangeAction:
        return ChangeAction.CREATE if self.instance is None else ChangeAction.UPDATE


@dataclass
class PreparedImport:
    exhibit: PreparedEntry | None = None
    search_configuration: PreparedEntry | None = None
    home_page: PreparedEntry | None = None
    collections: dict[str, list[PreparedEntry]] = field(default_factory=dict)


class ExhibitImporter:
    """
    Applies an exhibit document to ``exhibit``.

    The target may be the exhibit the document was exported from or any
    other exhibit; entries are matched by their identity keys, never by
    database ids.
    """

    def __init__(self, exhibit: Exhibit):
        self.exhibit = exhibit
        self.summary: dict[str, dict[str, int]] = {}
        self._written_files: list[tuple[Any, str]] = []

    def run(self, document) -> Exhibit:
        prepared = self.prepare(document)
        try:
            with transaction.atomic():
                self.apply(prepared)
        except Exception:
            self._discard_written_files()
            raise
        self.exhibit.refresh_from_db()
        logger.info(
            "Imported document into exhibit %s: %s",
            self.exhibit.slug,
            self.summary,
        )
        return self.exhibit

    # Parse phase

    def prepare(self, document) -> PreparedImport:
        if not isinstance(document, Mapping):
            msg = "An exhibit document must be a JSON object."
            raise ImportValidationError(msg)
        self._check_format_version(document)

        prepared = PreparedImport()
        prepared.exhibit = self._prepare_exhibit(document)
        prepared.search_configuration = self._prepare_singleton(
            document,
            manifest.SEARCH_CONFIGURATION,
            SearchConfigurationExportSerializer,
            SearchConfiguration.objects.filter(exhibit=self.exhibit).first(),
        )
        for entity in manifest.COLLECTIONS:
            fragments = self._collection_fragments(document, entity)
            prepared.collections[entity.document_key] = self._prepare_collection(
                entity,
                fragments,
            )
        prepared.home_page = self._prepare_singleton(
            document,
            manifest.HOME_PAGE,
            HomePageExportSerializer,
            self.exhibit.home_page,
        )
        return prepared

    def _check_format_version(self, document: Mapping) -> None:
        version = document.get(manifest.FORMAT_VERSION_KEY, manifest.EXPORT_FORMAT_VERSION)
        if (
            isinstance(version, bool)
            or not isinstance(version, int)
            or not 1 <= version <= manifest.EXPORT_FORMAT_VERSION
        ):
            msg = f"Unsupported format_version {version!r}."
            raise ImportValidationError(msg, path=manifest.FORMAT_VERSION_KEY)

    def _validate(self, serializer_class, entity, instance, data, path):
        serializer = serializer_class(
            instance=instance,
            data=data,
            partial=instance is not None,
        )
        if not serializer.is_valid():
            errors = serializer.errors
            if len(errors) == 1 and next(iter(errors)) in serializer.fields:
                path = _join_path(path, next(iter(errors)))
            raise ImportValidationError(_first_message(errors), path=path, errors=errors)
        values = dict(serializer.validated_data)
        files = {}
        for name in entity.file_fields:
            # None means "leave the stored file alone".
            embedded = values.pop(name, None)
            if embedded is not None:
                files[name] = embedded
        return values, files

    def _prepare_exhibit(self, document: Mapping) -> PreparedEntry:
        data = {
            name: document[name]
            for name in manifest.EXHIBIT.exported_fields
            if name in document
        }
        values, files = self._validate(
            ExhibitScalarSerializer,
            manifest.EXHIBIT,
            self.exhibit,
            data,
            "",
        )
        return PreparedEntry(path="", instance=self.exhibit, values=values, files=files)

    def _prepare_singleton(self, document, entity, serializer_class, instance):
        raw = document.get(entity.document_key)
        if raw is None:
            return None
        path = entity.document_key
        if not isinstance(raw, Mapping):
            msg = f"{path} must be an object."
            raise ImportValidationError(msg, path=path)
        data = dict(raw)
        data.pop(manifest.CHILD_PAGES_KEY, None)
        values, files = self._validate(serializer_class, entity, instance, data, path)
        return PreparedEntry(path=path, instance=instance, values=values, files=files)

    def _collection_fragments(self, document: Mapping, entity: EntityManifest):
        key = entity.document_key
        raw = document.get(key)
        if raw is None:
            return []
        if entity is manifest.FEATURE_PAGES:
            return self._flatten_feature_pages(raw)
        if not isinstance(raw, list):
            msg = f"{key} must be a list."
            raise ImportValidationError(msg, path=key)
        fragments = []
        for index, item in enumerate(raw):
            if not isinstance(item, Mapping):
                msg = "Entries must be objects."
                raise ImportValidationError(msg, path=f"{key}[{index}]")
            if entity is manifest.CONTACT_EMAILS and not str(item.get("email") or "").strip():
                logger.debug("Skipping contact email entry %d with no address", index)
                continue
            fragments.append(dict(item))
        return fragments

    def _flatten_feature_pages(self, raw) -> list[dict]:
        """
        Flatten the ``child_pages`` tree into one list, parents first.

        Each entry records its parent's token: the parent's identity key, or
        its position in the flat list when the parent has no slug.
        """
        flat: list[dict] = []

        def visit(items, parent_token, path):
            if not isinstance(items, list):
                msg = f"{path} must be a list."
                raise ImportValidationError(msg, path=path)
            for index, item in enumerate(items):
                item_path = f"{path}[{index}]"
                if not isinstance(item, Mapping):
                    msg = "Entries must be objects."
                    raise ImportValidationError(msg, path=item_path)
                fragment = dict(item)
                children = fragment.pop(manifest.CHILD_PAGES_KEY, None)
                fragment[_PARENT_KEY] = parent_token
                token = fragment_identity(manifest.FEATURE_PAGES, fragment) or (
                    "#",
                    len(flat),
                )
                flat.append(fragment)
                if children is not None:
                    visit(children, token, f"{item_path}.{manifest.CHILD_PAGES_KEY}")

        visit(raw, None, manifest.FEATURE_PAGES.document_key)
        return flat

    def _entry_path(self, entity: EntityManifest, change: PlannedChange) -> str:
        if change.key is None:
            return f"{entity.document_key}[{change.index}]"
        label = ",".join(
            f"{name}={value}"
            for name, value in zip(entity.identity, change.key, strict=True)
        )
        return f"{entity.document_key}[{label}]"

    def _prepare_collection(self, entity, fragments) -> list[PreparedEntry]:
        model = apps.get_model(entity.model)
        existing = model.objects.filter(exhibit=self.exhibit)
        if entity is manifest.TAGGINGS:
            existing = existing.select_related("tag")
        plan = reconcile(
            existing,
            fragments,
            key=partial(row_identity, entity),
            fragment_key=partial(
                fragment_identity,
                entity,
                defaults=identity_defaults(entity, model),
            ),
        )
        serializer_class = COLLECTION_SERIALIZERS[entity.document_key]
        entries = []
        positions: dict[Any, int] = {}
        for position, change in enumerate(plan.changes):
            path = self._entry_path(entity, change)
            data = dict(change.data)
            parent = data.pop(_PARENT_KEY, None)
            token = change.key if change.key is not None else ("#", change.index)
            if parent is not None and positions.get(parent, position) >= position:
                msg = "Feature pages must be nested under an earlier page."
                raise ImportValidationError(msg, path=path)
            values, files = self._validate(
                serializer_class,
                entity,
                change.instance,
                data,
                path,
            )
            entries.append(
                PreparedEntry(
                    path=path,
                    instance=change.instance,
                    values=values,
                    files=files,
                    token=token,
                    parent=parent,
                ),
            )
            positions[token] = position
        logger.debug(
            "Planned %s: %d create, %d update, %d untouched",
            entity.document_key,
            len(plan.creates),
            len(plan.updates),
            len(plan.untouched),
        )
        return entries

    # Apply phase

    def apply(self, prepared: PreparedImport) -> None:
        if prepared.exhibit is not None:
            self._save_entry(manifest.EXHIBIT, prepared.exhibit, Exhibit, {})
        if prepared.search_configuration is not None:
            self._save_entry(
                manifest.SEARCH_CONFIGURATION,
                prepared.search_configuration,
                SearchConfiguration,
                {},
            )

        saved_pages: dict[Any, Any] = {}
        for entity in manifest.COLLECTIONS:
            model = apps.get_model(entity.model)
            for entry in prepared.collections.get(entity.document_key, []):
                extra: dict[str, Any] = {}
                if entity is manifest.FEATURE_PAGES:
                    extra["parent"] = (
                        saved_pages[entry.parent] if entry.parent is not None else None
                    )
                if entity is manifest.TAGGINGS and "tag" in entry.values:
                    extra["tag"] = find_or_create_tag(
                        entry.values["tag"]["name"],
                        path=_join_path(entry.path, "tag"),
                    )
                instance = self._save_entry(entity, entry, model, extra)
                if entity is manifest.FEATURE_PAGES:
                    saved_pages[entry.token] = instance

        if prepared.home_page is not None:
            self._save_entry(manifest.HOME_PAGE, prepared.home_page, HomePage, {})

    def _save_entry(self, entity, entry: PreparedEntry, model, extra: dict):
        instance = entry.instance
        if instance is None:
            instance = model(exhibit=self.exhibit)
        for name, value in {**entry.values, **extra}.items():
            setattr(instance, name, value)
        instance.save()

        changed = []
        for name, embedded in entry.files.items():
            if store_embedded_file(instance, name, embedded):
                changed.append(name)
                stored = getattr(instance, name)
                self._written_files.append((stored.storage, stored.name))
        if changed:
            instance.save(update_fields=changed)

        counts = self.summary.setdefault(
            entity.document_key,
            {"created": 0, "updated": 0},
        )
        counts["created" if entry.action is ChangeAction.CREATE else "updated"] += 1
        return instance

    def _discard_written_files(self) -> None:
        for storage, name in self._written_files:
            logger.info("Removing %s written by a failed import", name)
            storage.delete(name)
        self._written_files.clear()


def import_exhibit(document, exhibit: Exhibit) -> Exhibit:
    """Apply ``document`` to ``exhibit``. All-or-nothing."""
    return ExhibitImporter(exhibit).run(document)
