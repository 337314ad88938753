"""
Match incoming document entries against an existing collection.

``reconcile`` is a pure function: it reads the existing rows and the incoming
fragments and returns a plan saying which fragments create new rows and which
update an existing one. Nothing is written; the importer applies the plan
inside a transaction.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from collections.abc import Hashable
from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Generic
from typing import TypeVar

T = TypeVar("T")


class ChangeAction(enum.Enum):
    CREATE = "create"
    UPDATE = "update"


@dataclass
class PlannedChange(Generic[T]):
    action: ChangeAction
    key: Hashable | None
    data: dict[str, Any]
    instance: T | None = None
    # Position of the first fragment with this key in the document.
    index: int = 0


@dataclass
class ReconciliationPlan(Generic[T]):
    changes: list[PlannedChange[T]] = field(default_factory=list)
    # Existing rows the document does not mention; import leaves them alone.
    untouched: list[T] = field(default_factory=list)

    @property
    def creates(self) -> list[PlannedChange[T]]:
        return [c for c in self.changes if c.action is ChangeAction.CREATE]

    @property
    def updates(self) -> list[PlannedChange[T]]:
        return [c for c in self.changes if c.action is ChangeAction.UPDATE]


def reconcile(
    existing: Iterable[T],
    incoming: Iterable[dict[str, Any]],
    *,
    key: Callable[[T], Hashable],
    fragment_key: Callable[[dict[str, Any]], Hashable | None],
) -> ReconciliationPlan[T]:
    """
    Plan how ``incoming`` fragments map onto ``existing`` rows.

    A fragment whose key matches an existing row updates it; any other
    fragment creates a row. Fragments without a key (``fragment_key``
    returns None) always create. Fragments repeating a key are merged into
    one change in document order, so later values win field by field.
    """
    by_key: dict[Hashable, T] = {}
    for row in existing:
        by_key.setdefault(key(row), row)

    plan: ReconciliationPlan[T] = ReconciliationPlan()
    planned: dict[Hashable, PlannedChange[T]] = {}
    for index, fragment in enumerate(incoming):
        fragment_id = fragment_key(fragment)
        if fragment_id is not None and fragment_id in planned:
            planned[fragment_id].data.update(fragment)
            continue
        instance = by_key.get(fragment_id) if fragment_id is not None else None
        change = PlannedChange(
            action=ChangeAction.CREATE if instance is None else ChangeAction.UPDATE,
            key=fragment_id,
            data=dict(fragment),
            instance=instance,
            index=index,
        )
        plan.changes.append(change)
        if fragment_id is not None:
            planned[fragment_id] = change

    plan.untouched = [row for row_key, row in by_key.items() if row_key not in planned]
    return plan
