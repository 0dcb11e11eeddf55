"""Bulk pantry editing.

A ``PantryEditSession`` holds the pantry as loaded (the original) next to a
working copy the user edits freely. ``reconcile`` diffs the two into the
smallest create/update/delete set and ``apply_changes`` pushes that set to a
pantry store: every deletion first, then creates, then updates, so a stale
update can never bring a deleted row back.

The store is anything with ``get_all()``, ``add(data)``, ``update(id, data)``
and ``delete(id)``; ``crud.PantryStore`` is the database-backed one.
"""
import logging
from typing import Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, Union

from .schemas import (
    CommitResult,
    ExistingIngredient,
    Ingredient,
    IngredientCreate,
    IngredientUpdate,
    NewIngredient,
    OperationFailure,
    PantryChanges,
)

logger = logging.getLogger(__name__)

DIFF_FIELDS = ("name", "quantity", "unit", "category", "in_stock", "expiry_date")

Entry = Union[ExistingIngredient, NewIngredient]


def enforce_stock_rule(entry):
    """Out of stock means nothing left and nothing to expire."""
    if entry.in_stock:
        return entry
    return entry.model_copy(update={"quantity": 0, "expiry_date": None})


def _fields(entry) -> dict:
    return {f: getattr(entry, f) for f in DIFF_FIELDS}


def differs(original: Ingredient, entry) -> bool:
    return _fields(original) != _fields(entry)


def reconcile(
    original: Sequence[Ingredient],
    working: Mapping[Hashable, Entry],
    deleted: Iterable[Hashable] = (),
) -> PantryChanges:
    deleted = set(deleted)
    by_id = {i.id: i for i in original}

    to_delete = [i.id for i in original if i.id in deleted]
    to_create = [
        IngredientCreate(**_fields(e))
        for e in working.values()
        if isinstance(e, NewIngredient) and e.key not in deleted
    ]
    edits = {
        e.id: e
        for e in working.values()
        if isinstance(e, ExistingIngredient) and e.id not in deleted
    }
    to_update = [
        IngredientUpdate(id=i.id, data=IngredientCreate(**_fields(edits[i.id])))
        for i in original
        if i.id in edits and differs(by_id[i.id], edits[i.id])
    ]
    return PantryChanges(to_create=to_create, to_update=to_update, to_delete=to_delete)


def has_changes(
    original: Sequence[Ingredient],
    working: Mapping[Hashable, Entry],
    deleted: Iterable[Hashable] = (),
) -> bool:
    if set(deleted):
        return True
    by_id = {i.id: i for i in original}
    for entry in working.values():
        if isinstance(entry, NewIngredient):
            return True
        if entry.id in by_id and differs(by_id[entry.id], entry):
            return True
    return False


def apply_changes(store, changes: PantryChanges, create_keys: Optional[Sequence] = None) -> CommitResult:
    """Push a change set to the store, recording each failed call.

    Nothing is retried here. A call that raises or returns False ends up in
    ``result.failures`` and the remaining calls still run.
    """
    result = CommitResult()
    if create_keys is None:
        create_keys = [c.name for c in changes.to_create]

    def failed(operation, key, error):
        logger.warning("pantry %s failed for %r: %s", operation, key, error)
        result.failures.append(OperationFailure(operation=operation, key=key, error=str(error)))

    for ingredient_id in changes.to_delete:
        try:
            if store.delete(ingredient_id):
                result.deleted.append(ingredient_id)
            else:
                failed("delete", ingredient_id, "not found")
        except Exception as exc:
            failed("delete", ingredient_id, exc)

    for key, data in zip(create_keys, changes.to_create):
        try:
            result.created.append(store.add(data))
        except Exception as exc:
            failed("create", key, exc)

    for update in changes.to_update:
        try:
            if store.update(update.id, update.data):
                result.updated.append(update.id)
            else:
                failed("update", update.id, "not found")
        except Exception as exc:
            failed("update", update.id, exc)

    logger.info(
        "pantry commit: %d deleted, %d created, %d updated, %d failed",
        len(result.deleted), len(result.created), len(result.updated), len(result.failures),
    )
    return result


class PantryEditSession:
    def __init__(self, original: Sequence[Ingredient]):
        self.reset(original)

    def reset(self, original: Sequence[Ingredient]):
        self.original: List[Ingredient] = list(original)
        self.working: Dict[Hashable, Entry] = {
            i.id: ExistingIngredient(**i.model_dump()) for i in self.original
        }
        self.deleted = set()

    def add_row(self, **fields) -> NewIngredient:
        entry = NewIngredient(**fields)
        self.working[entry.key] = entry
        return entry

    def edit(self, key, **changes) -> Entry:
        entry = self.working[key].model_copy(update=changes)
        # the rule has to hold before anything diffs against the working copy
        entry = enforce_stock_rule(entry)
        self.working[key] = entry
        return entry

    def set_in_stock(self, key, in_stock: bool) -> Entry:
        return self.edit(key, in_stock=in_stock)

    def delete(self, key):
        entry = self.working.pop(key)
        # unsaved rows just disappear
        if isinstance(entry, ExistingIngredient):
            self.deleted.add(key)

    def changes(self) -> PantryChanges:
        return reconcile(self.original, self.working, self.deleted)

    def has_changes(self) -> bool:
        return has_changes(self.original, self.working, self.deleted)

    def commit(self, store) -> CommitResult:
        """Apply pending changes and reload the original from the store.

        Edits whose store call failed stay pending so the next commit
        retries just those.
        """
        if not self.has_changes():
            return CommitResult()
        drafts = [
            e for e in self.working.values()
            if isinstance(e, NewIngredient) and e.key not in self.deleted
        ]
        result = apply_changes(store, self.changes(), create_keys=[d.key for d in drafts])

        previous = self.working
        failed = {(f.operation, f.key) for f in result.failures}
        self.reset(store.get_all())
        for draft in drafts:
            if ("create", draft.key) in failed:
                self.working[draft.key] = draft
        for op, key in failed:
            if key not in self.working:
                continue
            if op == "update":
                self.working[key] = previous[key]
            elif op == "delete":
                self.delete(key)
        return result
