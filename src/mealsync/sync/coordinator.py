"""Optimistic single-item mutations and their reconciliation with the server."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, TypeVar, Union

from mealsync.client.base import RemoteListService
from mealsync.client.errors import RemoteError, UnauthorizedError
from mealsync.metrics import MUTATIONS
from mealsync.models.shopping import FoodStub, ShoppingListItem, UnitStub
from mealsync.sync.results import MutationResult, Outcome
from mealsync.sync.store import ItemNotFoundError, ListItemStore

logger = logging.getLogger(__name__)

StubT = TypeVar("StubT", bound=Union[FoodStub, UnitStub])

MISSING_NAME_MESSAGE = "Item name or food is required."
INVALID_QUANTITY_MESSAGE = "Quantity must be greater than 0."


class ItemValidationError(ValueError):
    """Raised before any network call when an item would be invalid on the server."""


def validate_item_fields(note: Optional[str], quantity: Optional[float], food_id: Optional[str]) -> str:
    """Return the trimmed note or raise :class:`ItemValidationError`."""

    trimmed = (note or "").strip()
    if not trimmed and food_id is None:
        raise ItemValidationError(MISSING_NAME_MESSAGE)
    if quantity is None or quantity <= 0:
        raise ItemValidationError(INVALID_QUANTITY_MESSAGE)
    return trimmed


def _describe(error: Exception) -> str:
    return str(error) or error.__class__.__name__


class SyncCoordinator:
    """Apply a mutation to the store, persist it, then confirm, roll back or reload.

    Each mutation walks ``LocalApplied -> Persisting`` and ends ``Reconciled``, ``RolledBack``
    or ``ReloadedFromServer``; the returned :class:`MutationResult` names the end state.
    Failures never propagate to the caller: they land in the store's ``last_error``.
    """

    def __init__(self, store: ListItemStore, remote: RemoteListService) -> None:
        self._store = store
        self._remote = remote
        self._in_flight: Dict[str, asyncio.Task] = {}

    @property
    def store(self) -> ListItemStore:
        return self._store

    @property
    def _log_extra(self) -> dict[str, str]:
        return {"list_id": self._store.list_id}

    async def reload(self, *, clear_error: bool = True) -> bool:
        """Replace local state with the server's copy of the list."""

        if clear_error:
            self._store.clear_error()
        try:
            detail = await self._remote.fetch_list_detail(self._store.list_id)
        except UnauthorizedError as exc:
            logger.warning("Reload of list %s rejected as unauthorized", self._store.list_id, extra=self._log_extra)
            self._store.report_error(_describe(exc))
            return False
        except RemoteError as exc:
            logger.error("Reload of list %s failed: %s", self._store.list_id, exc, extra=self._log_extra)
            self._store.report_error(f"Failed to load list details: {_describe(exc)}")
            return False

        self._store.load(detail)
        logger.debug("Loaded list %s with %d item(s)", detail.id, len(detail.list_items), extra=self._log_extra)
        return True

    async def toggle_checked(self, item_id: str, checked: bool) -> MutationResult:
        try:
            current = self._store.get(item_id)
        except ItemNotFoundError as exc:
            return self._record("toggle", MutationResult(Outcome.REJECTED, str(exc)))
        if current.checked == checked:
            return self._record("toggle", MutationResult(Outcome.NOOP))
        if not current.is_submittable:
            self._store.report_error(MISSING_NAME_MESSAGE)
            return self._record("toggle", MutationResult(Outcome.REJECTED, MISSING_NAME_MESSAGE))

        self._store.clear_error()
        prior = self._store.set_checked(item_id, checked)
        # Persist the version applied now; the item may leave the store before the task starts.
        item = self._store.get(item_id)

        # A newer intent for the same item replaces the one still in flight.
        previous = self._in_flight.get(item_id)
        if previous is not None and not previous.done():
            logger.debug("Superseding in-flight update for item %s", item_id, extra=self._log_extra)
            previous.cancel()

        task = asyncio.ensure_future(self._persist_checked(item, prior))
        self._in_flight[item_id] = task
        try:
            result = await task
        except asyncio.CancelledError:
            if self._in_flight.get(item_id) is task:
                raise
            return self._record("toggle", MutationResult(Outcome.SUPERSEDED))
        finally:
            if self._in_flight.get(item_id) is task:
                del self._in_flight[item_id]
        return self._record("toggle", result)

    async def _persist_checked(self, item: ShoppingListItem, prior: bool) -> MutationResult:
        item_id = item.id
        try:
            await self._remote.update_item(item)
        except UnauthorizedError:
            logger.info("Update of item %s unauthorized; reloading list", item_id, extra=self._log_extra)
            self._rollback_checked(item_id, prior)
            await self.reload(clear_error=False)
            return MutationResult(Outcome.RELOADED)
        except RemoteError as exc:
            message = f"Failed to update item: {_describe(exc)}"
            logger.warning("Update of item %s failed: %s", item_id, exc, extra=self._log_extra)
            self._store.report_error(message)
            self._rollback_checked(item_id, prior)
            await self.reload(clear_error=False)
            return MutationResult(Outcome.RELOADED, message)
        return MutationResult(Outcome.RECONCILED)

    def _rollback_checked(self, item_id: str, prior: bool) -> None:
        if item_id in self._store:
            self._store.set_checked(item_id, prior)

    async def add_item(
        self,
        note: str,
        quantity: float = 1.0,
        food_id: Optional[str] = None,
        unit_id: Optional[str] = None,
    ) -> MutationResult:
        try:
            trimmed = validate_item_fields(note, quantity, food_id)
        except ItemValidationError as exc:
            self._store.report_error(str(exc))
            return self._record("add", MutationResult(Outcome.REJECTED, str(exc)))

        self._store.clear_error()
        try:
            response = await self._remote.create_item(
                self._store.list_id,
                trimmed,
                quantity,
                food_id=food_id,
                unit_id=unit_id,
            )
        except RemoteError as exc:
            message = f"Failed to add item: {_describe(exc)}"
            logger.warning("Creating item on list %s failed: %s", self._store.list_id, exc, extra=self._log_extra)
            self._store.report_error(message)
            return self._record("add", MutationResult(Outcome.FAILED, message))

        if not response.created_items:
            # The server merged the request into an existing item.
            logger.info("Server returned no created item for %r; reloading", trimmed, extra=self._log_extra)
            await self.reload(clear_error=False)
            return self._record("add", MutationResult(Outcome.RELOADED))

        self._store.insert_item(response.created_items[0], at_front=True)
        return self._record("add", MutationResult(Outcome.RECONCILED))

    async def edit_item(
        self,
        item_id: str,
        note: str,
        quantity: float,
        food_id: Optional[str] = None,
        unit_id: Optional[str] = None,
        *,
        food: Optional[FoodStub] = None,
        unit: Optional[UnitStub] = None,
    ) -> MutationResult:
        """Edit an item optimistically.

        ``food`` and ``unit`` are the stubs picked for ``food_id`` and ``unit_id`` (for example from
        food search results) so the item shows their names before the server answers.
        """

        try:
            original = self._store.get(item_id)
            trimmed = validate_item_fields(note, quantity, food_id)
        except (ItemNotFoundError, ItemValidationError) as exc:
            self._store.report_error(str(exc))
            return self._record("edit", MutationResult(Outcome.REJECTED, str(exc)))

        self._store.clear_error()
        edited = _apply_edit(original, trimmed, quantity, food_id, unit_id, food=food, unit=unit)
        self._store.replace_item(edited)

        try:
            confirmed = await self._remote.update_item(edited)
        except RemoteError as exc:
            message = f"Failed to update item: {_describe(exc)}"
            logger.warning("Editing item %s failed: %s", item_id, exc, extra=self._log_extra)
            if item_id in self._store:
                self._store.replace_item(original)
            self._store.report_error(message)
            return self._record("edit", MutationResult(Outcome.ROLLED_BACK, message))

        if confirmed is not None and item_id in self._store:
            self._store.replace_item(confirmed)
        return self._record("edit", MutationResult(Outcome.RECONCILED))

    @staticmethod
    def _record(operation: str, result: MutationResult) -> MutationResult:
        MUTATIONS.labels(operation=operation, outcome=result.outcome.value).inc()
        return result


def _resolve_stub(
    stub_id: Optional[str],
    picked: Optional[StubT],
    current_id: Optional[str],
    current: Optional[StubT],
) -> Optional[StubT]:
    if stub_id is None:
        return None
    if picked is not None and picked.id == stub_id:
        return picked
    return current if current_id == stub_id else None


def _apply_edit(
    original: ShoppingListItem,
    note: str,
    quantity: float,
    food_id: Optional[str],
    unit_id: Optional[str],
    *,
    food: Optional[FoodStub] = None,
    unit: Optional[UnitStub] = None,
) -> ShoppingListItem:
    # No display text: display_name derives it from the edited fields.
    return original.model_copy(
        update={
            "note": note,
            "quantity": quantity,
            "food_id": food_id,
            "food": _resolve_stub(food_id, food, original.food_id, original.food),
            "unit_id": unit_id,
            "unit": _resolve_stub(unit_id, unit, original.unit_id, original.unit),
            "display": None,
        }
    )


__all__ = ["ItemValidationError", "SyncCoordinator", "validate_item_fields"]
