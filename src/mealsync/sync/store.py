"""In-memory state of one open shopping list."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from mealsync.models.shopping import ShoppingList, ShoppingListDetail, ShoppingListItem

logger = logging.getLogger(__name__)


class ItemNotFoundError(LookupError):
    def __init__(self, item_id: str) -> None:
        super().__init__(f"Shopping list item {item_id} not found")
        self.item_id = item_id


@dataclass(frozen=True)
class RemovedItem:
    """A removed item and the index it occupied, enough to put it back."""

    item: ShoppingListItem
    index: int


class StoreState(BaseModel):
    """Immutable snapshot published after every store mutation."""

    list_id: str
    shopping_list: Optional[ShoppingList] = None
    items: tuple[ShoppingListItem, ...] = ()
    recipe_names: dict[str, str] = Field(default_factory=dict)
    last_error: Optional[str] = None
    version: int = 0

    model_config = ConfigDict(frozen=True)

    @property
    def has_unchecked_items(self) -> bool:
        return any(not item.checked for item in self.items)

    @property
    def checked_items(self) -> tuple[ShoppingListItem, ...]:
        return tuple(item for item in self.items if item.checked)

    def item_ids(self) -> list[str]:
        return [item.id for item in self.items]


StateListener = Callable[[StoreState], None]


class ListItemStore:
    """Owns one list's items and keeps them ordered unchecked-first.

    Items carry a baseline rank (server order, adjusted by local inserts). Sorting by
    ``(checked, rank)`` keeps relative order stable among items with the same checked state, so
    toggling an item back and forth returns it to the slot it started in.
    """

    def __init__(self, list_id: str) -> None:
        self._list_id = list_id
        self._list: Optional[ShoppingList] = None
        self._items: List[ShoppingListItem] = []
        self._ranks: dict[str, float] = {}
        self._recipe_names: dict[str, str] = {}
        self._last_error: Optional[str] = None
        self._version = 0
        self._listeners: List[StateListener] = []

    @property
    def list_id(self) -> str:
        return self._list_id

    @property
    def items(self) -> tuple[ShoppingListItem, ...]:
        return tuple(self._items)

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def get(self, item_id: str) -> ShoppingListItem:
        return self._items[self.index_of(item_id)]

    def index_of(self, item_id: str) -> int:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        raise ItemNotFoundError(item_id)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ranks

    def snapshot(self) -> StoreState:
        return StoreState(
            list_id=self._list_id,
            shopping_list=self._list,
            items=tuple(self._items),
            recipe_names=dict(self._recipe_names),
            last_error=self._last_error,
            version=self._version,
        )

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for state snapshots and return a function that removes it."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def recipe_names_for(self, item: ShoppingListItem) -> list[str]:
        """Cached names of the recipes that contributed ``item``."""

        names: list[str] = []
        for reference in item.recipe_references:
            name = self._recipe_names.get(reference.recipe_id)
            if name and name not in names:
                names.append(name)
        return names

    def load(self, detail: ShoppingListDetail) -> None:
        """Replace the whole state with a freshly fetched list."""

        if detail.id != self._list_id:
            raise ValueError(f"Cannot load list {detail.id} into the store for list {self._list_id}")

        items: List[ShoppingListItem] = []
        ranks: dict[str, float] = {}
        for item in detail.list_items:
            if item.id in ranks:
                logger.warning("Dropping duplicate item id=%s from list %s", item.id, detail.id)
                continue
            ranks[item.id] = float(len(items))
            items.append(item)

        self._list = detail.summary()
        self._items = items
        self._ranks = ranks
        self._recipe_names = {
            reference.recipe_id: reference.recipe_name
            for reference in detail.recipe_references
            if reference.recipe_name
        }
        self._sort()
        self._publish()

    def insert_item(self, item: ShoppingListItem, at_front: bool = True) -> None:
        self._check_owner(item)
        self._discard(item.id)
        if not self._ranks:
            rank = 0.0
        elif at_front:
            rank = min(self._ranks.values()) - 1
        else:
            rank = max(self._ranks.values()) + 1
        self._ranks[item.id] = rank
        if at_front:
            self._items.insert(0, item)
        else:
            self._items.append(item)
        self._sort()
        self._publish()

    def set_checked(self, item_id: str, checked: bool) -> bool:
        """Set the checked flag and return the prior value; unchanged items are left alone."""

        index = self.index_of(item_id)
        current = self._items[index]
        prior = current.checked
        if prior == checked:
            return prior
        self._items[index] = current.model_copy(update={"checked": checked})
        self._sort()
        self._publish()
        return prior

    def replace_item(self, item: ShoppingListItem) -> ShoppingListItem:
        """Swap in a new version of an existing item and return the previous one."""

        index = self.index_of(item.id)
        previous = self._items[index]
        if previous.shopping_list_id != item.shopping_list_id:
            raise ValueError(f"Item {item.id} cannot move to list {item.shopping_list_id}")
        self._items[index] = item
        self._sort()
        self._publish()
        return previous

    def remove(self, item_ids: Iterable[str]) -> list[RemovedItem]:
        """Remove items, returning each with its original index in request order."""

        requested = list(dict.fromkeys(item_ids))
        wanted = set(requested)
        removed: dict[str, RemovedItem] = {}
        kept: List[ShoppingListItem] = []
        for index, item in enumerate(self._items):
            if item.id in wanted:
                removed[item.id] = RemovedItem(item=item, index=index)
            else:
                kept.append(item)

        if not removed:
            return []

        self._items = kept
        for item_id in removed:
            self._ranks.pop(item_id, None)
        self._publish()
        return [removed[item_id] for item_id in requested if item_id in removed]

    def reinsert(self, item: ShoppingListItem, index: int) -> int:
        """Put a removed item back at ``index`` clamped to the current bounds.

        Returns the clamped index. The item then moves to its checked region if needed.
        """

        self._check_owner(item)
        self._discard(item.id)
        position = max(0, min(index, len(self._items)))
        if not self._items:
            rank = 0.0
        elif position == 0:
            rank = self._ranks[self._items[0].id] - 1
        elif position == len(self._items):
            rank = self._ranks[self._items[-1].id] + 1
        else:
            before = self._ranks[self._items[position - 1].id]
            after = self._ranks[self._items[position].id]
            rank = (before + after) / 2 if before < after else before
        self._ranks[item.id] = rank
        self._items.insert(position, item)
        self._sort()
        self._publish()
        return position

    def report_error(self, message: str) -> None:
        self._last_error = message
        self._publish()

    def clear_error(self) -> None:
        if self._last_error is None:
            return
        self._last_error = None
        self._publish()

    def _check_owner(self, item: ShoppingListItem) -> None:
        if item.shopping_list_id != self._list_id:
            raise ValueError(f"Item {item.id} belongs to list {item.shopping_list_id}, not {self._list_id}")

    def _discard(self, item_id: str) -> None:
        if item_id in self._ranks:
            self._items = [existing for existing in self._items if existing.id != item_id]
            del self._ranks[item_id]

    def _sort(self) -> None:
        self._items.sort(key=lambda item: (item.checked, self._ranks[item.id]))

    def _publish(self) -> None:
        self._version += 1
        if not self._listeners:
            return
        state = self.snapshot()
        for listener in list(self._listeners):
            listener(state)


__all__ = ["ItemNotFoundError", "ListItemStore", "RemovedItem", "StoreState", "StateListener"]
