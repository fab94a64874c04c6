"""In-memory remote list service and model builders shared by the test suite."""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from mealsync.client.base import RemoteListService
from mealsync.client.errors import RemoteError, RequestFailedError
from mealsync.models.mealplan import MealPlanEntry
from mealsync.models.shopping import (
    FoodStub,
    ItemsCollectionResponse,
    RecipeReference,
    ShoppingList,
    ShoppingListDetail,
    ShoppingListItem,
    ShoppingListPage,
    UnitStub,
)

LIST_ID = "list-1"


def make_item(item_id: str, checked: bool = False, note: Optional[str] = None, **fields) -> ShoppingListItem:
    payload = {
        "id": item_id,
        "shopping_list_id": fields.pop("shopping_list_id", LIST_ID),
        "checked": checked,
        "note": note if note is not None else item_id,
    }
    payload.update(fields)
    return ShoppingListItem(**payload)


def make_detail(
    items: Iterable[ShoppingListItem] = (),
    recipe_references: Sequence[RecipeReference] = (),
    list_id: str = LIST_ID,
) -> ShoppingListDetail:
    return ShoppingListDetail(
        id=list_id,
        name="Groceries",
        list_items=list(items),
        recipe_references=list(recipe_references),
    )


class FakeRemote(RemoteListService):
    """Records every call; ``fail`` makes a method raise for one key or for every call."""

    def __init__(self, detail: Optional[ShoppingListDetail] = None) -> None:
        self.detail = detail or make_detail()
        self.calls: List[Tuple[str, Optional[str]]] = []
        self.failures: Dict[Tuple[str, Optional[str]], RemoteError] = {}
        self.updated: List[ShoppingListItem] = []
        self.deleted: List[str] = []
        self.bulk_calls: List[Tuple[str, List[str]]] = []
        self.meal_plan_ranges: List[Tuple[date, date]] = []
        self.search_calls: List[str] = []
        self.entries: List[MealPlanEntry] = []
        self.foods: List[FoodStub] = []
        self.units: List[UnitStub] = []
        self.lists: List[ShoppingList] = []
        self.return_created = True
        self.update_started: Optional[asyncio.Event] = None
        self.update_gate: Optional[asyncio.Event] = None
        self._created = 0

    def fail(self, method: str, key: Optional[str] = None, error: Optional[RemoteError] = None) -> None:
        self.failures[(method, key)] = error or RequestFailedError("boom", status_code=500)

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    def _check(self, method: str, key: Optional[str] = None) -> None:
        self.calls.append((method, key))
        error = self.failures.get((method, key)) or self.failures.get((method, None))
        if error is not None:
            raise error

    async def __aenter__(self) -> "FakeRemote":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def fetch_list_detail(self, list_id: str) -> ShoppingListDetail:
        self._check("fetch_list_detail", list_id)
        return self.detail

    async def create_item(self, list_id, note, quantity, food_id=None, unit_id=None) -> ItemsCollectionResponse:
        self._check("create_item", note)
        if not self.return_created:
            return ItemsCollectionResponse()
        self._created += 1
        created = ShoppingListItem(
            id=f"new-{self._created}",
            shopping_list_id=list_id,
            note=note,
            quantity=quantity,
            food_id=food_id,
            unit_id=unit_id,
        )
        return ItemsCollectionResponse(created_items=[created])

    async def update_item(self, item: ShoppingListItem) -> Optional[ShoppingListItem]:
        if self.update_gate is not None:
            if self.update_started is not None:
                self.update_started.set()
            await self.update_gate.wait()
        self._check("update_item", item.id)
        self.updated.append(item)
        return item

    async def delete_item(self, item_id: str) -> None:
        self._check("delete_item", item_id)
        self.deleted.append(item_id)

    async def fetch_meal_plan_entries(self, start: date, end: date) -> List[MealPlanEntry]:
        self._check("fetch_meal_plan_entries")
        self.meal_plan_ranges.append((start, end))
        return list(self.entries)

    async def bulk_add_recipes(self, list_id: str, recipe_ids: Sequence[str]) -> None:
        self._check("bulk_add_recipes", list_id)
        self.bulk_calls.append((list_id, list(recipe_ids)))

    async def fetch_lists(self, page: int = 1, per_page: int = 50) -> ShoppingListPage:
        self._check("fetch_lists")
        return ShoppingListPage(items=list(self.lists), total=len(self.lists))

    async def create_list(self, name: Optional[str]) -> ShoppingListDetail:
        self._check("create_list", name)
        return ShoppingListDetail(id=f"list-{len(self.lists) + 100}", name=name)

    async def update_list(self, shopping_list: ShoppingList, name: Optional[str]) -> ShoppingListDetail:
        self._check("update_list", shopping_list.id)
        renamed = shopping_list.model_copy(update={"name": name})
        self.lists = [renamed if entry.id == renamed.id else entry for entry in self.lists]
        return ShoppingListDetail(id=renamed.id, name=name)

    async def delete_list(self, list_id: str) -> None:
        self._check("delete_list", list_id)

    async def search_foods(self, query: str, page: int = 1, per_page: int = 50) -> List[FoodStub]:
        self._check("search_foods", query)
        self.search_calls.append(query)
        return [food for food in self.foods if query.lower() in food.name.lower()]

    async def fetch_units(self, page: int = 1, per_page: int = 500) -> List[UnitStub]:
        self._check("fetch_units")
        return list(self.units)
