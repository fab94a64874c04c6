"""Remote list service interface consumed by the sync engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, Sequence

from mealsync.models.mealplan import MealPlanEntry
from mealsync.models.shopping import (
    FoodStub,
    ItemsCollectionResponse,
    ShoppingList,
    ShoppingListDetail,
    ShoppingListItem,
    ShoppingListPage,
    UnitStub,
)


class RemoteListService(ABC):
    """Network operations for shopping lists, items and meal-plan queries.

    Every method may raise :class:`~mealsync.client.errors.UnauthorizedError` or another
    :class:`~mealsync.client.errors.RemoteError`.
    """

    @abstractmethod
    async def fetch_list_detail(self, list_id: str) -> ShoppingListDetail:
        """Return the list with all its items and recipe references."""

    @abstractmethod
    async def create_item(
        self,
        list_id: str,
        note: str,
        quantity: float,
        food_id: Optional[str] = None,
        unit_id: Optional[str] = None,
    ) -> ItemsCollectionResponse:
        """Create an item; only ``created_items`` of the response is consulted."""

    @abstractmethod
    async def update_item(self, item: ShoppingListItem) -> Optional[ShoppingListItem]:
        """Persist the complete field set of ``item`` and return the server's copy."""

    @abstractmethod
    async def delete_item(self, item_id: str) -> None:
        """Delete a single item."""

    @abstractmethod
    async def fetch_meal_plan_entries(self, start: date, end: date) -> list[MealPlanEntry]:
        """Return every meal-plan entry scheduled between ``start`` and ``end`` inclusive."""

    @abstractmethod
    async def bulk_add_recipes(self, list_id: str, recipe_ids: Sequence[str]) -> None:
        """Add the ingredients of every recipe to the list in one request."""

    @abstractmethod
    async def fetch_lists(self, page: int = 1, per_page: int = 50) -> ShoppingListPage:
        """Return one page of list summaries."""

    @abstractmethod
    async def create_list(self, name: Optional[str]) -> ShoppingListDetail:
        """Create a list."""

    @abstractmethod
    async def update_list(self, shopping_list: ShoppingList, name: Optional[str]) -> ShoppingListDetail:
        """Rename a list."""

    @abstractmethod
    async def delete_list(self, list_id: str) -> None:
        """Delete a list."""

    @abstractmethod
    async def search_foods(self, query: str, page: int = 1, per_page: int = 50) -> list[FoodStub]:
        """Search foods by name."""

    @abstractmethod
    async def fetch_units(self, page: int = 1, per_page: int = 500) -> list[UnitStub]:
        """Return measurement units for item forms."""
