"""Wiring for one open shopping list."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional

from mealsync.client.base import RemoteListService
from mealsync.client.errors import RemoteError
from mealsync.config import Settings, get_settings
from mealsync.models.shopping import UnitStub
from mealsync.sync.bulk import BulkOperationRunner
from mealsync.sync.coordinator import SyncCoordinator
from mealsync.sync.food_search import FoodSearch
from mealsync.sync.mealplan_import import MealPlanImportMerger
from mealsync.sync.store import ListItemStore

logger = logging.getLogger(__name__)

UNITS_PAGE_SIZE = 500


class ShoppingListSession:
    """Own a single :class:`ListItemStore` and the components that mutate it."""

    def __init__(
        self,
        list_id: str,
        remote: RemoteListService,
        settings: Optional[Settings] = None,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        settings = settings or get_settings()
        self._remote = remote
        self.units: list[UnitStub] = []
        self.store = ListItemStore(list_id)
        self.coordinator = SyncCoordinator(self.store, remote)
        self.bulk = BulkOperationRunner(self.store, remote)
        self.importer = MealPlanImportMerger(
            self.store,
            remote,
            self.coordinator.reload,
            week_start=settings.week_start,
            today=today,
        )
        self.food_search = FoodSearch(
            remote,
            store=self.store,
            debounce=settings.food_search_debounce,
            page_size=settings.food_search_page_size,
        )

    async def open(self) -> bool:
        return await self.coordinator.reload()

    async def load_units(self) -> list[UnitStub]:
        """Load measurement units for the item form once; later calls reuse them."""

        if self.units:
            return self.units
        try:
            units = await self._remote.fetch_units(page=1, per_page=UNITS_PAGE_SIZE)
        except RemoteError as exc:
            logger.warning("Loading units failed: %s", exc, extra={"list_id": self.store.list_id})
            self.store.report_error(f"Failed to load units: {str(exc) or exc.__class__.__name__}")
            return []
        self.units = sorted(units, key=lambda unit: unit.name.casefold())
        return self.units

    def close(self) -> None:
        self.food_search.cancel()


__all__ = ["ShoppingListSession"]
