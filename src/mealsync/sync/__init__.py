"""Local-first shopping list synchronization."""

from mealsync.sync.bulk import BulkOperationRunner, RollbackPolicy
from mealsync.sync.coordinator import ItemValidationError, SyncCoordinator
from mealsync.sync.food_search import FoodSearch
from mealsync.sync.lists import ShoppingListIndex
from mealsync.sync.mealplan_import import MealPlanImportMerger
from mealsync.sync.results import BatchResult, ImportResult, MutationResult, Outcome
from mealsync.sync.session import ShoppingListSession
from mealsync.sync.store import ItemNotFoundError, ListItemStore, StoreState

__all__ = [
    "BulkOperationRunner",
    "RollbackPolicy",
    "ItemValidationError",
    "SyncCoordinator",
    "FoodSearch",
    "ShoppingListIndex",
    "MealPlanImportMerger",
    "BatchResult",
    "ImportResult",
    "MutationResult",
    "Outcome",
    "ShoppingListSession",
    "ItemNotFoundError",
    "ListItemStore",
    "StoreState",
]
