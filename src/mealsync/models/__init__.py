"""Pydantic models defining the shopping list and meal plan contracts."""

from mealsync.models.mealplan import MealPlanEntry, MealPlanPage
from mealsync.models.shopping import (
    FoodStub,
    ItemRecipeReference,
    ItemsCollectionResponse,
    RecipeReference,
    RecipeSummary,
    ShoppingList,
    ShoppingListDetail,
    ShoppingListItem,
    ShoppingListPage,
    UnitStub,
)

__all__ = [
    "MealPlanEntry",
    "MealPlanPage",
    "FoodStub",
    "ItemRecipeReference",
    "ItemsCollectionResponse",
    "RecipeReference",
    "RecipeSummary",
    "ShoppingList",
    "ShoppingListDetail",
    "ShoppingListItem",
    "ShoppingListPage",
    "UnitStub",
]
