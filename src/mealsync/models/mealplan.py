"""Meal plan models consumed by the ingredient importer."""

from __future__ import annotations

import datetime
from typing import Optional

from pydantic import BaseModel, Field

from mealsync.models.shopping import WIRE_CONFIG, RecipeSummary


class MealPlanEntry(BaseModel):
    """Scheduled meal-plan entry; freeform entries carry no recipe."""

    id: Optional[int] = None
    date: datetime.date
    entry_type: str = Field(default="dinner")
    title: str = Field(default="")
    text: str = Field(default="")
    recipe_id: Optional[str] = Field(default=None)
    recipe: Optional[RecipeSummary] = Field(default=None)

    model_config = WIRE_CONFIG


class MealPlanPage(BaseModel):
    items: list[MealPlanEntry] = Field(default_factory=list)
    total_pages: int = 1

    model_config = WIRE_CONFIG


__all__ = ["MealPlanEntry", "MealPlanPage"]
