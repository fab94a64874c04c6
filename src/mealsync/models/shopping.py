"""Shopping list models mirroring the Mealie household shopping API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


def format_quantity(quantity: float) -> str:
    """Render a quantity with at most two decimals and no trailing zeros."""

    text = f"{quantity:.2f}".rstrip("0").rstrip(".")
    return text or "0"


class FoodStub(BaseModel):
    """Food linked to an item (id plus cached name)."""

    id: str
    name: str

    model_config = WIRE_CONFIG


class UnitStub(BaseModel):
    """Measurement unit linked to an item."""

    id: str
    name: str

    model_config = WIRE_CONFIG


class RecipeSummary(BaseModel):
    id: str
    name: Optional[str] = None
    slug: Optional[str] = None

    model_config = WIRE_CONFIG


class RecipeReference(BaseModel):
    """List-level reference to a recipe represented in the list."""

    id: Optional[str] = None
    shopping_list_id: Optional[str] = None
    recipe_id: str
    recipe_quantity: Optional[float] = None
    recipe: Optional[RecipeSummary] = None

    model_config = WIRE_CONFIG

    @property
    def recipe_name(self) -> Optional[str]:
        return self.recipe.name if self.recipe else None


class ItemRecipeReference(BaseModel):
    """Provenance of an item: the recipe that contributed it."""

    id: Optional[str] = None
    shopping_list_item_id: Optional[str] = None
    recipe_id: str
    recipe_quantity: Optional[float] = None

    model_config = WIRE_CONFIG


class ShoppingListItem(BaseModel):
    """Single entry on a shopping list.

    ``shopping_list_id`` never changes once the item exists. Items are frozen; every local
    mutation produces a copy via ``model_copy``.
    """

    id: str
    shopping_list_id: str
    quantity: Optional[float] = Field(default=1.0, ge=0)
    checked: bool = Field(default=False)
    position: int = Field(default=0)
    note: Optional[str] = Field(default=None)
    display: Optional[str] = Field(default=None)
    food_id: Optional[str] = Field(default=None)
    food: Optional[FoodStub] = Field(default=None)
    unit_id: Optional[str] = Field(default=None)
    unit: Optional[UnitStub] = Field(default=None)
    label_id: Optional[str] = Field(default=None)
    recipe_references: list[ItemRecipeReference] = Field(default_factory=list)

    model_config = WIRE_CONFIG

    @field_validator("recipe_references", mode="before")
    @classmethod
    def coerce_null_references(cls, value: object) -> object:
        return [] if value is None else value

    @property
    def sync_note(self) -> Optional[str]:
        """Trimmed note, or ``None`` when blank."""

        trimmed = (self.note or "").strip()
        return trimmed or None

    @property
    def is_submittable(self) -> bool:
        """An item needs a linked food or a non-blank note before it may be sent."""

        return self.food_id is not None or self.sync_note is not None

    @property
    def display_name(self) -> str:
        trimmed_display = (self.display or "").strip()
        if trimmed_display:
            return trimmed_display

        note = self.sync_note
        food_name = (self.food.name.strip() if self.food else "") or None
        unit_name = (self.unit.name.strip() if self.unit else "") or None

        if food_name and note:
            descriptor: Optional[str] = f"{food_name} ({note})"
        else:
            descriptor = food_name or note

        parts: list[str] = []
        if self.quantity:
            parts.append(format_quantity(self.quantity))
        if unit_name:
            parts.append(unit_name)
        if descriptor:
            parts.append(descriptor)
        return " ".join(parts) if parts else "Unknown Item"

    def update_payload(self) -> dict[str, object]:
        """Complete field set sent on every update; the API does not accept partial patches."""

        return {
            "id": self.id,
            "shoppingListId": self.shopping_list_id,
            "note": self.sync_note,
            "quantity": self.quantity,
            "checked": self.checked,
            "foodId": self.food_id,
            "unitId": self.unit_id,
            "labelId": self.label_id,
            "position": self.position,
        }


class ShoppingList(BaseModel):
    """Shopping list summary as returned by list and create endpoints."""

    id: str
    name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    group_id: Optional[str] = None
    user_id: Optional[str] = None
    household_id: Optional[str] = None

    model_config = WIRE_CONFIG

    @property
    def display_name(self) -> str:
        return self.name or "Untitled"


class ShoppingListDetail(ShoppingList):
    """Shopping list with its items and the recipes it references."""

    list_items: list[ShoppingListItem] = Field(default_factory=list)
    recipe_references: list[RecipeReference] = Field(default_factory=list)

    @field_validator("list_items", "recipe_references", mode="before")
    @classmethod
    def coerce_null_collections(cls, value: object) -> object:
        return [] if value is None else value

    def summary(self) -> ShoppingList:
        return ShoppingList.model_validate(self.model_dump(include=set(ShoppingList.model_fields)))


class ShoppingListPage(BaseModel):
    items: list[ShoppingList] = Field(default_factory=list)
    page: int = 1
    per_page: int = 50
    total: int = 0
    total_pages: int = 1

    model_config = WIRE_CONFIG


class ItemsCollectionResponse(BaseModel):
    """Response of item create/update endpoints."""

    created_items: list[ShoppingListItem] = Field(default_factory=list)
    updated_items: list[ShoppingListItem] = Field(default_factory=list)
    deleted_items: list[ShoppingListItem] = Field(default_factory=list)

    model_config = WIRE_CONFIG

    @field_validator("created_items", "updated_items", "deleted_items", mode="before")
    @classmethod
    def coerce_null_collections(cls, value: object) -> object:
        return [] if value is None else value


__all__ = [
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
    "format_quantity",
]
