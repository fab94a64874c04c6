"""httpx implementation of the remote list service against the Mealie REST API."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from mealsync.client.base import RemoteListService
from mealsync.client.errors import (
    DecodingError,
    InvalidResponseError,
    RequestFailedError,
    UnauthorizedError,
)
from mealsync.config import Settings, get_settings
from mealsync.metrics import REMOTE_REQUESTS
from mealsync.models.mealplan import MealPlanEntry, MealPlanPage
from mealsync.models.shopping import (
    FoodStub,
    ItemsCollectionResponse,
    ShoppingList,
    ShoppingListDetail,
    ShoppingListItem,
    ShoppingListPage,
    UnitStub,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_FOODS_ADAPTER = TypeAdapter(list[FoodStub])
_UNITS_ADAPTER = TypeAdapter(list[UnitStub])

LISTS_PATH = "/api/households/shopping/lists"
ITEMS_PATH = "/api/households/shopping/items"
MEALPLANS_PATH = "/api/households/mealplans"
FOODS_PATH = "/api/foods"
UNITS_PATH = "/api/units"


class MealieListService(RemoteListService):
    """Async client for the household shopping-list and meal-plan endpoints."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "MealieListService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_list_detail(self, list_id: str) -> ShoppingListDetail:
        response = await self._request("fetch_list_detail", "GET", f"{LISTS_PATH}/{list_id}")
        return _decode(response, ShoppingListDetail)

    async def create_item(
        self,
        list_id: str,
        note: str,
        quantity: float,
        food_id: Optional[str] = None,
        unit_id: Optional[str] = None,
    ) -> ItemsCollectionResponse:
        payload = {
            "shoppingListId": list_id,
            "note": note,
            "quantity": quantity,
            "foodId": food_id,
            "unitId": unit_id,
        }
        response = await self._request("create_item", "POST", ITEMS_PATH, json=payload)
        return _decode(response, ItemsCollectionResponse)

    async def update_item(self, item: ShoppingListItem) -> Optional[ShoppingListItem]:
        response = await self._request(
            "update_item",
            "PUT",
            f"{ITEMS_PATH}/{item.id}",
            json=item.update_payload(),
        )
        collection = _decode(response, ItemsCollectionResponse)
        for updated in collection.updated_items:
            if updated.id == item.id:
                return updated
        return None

    async def delete_item(self, item_id: str) -> None:
        await self._request("delete_item", "DELETE", f"{ITEMS_PATH}/{item_id}")

    async def fetch_meal_plan_entries(self, start: date, end: date) -> list[MealPlanEntry]:
        params = {
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "perPage": -1,
        }
        response = await self._request("fetch_meal_plan_entries", "GET", MEALPLANS_PATH, params=params)
        return _decode(response, MealPlanPage).items

    async def bulk_add_recipes(self, list_id: str, recipe_ids: Sequence[str]) -> None:
        payload = [{"recipeId": recipe_id} for recipe_id in recipe_ids]
        await self._request(
            "bulk_add_recipes",
            "POST",
            f"{LISTS_PATH}/{list_id}/recipe",
            json=payload,
        )

    async def fetch_lists(self, page: int = 1, per_page: int = 50) -> ShoppingListPage:
        params = {"page": page, "perPage": per_page, "orderBy": "created_at", "orderDirection": "desc"}
        response = await self._request("fetch_lists", "GET", LISTS_PATH, params=params)
        return _decode(response, ShoppingListPage)

    async def create_list(self, name: Optional[str]) -> ShoppingListDetail:
        response = await self._request("create_list", "POST", LISTS_PATH, json={"name": name})
        return _decode(response, ShoppingListDetail)

    async def update_list(self, shopping_list: ShoppingList, name: Optional[str]) -> ShoppingListDetail:
        payload = {
            "id": shopping_list.id,
            "name": name,
            "groupId": shopping_list.group_id,
            "userId": shopping_list.user_id,
        }
        response = await self._request(
            "update_list",
            "PUT",
            f"{LISTS_PATH}/{shopping_list.id}",
            json=payload,
        )
        return _decode(response, ShoppingListDetail)

    async def delete_list(self, list_id: str) -> None:
        await self._request("delete_list", "DELETE", f"{LISTS_PATH}/{list_id}")

    async def search_foods(self, query: str, page: int = 1, per_page: int = 50) -> list[FoodStub]:
        params = {"search": query, "page": page, "perPage": per_page}
        response = await self._request("search_foods", "GET", FOODS_PATH, params=params)
        return _decode_items(response, _FOODS_ADAPTER, "food search")

    async def fetch_units(self, page: int = 1, per_page: int = 500) -> list[UnitStub]:
        params = {"page": page, "perPage": per_page}
        response = await self._request("fetch_units", "GET", UNITS_PATH, params=params)
        return _decode_items(response, _UNITS_ADAPTER, "unit")

    async def _request(self, operation: str, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            REMOTE_REQUESTS.labels(operation=operation, status="timeout").inc()
            raise RequestFailedError(f"{operation} timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            REMOTE_REQUESTS.labels(operation=operation, status="error").inc()
            raise RequestFailedError(f"{operation} failed: {exc}") from exc

        status = response.status_code
        REMOTE_REQUESTS.labels(operation=operation, status=str(status)).inc()
        logger.debug("%s %s -> %s", method, path, status)
        if status in (401, 403):
            raise UnauthorizedError()
        if response.is_error:
            raise RequestFailedError(f"{operation} returned HTTP {status}", status_code=status)
        return response


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        snippet = response.text.strip().replace("\n", " ")[:200]
        raise DecodingError(f"Response is not valid JSON: payload={snippet}") from exc


def _decode(response: httpx.Response, model: Type[ModelT]) -> ModelT:
    body = _json_body(response)
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise DecodingError(f"Invalid {model.__name__} payload: {exc}") from exc


def _decode_items(response: httpx.Response, adapter: TypeAdapter, label: str) -> list:
    body = _json_body(response)
    if not isinstance(body, dict):
        raise InvalidResponseError(f"{label.capitalize()} response is not an object.")
    try:
        return adapter.validate_python(body.get("items") or [])
    except ValidationError as exc:
        raise DecodingError(f"Invalid {label} payload: {exc}") from exc


def build_list_service(settings: Optional[Settings] = None) -> MealieListService:
    """Create a client from application settings."""

    settings = settings or get_settings()
    if not settings.base_url:
        raise RuntimeError("Mealie base URL is not configured (MEALSYNC_BASE_URL).")
    return MealieListService(
        settings.base_url,
        settings.api_token,
        timeout=settings.request_timeout,
    )


__all__ = ["MealieListService", "build_list_service"]
