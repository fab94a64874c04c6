"""Remote list service interface, errors and the Mealie HTTP client."""

from mealsync.client.base import RemoteListService
from mealsync.client.errors import (
    DecodingError,
    InvalidResponseError,
    RemoteError,
    RequestFailedError,
    UnauthorizedError,
)
from mealsync.client.http import MealieListService, build_list_service

__all__ = [
    "RemoteListService",
    "RemoteError",
    "UnauthorizedError",
    "RequestFailedError",
    "InvalidResponseError",
    "DecodingError",
    "MealieListService",
    "build_list_service",
]
