"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global settings loaded from environment variables or .env files."""

    base_url: Optional[str] = Field(
        default=None,
        description="Mealie server base URL.",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Mealie API token sent as a bearer token.",
    )
    request_timeout: float = Field(
        default=10.0,
        description="Seconds before a remote request is reported as failed.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    food_search_debounce: float = Field(
        default=0.3,
        description="Quiet interval (seconds) before a food search request is issued.",
    )
    food_search_page_size: int = Field(
        default=50,
        description="Maximum number of foods returned per search.",
    )
    week_start: int = Field(
        default=0,
        ge=0,
        le=6,
        description="First weekday of a meal-plan week (0=Monday ... 6=Sunday).",
    )

    model_config = ConfigDict(frozen=True)


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip()
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (base_url := _env("MEALSYNC_BASE_URL")):
        payload["base_url"] = base_url.rstrip("/")
    if (api_token := _env("MEALSYNC_API_TOKEN")):
        payload["api_token"] = api_token
    if (request_timeout := _env("MEALSYNC_REQUEST_TIMEOUT")):
        try:
            payload["request_timeout"] = float(request_timeout)
        except ValueError:
            pass
    if (log_level := _env("MEALSYNC_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("MEALSYNC_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (debounce := _env("MEALSYNC_FOOD_SEARCH_DEBOUNCE")):
        try:
            payload["food_search_debounce"] = float(debounce)
        except ValueError:
            pass
    if (page_size := _env("MEALSYNC_FOOD_SEARCH_PAGE_SIZE")):
        try:
            payload["food_search_page_size"] = int(page_size)
        except ValueError:
            pass
    if (week_start := _env("MEALSYNC_WEEK_START")):
        try:
            payload["week_start"] = int(week_start)
        except ValueError:
            pass
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
