"""Configuration settings for alertdesk."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoadMoreMode(str, Enum):
    REPLACE = "replace"
    APPEND = "append"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ALERTDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_base_url: str = "http://localhost:5001/api"
    api_token: str | None = None
    request_timeout_seconds: float = 15.0

    page_limit: int = 20
    load_more_mode: LoadMoreMode = LoadMoreMode.REPLACE

    overlay_path: str = "local/alert_overlay.json"
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _require_api_base_url(self) -> "Settings":
        if not self.api_base_url or not self.api_base_url.strip():
            raise ValueError("api_base_url must be configured")
        if self.page_limit < 1:
            raise ValueError("page_limit must be positive")
        self.overlay_path = str(Path(self.overlay_path))
        self.log_level = self.log_level.upper()
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
