from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    api_title: str = "Storefront Search API"
    api_version: str = "0.1.0"

    catalog_store_backend: str = "memory"  # memory | http
    catalog_seed_path: str = "./data/catalog.json"
    catalog_http_base_url: str | None = None
    catalog_http_timeout_sec: float = 10.0
    catalog_cache_ttl_sec: float = 300.0
    catalog_max_records: int = 1000

    search_default_limit: int = 50
    search_max_suggestions: int = 5
    search_min_term_length: int = 2
    suggest_debounce_ms: int = 300

    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )
    frontend_origin: str | None = Field(default=None, alias="FRONTEND_ORIGIN")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def resolved_cors_origins(self) -> List[str]:
        """
        Returns the configured CORS origins plus the optional storefront origin, deduped.
        """
        normalized: list[str] = []

        def _append(origin: str | None) -> None:
            if not origin:
                return
            cleaned = origin.rstrip("/")
            if cleaned not in normalized:
                normalized.append(cleaned)

        for origin in self.cors_origins:
            _append(origin)

        _append(self.frontend_origin)
        return normalized


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()
