"""
studydeck.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single settings object injected across layers.

    Collaborator endpoints are optional: when unset, the corresponding adapter
    behaves as "not configured" instead of failing at startup.
    """

    model_config = SettingsConfigDict(env_prefix="STUDYDECK_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "studydeck"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "studydeck"
    jwt_audience: str = "studydeck-api"
    jwt_secret: str = Field(default="dev-only-secret-change-me-before-deploying", repr=False)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./studydeck.db"

    # Entitlements. The override grants every capability; it is handed to the
    # resolver once at construction and never read from the environment again.
    entitlement_override: bool = False
    entitlement_provider_url: str | None = None
    entitlement_provider_timeout_s: float = Field(default=2.0, gt=0)

    # Content generation
    content_generator_url: str | None = None
    content_generator_timeout_s: float = Field(default=30.0, gt=0)
    generation_card_count: int = Field(default=20, ge=1, le=100)

    # Quota
    free_deck_limit: int = Field(default=3, ge=1)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Tests construct `Settings(...)` directly instead of going through the cache.
