"""Configuration management for the link shortener service.

This module provides centralized configuration management using Pydantic BaseSettings
with environment variable support and caching for performance.

Flow Diagram — get_settings()
=============================
::
    ┌─────────────┐
    │  Call get_  │
    │  settings() │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Check cache  │
    │ (lru_cache)  │
    └──────┬──────┘
    HIT?  │
    ┌─────┴─────┐
    │ NO         │ YES
    ▼            ▼
┌─────────┐  ┌─────────┐
│ Create  │  │ Return  │
│ Settings│  │ cached  │
│ instance│  │ value   │
└─────────┘  └─────────┘

How to Use
===========
**Step 1 — Import**::
    from shortener.config import get_settings

**Step 2 — Get settings**::
    settings = get_settings()
    db_url = settings.DATABASE_URL

**Step 3 — Pick the identifier strategy**::
    HASH_STRATEGY=random RANDOM_HASH_LENGTH=6 uvicorn shortener.main:app

Key Behaviours
===============
- Settings are cached after first access for performance.
- Environment variables override defaults automatically.
- Invalid values (e.g. an unknown HASH_STRATEGY) raise ValidationError.

Classes:
    Settings:  Pydantic model for all configuration values.

"""

__all__ = ["Settings", "get_settings"]

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shortener.enums import HashStrategy


class Settings(BaseSettings):
    APP_NAME: str = "link-shortener"
    APP_ENV: str = "development"
    BASE_URL: str = "http://localhost:8000"
    LOG_LEVEL: str = "INFO"

    # PostgreSQL (any SQLAlchemy async URL is accepted)
    DATABASE_URL: str = "postgresql+asyncpg://shortener:shortener@db:5432/shortener"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10

    # Redis lookup cache
    REDIS_URL: str = "redis://redis:6379/0"
    CACHE_ENABLED: bool = True
    CACHE_TTL_SECONDS: int = Field(3600, ge=1)

    # Identifier generation
    HASH_STRATEGY: HashStrategy = HashStrategy.SEQUENTIAL
    RANDOM_HASH_LENGTH: int = Field(6, ge=1, le=64)
    MAX_HASH_ATTEMPTS: int = Field(10, ge=1)
    LINK_KEY_NAME: str = "links"

    # Target URL policy
    MAX_URL_LENGTH: int = Field(2048, ge=1, le=2048)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
