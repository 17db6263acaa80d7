"""Pydantic schemas for request/response validation in the link shortener.

This module defines Pydantic models for API input validation and output serialization,
ensuring type safety and automatic OpenAPI documentation generation.

Schema Hierarchy
=================
::
    LinkCreate (Input)
    ├─ url: str (validated absolute URL)
    ├─ expires_in: int | None (seconds from now)
    └─ expires_at: datetime | None (absolute, UTC if naive)

    LinkResponse (Output)
    ├─ id: int
    ├─ hash: str
    ├─ url: str
    ├─ short_url: str (computed)
    ├─ expires_at: datetime | None
    └─ created_at: datetime

    LinkDetails (Output)
    └─ LinkResponse + expired: bool

    HealthResponse (Output)
    ├─ status: HealthStatus
    ├─ database: HealthStatus
    └─ cache: HealthStatus

How to Use
===========
**Step 1 — Input validation**::
    @app.post("/api/links")
    async def create_link(payload: LinkCreate):
        # payload.url is stripped and validated, expiry is resolved
        return await service.shorten(payload.url, payload.resolve_expires_at(utcnow()))

**Step 2 — Response serialization**::
    return LinkResponse.from_link(link, settings.BASE_URL)

Key Behaviours
===============
- URL validation uses the validators library and the MAX_URL_LENGTH bound.
- expires_in and expires_at are mutually exclusive; expires_in is bounded
  to [0, MAX_EXPIRES_IN_SECONDS].
- All datetime fields are returned timezone-aware in UTC.
- FastAPI automatically generates OpenAPI docs from these schemas.

Classes:
    LinkCreate:  Input schema for link creation requests.
    LinkResponse:  Output schema for created links.
    LinkDetails:  Output schema for link lookups.
    HealthResponse:  Output schema for health checks.
    ErrorResponse:  Output schema for error bodies.
    CachedLinkPayload:  Redis cache payload for a link.
"""

import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from shortener.clock import as_utc
from shortener.config import get_settings
from shortener.enums import HealthStatus
from shortener.models import Link
from shortener.validation import normalize_target_url

__all__ = [
    "LinkCreate",
    "LinkResponse",
    "LinkDetails",
    "HealthResponse",
    "ErrorResponse",
    "CachedLinkPayload",
]


# 100 years; keeps now + expires_in well inside the datetime range.
MAX_EXPIRES_IN_SECONDS = 100 * 365 * 24 * 60 * 60


class LinkCreate(BaseModel):
    url: str
    expires_in: int | None = Field(
        None, ge=0, le=MAX_EXPIRES_IN_SECONDS, description="Seconds until the link expires"
    )
    expires_at: datetime.datetime | None = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return normalize_target_url(v, get_settings().MAX_URL_LENGTH)

    @field_validator("expires_at")
    @classmethod
    def validate_expires_at(cls, v: datetime.datetime | None) -> datetime.datetime | None:
        return as_utc(v)

    @model_validator(mode="after")
    def check_single_expiry(self) -> "LinkCreate":
        if self.expires_in is not None and self.expires_at is not None:
            raise ValueError("Provide either expires_in or expires_at, not both")
        return self

    def resolve_expires_at(self, now: datetime.datetime) -> datetime.datetime | None:
        if self.expires_in is not None:
            return now + datetime.timedelta(seconds=self.expires_in)
        return self.expires_at


class LinkResponse(BaseModel):
    id: int
    hash: str
    url: str
    short_url: str
    expires_at: datetime.datetime | None
    created_at: datetime.datetime

    model_config = {"from_attributes": True}

    @field_validator("expires_at", "created_at")
    @classmethod
    def normalize_timestamps(cls, v: datetime.datetime | None) -> datetime.datetime | None:
        return as_utc(v)

    @classmethod
    def from_link(cls, link: Link, base_url: str, **extra) -> "LinkResponse":
        return cls(
            id=link.id,
            hash=link.hash,
            url=link.url,
            short_url=f"{base_url.rstrip('/')}/{link.hash}",
            expires_at=link.expires_at,
            created_at=link.created_at,
            **extra,
        )


class LinkDetails(LinkResponse):
    expired: bool


class HealthResponse(BaseModel):
    status: HealthStatus
    database: HealthStatus
    cache: HealthStatus


class ErrorResponse(BaseModel):
    error: str


class CachedLinkPayload(BaseModel):
    """Redis cache payload for a link; links are immutable so entries never go stale."""

    id: int
    hash: str
    url: str
    expires_at: datetime.datetime | None = None
    created_at: datetime.datetime

    model_config = {"from_attributes": True}

    def to_link(self) -> Link:
        return Link(
            id=self.id,
            hash=self.hash,
            url=self.url,
            expires_at=as_utc(self.expires_at),
            created_at=as_utc(self.created_at),
        )
