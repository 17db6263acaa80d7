"""Link Shortener Service Layer - Core Business Logic

This module exposes the two operations of the core, ``shorten`` and
``resolve``, wiring the link store, collision resolver and redirect resolver
together with logging and Prometheus metrics.

Architecture Overview
==================
::
    ┌──────────────────────────────────────────────────────────────┐
    │                        LinkService                           │
    │  ┌────────────────┐  ┌──────────────────┐  ┌──────────────┐  │
    │  │   LinkStore    │  │ CollisionResolver│  │  Redirect    │  │
    │  │ • create       │◄─┤ • propose hash   │  │  Resolver    │  │
    │  │ • find_by_hash │  │ • bounded retry  │  │ • OK/EXPIRED │  │
    │  │ • allocate_key │  └──────────────────┘  │ • NOT_FOUND  │  │
    │  └───────┬────────┘                        └──────┬───────┘  │
    └──────────┼────────────────────────────────────────┼──────────┘
               ▼                                        │
    ┌─────────────────┐  ┌─────────────────┐            │
    │   PostgreSQL    │  │     Redis       │◄───────────┘
    │ (links, keys)   │  │ (lookup cache)  │   via LinkStore
    └─────────────────┘  └─────────────────┘

Request Flow Diagrams
=====================

Shorten Flow
------------
::
    ┌─────────────┐
    │  POST /api  │
    │  /links      │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Validate URL │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Allocate key │
    │ + hash       │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Insert-or-   │
    │ fail (retry) │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Return Link  │
    └─────────────┘

Resolve Flow
------------
::
    ┌─────────────┐
    │  GET /:hash │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ find_by_hash │── none ──► NOT_FOUND (404)
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ now > exp?   │── yes ───► EXPIRED (410)
    └──────┬──────┘
           ▼
       OK (307 redirect)

Usage Examples
=============

```python
@router.post("/api/links")
async def create_link(
    payload: LinkCreate,
    service: LinkService = Depends(get_link_service),
) -> LinkResponse:
    link = await service.shorten(payload.url, payload.resolve_expires_at(utcnow()))
    return LinkResponse.from_link(link, service.settings.BASE_URL)
```
"""

import datetime
import time
from typing import TYPE_CHECKING

from shortener.clock import Clock, utcnow
from shortener.config import Settings
from shortener.enums import RequestStatus, ResolveStatus
from shortener.exceptions import IdentifierSpaceExhausted, InvalidTarget
from shortener.metrics import (
    LINK_CREATE_DURATION,
    LINK_CREATE_REQUESTS_TOTAL,
    LINK_RESOLVE_DURATION,
    LINK_RESOLVE_REQUESTS_TOTAL,
)
from shortener.models import Link
from shortener.redirect import RedirectResolver, Resolution
from shortener.store import LinkStore

if TYPE_CHECKING:
    from shortener.dependencies import RequestContext

__all__ = ["LinkService"]


class LinkService:
    """Core service class for link shortening operations.

    Example:
        >>> ctx = RequestContext(database=db, cache=cache, ...)
        >>> service = LinkService.from_context(ctx)
        >>> link = await service.shorten("https://example.com")
        >>> (await service.resolve(link.hash)).target_url
        'https://example.com'
    """

    def __init__(self, ctx: "RequestContext", clock: Clock = utcnow):
        self._ctx = ctx
        self._logger = ctx.logger
        self._settings = ctx.settings
        self._clock = clock
        self._store = LinkStore(
            ctx.database,
            cache=ctx.cache,
            settings=ctx.settings,
            logger=ctx.logger,
            clock=clock,
        )
        self._redirects = RedirectResolver(self._store, clock=clock, logger=ctx.logger)

    @classmethod
    def from_context(cls, ctx: "RequestContext") -> "LinkService":
        return cls(ctx)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def store(self) -> LinkStore:
        return self._store

    def now(self) -> datetime.datetime:
        return self._clock()

    async def shorten(self, target_url: str, expires_at: datetime.datetime | None = None) -> Link:
        """Create a short link for ``target_url``.

        Raises:
            InvalidTarget: If the URL is rejected before persistence.
            IdentifierSpaceExhausted: If every hash candidate collided.
            StorageError: If the database fails.
        """
        start_time = time.perf_counter()
        status = RequestStatus.ERROR
        try:
            link = await self._store.create(target_url, expires_at)
            status = RequestStatus.SUCCESS
            self._logger.info(f"Link created: {link.hash} (id={link.id})")
            return link
        except InvalidTarget as exc:
            status = RequestStatus.VALIDATION_ERROR
            self._logger.info(f"Link rejected: {exc}")
            raise
        except IdentifierSpaceExhausted:
            status = RequestStatus.EXHAUSTED
            raise
        except Exception as exc:
            self._logger.error(f"Link creation error: {exc}")
            raise
        finally:
            LINK_CREATE_DURATION.observe(time.perf_counter() - start_time)
            LINK_CREATE_REQUESTS_TOTAL.labels(status=status.value).inc()

    async def resolve(self, hash: str) -> Resolution:
        """Resolve ``hash``; NOT_FOUND and EXPIRED are outcomes, not errors."""
        start_time = time.perf_counter()
        try:
            resolution = await self._redirects.resolve(hash)
        except Exception as exc:
            LINK_RESOLVE_REQUESTS_TOTAL.labels(outcome="error").inc()
            self._logger.error(f"Resolve error for {hash}: {exc}")
            raise

        duration = time.perf_counter() - start_time
        LINK_RESOLVE_DURATION.observe(duration)
        LINK_RESOLVE_REQUESTS_TOTAL.labels(outcome=resolution.status.value).inc()
        if resolution.status is ResolveStatus.OK:
            self._logger.debug(f"Resolved {hash} in {duration:.3f}s")
        return resolution
