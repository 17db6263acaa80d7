"""FastAPI route definitions for the link shortener REST API.

This module provides all HTTP endpoints with dependency injection, outcome
mapping and response serialization around the core ``LinkService``.

API Endpoint Overview
=====================
::
    GET  /health
        └─ HealthResponse (200)

    POST /api/links
        ├─ LinkCreate (request body)
        └─ LinkResponse (201) or 422/503

    GET  /api/links/:hash
        └─ LinkDetails (200) or 404

    GET  /:hash
        └─ 307 Redirect, 410 Expired or 404

How to Use
===========
**Step 1 — Import and include router**::
    from shortener.routes import router
    app.include_router(router)

**Step 2 — Access endpoints**::
    # Shorten URL
    POST http://localhost:8000/api/links
    {"url": "https://example.com", "expires_in": 3600}

    # Redirect
    GET http://localhost:8000/3d7

Key Behaviours
===============
- Database and cache are injected through the request context.
- Expired and unknown hashes are distinct responses (410 vs 404).
- Core errors (InvalidTarget, IdentifierSpaceExhausted, StorageError) are
  mapped to HTTP responses by the handlers registered in shortener.main.
- 307 redirects preserve the HTTP method.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse
from sqlalchemy import text

from shortener.dependencies import RequestContext, get_link_service, get_request_context
from shortener.enums import HealthStatus, ResolveStatus
from shortener.schemas import ErrorResponse, HealthResponse, LinkCreate, LinkDetails, LinkResponse
from shortener.service import LinkService

__all__ = ["router"]

router = APIRouter()

NOT_FOUND_DETAIL = "Link not found"
EXPIRED_DETAIL = "Link has expired"


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(ctx: RequestContext = Depends(get_request_context)) -> HealthResponse:
    db_status = HealthStatus.HEALTHY
    cache_status = HealthStatus.DISABLED

    try:
        await ctx.database.execute(text("SELECT 1"))
    except Exception as e:
        ctx.logger.error(f"Database health check failed: {e}")
        db_status = HealthStatus.UNHEALTHY

    if ctx.cache is not None:
        cache_status = HealthStatus.HEALTHY
        try:
            await ctx.cache.ping()
        except Exception as e:
            ctx.logger.error(f"Cache health check failed: {e}")
            cache_status = HealthStatus.UNHEALTHY

    status = (
        HealthStatus.HEALTHY
        if db_status is HealthStatus.HEALTHY and cache_status is not HealthStatus.UNHEALTHY
        else HealthStatus.UNHEALTHY
    )
    return HealthResponse(status=status, database=db_status, cache=cache_status)


@router.post(
    "/api/links",
    response_model=LinkResponse,
    status_code=201,
    tags=["links"],
    responses={422: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def create_link(
    payload: LinkCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: LinkService = Depends(get_link_service),
) -> LinkResponse:
    ctx.logger.info(
        f"Link creation requested: {payload.url}",
        extra={"operation": "shorten", "target_url": payload.url},
    )

    link = await service.shorten(payload.url, payload.resolve_expires_at(service.now()))

    ctx.logger.info(
        f"Link created: {link.hash}",
        extra={"operation": "shorten", "hash": link.hash, "duration_ms": ctx.get_duration()},
    )
    return LinkResponse.from_link(link, ctx.settings.BASE_URL)


@router.get(
    "/api/links/{hash}",
    response_model=LinkDetails,
    tags=["links"],
    responses={404: {"model": ErrorResponse}},
)
async def get_link(
    hash: str,
    ctx: RequestContext = Depends(get_request_context),
    service: LinkService = Depends(get_link_service),
) -> LinkDetails:
    resolution = await service.resolve(hash)
    if resolution.status is ResolveStatus.NOT_FOUND:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)

    return LinkDetails.from_link(
        resolution.link,
        ctx.settings.BASE_URL,
        expired=resolution.status is ResolveStatus.EXPIRED,
    )


@router.get(
    "/{hash}",
    tags=["redirect"],
    status_code=307,
    responses={404: {"model": ErrorResponse}, 410: {"model": ErrorResponse}},
)
async def redirect_to_target(
    hash: str,
    ctx: RequestContext = Depends(get_request_context),
    service: LinkService = Depends(get_link_service),
) -> RedirectResponse:
    resolution = await service.resolve(hash)

    if resolution.status is ResolveStatus.NOT_FOUND:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    if resolution.status is ResolveStatus.EXPIRED:
        raise HTTPException(status_code=410, detail=EXPIRED_DETAIL)

    ctx.logger.info(
        f"Redirect: {hash} -> {resolution.target_url}",
        extra={"operation": "redirect", "hash": hash, "duration_ms": ctx.get_duration()},
    )
    return RedirectResponse(url=resolution.target_url, status_code=307)
