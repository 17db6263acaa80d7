"""FastAPI application entry point for the link shortener service.

This module configures and initializes the FastAPI application with middleware,
lifecycle management, error mapping and route registration.

Application Lifecycle Diagram
===========================
::
    ┌─────────────┐
    │  uvicorn    │
    │  startup    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Create      │
    │ FastAPI app │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ CORS, error │
    │ handlers,   │
    │ /metrics    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Include     │
    │ routes      │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ lifespan()  │
    │ startup:    │
    │ init_db()   │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Serve HTTP  │
    │ requests    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ lifespan()  │
    │ shutdown:   │
    │ close_db()  │
    │ close_redis()│
    └─────────────┘

How to Use
===========
**Step 1 — Run with uvicorn**::
    uvicorn shortener.main:app --host 0.0.0.0 --port 8000

**Step 2 — Make API calls**::
    curl -X POST http://localhost:8000/api/links \
         -H "Content-Type: application/json" \
         -d '{"url": "https://example.com", "expires_in": 3600}'

    curl -i http://localhost:8000/<hash>

Error Mapping
=============
::
    RequestValidationError / InvalidTarget  → 422 {"error": ...}
    IdentifierSpaceExhausted                → 503 {"error": ...}
    StorageError                            → 503 {"error": ...}
    HTTPException (404 / 410)               → {"error": detail}
"""

__all__ = ["app", "register_exception_handlers"]

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortener.config import get_settings
from shortener.database import close_db, init_db
from shortener.dependencies import LOGGER_NAME, _service_manager
from shortener.exceptions import IdentifierSpaceExhausted, InvalidTarget, StorageError
from shortener.redis import close_redis
from shortener.routes import router

settings = get_settings()
logger = logging.getLogger(LOGGER_NAME)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    _service_manager.initialize()
    await init_db()
    yield
    # Shutdown
    _service_manager.cleanup()
    await close_db()
    await close_redis()


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _validation_message(error: dict) -> str:
    # Validators raising ValueError carry the bare message in ctx; pydantic
    # prefixes "Value error, " to msg.
    cause = error.get("ctx", {}).get("error")
    if isinstance(cause, Exception):
        return str(cause)
    return str(error.get("msg", ""))


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = "; ".join(_validation_message(error) for error in exc.errors()) or "Unprocessable Entity"
        return _error(422, message)

    @app.exception_handler(InvalidTarget)
    async def invalid_target_handler(request: Request, exc: InvalidTarget) -> JSONResponse:
        return _error(422, str(exc))

    @app.exception_handler(IdentifierSpaceExhausted)
    async def exhausted_handler(request: Request, exc: IdentifierSpaceExhausted) -> JSONResponse:
        return _error(503, str(exc), headers={"Retry-After": "1"})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
        return _error(503, "Storage temporarily unavailable")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="URL shortener with expiring links",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# /metrics is registered before the router so the catch-all /{hash} route
# does not shadow it.
Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=False,
    should_respect_env_var=False,
).instrument(app).expose(app)

app.include_router(router)
