"""SurrealMCP FastAPI application factory + lifespan lifecycle.

This module implements:
  - create_app() — testable application factory
  - lifespan — @asynccontextmanager startup/shutdown sequence
  - /health router — delegated to surrealmcp/health.py
  - /tools, /resources routers — delegated to surrealmcp/tools/router.py
  - /        route  — service discovery root (inline)
  - app = create_app() — module-level instance for uvicorn

Startup sequence:
  1. load_config()           → app.state.config
  2. configure_rate_limit()  → tool call limit from config.rate_limit
  3. create_http_client()    → app.state.http_client
  4. ToolService.from_config() → query engine + service → app.state.tool_service
  5. app.state.ready = True

Shutdown sequence (reverse):
  app.state.ready = False → engine.close() → http_client.aclose()

Uvicorn hardened defaults (see surrealmcp/run.py):
  uvicorn surrealmcp.main:app \\
    --host 127.0.0.1 \\
    --port 8080 \\
    --limit-concurrency 100 \\
    --backlog 50 \\
    --timeout-keep-alive 5
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRouter
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from surrealmcp import __version__
from surrealmcp.auth.limiter import configure_rate_limit, limiter
from surrealmcp.auth.tokens import AuthenticationError, clear_token_cache
from surrealmcp.config import Config, load_config
from surrealmcp.engine.http_engine import create_http_client
from surrealmcp.guard.params import InvalidParameterError
from surrealmcp.health import router as health_router
from surrealmcp.models.responses import (
    build_authentication_response,
    build_invalid_parameters_response,
    build_query_failed_response,
    build_unknown_tool_response,
)
from surrealmcp.tools.router import router as tools_router
from surrealmcp.tools.service import QueryExecutionError, ToolService, UnknownToolError
from surrealmcp.utils.health import QueryMetrics
from surrealmcp.utils.logger import configure_logging, get_logger

# ─── Logging Setup ────────────────────────────────────────────────────────────
# Configure logging at module import time (before any other imports that may log).
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
JSON_LOGS = os.getenv("JSON_LOGS", "true").lower() == "true"

configure_logging(log_level=LOG_LEVEL, json_output=JSON_LOGS)
logger = get_logger(__name__)


# ─── Routers ──────────────────────────────────────────────────────────────────

root_router = APIRouter(tags=["root"])


# ─── Dependencies ─────────────────────────────────────────────────────────────


async def require_ready(request: Request) -> None:
    """FastAPI dependency: raises HTTP 503 if app.state.ready is not True.

    Tool and resource routes consume this dependency. /health handles the
    503 case itself.
    """
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={
                "status": "starting",
                "message": "SurrealMCP is starting up...",
            },
        )


def _from_request_validation(exc: RequestValidationError) -> InvalidParameterError:
    """Map a FastAPI request validation failure onto the invalid_parameters envelope.

    Body failures (malformed JSON, a body that is not a JSON object) are
    reported against ``arguments``. Query parameter failures name the
    parameter.
    """
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = tuple(first.get("loc") or ())
    if not loc or loc[0] == "body":
        reason = "invalid_json" if first.get("type") == "json_invalid" else "not_an_object"
        return InvalidParameterError(
            "arguments", reason, message="Tool arguments must be a JSON object"
        )
    parameter = str(loc[-1])
    return InvalidParameterError(parameter, str(first.get("type", "invalid")))


# ─── Root Endpoint ────────────────────────────────────────────────────────────


@root_router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint — service identity / discovery."""
    return {
        "service": "SurrealMCP",
        "version": __version__,
        "health": "/health",
        "tools": "/tools",
        "resources": "/resources",
    }


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — startup and shutdown sequence."""
    logger.info("SurrealMCP starting up...", version=__version__)

    # ── Step 1: Load configuration ────────────────────────────────────────────
    # load_config() raises SystemExit on invalid config, before ready=True.
    config: Config = load_config()
    app.state.config = config
    clear_token_cache()

    # ── Step 2: Rate limit ────────────────────────────────────────────────────
    configure_rate_limit(config.rate_limit)

    # ── Step 3: Shared HTTP client ────────────────────────────────────────────
    # Single shared httpx.AsyncClient, NEVER instantiated per request.
    http_client: httpx.AsyncClient = create_http_client()
    app.state.http_client = http_client

    # ── Step 4: Query engine + tool service ──────────────────────────────────
    service = ToolService.from_config(config, http_client, QueryMetrics())
    app.state.tool_service = service

    # ── Step 5: Mark as ready ─────────────────────────────────────────────────
    app.state.started_at = datetime.now(timezone.utc)
    app.state.ready = True
    logger.info(
        "SurrealMCP ready",
        endpoint=config.database.endpoint,
        namespace=config.database.namespace,
        database=config.database.database,
        auth_required=config.auth.required,
    )

    yield

    # ── Shutdown (reverse order) ──────────────────────────────────────────────
    logger.info("SurrealMCP shutting down...")
    app.state.ready = False

    await service.engine.close()

    try:
        await http_client.aclose()
        logger.info("HTTP client closed")
    except httpx.HTTPError as exc:
        logger.warning("HTTP client close error (non-fatal)", error=str(exc))

    logger.info("SurrealMCP shutdown complete")


# ─── Application Factory ──────────────────────────────────────────────────────


def create_app() -> FastAPI:
    """Create and configure the SurrealMCP FastAPI application.

    Call this function directly in tests to get an isolated app instance:
        app = create_app()

    The module-level `app` is created at import time for uvicorn:
        uvicorn surrealmcp.main:app --host 127.0.0.1 --port 8080

    Returns:
        Configured FastAPI application with lifespan, routers, and handlers.
    """
    # Swagger UI and ReDoc expose the full API schema; enabled with DEBUG=true only.
    _debug = os.getenv("DEBUG", "false").lower() == "true"

    application = FastAPI(
        title="SurrealMCP",
        description="Structured SurrealDB tools with guarded SurrealQL clause parameters",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if _debug else None,
        redoc_url="/redoc" if _debug else None,
        openapi_url="/openapi.json" if _debug else None,
    )

    # /health must return 503 on any request that arrives before startup completes.
    application.state.ready = False

    # slowapi reads the limiter from app state.
    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    application.add_middleware(SlowAPIMiddleware)

    application.include_router(root_router)
    application.include_router(health_router)
    application.include_router(tools_router, dependencies=[Depends(require_ready)])

    # ── Exception handlers ────────────────────────────────────────────────────

    @application.exception_handler(AuthenticationError)
    async def authentication_error_handler(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        return build_authentication_response(exc)

    @application.exception_handler(InvalidParameterError)
    async def invalid_parameters_handler(
        request: Request, exc: InvalidParameterError
    ) -> JSONResponse:
        return build_invalid_parameters_response(exc)

    @application.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Reports the parameter only, never the submitted input.
        return build_invalid_parameters_response(_from_request_validation(exc))

    @application.exception_handler(UnknownToolError)
    async def unknown_tool_handler(
        request: Request, exc: UnknownToolError
    ) -> JSONResponse:
        logger.info("Unknown tool requested", tool=exc.name)
        return build_unknown_tool_response(exc)

    @application.exception_handler(QueryExecutionError)
    async def query_failed_handler(
        request: Request, exc: QueryExecutionError
    ) -> JSONResponse:
        return build_query_failed_response(exc)

    @application.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=str(request.url.path),
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @application.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=str(request.url.path),
        )
        return JSONResponse(
            status_code=500, content={"error": "Internal server error"}
        )

    return application


# Module-level app instance for uvicorn
app = create_app()
