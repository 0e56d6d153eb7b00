"""Health endpoint for SurrealMCP.

Implements:
  GET /health — 503 before ``app.state.ready``, 200 with database and query
                metrics after startup

The database probe is live: every call checks SurrealDB reachability and
version through the configured QueryEngine. An unreachable or non-3.x
database reports ``"status": "degraded"`` with HTTP 200, since the MCP
server itself is up and will answer with ``query_failed`` errors.

/health is unauthenticated. It never reveals credentials, tokens or the
database endpoint.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, HTTPException, Request

from surrealmcp.config import Config
from surrealmcp.engine.http_engine import check_health
from surrealmcp.tools.service import ToolService
from surrealmcp.utils.ids import format_duration
from surrealmcp.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Primary health check endpoint.

    Response body (200):
        {
          "status": "ok" | "degraded",
          "database": "healthy" | "unavailable",
          "database_version": "3.0.0" | null,
          "database_detail": null | "<reason>",
          "database_latency_ms": 1.234,
          "auth_required": true,
          "uptime": "2m 5s",
          "total_queries": 0,
          "total_query_errors": 0,
          "total_rejections": 0,
          "avg_query_ms": 0.0,
          "p99_query_ms": 0.0
        }

    Response body (503):
        {"status": "starting", "message": "SurrealMCP is starting up..."}
    """
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={
                "status": "starting",
                "message": "SurrealMCP is starting up...",
            },
        )

    config: Config = request.app.state.config
    service: ToolService = request.app.state.tool_service

    start = time.perf_counter()
    healthy, detail = await check_health(service.engine)
    latency_ms = round((time.perf_counter() - start) * 1000, 3)
    if healthy:
        logger.debug("SurrealDB health check passed", latency_ms=latency_ms)
    else:
        logger.warning("SurrealDB health check failed", latency_ms=latency_ms, detail=detail)

    started_at: datetime = request.app.state.started_at
    uptime = datetime.now(timezone.utc) - started_at

    return {
        "status": "ok" if healthy else "degraded",
        "database": "healthy" if healthy else "unavailable",
        "database_version": detail if healthy else None,
        "database_detail": None if healthy else detail,
        "database_latency_ms": latency_ms,
        "auth_required": config.auth.required,
        "uptime": format_duration(uptime),
        **service.metrics.snapshot(),
    }
