"""Tool and resource endpoints.

Provides:
  GET  /tools              — list tools with their argument JSON schemas
  POST /tools/{name}       — call a tool; the request body is the argument object
  GET  /resources          — list resources
  GET  /resources/read     — read one resource by ``uri``

All endpoints require authentication via Depends(authenticate_request).
Only tool calls are rate limited; listing is cheap and never reaches the
database.

Errors are raised as exceptions (InvalidParameterError, UnknownToolError,
QueryExecutionError, AuthenticationError) and rendered by the handlers
registered in surrealmcp/main.py.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request

from surrealmcp.auth.limiter import limiter, tool_call_limit
from surrealmcp.auth.middleware import authenticate_request
from surrealmcp.resources import list_resources, read_resource
from surrealmcp.tools.service import ToolService
from surrealmcp.utils.ids import generate_connection_id
from surrealmcp.utils.logger import clear_connection_id, get_logger, set_connection_id

logger = get_logger(__name__)

router = APIRouter(tags=["tools"])


def _service(request: Request) -> ToolService:
    return request.app.state.tool_service


# ─── Tools ────────────────────────────────────────────────────────────────────


@router.get("/tools")
async def get_tools(
    request: Request,
    principal: str = Depends(authenticate_request),
) -> dict[str, Any]:
    return {"tools": _service(request).list_tools()}


@router.post("/tools/{name}")
@limiter.limit(tool_call_limit)
async def call_tool(
    name: str,
    request: Request,
    arguments: Optional[dict[str, Any]] = Body(default=None),
    principal: str = Depends(authenticate_request),
) -> dict[str, Any]:
    """Call one tool.

    Returns:
        JSON: {tool, query_id, duration_ms, result}
    """
    connection_id = generate_connection_id()
    set_connection_id(connection_id)
    try:
        logger.info("Tool call received", tool=name, principal=principal)
        result = await _service(request).call_tool(name, arguments, connection_id)
        return result.to_dict()
    finally:
        clear_connection_id()


# ─── Resources ────────────────────────────────────────────────────────────────


@router.get("/resources", tags=["resources"])
async def get_resources(
    principal: str = Depends(authenticate_request),
) -> dict[str, Any]:
    return {"resources": list_resources()}


@router.get("/resources/read", tags=["resources"])
async def get_resource(
    uri: str = Query(...),
    principal: str = Depends(authenticate_request),
) -> dict[str, Any]:
    contents = read_resource(uri)
    if contents is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "resource_not_found", "message": f"Unknown resource '{uri}'"},
        )
    return contents
