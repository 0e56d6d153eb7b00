"""SurrealMCP query execution engine package.

Public API:
  - QueryEngine, EngineError      — engine protocol (protocol.py)
  - SurrealHttpEngine             — SurrealDB over HTTP /rpc (http_engine.py)
  - create_query_engine()         — engine factory (factory.py)
  - create_http_client()          — shared httpx.AsyncClient factory
  - execute_query(), QueryResponse — timed execution (query.py)
  - check_health()                — reachability + 3.x version probe
"""

from __future__ import annotations

from surrealmcp.engine.factory import create_query_engine
from surrealmcp.engine.http_engine import (
    SurrealHttpEngine,
    check_health,
    create_http_client,
    normalize_endpoint,
)
from surrealmcp.engine.protocol import EngineError, QueryEngine
from surrealmcp.engine.query import QueryResponse, execute_query

__all__ = [
    "EngineError",
    "QueryEngine",
    "QueryResponse",
    "SurrealHttpEngine",
    "check_health",
    "create_http_client",
    "create_query_engine",
    "execute_query",
    "normalize_endpoint",
]
