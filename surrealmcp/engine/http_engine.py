"""SurrealDB engine over HTTP.

Sends queries to SurrealDB's JSON-RPC endpoint (``POST /rpc``) using the
shared ``httpx.AsyncClient`` created at lifespan startup. Bind variables
travel in the RPC ``params`` array, so structured tool arguments (record
content, merge data, user ``parameters``) are never composed into query text.

Request shape::

    POST <endpoint>/rpc
    Surreal-NS: <namespace>        (when configured)
    Surreal-DB: <database>         (when configured)
    Authorization: Basic ...       (when username + password configured)

    {"id": 7, "method": "query", "params": ["SELECT * FROM person", {}]}

Response shape::

    {"id": 7, "result": [{"status": "OK", "time": "1ms", "result": [...]}]}
    {"id": 7, "error": {"code": -32000, "message": "..."}}
"""

from __future__ import annotations

import itertools
from typing import Any, Optional

import httpx

from surrealmcp.config import DatabaseConfig
from surrealmcp.constants import (
    POOL_KEEPALIVE_EXPIRY,
    POOL_MAX_CONNECTIONS,
    POOL_MAX_KEEPALIVE,
    QUERY_TIMEOUT_S,
)
from surrealmcp.engine.protocol import EngineError, QueryEngine
from surrealmcp.utils.logger import get_logger

logger = get_logger(__name__)

#: Maximum characters of an error body carried into EngineError messages.
_ERROR_BODY_LIMIT = 200

_SCHEME_MAP = {"ws://": "http://", "wss://": "https://"}


# ─── httpx.AsyncClient factory ────────────────────────────────────────────────


def create_http_client() -> httpx.AsyncClient:
    """Create the shared httpx.AsyncClient with connection pooling configured.

    Created once at lifespan startup and stored in app.state.http_client.
    NEVER instantiated per-request.
    """
    return httpx.AsyncClient(
        limits=httpx.Limits(
            max_connections=POOL_MAX_CONNECTIONS,
            max_keepalive_connections=POOL_MAX_KEEPALIVE,
            keepalive_expiry=POOL_KEEPALIVE_EXPIRY,
        ),
        timeout=httpx.Timeout(QUERY_TIMEOUT_S),
        follow_redirects=False,
    )


def normalize_endpoint(endpoint: str) -> str:
    """Map a configured endpoint to its HTTP base URL.

    ``ws://host:8000/rpc`` → ``http://host:8000``; trailing slashes and a
    trailing ``/rpc`` path are removed.
    """
    base = endpoint.strip()
    for ws_scheme, http_scheme in _SCHEME_MAP.items():
        if base.lower().startswith(ws_scheme):
            base = http_scheme + base[len(ws_scheme):]
            break
    base = base.rstrip("/")
    if base.endswith("/rpc"):
        base = base[: -len("/rpc")]
    return base


# ─── Engine ───────────────────────────────────────────────────────────────────


class SurrealHttpEngine:
    """QueryEngine implementation backed by SurrealDB's HTTP API."""

    def __init__(self, config: DatabaseConfig, client: httpx.AsyncClient) -> None:
        self._base_url = normalize_endpoint(config.endpoint)
        self._client = client
        self._headers: dict[str, str] = {"Accept": "application/json"}
        if config.namespace:
            self._headers["Surreal-NS"] = config.namespace
        if config.database:
            self._headers["Surreal-DB"] = config.database
        self._auth: Optional[httpx.BasicAuth] = None
        if config.username is not None and config.password is not None:
            self._auth = httpx.BasicAuth(config.username, config.password)
        self._rpc_ids = itertools.count(1)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self._base_url}{path}"
        try:
            return await self._client.request(
                method, url, headers=self._headers, auth=self._auth, **kwargs
            )
        except httpx.HTTPError as exc:
            raise EngineError(f"SurrealDB unreachable: {type(exc).__name__}") from exc

    async def execute(self, query: str, variables: Optional[dict[str, Any]] = None) -> Any:
        body = {
            "id": next(self._rpc_ids),
            "method": "query",
            "params": [query, variables or {}],
        }
        response = await self._request("POST", "/rpc", json=body)
        if response.status_code != 200:
            raise EngineError(
                f"SurrealDB returned HTTP {response.status_code}: "
                f"{response.text[:_ERROR_BODY_LIMIT]}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise EngineError("SurrealDB returned a non-JSON response") from exc
        if not isinstance(payload, dict):
            raise EngineError("SurrealDB returned an unexpected RPC payload")

        error = payload.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise EngineError(str(message))

        statements = payload.get("result")
        if not isinstance(statements, list) or not statements:
            raise EngineError("SurrealDB returned no statement results")

        for statement in statements:
            if isinstance(statement, dict) and statement.get("status") == "ERR":
                raise EngineError(str(statement.get("result")))

        first = statements[0]
        return first.get("result") if isinstance(first, dict) else first

    async def version(self) -> str:
        response = await self._request("GET", "/version")
        if response.status_code != 200:
            raise EngineError(f"SurrealDB /version returned HTTP {response.status_code}")
        return response.text.strip().removeprefix("surrealdb-")

    async def health(self) -> bool:
        try:
            response = await self._request("GET", "/health")
        except EngineError:
            return False
        return response.status_code == 200

    async def close(self) -> None:
        # The shared client is owned and closed by the app lifespan.
        return None


async def check_health(engine: QueryEngine) -> tuple[bool, str]:
    """Check reachability and version of the SurrealDB instance.

    Returns:
        ``(True, version)`` for a reachable 3.x server, otherwise ``(False, detail)``.
    """
    try:
        if not await engine.health():
            return False, "SurrealDB health check failed"
        version = await engine.version()
    except EngineError as exc:
        return False, exc.message

    if version.startswith("3"):
        return True, version
    return False, f"Unsupported SurrealDB version: {version}. Expected 3.x"
