"""Unit tests for surrealmcp/engine/http_engine.py — SurrealDB over HTTP.

Uses httpx.MockTransport, so no SurrealDB server is needed.

Verifies:
  - endpoint normalisation (ws → http, trailing /rpc)
  - RPC request body, headers and basic auth
  - first-statement result selection
  - ERR statements, RPC errors, HTTP errors and transport errors → EngineError
  - version() / health() / check_health()
"""

from __future__ import annotations

import base64
import json
from typing import Any, Callable

import httpx
import pytest

from surrealmcp.config import DatabaseConfig
from surrealmcp.engine.http_engine import (
    SurrealHttpEngine,
    check_health,
    create_http_client,
    normalize_endpoint,
)
from surrealmcp.engine.protocol import EngineError, QueryEngine

Handler = Callable[[httpx.Request], httpx.Response]


def _engine(handler: Handler, **db: Any) -> SurrealHttpEngine:
    config = DatabaseConfig(endpoint=db.pop("endpoint", "http://db:8000"), **db)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SurrealHttpEngine(config, client)


def _rpc_ok(*statements: Any) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        return httpx.Response(200, json={"id": body["id"], "result": list(statements)})

    return handler


class TestNormalizeEndpoint:
    @pytest.mark.parametrize(
        ("endpoint", "expected"),
        [
            ("http://localhost:8000", "http://localhost:8000"),
            ("http://localhost:8000/", "http://localhost:8000"),
            ("ws://localhost:8000/rpc", "http://localhost:8000"),
            ("wss://cloud.surreal.io/rpc", "https://cloud.surreal.io"),
            ("WS://host:8000", "http://host:8000"),
            ("https://host/rpc/", "https://host"),
        ],
    )
    def test_normalize(self, endpoint: str, expected: str) -> None:
        assert normalize_endpoint(endpoint) == expected


@pytest.mark.asyncio
class TestExecute:
    async def test_request_shape(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": 1, "result": [{"status": "OK", "result": []}]})

        engine = _engine(
            handler,
            endpoint="ws://db:8000/rpc",
            namespace="app",
            database="main",
            username="root",
            password="secret",
        )
        await engine.execute("SELECT * FROM person WHERE age > $min", {"min": 18})

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "http://db:8000/rpc"
        assert request.headers["Surreal-NS"] == "app"
        assert request.headers["Surreal-DB"] == "main"
        expected_auth = base64.b64encode(b"root:secret").decode()
        assert request.headers["Authorization"] == f"Basic {expected_auth}"
        body = json.loads(request.content)
        assert body["method"] == "query"
        assert body["params"] == ["SELECT * FROM person WHERE age > $min", {"min": 18}]
        assert isinstance(body["id"], int)

    async def test_no_namespace_or_auth_headers_when_unset(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": 1, "result": [{"status": "OK", "result": 1}]})

        await _engine(handler).execute("RETURN 1")
        assert "Surreal-NS" not in seen[0].headers
        assert "Surreal-DB" not in seen[0].headers
        assert "Authorization" not in seen[0].headers
        assert json.loads(seen[0].content)["params"][1] == {}

    async def test_rpc_ids_increase(self) -> None:
        ids: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            ids.append(json.loads(request.content)["id"])
            return httpx.Response(200, json={"result": [{"status": "OK", "result": None}]})

        engine = _engine(handler)
        await engine.execute("RETURN 1")
        await engine.execute("RETURN 2")
        assert ids[1] == ids[0] + 1

    async def test_returns_first_statement_result(self) -> None:
        engine = _engine(
            _rpc_ok(
                {"status": "OK", "time": "1ms", "result": [{"id": "person:1"}]},
                {"status": "OK", "time": "1ms", "result": ["ignored"]},
            )
        )
        assert await engine.execute("SELECT * FROM person") == [{"id": "person:1"}]

    async def test_err_statement_raises(self) -> None:
        engine = _engine(_rpc_ok({"status": "ERR", "result": "Table 'x' does not exist"}))
        with pytest.raises(EngineError) as exc_info:
            await engine.execute("SELECT * FROM x")
        assert "does not exist" in exc_info.value.message

    async def test_rpc_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"id": 1, "error": {"code": -32000, "message": "Parse error"}}
            )

        with pytest.raises(EngineError) as exc_info:
            await _engine(handler).execute("SELEC")
        assert exc_info.value.message == "Parse error"

    async def test_http_error_status_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="There was a problem with authentication")

        with pytest.raises(EngineError) as exc_info:
            await _engine(handler).execute("RETURN 1")
        assert "401" in exc_info.value.message

    async def test_non_json_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>")

        with pytest.raises(EngineError):
            await _engine(handler).execute("RETURN 1")

    async def test_empty_result_raises(self) -> None:
        with pytest.raises(EngineError):
            await _engine(_rpc_ok()).execute("RETURN 1")

    async def test_transport_error_raises_engine_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(EngineError) as exc_info:
            await _engine(handler).execute("RETURN 1")
        assert "unreachable" in exc_info.value.message
        assert "ConnectError" in exc_info.value.message


@pytest.mark.asyncio
class TestVersionAndHealth:
    async def test_version_strips_prefix(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/version"
            return httpx.Response(200, text="surrealdb-3.0.1\n")

        assert await _engine(handler).version() == "3.0.1"

    async def test_health_true_on_200(self) -> None:
        assert await _engine(lambda r: httpx.Response(200)).health() is True

    async def test_health_false_on_error_status(self) -> None:
        assert await _engine(lambda r: httpx.Response(500)).health() is False

    async def test_health_false_when_unreachable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        assert await _engine(handler).health() is False

    async def test_check_health_accepts_3x(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/version":
                return httpx.Response(200, text="surrealdb-3.1.0")
            return httpx.Response(200)

        assert await check_health(_engine(handler)) == (True, "3.1.0")

    async def test_check_health_rejects_2x(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/version":
                return httpx.Response(200, text="surrealdb-2.3.7")
            return httpx.Response(200)

        healthy, detail = await check_health(_engine(handler))
        assert healthy is False
        assert "2.3.7" in detail

    async def test_check_health_unhealthy(self) -> None:
        healthy, _ = await check_health(_engine(lambda r: httpx.Response(503)))
        assert healthy is False

    async def test_close_leaves_shared_client_open(self) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        engine = SurrealHttpEngine(DatabaseConfig(), client)
        await engine.close()
        assert client.is_closed is False
        await client.aclose()


def test_engine_satisfies_protocol() -> None:
    client = httpx.AsyncClient()
    assert isinstance(SurrealHttpEngine(DatabaseConfig(), client), QueryEngine)


@pytest.mark.asyncio
async def test_create_http_client_limits() -> None:
    client = create_http_client()
    try:
        assert client.timeout.read == 30.0
        assert client.follow_redirects is False
    finally:
        await client.aclose()
