"""Root test configuration for SurrealMCP.

Every test starts from a clean environment:
  - SurrealDB / SurrealMCP environment overrides are removed
  - the default config search paths are disabled, so a developer's
    ``~/.surrealmcp/config.yaml`` never leaks into a test
  - the rate limiter storage, tool call limit and token cache are reset

Shared fixtures:
  - ``fake_engine``    — in-memory QueryEngine that records executed queries
  - ``api_token``      — (plaintext, TokenEntry) pair hashed with cheap bcrypt rounds
  - ``make_client``    — TestClient factory for an app wired to a given config/engine
"""

from __future__ import annotations

from typing import Any, Callable, Iterator, Optional

import bcrypt
import pytest
from starlette.testclient import TestClient

from surrealmcp.auth.limiter import configure_rate_limit, limiter
from surrealmcp.auth.tokens import clear_token_cache
from surrealmcp.config import Config, RateLimitConfig, TokenEntry
from surrealmcp.engine.protocol import EngineError

_ENV_VARS = (
    "SURREAL_MCP_CONFIG",
    "SURREALDB_URL",
    "SURREALDB_NS",
    "SURREALDB_DB",
    "SURREALDB_USER",
    "SURREALDB_PASS",
    "SURREAL_MCP_BIND_ADDRESS",
    "SURREAL_MCP_PORT",
    "SURREAL_MCP_AUTH_DISABLED",
    "SURREAL_MCP_RATE_LIMIT_RPS",
    "SURREAL_MCP_RATE_LIMIT_BURST",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("surrealmcp.config.DEFAULT_CONFIG_PATHS", [])


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> Iterator[None]:
    """Reset limiter storage and the tool call limit between tests.

    Prevents test-to-test rate limit bleed where multiple tests hitting the
    same endpoint within the same second would trigger a 429.
    """
    limiter.reset()
    yield
    configure_rate_limit(RateLimitConfig())
    limiter.reset()


@pytest.fixture(autouse=True)
def reset_token_cache() -> Iterator[None]:
    clear_token_cache()
    yield
    clear_token_cache()


# ─── Fake engine ──────────────────────────────────────────────────────────────


class FakeEngine:
    """QueryEngine double. Records every execute() call.

    Args:
        result:  Value returned by execute().
        error:   When set, execute() raises EngineError(error).
        version: Value returned by version().
        healthy: Value returned by health().
    """

    def __init__(
        self,
        result: Any = None,
        error: Optional[str] = None,
        version: str = "3.0.0",
        healthy: bool = True,
    ) -> None:
        self.result = [] if result is None else result
        self.error = error
        self._version = version
        self.healthy = healthy
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    async def execute(self, query: str, variables: Optional[dict[str, Any]] = None) -> Any:
        self.calls.append((query, dict(variables or {})))
        if self.error is not None:
            raise EngineError(self.error)
        return self.result

    async def version(self) -> str:
        return self._version

    async def health(self) -> bool:
        return self.healthy

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine(result=[{"id": "person:tobie", "name": "Tobie"}])


@pytest.fixture
def engine_factory() -> type[FakeEngine]:
    """The FakeEngine class, for tests that need custom results or errors."""
    return FakeEngine


# ─── Auth ─────────────────────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def api_token() -> tuple[str, TokenEntry]:
    """A plaintext token and its TokenEntry (bcrypt rounds=4 to keep tests fast)."""
    plaintext = "smcp-test-token-0123456789"
    hashed = bcrypt.hashpw(plaintext.encode(), bcrypt.gensalt(rounds=4)).decode()
    return plaintext, TokenEntry(id="test-agent", hash=hashed)


# ─── App client ───────────────────────────────────────────────────────────────


@pytest.fixture
def make_client(
    monkeypatch: pytest.MonkeyPatch,
) -> Iterator[Callable[..., TestClient]]:
    """Build a TestClient for a fresh app using ``config`` and ``engine``.

    The lifespan runs on entering the client, so ``app.state.ready`` is True
    and ``app.state.tool_service`` wraps ``engine``.
    """
    from surrealmcp.main import create_app

    clients: list[TestClient] = []

    def _make(config: Config, engine: Any) -> TestClient:
        monkeypatch.setattr("surrealmcp.main.load_config", lambda: config)
        monkeypatch.setattr(
            "surrealmcp.tools.service.create_query_engine", lambda cfg, client: engine
        )
        client = TestClient(create_app())
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def anonymous_config() -> Config:
    """Config with authentication disabled."""
    config = Config.defaults()
    config.auth.required = False
    return config


@pytest.fixture
def token_config(api_token: tuple[str, TokenEntry]) -> Config:
    """Config requiring auth with one configured token."""
    config = Config.defaults()
    config.auth.tokens = [api_token[1]]
    return config
