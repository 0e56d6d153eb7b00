"""Config loading for SurrealMCP.

Reads `.surrealmcp/config.yaml` (or `~/.surrealmcp/config.yaml`).
Raises SystemExit on parse errors or missing `version` field.
If no config file is found, returns default values.

Defaults are safe, not permissive: authentication is required and no API
token is configured, so a server started without config refuses every tool
call with an "authentication unavailable" error until tokens are added.

Config search order:
  1. `config_path` argument (if provided — for testing or explicit override)
  2. SURREAL_MCP_CONFIG environment variable (if set)
  3. `.surrealmcp/config.yaml` (working directory — for development)
  4. `~/.surrealmcp/config.yaml` (home directory — for production deployments)

Environment variable overrides (applied after the file):
  SURREALDB_URL                  — database.endpoint
  SURREALDB_NS                   — database.namespace
  SURREALDB_DB                   — database.database
  SURREALDB_USER                 — database.username
  SURREALDB_PASS                 — database.password
  SURREAL_MCP_BIND_ADDRESS       — server.host
  SURREAL_MCP_PORT               — server.port
  SURREAL_MCP_AUTH_DISABLED      — "true" sets auth.required = false
  SURREAL_MCP_RATE_LIMIT_RPS     — rate_limit.rps
  SURREAL_MCP_RATE_LIMIT_BURST   — rate_limit.burst

Example::

    version: 1
    database:
      endpoint: http://127.0.0.1:8000
      namespace: app
      database: main
      username: root
      password: root
    server:
      host: 127.0.0.1
      port: 8080
    auth:
      required: true
      tokens:
        - id: ci-agent
          hash: "$2b$12$..."     # python -c "from surrealmcp.auth import hash_token; ..."
    rate_limit:
      rps: 100
      burst: 200
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Any, Optional

import yaml

from surrealmcp.constants import DEFAULT_RATE_LIMIT_BURST, DEFAULT_RATE_LIMIT_RPS
from surrealmcp.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

DEFAULT_CONFIG_PATHS = [
    ".surrealmcp/config.yaml",
    os.path.expanduser("~/.surrealmcp/config.yaml"),
]


def _config_error(message: str) -> SystemExit:
    """Print a CONFIG ERROR line to stderr and return the SystemExit to raise."""
    print(f"CONFIG ERROR: {message}", file=sys.stderr)
    return SystemExit(1)


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class DatabaseConfig:
    """SurrealDB connection settings.

    endpoint:  HTTP(S) base URL of the SurrealDB server. ``ws://`` and
               ``wss://`` URLs are accepted and mapped to HTTP by the engine.
    namespace: Sent as the ``Surreal-NS`` header when set.
    database:  Sent as the ``Surreal-DB`` header when set.
    username / password: Basic auth credentials (root or namespace user).
    """

    endpoint: str = "http://127.0.0.1:8000"
    namespace: Optional[str] = None
    database: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


@dataclass
class ServerConfig:
    """HTTP binding configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class TokenEntry:
    """One accepted API token: an identifier plus its bcrypt hash.

    The plaintext token is never stored in config.
    """

    id: str
    hash: str


@dataclass
class AuthConfig:
    """Authentication configuration.

    required: When True (the default) every tool/resource request must carry a
              bearer token matching one of ``tokens``. With no tokens configured
              requests fail closed — there is no fallback token.
    tokens:   Accepted tokens (bcrypt hashes).
    """

    required: bool = True
    tokens: list[TokenEntry] = field(default_factory=list)


@dataclass
class RateLimitConfig:
    """Per-client-IP rate limit for tool calls."""

    rps: int = DEFAULT_RATE_LIMIT_RPS
    burst: int = DEFAULT_RATE_LIMIT_BURST


@dataclass
class Config:
    """Root configuration object populated from .surrealmcp/config.yaml."""

    version: int = SUPPORTED_CONFIG_VERSION
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    path: Optional[str] = None  # Path to the loaded config file

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are ignored.

        Raises:
            SystemExit(1): On malformed token entries or non-positive rate limits.
        """
        # ── Database ──────────────────────────────────────────────────────────
        db_raw = raw.get("database") or {}
        database = DatabaseConfig(
            endpoint=db_raw.get("endpoint", DatabaseConfig.endpoint),
            namespace=db_raw.get("namespace"),
            database=db_raw.get("database"),
            username=db_raw.get("username"),
            password=db_raw.get("password"),
        )

        # ── Server ────────────────────────────────────────────────────────────
        server_raw = raw.get("server") or {}
        server = ServerConfig(
            host=server_raw.get("host", "127.0.0.1"),
            port=server_raw.get("port", 8080),
        )

        # ── Auth ──────────────────────────────────────────────────────────────
        auth_raw = raw.get("auth") or {}
        auth = AuthConfig(
            required=bool(auth_raw.get("required", True)),
            tokens=[_parse_token_entry(entry, path) for entry in auth_raw.get("tokens") or []],
        )

        # ── Rate limit ────────────────────────────────────────────────────────
        rl_raw = raw.get("rate_limit") or {}
        rate_limit = RateLimitConfig(
            rps=rl_raw.get("rps", DEFAULT_RATE_LIMIT_RPS),
            burst=rl_raw.get("burst", DEFAULT_RATE_LIMIT_BURST),
        )
        _validate_rate_limit(rate_limit)
        _validate_port(server.port)

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            database=database,
            server=server,
            auth=auth,
            rate_limit=rate_limit,
            path=path,
        )


def _parse_token_entry(entry: Any, path: Optional[str]) -> TokenEntry:
    """Parse one ``auth.tokens`` item. Rejects plaintext-looking values."""
    if not isinstance(entry, dict) or not entry.get("id") or not entry.get("hash"):
        raise _config_error(
            f"{path or 'config'}: each auth.tokens entry needs an 'id' and a 'hash'."
        )
    token_hash = str(entry["hash"])
    if not token_hash.startswith("$2"):
        raise _config_error(
            f"{path or 'config'}: auth.tokens entry '{entry['id']}' is not a bcrypt hash. "
            "Store the output of surrealmcp.auth.hash_token(), never the token itself."
        )
    return TokenEntry(id=str(entry["id"]), hash=token_hash)


def _validate_rate_limit(rate_limit: RateLimitConfig) -> None:
    for name in ("rps", "burst"):
        value = getattr(rate_limit, name)
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise _config_error(f"rate_limit.{name} must be a positive integer, got {value!r}")


def _validate_port(port: Any) -> None:
    if not isinstance(port, int) or isinstance(port, bool) or not 1 <= port <= 65535:
        raise _config_error(f"server.port must be an integer between 1 and 65535, got {port!r}")


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate SurrealMCP configuration.

    If no file is found at any search path, returns default Config (not an
    error). If a file is found but invalid, writes the error to stderr and
    raises SystemExit(1). Environment overrides are applied in both cases.

    Raises:
        SystemExit(1): On YAML parse error, missing or unsupported ``version``,
                       malformed tokens, invalid rate limits, or invalid
                       numeric environment overrides.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("SURREAL_MCP_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    # ── No config file found ─────────────────────────────────────────────────
    if found_path is None:
        logger.info("No config file found — using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        _log_security_warnings(config)
        return config

    # ── Parse config file ─────────────────────────────────────────────────────
    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise _config_error(
            f"Failed to parse {found_path}: {exc}\n"
            "SurrealMCP refuses to start with an invalid config."
        )
    except OSError as exc:
        raise _config_error(f"Could not read {found_path}: {exc}")

    if not isinstance(raw, dict):
        if raw is None:
            raise _config_error(
                f"{found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        raise _config_error(
            f"{found_path} is not a valid YAML mapping.\n"
            "The config file must be a YAML dictionary at the top level."
        )

    # ── Version validation ────────────────────────────────────────────────────
    version = raw.get("version")
    if version is None:
        raise _config_error(
            f"{found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
    if version not in SUPPORTED_VERSIONS:
        raise _config_error(
            f"Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)
    _log_security_warnings(config)

    logger.info(
        "Config loaded",
        path=found_path,
        version=config.version,
        endpoint=config.database.endpoint,
        auth_required=config.auth.required,
        token_count=len(config.auth.tokens),
    )
    return config


def _env_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise _config_error(f"{name} environment variable is not a valid integer: '{value}'")


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Called for both file-loaded and default configs so env vars always take
    precedence over any file value.
    """
    db = config.database
    db.endpoint = os.environ.get("SURREALDB_URL", db.endpoint)
    db.namespace = os.environ.get("SURREALDB_NS", db.namespace)
    db.database = os.environ.get("SURREALDB_DB", db.database)
    db.username = os.environ.get("SURREALDB_USER", db.username)
    db.password = os.environ.get("SURREALDB_PASS", db.password)

    config.server.host = os.environ.get("SURREAL_MCP_BIND_ADDRESS", config.server.host)
    port = _env_int("SURREAL_MCP_PORT")
    if port is not None:
        config.server.port = port

    if os.environ.get("SURREAL_MCP_AUTH_DISABLED", "false").lower() == "true":
        config.auth.required = False

    rps = _env_int("SURREAL_MCP_RATE_LIMIT_RPS")
    if rps is not None:
        config.rate_limit.rps = rps
    burst = _env_int("SURREAL_MCP_RATE_LIMIT_BURST")
    if burst is not None:
        config.rate_limit.burst = burst
    _validate_rate_limit(config.rate_limit)
    _validate_port(config.server.port)


def _log_security_warnings(config: Config) -> None:
    if config.server.host == "0.0.0.0":
        logger.warning(
            "SECURITY WARNING: SurrealMCP is configured to bind on 0.0.0.0 (all interfaces). "
            "Recommended: use server.host: '127.0.0.1' for local-only access."
        )
    if not config.auth.required:
        logger.warning(
            "SECURITY WARNING: authentication is disabled — every caller is 'anonymous'. "
            "Never run with auth disabled outside local development."
        )
    elif not config.auth.tokens:
        logger.warning(
            "No API tokens configured — all tool calls will be refused until "
            "auth.tokens is populated."
        )
