"""Shared constants for SurrealMCP.

Size limits, pool sizes and default numeric settings used across modules are
defined here. No magic numbers in other modules — import from here.
"""

# ─── Parameter Guard ──────────────────────────────────────────────────────────

# Maximum number of characters of an offending snippet echoed back in an
# invalid-parameter response or written to the log. Bounded so that rejected
# user text cannot flood logs or be reflected back at length.
MAX_EXCERPT_CHARS: int = 32

# ─── Logging ──────────────────────────────────────────────────────────────────

# SurrealQL text longer than this is shortened in log entries. Built queries
# are bounded by their snippets, but record values never appear in them.
MAX_LOGGED_QUERY_CHARS: int = 512

# ─── Query Engine HTTP client ─────────────────────────────────────────────────

# Shared httpx.AsyncClient pool. Sized to match UVICORN_LIMIT_CONCURRENCY so
# every in-flight tool call has a pooled connection to the database.
POOL_MAX_CONNECTIONS: int = 100
POOL_MAX_KEEPALIVE: int = 100
POOL_KEEPALIVE_EXPIRY: float = 30.0  # seconds

# Total timeout for one query round-trip to SurrealDB.
QUERY_TIMEOUT_S: float = 30.0

# ─── Rate limiting ────────────────────────────────────────────────────────────

# Sustained requests per second allowed per client IP.
DEFAULT_RATE_LIMIT_RPS: int = 100

# Maximum requests accepted from one client IP within a single second.
DEFAULT_RATE_LIMIT_BURST: int = 200

# ─── Authentication ───────────────────────────────────────────────────────────

# bcrypt cost factor used by hash_token() when generating token hashes.
BCRYPT_ROUNDS: int = 12

# Upper bound on cached successful token verifications.
TOKEN_CACHE_MAXSIZE: int = 1000

# ─── Metrics ──────────────────────────────────────────────────────────────────

# Rolling window size for query latency statistics reported on /health.
QUERY_LATENCY_WINDOW: int = 100
