"""Programmatic uvicorn entry point for SurrealMCP.

Reads host and port from the loaded config (127.0.0.1:8080 by default) and
starts uvicorn with hardened defaults:

  --limit-concurrency 100  Max 100 concurrent connections; HTTP 503 when exceeded
  --backlog 50             OS connection queue depth
  --timeout-keep-alive 5   Short keep-alive window against slow clients

Usage:
    python -m surrealmcp.run   # reads .surrealmcp/config.yaml
    surrealmcp                 # via pyproject.toml [project.scripts]

Binding to 0.0.0.0 is allowed but logs a SECURITY WARNING at startup
(see surrealmcp/config.py).
"""

from __future__ import annotations

import uvicorn

from surrealmcp.config import load_config

# Must match the httpx pool size (POOL_MAX_CONNECTIONS in constants.py).
UVICORN_LIMIT_CONCURRENCY: int = 100

UVICORN_BACKLOG: int = 50

UVICORN_TIMEOUT_KEEP_ALIVE: int = 5


def main() -> None:
    """Start SurrealMCP with hardened uvicorn defaults.

    Raises:
        SystemExit: Propagated from load_config() on config errors.
    """
    config = load_config()

    uvicorn.run(
        "surrealmcp.main:app",
        host=config.server.host,
        port=config.server.port,
        limit_concurrency=UVICORN_LIMIT_CONCURRENCY,
        backlog=UVICORN_BACKLOG,
        timeout_keep_alive=UVICORN_TIMEOUT_KEEP_ALIVE,
    )


if __name__ == "__main__":
    main()
