"""SurrealMCP authentication dependency.

Provides ``authenticate_request()``: a FastAPI Depends()-compatible async
dependency that extracts and verifies the bearer token on incoming requests.

CRITICAL INVARIANT: authentication runs BEFORE tool dispatch. Tool routes
depend on this function, so a failure short-circuits the handler before any
argument is deserialized, guarded or sent to the database.

Auth control (``config.auth.required``, see surrealmcp/config.py):
  - true  (default) → token verification enforced; fails closed when no tokens
                      are configured
  - false           → every caller is 'anonymous' (local development only)
"""

from __future__ import annotations

import re
from typing import Optional

from fastapi import Request

from surrealmcp.auth.tokens import AuthenticationError, verify_token
from surrealmcp.config import Config
from surrealmcp.utils.logger import get_logger

logger = get_logger(__name__)

_BEARER_RE = re.compile(r"^Bearer\s+(\S+)$", re.IGNORECASE)

ANONYMOUS_PRINCIPAL = "anonymous"


def _extract_bearer(authorization: str) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header, else None."""
    if not authorization:
        return None
    m = _BEARER_RE.match(authorization.strip())
    return m.group(1) if m else None


async def authenticate_request(request: Request) -> str:
    """FastAPI dependency: authenticate the caller.

    Returns:
        The matching token id, or ``'anonymous'`` when auth is disabled.

    Raises:
        AuthenticationError: Missing/invalid token, or no tokens configured
                             while auth is required. Mapped to 401/503 by the
                             exception handler in surrealmcp/main.py.
    """
    config: Config = request.app.state.config
    if not config.auth.required:
        return ANONYMOUS_PRINCIPAL

    token = _extract_bearer(request.headers.get("Authorization", ""))
    try:
        principal = verify_token(token, config.auth.tokens)
    except AuthenticationError as exc:
        logger.warning(
            "Authentication failed",
            kind=exc.kind.value,
            path=str(request.url.path),
            method=request.method,
        )
        raise

    return principal
