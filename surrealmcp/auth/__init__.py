"""SurrealMCP authentication package.

Public API:
  - authenticate_request() — FastAPI Depends() dependency
  - verify_token()         — bearer token → token id (fails closed)
  - hash_token()           — bcrypt hash for config
  - clear_token_cache()
  - AuthenticationError, AuthErrorKind
"""

from __future__ import annotations

from surrealmcp.auth.middleware import ANONYMOUS_PRINCIPAL, authenticate_request
from surrealmcp.auth.tokens import (
    AuthenticationError,
    AuthErrorKind,
    clear_token_cache,
    hash_token,
    verify_token,
)

__all__ = [
    "ANONYMOUS_PRINCIPAL",
    "AuthErrorKind",
    "AuthenticationError",
    "authenticate_request",
    "clear_token_cache",
    "hash_token",
    "verify_token",
]
