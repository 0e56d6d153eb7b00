"""SurrealMCP API token verification.

Implements:
  - hash_token()     — bcrypt hash for a new token (for operators populating config)
  - verify_token()   — bearer token → token id, or AuthenticationError
  - clear_token_cache()

Non-negotiables:
  - There is NO built-in or fallback token. When auth is required and no
    tokens are configured, verification fails with NOT_CONFIGURED.
  - Plaintext tokens are never stored, cached or logged. The verification
    cache is keyed by the SHA-256 digest of the presented token.
  - bcrypt.checkpw() is only reached on a cache miss.
"""

from __future__ import annotations

import hashlib
from collections import OrderedDict
from enum import Enum
from typing import Optional, Sequence

import bcrypt

from surrealmcp.config import TokenEntry
from surrealmcp.constants import BCRYPT_ROUNDS, TOKEN_CACHE_MAXSIZE
from surrealmcp.utils.logger import get_logger

logger = get_logger(__name__)


# ─── Exceptions ───────────────────────────────────────────────────────────────


class AuthErrorKind(str, Enum):
    """Distinct authentication failure outcomes."""

    MISSING_CREDENTIAL = "missing_credential"
    INVALID_CREDENTIAL = "invalid_credential"
    NOT_CONFIGURED = "not_configured"


class AuthenticationError(Exception):
    """Raised when a request cannot be authenticated.

    HTTP mapping:
      MISSING_CREDENTIAL / INVALID_CREDENTIAL → 401 code='authentication_failed'
      NOT_CONFIGURED                          → 503 code='authentication_unavailable'
    """

    def __init__(self, kind: AuthErrorKind, message: Optional[str] = None) -> None:
        self.kind = kind
        self.message = message or {
            AuthErrorKind.MISSING_CREDENTIAL: "Missing bearer token",
            AuthErrorKind.INVALID_CREDENTIAL: "Invalid bearer token",
            AuthErrorKind.NOT_CONFIGURED: "Authentication is required but no tokens are configured",
        }[kind]
        super().__init__(self.message)

    @property
    def code(self) -> str:
        if self.kind is AuthErrorKind.NOT_CONFIGURED:
            return "authentication_unavailable"
        return "authentication_failed"


# ─── LRU Cache (module-level) ─────────────────────────────────────────────────
# OrderedDict-based LRU: digest of presented token -> token id.
# Must be cleared whenever the configured token set changes.

_cache: OrderedDict[str, str] = OrderedDict()


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _cache_get(digest: str) -> Optional[str]:
    if digest in _cache:
        _cache.move_to_end(digest)
        return _cache[digest]
    return None


def _cache_set(digest: str, token_id: str) -> None:
    if digest in _cache:
        _cache.move_to_end(digest)
    elif len(_cache) >= TOKEN_CACHE_MAXSIZE:
        _cache.popitem(last=False)
    _cache[digest] = token_id


def clear_token_cache() -> None:
    """Invalidate ALL cached token verifications."""
    _cache.clear()
    logger.debug("Token verification cache cleared")


# ─── Hashing ──────────────────────────────────────────────────────────────────


def hash_token(token: str) -> str:
    """Return the bcrypt hash to store in ``auth.tokens[].hash`` for ``token``."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(token.encode(), salt).decode()


# ─── Verification ─────────────────────────────────────────────────────────────


def verify_token(token: Optional[str], entries: Sequence[TokenEntry]) -> str:
    """Verify a presented bearer token against the configured entries.

    Args:
        token:   Plaintext token from the request (None/empty when absent).
        entries: Configured TokenEntry list.

    Returns:
        The ``id`` of the matching TokenEntry.

    Raises:
        AuthenticationError(NOT_CONFIGURED):     no entries configured.
        AuthenticationError(MISSING_CREDENTIAL): no token presented.
        AuthenticationError(INVALID_CREDENTIAL): token matches no entry.
    """
    if not entries:
        raise AuthenticationError(AuthErrorKind.NOT_CONFIGURED)
    if not token:
        raise AuthenticationError(AuthErrorKind.MISSING_CREDENTIAL)

    digest = _digest(token)
    cached = _cache_get(digest)
    if cached is not None and any(entry.id == cached for entry in entries):
        return cached

    encoded = token.encode()
    for entry in entries:
        try:
            matched = bcrypt.checkpw(encoded, entry.hash.encode())
        except ValueError as exc:
            # Malformed hash in config: skip the entry, never accept on error
            logger.warning("bcrypt verify error", token_id=entry.id, error=str(exc))
            continue
        if matched:
            _cache_set(digest, entry.id)
            return entry.id

    raise AuthenticationError(AuthErrorKind.INVALID_CREDENTIAL)
