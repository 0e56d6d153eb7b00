"""Shared rate limiter for SurrealMCP tool calls.

Uses slowapi (Starlette-compatible rate limiting) keyed by client IP.

The client IP is taken from the first non-empty value among the usual proxy
headers, in order of preference, then from the socket peer address. Requests
with no identifying information share the ``"unknown"`` bucket.

The Limiter instance is created here and shared between:
  - surrealmcp/tools/router.py (route decorators)
  - surrealmcp/main.py         (app.state.limiter + SlowAPIMiddleware registration)
"""

from __future__ import annotations

from typing import Optional

from slowapi import Limiter
from starlette.requests import Request

from surrealmcp.config import RateLimitConfig
from surrealmcp.constants import DEFAULT_RATE_LIMIT_BURST, DEFAULT_RATE_LIMIT_RPS
from surrealmcp.utils.logger import get_logger

logger = get_logger(__name__)

#: Headers consulted for the client IP, most trusted first.
CLIENT_IP_HEADERS: tuple[str, ...] = (
    "X-Forwarded-For",
    "X-Real-IP",          # nginx
    "X-Client-IP",
    "CF-Connecting-IP",   # Cloudflare
    "True-Client-IP",     # Akamai
    "X-Originating-IP",
    "X-Remote-IP",
    "X-Remote-Addr",
)

UNKNOWN_CLIENT = "unknown"


def client_ip_key(request: Request) -> str:
    """Extract the rate-limit key (client IP) for ``request``.

    ``X-Forwarded-For`` may carry a chain (``client, proxy1, proxy2``); only
    the first hop is used. Empty and whitespace-only header values fall
    through to the next header.
    """
    for header in CLIENT_IP_HEADERS:
        value = request.headers.get(header)
        if not value:
            continue
        if header == "X-Forwarded-For":
            value = value.split(",")[0]
        value = value.strip()
        if value:
            return value

    if request.client is not None and request.client.host:
        return request.client.host

    logger.warning("Could not extract client IP from request, using default key")
    return UNKNOWN_CLIENT


def build_rate_limit(rate_limit: RateLimitConfig) -> str:
    """Render a RateLimitConfig as a slowapi limit string.

    ``burst`` caps any single second; ``rps`` is enforced as a sustained
    per-minute budget.
    """
    return f"{rate_limit.burst}/second;{rate_limit.rps * 60}/minute"


# Imported by main.py and tools/router.py
limiter = Limiter(key_func=client_ip_key)

_tool_call_limit: str = build_rate_limit(
    RateLimitConfig(rps=DEFAULT_RATE_LIMIT_RPS, burst=DEFAULT_RATE_LIMIT_BURST)
)


def configure_rate_limit(rate_limit: Optional[RateLimitConfig]) -> None:
    """Set the limit applied to tool calls. Called once from the app lifespan."""
    global _tool_call_limit
    if rate_limit is None:
        return
    _tool_call_limit = build_rate_limit(rate_limit)
    logger.info("Rate limit configured", limit=_tool_call_limit)


def tool_call_limit() -> str:
    """Dynamic limit provider for ``@limiter.limit(tool_call_limit)``."""
    return _tool_call_limit
