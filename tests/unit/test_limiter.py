"""Unit tests for surrealmcp/auth/limiter.py — client IP key and limit string."""

from __future__ import annotations

from typing import Optional

import pytest
from starlette.requests import Request

from surrealmcp.auth.limiter import (
    CLIENT_IP_HEADERS,
    build_rate_limit,
    client_ip_key,
    configure_rate_limit,
    tool_call_limit,
)
from surrealmcp.config import RateLimitConfig


def _request(
    headers: Optional[dict[str, str]] = None,
    client: Optional[tuple[str, int]] = ("10.0.0.9", 5000),
) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/tools/select",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestClientIpKey:
    def test_forwarded_for_first_hop(self) -> None:
        request = _request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1, 10.0.0.2"})
        assert client_ip_key(request) == "203.0.113.7"

    def test_forwarded_for_wins_over_real_ip(self) -> None:
        request = _request({"X-Forwarded-For": "1.1.1.1", "X-Real-IP": "2.2.2.2"})
        assert client_ip_key(request) == "1.1.1.1"

    def test_real_ip(self) -> None:
        assert client_ip_key(_request({"X-Real-IP": "2.2.2.2"})) == "2.2.2.2"

    def test_cloudflare(self) -> None:
        assert client_ip_key(_request({"CF-Connecting-IP": "3.3.3.3"})) == "3.3.3.3"

    def test_precedence_follows_header_order(self) -> None:
        headers = {name: f"9.9.9.{i}" for i, name in enumerate(CLIENT_IP_HEADERS)}
        del headers["X-Forwarded-For"]
        del headers["X-Real-IP"]
        assert client_ip_key(_request(headers)) == "9.9.9.2"  # X-Client-IP

    def test_empty_header_falls_through(self) -> None:
        request = _request({"X-Forwarded-For": " ", "X-Real-IP": "4.4.4.4"})
        assert client_ip_key(request) == "4.4.4.4"

    def test_socket_peer_fallback(self) -> None:
        assert client_ip_key(_request()) == "10.0.0.9"

    def test_unknown_fallback(self) -> None:
        assert client_ip_key(_request(client=None)) == "unknown"


class TestLimitString:
    def test_build_rate_limit(self) -> None:
        assert build_rate_limit(RateLimitConfig(rps=100, burst=200)) == "200/second;6000/minute"

    def test_configure_rate_limit(self) -> None:
        configure_rate_limit(RateLimitConfig(rps=1, burst=2))
        assert tool_call_limit() == "2/second;60/minute"

    def test_configure_none_keeps_limit(self) -> None:
        before = tool_call_limit()
        configure_rate_limit(None)
        assert tool_call_limit() == before


@pytest.mark.parametrize("header", CLIENT_IP_HEADERS)
def test_every_header_is_honoured(header: str) -> None:
    assert client_ip_key(_request({header: "198.51.100.1"})) == "198.51.100.1"
