"""Identifier and duration helpers for SurrealMCP.

Provides:
  - ``generate_ulid()``          — 26-char ULID (python-ulid; never hand-rolled)
  - ``generate_connection_id()`` — ``conn_<ULID>`` tag bound into the log context
                                   for the lifetime of one HTTP request
  - ``format_duration()``        — human-readable rendering of a timedelta
"""

from __future__ import annotations

from datetime import timedelta

from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID as a 26-character uppercase string.

    Returns:
        str: Crockford Base32 ULID, e.g. ``"01KJ0JRVHYA7KX32VPN5ZSCTMV"``.
    """
    return str(ULID())


def generate_connection_id() -> str:
    """Generate a unique connection ID (``conn_`` + lowercase ULID).

    ULIDs sort by creation time, so connection IDs in the log are ordered the
    same way the requests arrived.
    """
    return f"conn_{generate_ulid().lower()}"


def format_duration(duration: timedelta) -> str:
    """Format a duration in a human-readable way.

    Examples:
        250ms      → ``"250ms"``
        5.042s     → ``"5.042s"``
        125s       → ``"2m 5s"``
        3725s      → ``"1h 2m 5s"``
    """
    total_secs = int(duration.total_seconds())
    millis = duration.microseconds // 1000

    if total_secs == 0:
        return f"{millis}ms"
    if total_secs < 60:
        return f"{total_secs}.{millis:03d}s"
    if total_secs < 3600:
        minutes, seconds = divmod(total_secs, 60)
        return f"{minutes}m {seconds}s"
    hours, rem = divmod(total_secs, 3600)
    minutes, seconds = divmod(rem, 60)
    return f"{hours}h {minutes}m {seconds}s"
