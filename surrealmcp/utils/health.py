"""Query metrics for SurrealMCP.

Provides ``QueryMetrics``: counters for executed, failed and rejected tool
calls plus a rolling window of the last N query durations (avg, p99).
Reported by ``GET /health``.
"""

from __future__ import annotations

from collections import deque

from surrealmcp.constants import QUERY_LATENCY_WINDOW


class QueryMetrics:
    """Counters and rolling latency window for tool calls.

    Thread-safety:
        Safe for single-threaded asyncio use (all access from the event loop).
        NOT safe for concurrent OS-thread access (not needed here).

    Args:
        window: Maximum number of latency samples to retain.

    Usage::

        metrics = QueryMetrics()
        metrics.record_query(12.3)           # successful query, 12.3 ms
        metrics.record_query(40.0, ok=False) # failed query
        metrics.record_rejection()           # call refused by the guard
        metrics.p99_ms
    """

    def __init__(self, window: int = QUERY_LATENCY_WINDOW) -> None:
        self._times: deque[float] = deque(maxlen=window)
        self.total_queries: int = 0
        self.total_query_errors: int = 0
        self.total_rejections: int = 0

    # ── Mutation ──────────────────────────────────────────────────────────────

    def record_query(self, duration_ms: float, ok: bool = True) -> None:
        """Record one query round-trip.

        Failed queries still contribute their duration to the latency window;
        a slow failure is as relevant to operators as a slow success.
        """
        self.total_queries += 1
        if not ok:
            self.total_query_errors += 1
        self._times.append(duration_ms)

    def record_rejection(self) -> None:
        """Record a tool call refused before reaching the database."""
        self.total_rejections += 1

    # ── Computed properties ───────────────────────────────────────────────────

    @property
    def avg_ms(self) -> float:
        """Rolling mean of the window; 0.0 when empty."""
        if not self._times:
            return 0.0
        return sum(self._times) / len(self._times)

    @property
    def p99_ms(self) -> float:
        """99th percentile of the window; 0.0 until 10 samples exist."""
        if len(self._times) < 10:
            return 0.0
        sorted_times = sorted(self._times)
        idx = max(0, int(len(sorted_times) * 0.99) - 1)
        return sorted_times[idx]

    @property
    def count(self) -> int:
        """Number of latency samples currently in the window."""
        return len(self._times)

    def snapshot(self) -> dict[str, float | int]:
        """Return all metrics as a JSON-serializable dict."""
        return {
            "total_queries": self.total_queries,
            "total_query_errors": self.total_query_errors,
            "total_rejections": self.total_rejections,
            "avg_query_ms": round(self.avg_ms, 3),
            "p99_query_ms": round(self.p99_ms, 3),
        }
