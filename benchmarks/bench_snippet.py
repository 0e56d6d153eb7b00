"""Snippet validator benchmark.

Measures p99 latency of validate_snippet() across input categories:

  1. Typical clauses (short WHERE / ORDER BY text)
  2. Long clauses with many string literals (quote-state churn)
  3. Early rejection (separator near the start)
  4. Late rejection (separator at the very end of a long snippet)

The validator is a single linear pass, so even 64 KiB inputs should stay
well under 1ms p99 on commodity hardware.

Usage (from project root):
    python benchmarks/bench_snippet.py
"""

from __future__ import annotations

import statistics
import time
from typing import Any

from surrealmcp.guard.snippet import validate_snippet

# ---------------------------------------------------------------------------
# Test inputs
# ---------------------------------------------------------------------------

TYPICAL_WHERE = "age > 18 AND name = 'Tobie' AND email CONTAINS '@surrealdb.com'"
TYPICAL_ORDER = "created_at DESC, name ASC"
MANY_STRINGS = " OR ".join(f"tag = 'value-{i}; -- /* it''s fine'" for i in range(400))
EARLY_REJECT = "id = 1; DELETE person" + " AND x = 1" * 2000
LATE_REJECT = "x = 1 AND " * 6500 + "y = 2;"


# ---------------------------------------------------------------------------
# Benchmark runner
# ---------------------------------------------------------------------------


def measure_p99(fn: Any, *args: Any, n: int = 1_000) -> tuple[float, float, float]:
    """Run fn(*args) n times and return (p50, p99, max) in milliseconds."""
    latencies: list[float] = []
    for _ in range(n):
        start = time.perf_counter()
        fn(*args)
        latencies.append((time.perf_counter() - start) * 1_000)
    latencies.sort()
    return statistics.median(latencies), latencies[int(0.99 * n)], latencies[-1]


def run_benchmarks() -> bool:
    """Run all benchmarks. Returns True if every p99 is within budget."""
    WARMUP = 100
    N = 1_000

    print("=" * 70)
    print("SurrealMCP validate_snippet() Benchmark")
    print(f"Warmup: {WARMUP} calls | Measurement: {N} calls each")
    print("=" * 70)

    scenarios = [
        (f"Typical WHERE ({len(TYPICAL_WHERE)} chars)", TYPICAL_WHERE, 0.05),
        (f"Typical ORDER BY ({len(TYPICAL_ORDER)} chars)", TYPICAL_ORDER, 0.05),
        (f"Many string literals ({len(MANY_STRINGS)} chars)", MANY_STRINGS, 10.0),
        (f"Early rejection ({len(EARLY_REJECT)} chars)", EARLY_REJECT, 0.05),
        (f"Late rejection ({len(LATE_REJECT)} chars)", LATE_REJECT, 20.0),
    ]

    all_pass = True
    for name, text, budget_ms in scenarios:
        for _ in range(WARMUP):
            validate_snippet(text)

        p50, p99, worst = measure_p99(validate_snippet, text, n=N)
        passed = p99 <= budget_ms
        status = "✓ PASS" if passed else "✗ FAIL"
        if not passed:
            all_pass = False
        print(f"  [{status}] {name}")
        print(f"          p50={p50:.3f}ms  p99={p99:.3f}ms  worst={worst:.3f}ms  budget={budget_ms}ms")

    print("=" * 70)
    print("RESULT: ALL BENCHMARKS PASSED ✓" if all_pass else "RESULT: SOME BENCHMARKS FAILED ✗")
    print("=" * 70)
    return all_pass


if __name__ == "__main__":
    import sys

    sys.exit(0 if run_benchmarks() else 1)
