"""SurrealMCP snippet guard package.

Public API:
  - validate_snippet()          — quote-aware snippet validator → Verdict
  - is_safe_surrealql_snippet() — boolean form of validate_snippet()
  - guard_parameters()          — applies the validator to a tool call's clause parameters
  - InvalidParameterError       — raised by guard_parameters() on the first unsafe parameter
"""

from __future__ import annotations

from surrealmcp.guard.params import (
    CLAUSE_PARAMETERS,
    GUARDED_PARAMETERS,
    InvalidParameterError,
    ValidationOutcome,
    guard_parameters,
    make_excerpt,
)
from surrealmcp.guard.snippet import (
    SAFE,
    QuoteContext,
    UnsafeReason,
    Verdict,
    is_safe_surrealql_snippet,
    validate_snippet,
)

__all__ = [
    "CLAUSE_PARAMETERS",
    "GUARDED_PARAMETERS",
    "InvalidParameterError",
    "QuoteContext",
    "SAFE",
    "UnsafeReason",
    "ValidationOutcome",
    "Verdict",
    "guard_parameters",
    "is_safe_surrealql_snippet",
    "make_excerpt",
    "validate_snippet",
]
