"""Parameter Guard — applies the snippet validator to a tool call.

For one tool invocation, enumerates the clause parameters that the operation
splices into SurrealQL as raw text and validates each one that is present.

  | Operation                       | Guarded parameters (in check order)       |
  |---------------------------------|-------------------------------------------|
  | select, update, delete, upsert  | where_clause, order_clause, group_clause, |
  |                                 | split_clause, limit_clause, start_clause  |
  | relate                          | table                                     |

INVARIANTS:
  - Every applicable parameter is checked BEFORE any query text is built.
  - The first unsafe parameter (in table order) aborts the call with
    ``InvalidParameterError``; later parameters are not examined.
  - Snippets are never modified. A passing call hands the original text on
    to the query builders unchanged.
  - Excerpts of rejected text are bounded to ``MAX_EXCERPT_CHARS`` and have
    control characters replaced, both in the error and in the log.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from surrealmcp.constants import MAX_EXCERPT_CHARS
from surrealmcp.guard.snippet import Verdict, validate_snippet
from surrealmcp.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Guard table ──────────────────────────────────────────────────────────────

CLAUSE_PARAMETERS: tuple[str, ...] = (
    "where_clause",
    "order_clause",
    "group_clause",
    "split_clause",
    "limit_clause",
    "start_clause",
)

GUARDED_PARAMETERS: dict[str, tuple[str, ...]] = {
    "select": CLAUSE_PARAMETERS,
    "update": CLAUSE_PARAMETERS,
    "delete": CLAUSE_PARAMETERS,
    "upsert": CLAUSE_PARAMETERS,
    "relate": ("table",),
}


# ─── Exceptions ───────────────────────────────────────────────────────────────


class InvalidParameterError(Exception):
    """Raised when a tool argument is rejected before query construction.

    HTTP mapping: 400 Bad Request with code='invalid_parameters'.

    Attributes:
        parameter: Name of the offending argument.
        reason:    Machine-readable reason (an ``UnsafeReason`` value for
                   guard rejections).
        excerpt:   Bounded, sanitised excerpt of the offending text, or None.
    """

    code: str = "invalid_parameters"

    def __init__(
        self,
        parameter: str,
        reason: str,
        excerpt: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        self.parameter = parameter
        self.reason = reason
        self.excerpt = excerpt
        self.message = message or f"Invalid parameter '{parameter}': {reason}"
        super().__init__(self.message)


# ─── Outcome ──────────────────────────────────────────────────────────────────


@dataclass
class ValidationOutcome:
    """Verdicts for every guarded parameter present on one passing call."""

    operation: str
    verdicts: dict[str, Verdict] = field(default_factory=dict)

    @property
    def safe(self) -> bool:
        return all(v.safe for v in self.verdicts.values())


# ─── Helpers ──────────────────────────────────────────────────────────────────


def make_excerpt(text: str, limit: int = MAX_EXCERPT_CHARS) -> str:
    """Return a log- and response-safe excerpt of ``text``.

    Non-printable characters (newlines, ANSI escapes, NULs) are replaced with
    U+FFFD so a rejected snippet cannot forge extra log lines. Output is at
    most ``limit`` characters plus a trailing ellipsis when truncated.
    """
    head = text[:limit]
    cleaned = "".join(ch if ch.isprintable() else "�" for ch in head)
    return cleaned + "…" if len(text) > limit else cleaned


# ─── Guard ────────────────────────────────────────────────────────────────────


def guard_parameters(operation: str, params: Mapping[str, Any]) -> ValidationOutcome:
    """Validate every guarded clause parameter of one tool call.

    Args:
        operation: Tool name (``"select"``, ``"relate"``, ...). Operations
                   with no guarded parameters pass trivially.
        params:    Deserialized arguments. Absent or ``None`` values are skipped.

    Returns:
        ValidationOutcome with one SAFE verdict per present guarded parameter.

    Raises:
        InvalidParameterError: On the first unsafe (or non-string) parameter,
                               in guard-table order.
    """
    outcome = ValidationOutcome(operation=operation)

    for name in GUARDED_PARAMETERS.get(operation, ()):
        value = params.get(name)
        if value is None:
            continue
        if not isinstance(value, str):
            raise InvalidParameterError(name, "not_a_string")

        verdict = validate_snippet(value)
        outcome.verdicts[name] = verdict
        if verdict.safe:
            continue

        excerpt = make_excerpt(value)
        reason = verdict.reason.value if verdict.reason else "unsafe"
        logger.warning(
            "Rejected unsafe clause parameter",
            operation=operation,
            parameter=name,
            reason=reason,
            position=verdict.position,
            excerpt=excerpt,
        )
        raise InvalidParameterError(
            name,
            reason,
            excerpt=excerpt,
            message=f"Parameter '{name}' is not a safe SurrealQL snippet ({reason})",
        )

    return outcome
