"""SurrealQL snippet safety validator.

Decides whether a caller-supplied clause snippet (a WHERE filter, an ORDER BY
list, a LIMIT bound, ...) can be spliced verbatim into a SurrealQL statement
without changing the statement's structure.

Provides:
  - ``validate_snippet()``          — pure, total decision function → ``Verdict``
  - ``is_safe_surrealql_snippet()`` — boolean convenience form
  - ``Verdict``, ``UnsafeReason``, ``QuoteContext``, ``ScanState``

The decision is made by an explicit single-pass state machine, NOT a regular
expression. Each character is consumed exactly once with at most one character
of lookahead, so running time is linear in the snippet length for every input.

Quote-state transitions, in priority order:
  1. Pending escape → consume the character literally, clear the flag.
  2. Inside '...' and the character is ``'``: a doubled ``''`` is a literal
     quote (both consumed, still inside); otherwise the string closes.
  3. Same for "..." and ``"``.
  4. Unquoted ``'`` or ``"`` opens a string.
  5. Backslash inside a string sets the pending-escape flag.
  6. Anything else stays in the current context. Unquoted characters are
     checked against the forbidden-pattern policy.

Forbidden-pattern policy (unquoted characters only, checked in this order):
  ``;``  → STATEMENT_SEPARATOR
  ``--`` → LINE_COMMENT
  ``/*`` → BLOCK_COMMENT

Reaching the end of the snippet inside a string, or with an escape pending,
is UNTERMINATED_STRING: without a closing quote there is no way to know where
unquoted text resumes, so the snippet is rejected.

Both doubled-quote and backslash escaping are honoured inside strings. Whether
SurrealQL's grammar also treats backslash as an escape inside every string
form must be verified against the parser before this is relied on as the sole
security boundary.

The validator never rewrites, trims or case-folds the snippet, never raises
for any ``str`` input, keeps no state between calls and performs no I/O. It is
safe to call concurrently from any number of request handlers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

__all__ = [
    "QuoteContext",
    "ScanState",
    "UnsafeReason",
    "Verdict",
    "SAFE",
    "is_safe_surrealql_snippet",
    "validate_snippet",
]


# ─── Types ────────────────────────────────────────────────────────────────────


class QuoteContext(str, Enum):
    """Lexical region the scanner cursor is currently in."""

    UNQUOTED = "unquoted"
    IN_SINGLE = "in_single"
    IN_DOUBLE = "in_double"


class UnsafeReason(str, Enum):
    """Closed set of reasons a snippet is rejected."""

    STATEMENT_SEPARATOR = "statement_separator"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"
    UNTERMINATED_STRING = "unterminated_string"


@dataclass(frozen=True)
class Verdict:
    """Outcome of validating one snippet. Produced once, never mutated.

    Fields:
        safe:     True when the snippet cannot escape its syntactic slot.
        reason:   Why the snippet was rejected (None when safe).
        position: Character offset of the violation. For UNTERMINATED_STRING
                  this is the offset of the quote that opened the string.
    """

    safe: bool
    reason: Optional[UnsafeReason] = None
    position: Optional[int] = None

    @classmethod
    def unsafe(cls, reason: UnsafeReason, position: int) -> "Verdict":
        return cls(safe=False, reason=reason, position=position)


#: The single shared safe verdict (Verdict is immutable).
SAFE = Verdict(safe=True)


@dataclass
class ScanState:
    """Mutable scan state. Owned by exactly one ``validate_snippet()`` call.

    Invariant: ``escape_pending`` is only ever set while ``context`` is a
    string context, and it applies to exactly the next character.
    """

    context: QuoteContext = QuoteContext.UNQUOTED
    escape_pending: bool = False
    cursor: int = 0
    string_start: int = -1


# ─── Transition tables ────────────────────────────────────────────────────────

_OPENING_QUOTES: dict[str, QuoteContext] = {
    "'": QuoteContext.IN_SINGLE,
    '"': QuoteContext.IN_DOUBLE,
}

_CLOSING_QUOTES: dict[QuoteContext, str] = {
    QuoteContext.IN_SINGLE: "'",
    QuoteContext.IN_DOUBLE: '"',
}

_ESCAPE = "\\"


# ─── Policy ───────────────────────────────────────────────────────────────────


def _check_policy(snippet: str, pos: int) -> Optional[UnsafeReason]:
    """Apply the forbidden-pattern rules to the unquoted character at ``pos``."""
    ch = snippet[pos]
    if ch == ";":
        return UnsafeReason.STATEMENT_SEPARATOR
    following = snippet[pos + 1 : pos + 2]
    if ch == "-" and following == "-":
        return UnsafeReason.LINE_COMMENT
    if ch == "/" and following == "*":
        return UnsafeReason.BLOCK_COMMENT
    return None


# ─── Scanner ──────────────────────────────────────────────────────────────────


def _step_in_string(snippet: str, state: ScanState) -> None:
    """Consume one character (or a doubled quote) inside a string literal."""
    ch = snippet[state.cursor]
    closing = _CLOSING_QUOTES[state.context]

    if ch == closing:
        if snippet[state.cursor + 1 : state.cursor + 2] == closing:
            # Doubled quote: literal quote character, string stays open
            state.cursor += 2
            return
        state.context = QuoteContext.UNQUOTED
        state.string_start = -1
    elif ch == _ESCAPE:
        state.escape_pending = True

    state.cursor += 1


def validate_snippet(snippet: str) -> Verdict:
    """Validate one clause snippet.

    Pure, total and deterministic: every string, including the empty string,
    maps to exactly one ``Verdict``. An unsafe verdict is a normal return
    value, not an error.

    Args:
        snippet: Raw text exactly as it would be interpolated into the query.

    Returns:
        ``SAFE`` or ``Verdict(safe=False, reason=..., position=...)``.
    """
    state = ScanState()
    length = len(snippet)

    while state.cursor < length:
        if state.escape_pending:
            state.escape_pending = False
            state.cursor += 1
            continue

        if state.context is not QuoteContext.UNQUOTED:
            _step_in_string(snippet, state)
            continue

        ch = snippet[state.cursor]
        opened = _OPENING_QUOTES.get(ch)
        if opened is not None:
            state.context = opened
            state.string_start = state.cursor
            state.cursor += 1
            continue

        reason = _check_policy(snippet, state.cursor)
        if reason is not None:
            return Verdict.unsafe(reason, state.cursor)
        state.cursor += 1

    if state.context is not QuoteContext.UNQUOTED or state.escape_pending:
        return Verdict.unsafe(UnsafeReason.UNTERMINATED_STRING, state.string_start)

    return SAFE


def is_safe_surrealql_snippet(text: str) -> bool:
    """Return True if ``text`` is safe to splice into a SurrealQL clause."""
    return validate_snippet(text).safe
