"""Target rendering — table names and record ids as SurrealQL identifiers.

Tool targets (``person``, ``person:john``, ``order:1024``) are caller-supplied
but, unlike clause snippets, have a fixed shape. They are therefore rendered
through an escaping function instead of being validated and spliced raw:

  - plain identifiers (``[A-Za-z_][A-Za-z0-9_]*``) are emitted as-is
  - anything else is wrapped in ``⟨…⟩`` with ``\\`` and ``⟩`` backslash-escaped
  - integer record ids (``order:1024``) are emitted unquoted

IMPORT RULES:
  - ``import re2`` ONLY — identifier matching must stay linear-time.
"""

from __future__ import annotations

from typing import Sequence

import re2  # google-re2, not stdlib re

from surrealmcp.guard.params import InvalidParameterError, make_excerpt

_IDENT_RE = re2.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_INT_ID_RE = re2.compile(r"-?[0-9]+")


def escape_ident(name: str) -> str:
    """Render ``name`` as a SurrealQL identifier."""
    if _IDENT_RE.fullmatch(name):
        return name
    escaped = name.replace("\\", "\\\\").replace("⟩", "\\⟩")
    return f"⟨{escaped}⟩"


def _render_id(record_id: str) -> str:
    if _INT_ID_RE.fullmatch(record_id):
        return record_id
    return escape_ident(record_id)


def parse_target(value: str, parameter: str = "target") -> str:
    """Render one target as a table name or ``table:id`` record id.

    The first ``:`` splits table from id. A value with an empty table or id
    part is rejected rather than guessed at.

    Raises:
        InvalidParameterError: Empty target, or empty table/id around ``:``.
    """
    if not value:
        raise InvalidParameterError(parameter, "empty_target")

    if ":" in value:
        table, record_id = value.split(":", 1)
        if not table or not record_id:
            raise InvalidParameterError(
                parameter, "malformed_record_id", excerpt=make_excerpt(value)
            )
        return f"{escape_ident(table)}:{_render_id(record_id)}"

    return escape_ident(value)


def parse_targets(values: Sequence[str], parameter: str = "targets") -> str:
    """Render a list of targets as a comma-separated SurrealQL target list.

    Raises:
        InvalidParameterError: Empty list, or any invalid target.
    """
    if not values:
        raise InvalidParameterError(parameter, "empty_targets")
    return ", ".join(parse_target(v, parameter) for v in values)
