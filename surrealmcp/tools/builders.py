"""Query builders — compose SurrealQL text for each tool.

PRECONDITION: every builder is called only after ``guard_parameters()`` has
accepted the call. Clause snippets are spliced verbatim (the guard never
rewrites them); targets go through ``parse_target()``; structured values are
bound as ``$content`` / ``$data`` / ``$values``.

SurrealQL clause order for SELECT:
    SELECT * FROM <targets> [WHERE] [SPLIT] [GROUP BY] [ORDER BY] [LIMIT] [START]

UPDATE / UPSERT / DELETE accept only WHERE from the clause set. Any other
clause parameter supplied to them is rejected rather than ignored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import re2  # google-re2, not stdlib re

from surrealmcp.guard.params import CLAUSE_PARAMETERS, InvalidParameterError, make_excerpt
from surrealmcp.tools.registry import (
    ClauseArgs,
    CreateArgs,
    DeleteArgs,
    InsertArgs,
    RelateArgs,
    SelectArgs,
    ToolArgs,
    UpdateArgs,
)
from surrealmcp.tools.targets import escape_ident, parse_target, parse_targets

_VARIABLE_NAME_RE = re2.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_SELECT_CLAUSES: tuple[tuple[str, str], ...] = (
    ("where_clause", "WHERE"),
    ("split_clause", "SPLIT"),
    ("group_clause", "GROUP BY"),
    ("order_clause", "ORDER BY"),
    ("limit_clause", "LIMIT"),
    ("start_clause", "START"),
)

_DATA_KEYWORDS = {"content": "CONTENT", "merge": "MERGE", "replace": "REPLACE"}


@dataclass(frozen=True)
class BuiltQuery:
    """Final query text plus the variables bound alongside it."""

    query: str
    variables: dict[str, Any] = field(default_factory=dict)


# ─── Helpers ──────────────────────────────────────────────────────────────────


def _clauses(args: ClauseArgs, clauses: tuple[tuple[str, str], ...]) -> str:
    parts = []
    for name, keyword in clauses:
        snippet: Optional[str] = getattr(args, name)
        if snippet:
            parts.append(f" {keyword} {snippet}")
    return "".join(parts)


def _reject_unsupported_clauses(args: ClauseArgs, operation: str) -> None:
    for name in CLAUSE_PARAMETERS:
        if name == "where_clause":
            continue
        if getattr(args, name):
            raise InvalidParameterError(
                name,
                "unsupported_clause",
                message=f"Parameter '{name}' is not supported by {operation}",
            )


def _variables(args: ToolArgs, **internal: Any) -> dict[str, Any]:
    """Merge caller ``parameters`` with internal bind variables.

    Raises:
        InvalidParameterError: A caller variable name is not an identifier or
                               collides with an internal variable.
    """
    caller = args.parameters or {}
    for name in caller:
        if not _VARIABLE_NAME_RE.fullmatch(name):
            raise InvalidParameterError(
                "parameters", "invalid_variable_name", excerpt=make_excerpt(name)
            )
        if name in internal:
            raise InvalidParameterError(
                "parameters", "reserved_variable", excerpt=make_excerpt(name)
            )
    return {**caller, **internal}


# ─── Builders ─────────────────────────────────────────────────────────────────


def build_select(args: SelectArgs) -> BuiltQuery:
    query = f"SELECT * FROM {parse_targets(args.targets)}{_clauses(args, _SELECT_CLAUSES)}"
    return BuiltQuery(query, _variables(args))


def build_create(args: CreateArgs) -> BuiltQuery:
    query = f"CREATE {parse_target(args.target)} CONTENT $content"
    return BuiltQuery(query, _variables(args, content=args.content))


def build_insert(args: InsertArgs) -> BuiltQuery:
    if not args.table:
        raise InvalidParameterError("table", "empty_target")
    query = f"INSERT INTO {escape_ident(args.table)} $values"
    return BuiltQuery(query, _variables(args, values=args.values))


def _build_data_statement(statement: str, args: UpdateArgs) -> BuiltQuery:
    _reject_unsupported_clauses(args, statement.lower())
    keyword = _DATA_KEYWORDS[args.mode]
    query = (
        f"{statement} {parse_targets(args.targets)} {keyword} $data"
        f"{_clauses(args, _SELECT_CLAUSES[:1])}"
    )
    return BuiltQuery(query, _variables(args, data=args.data))


def build_update(args: UpdateArgs) -> BuiltQuery:
    return _build_data_statement("UPDATE", args)


def build_upsert(args: UpdateArgs) -> BuiltQuery:
    return _build_data_statement("UPSERT", args)


def build_delete(args: DeleteArgs) -> BuiltQuery:
    _reject_unsupported_clauses(args, "delete")
    query = (
        f"DELETE {parse_targets(args.targets)}"
        f"{_clauses(args, _SELECT_CLAUSES[:1])} RETURN BEFORE"
    )
    return BuiltQuery(query, _variables(args))


def build_relate(args: RelateArgs) -> BuiltQuery:
    # args.table has passed the Parameter Guard and is spliced as-is
    if not args.table:
        raise InvalidParameterError("table", "empty_target")
    query = (
        f"RELATE {parse_target(args.from_, 'from')}"
        f"->{args.table}->{parse_target(args.to, 'to')}"
    )
    if args.content is None:
        return BuiltQuery(query, _variables(args))
    return BuiltQuery(f"{query} CONTENT $content", _variables(args, content=args.content))


BUILDERS: dict[str, Callable[[Any], BuiltQuery]] = {
    "select": build_select,
    "create": build_create,
    "insert": build_insert,
    "update": build_update,
    "upsert": build_upsert,
    "delete": build_delete,
    "relate": build_relate,
}
