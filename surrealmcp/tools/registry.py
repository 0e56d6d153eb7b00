"""Tool registry — argument models and tool metadata.

Each tool has a pydantic argument model. Models forbid unknown keys so a
misspelled clause parameter (``where`` instead of ``where_clause``) is
rejected instead of being silently dropped.

Structured values (``content``, ``data``, ``values``, ``parameters``) are
always sent to the database as bind variables. Only the six clause
parameters and relate's ``table`` are spliced as text, and those are the
parameters checked by the Parameter Guard.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from surrealmcp.guard.params import GUARDED_PARAMETERS

DataMode = Literal["content", "merge", "replace"]


# ─── Argument models ──────────────────────────────────────────────────────────


class ToolArgs(BaseModel):
    """Base for all tool argument models."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    parameters: Optional[dict[str, Any]] = None
    """Extra bind variables, referenced as ``$name`` from clause snippets."""


class ClauseArgs(ToolArgs):
    """Clause parameters spliced into the query as raw SurrealQL text."""

    where_clause: Optional[str] = None
    order_clause: Optional[str] = None
    group_clause: Optional[str] = None
    split_clause: Optional[str] = None
    limit_clause: Optional[str] = None
    start_clause: Optional[str] = None


class SelectArgs(ClauseArgs):
    targets: list[str]


class UpdateArgs(ClauseArgs):
    targets: list[str]
    data: dict[str, Any]
    mode: DataMode = "merge"


class UpsertArgs(UpdateArgs):
    pass


class DeleteArgs(ClauseArgs):
    targets: list[str]


class CreateArgs(ToolArgs):
    target: str
    content: dict[str, Any] = Field(default_factory=dict)


class InsertArgs(ToolArgs):
    table: str
    values: Union[dict[str, Any], list[dict[str, Any]]]


class RelateArgs(ToolArgs):
    from_: str = Field(alias="from")
    table: str
    to: str
    content: Optional[dict[str, Any]] = None


# ─── Tool metadata ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    args_model: type[ToolArgs]

    @property
    def guarded_parameters(self) -> tuple[str, ...]:
        return GUARDED_PARAMETERS.get(self.name, ())

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.args_model.model_json_schema(by_alias=True),
            "guarded_parameters": list(self.guarded_parameters),
        }


TOOLS: dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        ToolSpec(
            "select",
            "Select records from one or more tables or record ids, with optional "
            "WHERE / SPLIT / GROUP BY / ORDER BY / LIMIT / START clauses.",
            SelectArgs,
        ),
        ToolSpec(
            "create",
            "Create a single record with the given content.",
            CreateArgs,
        ),
        ToolSpec(
            "insert",
            "Insert one or more records into a table.",
            InsertArgs,
        ),
        ToolSpec(
            "update",
            "Update existing records (content, merge or replace), optionally filtered by WHERE.",
            UpdateArgs,
        ),
        ToolSpec(
            "upsert",
            "Create or update records (content, merge or replace), optionally filtered by WHERE.",
            UpsertArgs,
        ),
        ToolSpec(
            "delete",
            "Delete records, optionally filtered by WHERE. Returns the deleted records.",
            DeleteArgs,
        ),
        ToolSpec(
            "relate",
            "Create a graph edge in the given edge table between two records.",
            RelateArgs,
        ),
    )
}


def get_tool(name: str) -> Optional[ToolSpec]:
    return TOOLS.get(name)


def list_tools() -> list[dict[str, Any]]:
    """Describe every registered tool (name, description, JSON schema)."""
    return [spec.describe() for spec in TOOLS.values()]
