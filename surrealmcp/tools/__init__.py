"""SurrealMCP tools — argument models, query builders and the call pipeline.

Public API:
  - ToolService                        — call pipeline (service.py)
  - ToolResult, UnknownToolError,
    QueryExecutionError                — results and errors (service.py)
  - TOOLS, list_tools()                — tool registry (registry.py)
  - BUILDERS, BuiltQuery               — query builders (builders.py)
  - escape_ident(), parse_target(),
    parse_targets()                    — target rendering (targets.py)
"""

from __future__ import annotations

from surrealmcp.tools.builders import BUILDERS, BuiltQuery
from surrealmcp.tools.registry import TOOLS, list_tools
from surrealmcp.tools.service import (
    QueryExecutionError,
    ToolResult,
    ToolService,
    UnknownToolError,
)
from surrealmcp.tools.targets import escape_ident, parse_target, parse_targets

__all__ = [
    "BUILDERS",
    "BuiltQuery",
    "QueryExecutionError",
    "TOOLS",
    "ToolResult",
    "ToolService",
    "UnknownToolError",
    "escape_ident",
    "list_tools",
    "parse_target",
    "parse_targets",
]
