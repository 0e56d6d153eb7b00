"""SurrealMCP response models."""

from __future__ import annotations

from surrealmcp.models.responses import (
    build_authentication_response,
    build_invalid_parameters_response,
    build_query_failed_response,
    build_unknown_tool_response,
)

__all__ = [
    "build_authentication_response",
    "build_invalid_parameters_response",
    "build_query_failed_response",
    "build_unknown_tool_response",
]
