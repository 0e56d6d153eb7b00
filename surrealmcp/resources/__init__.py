"""SurrealMCP resources (read-only documents)."""

from __future__ import annotations

from surrealmcp.resources.registry import (
    InstructionsResource,
    ResourceProvider,
    ResourceRegistry,
    list_resources,
    read_resource,
)

__all__ = [
    "InstructionsResource",
    "ResourceProvider",
    "ResourceRegistry",
    "list_resources",
    "read_resource",
]
