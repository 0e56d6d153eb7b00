"""Read-only resources exposed to tool callers.

A resource is a static document identified by a ``surrealmcp://`` URI.
Providers are registered in ``ResourceRegistry.providers``; the HTTP surface
only lists and reads them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

_INSTRUCTIONS_PATH = Path(__file__).parent / "instructions.md"


class ResourceProvider:
    """Base class for a single read-only resource."""

    uri: str = ""
    name: str = ""
    description: str = ""
    mime_type: str = "text/plain"

    def content(self) -> str:
        raise NotImplementedError

    def meta(self) -> dict[str, Any]:
        return {
            "uri": self.uri,
            "name": self.name,
            "title": self.name,
            "mime_type": self.mime_type,
            "description": self.description,
            "size": len(self.content().encode()),
        }

    def read(self) -> dict[str, Any]:
        return {
            "contents": [
                {"uri": self.uri, "mime_type": self.mime_type, "text": self.content()}
            ]
        }


class InstructionsResource(ResourceProvider):
    uri = "surrealmcp://instructions"
    name = "SurrealMCP Instructions"
    description = "Full instructions and guidelines for the SurrealDB MCP server"
    mime_type = "text/markdown"

    def content(self) -> str:
        return _INSTRUCTIONS_PATH.read_text(encoding="utf-8")


class ResourceRegistry:
    """All available resource providers, in listing order."""

    providers: tuple[ResourceProvider, ...] = (InstructionsResource(),)

    @classmethod
    def find_by_uri(cls, uri: str) -> Optional[ResourceProvider]:
        for provider in cls.providers:
            if provider.uri == uri:
                return provider
        return None


def list_resources() -> list[dict[str, Any]]:
    return [provider.meta() for provider in ResourceRegistry.providers]


def read_resource(uri: str) -> Optional[dict[str, Any]]:
    """Return ``{"contents": [...]}`` for ``uri``, or None if unknown."""
    provider = ResourceRegistry.find_by_uri(uri)
    if provider is None:
        return None
    return provider.read()
