"""QueryEngine Protocol — the pluggable database interface.

The tool service only ever talks to a ``QueryEngine``. It never inspects or
transforms the rows an engine returns.

Implementations: SurrealHttpEngine (surrealmcp/engine/http_engine.py).
Selection via create_query_engine() (surrealmcp/engine/factory.py).
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable


class EngineError(Exception):
    """Raised by a QueryEngine when a query or probe fails.

    Covers transport failures, non-200 responses, RPC errors and statements
    that report ``status: "ERR"``. Caught by ``execute_query()``.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@runtime_checkable
class QueryEngine(Protocol):
    """Database engine interface.

    All methods are async. ``execute()`` receives the final query text and
    the bind variables separately; structured values are never inlined.
    """

    async def execute(self, query: str, variables: Optional[dict[str, Any]] = None) -> Any:
        """Run ``query`` and return the result of its first statement.

        Raises:
            EngineError: On any failure.
        """
        ...

    async def version(self) -> str:
        """Return the server version string (e.g. ``"3.0.0"``)."""
        ...

    async def health(self) -> bool:
        """Return True if the server reports itself healthy."""
        ...

    async def close(self) -> None:
        """Release engine resources. Idempotent."""
        ...
