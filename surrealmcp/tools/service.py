"""ToolService — the tool call pipeline.

call_tool() runs every invocation through the same fixed sequence:

  1. look up the tool                → UnknownToolError
  2. pydantic argument validation    → InvalidParameterError (first bad field)
  3. Parameter Guard                 → InvalidParameterError (first unsafe clause)
  4. query builder                   → InvalidParameterError (bad target, etc.)
  5. execute_query()                 → QueryExecutionError on engine failure
  6. ToolResult

Steps 2-4 never touch the database. A call rejected there is counted in
``QueryMetrics.total_rejections`` and the engine is not invoked.
"""

from __future__ import annotations

import itertools
from dataclasses import asdict, dataclass
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from surrealmcp.config import Config
from surrealmcp.engine.factory import create_query_engine
from surrealmcp.engine.protocol import QueryEngine
from surrealmcp.engine.query import execute_query
from surrealmcp.guard.params import InvalidParameterError, guard_parameters
from surrealmcp.tools.builders import BUILDERS, BuiltQuery
from surrealmcp.tools.registry import ToolSpec, get_tool, list_tools
from surrealmcp.utils.health import QueryMetrics
from surrealmcp.utils.logger import get_logger, query_context

logger = get_logger(__name__)


# ─── Exceptions ───────────────────────────────────────────────────────────────


class UnknownToolError(Exception):
    """Raised for a tool name that is not registered. HTTP 404."""

    code: str = "unknown_tool"

    def __init__(self, name: str) -> None:
        self.name = name
        self.message = f"Unknown tool '{name}'"
        super().__init__(self.message)


class QueryExecutionError(Exception):
    """Raised when the database rejects or fails a built query. HTTP 502."""

    code: str = "query_failed"

    def __init__(self, message: str, query_id: int) -> None:
        self.message = message
        self.query_id = query_id
        super().__init__(message)


# ─── Result ───────────────────────────────────────────────────────────────────


@dataclass
class ToolResult:
    tool: str
    query_id: int
    duration_ms: float
    result: Any

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _from_validation_error(exc: ValidationError) -> InvalidParameterError:
    """Convert the first pydantic error into an InvalidParameterError.

    The offending value is not echoed back; only the field name and the
    pydantic error type are reported.
    """
    first = exc.errors()[0]
    loc = first.get("loc") or ()
    parameter = str(loc[0]) if loc else "arguments"
    return InvalidParameterError(
        parameter,
        first.get("type", "invalid"),
        message=f"Invalid parameter '{parameter}': {first.get('msg', 'invalid value')}",
    )


# ─── Service ──────────────────────────────────────────────────────────────────


class ToolService:
    """Validates, builds and executes tool calls against one QueryEngine.

    Args:
        config:  Loaded application Config.
        engine:  QueryEngine the built queries are sent to.
        metrics: QueryMetrics to update (a private one is created if omitted).
    """

    def __init__(
        self,
        config: Config,
        engine: QueryEngine,
        metrics: Optional[QueryMetrics] = None,
    ) -> None:
        self.config = config
        self.engine = engine
        self.metrics = metrics if metrics is not None else QueryMetrics()
        self._query_ids = itertools.count(1)

    @classmethod
    def from_config(
        cls,
        config: Config,
        http_client: httpx.AsyncClient,
        metrics: Optional[QueryMetrics] = None,
    ) -> "ToolService":
        return cls(config, create_query_engine(config, http_client), metrics)

    def list_tools(self) -> list[dict[str, Any]]:
        return list_tools()

    def prepare(self, name: str, arguments: Any) -> BuiltQuery:
        """Run steps 1-4 of the pipeline and return the built query.

        Raises:
            UnknownToolError:      ``name`` is not a registered tool.
            InvalidParameterError: Arguments failed validation, the guard or
                                   the builder.
        """
        spec: Optional[ToolSpec] = get_tool(name)
        if spec is None:
            raise UnknownToolError(name)

        try:
            try:
                args = spec.args_model.model_validate(arguments if arguments is not None else {})
            except ValidationError as exc:
                raise _from_validation_error(exc) from None
            guard_parameters(name, args.model_dump())
            return BUILDERS[name](args)
        except InvalidParameterError as exc:
            self.metrics.record_rejection()
            logger.info(
                "Tool call rejected",
                tool=name,
                parameter=exc.parameter,
                reason=exc.reason,
            )
            raise

    async def call_tool(
        self,
        name: str,
        arguments: Any,
        connection_id: str,
    ) -> ToolResult:
        """Execute one tool call end to end.

        Raises:
            UnknownToolError, InvalidParameterError: see ``prepare()``.
            QueryExecutionError: The engine reported an error.
        """
        built = self.prepare(name, arguments)
        query_id = next(self._query_ids)

        with query_context(name, query_id):
            response = await execute_query(
                self.engine,
                query_id,
                built.query,
                built.variables,
                connection_id,
                metrics=self.metrics,
            )
        if not response.ok:
            raise QueryExecutionError(response.error or "Query failed", query_id)

        return ToolResult(
            tool=name,
            query_id=query_id,
            duration_ms=round(response.duration_ms, 3),
            result=response.result,
        )
