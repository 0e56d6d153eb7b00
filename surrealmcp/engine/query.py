"""Query execution with timing, logging and metrics.

``execute_query()`` is the single place where a built query reaches a
QueryEngine. It never raises for engine failures: an ``EngineError`` is
captured into ``QueryResponse.error`` so callers decide how to surface it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Optional

from surrealmcp.engine.protocol import EngineError, QueryEngine
from surrealmcp.utils.health import QueryMetrics
from surrealmcp.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class QueryResponse:
    """Response from executing one SurrealQL query.

    Fields:
        query_id: Per-service sequence number for tracking.
        query:    The query text that was executed.
        duration: Execution time in seconds.
        error:    Error message if the query failed.
        result:   First-statement result if the query succeeded.
    """

    query_id: int
    query: str
    duration: float
    error: Optional[str] = None
    result: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def duration_ms(self) -> float:
        return self.duration * 1000


async def execute_query(
    engine: QueryEngine,
    query_id: int,
    query_string: str,
    variables: Optional[dict[str, Any]],
    connection_id: str,
    metrics: Optional[QueryMetrics] = None,
) -> QueryResponse:
    """Execute a SurrealQL query against ``engine``.

    Args:
        engine:        QueryEngine to run the query on.
        query_id:      Identifier for tracking this query.
        query_string:  Final query text (already guarded and built).
        variables:     Bind variables sent alongside the query.
        connection_id: Connection ID for logging.
        metrics:       Optional QueryMetrics to update.

    Returns:
        QueryResponse with ``result`` on success or ``error`` on failure.
    """
    start = time.perf_counter()
    log = logger.bind(connection_id=connection_id, query_id=query_id)
    log.debug("Executing SurrealQL query", query=query_string, variables=variables or {})

    try:
        result = await engine.execute(query_string, variables)
    except EngineError as exc:
        duration = time.perf_counter() - start
        log.error(
            "Query execution failed",
            query=query_string,
            duration_ms=round(duration * 1000, 3),
            error=exc.message,
        )
        if metrics is not None:
            metrics.record_query(duration * 1000, ok=False)
        return QueryResponse(
            query_id=query_id,
            query=query_string,
            duration=duration,
            error=exc.message,
        )

    duration = time.perf_counter() - start
    log.info(
        "Query execution succeeded",
        query=query_string,
        duration_ms=round(duration * 1000, 3),
    )
    if metrics is not None:
        metrics.record_query(duration * 1000)
    return QueryResponse(
        query_id=query_id,
        query=query_string,
        duration=duration,
        result=result,
    )
