"""Structured logging for SurrealMCP (structlog).

Logging is configured once at import with JSON output and reconfigured by
surrealmcp/main.py from the DEBUG / LOG_LEVEL / JSON_LOGS environment.

Per-call context lives in structlog's contextvars, so every entry written
while a tool call is in flight carries it without being passed around:

  set_connection_id()        — bound by the tool router for one HTTP call
  query_context(tool, id)    — bound by ToolService around one query

Two processors keep query data out of the log:

  shorten_query     — ``query`` values are cut to MAX_LOGGED_QUERY_CHARS
  redact_variables  — ``variables`` mappings are reduced to their sorted names;
                      bound values (record content, filters) are never logged
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

import structlog
from structlog.types import EventDict, Processor

from surrealmcp.constants import MAX_LOGGED_QUERY_CHARS

# ─── Processors ───────────────────────────────────────────────────────────────


def shorten_query(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    query = event_dict.get("query")
    if isinstance(query, str) and len(query) > MAX_LOGGED_QUERY_CHARS:
        event_dict["query"] = query[:MAX_LOGGED_QUERY_CHARS] + "..."
        event_dict["query_chars"] = len(query)
    return event_dict


def redact_variables(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    variables = event_dict.get("variables")
    if isinstance(variables, Mapping):
        event_dict["variables"] = sorted(str(name) for name in variables)
    return event_dict


def build_processors(json_output: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        shorten_query,
        redact_variables,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


# ─── Configuration ────────────────────────────────────────────────────────────


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Configure structlog for the whole process.

    Args:
        log_level:   DEBUG, INFO, WARNING, ERROR or CRITICAL. Unknown names
                     fall back to INFO.
        json_output: JSON lines when True, coloured console output otherwise.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=build_processors(json_output),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "surrealmcp") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# ─── Call context ─────────────────────────────────────────────────────────────


def set_connection_id(connection_id: str) -> None:
    """Attach ``connection_id`` to every log entry of the current call."""
    structlog.contextvars.bind_contextvars(connection_id=connection_id)


def clear_connection_id() -> None:
    structlog.contextvars.unbind_contextvars("connection_id")


def current_context() -> dict[str, Any]:
    return structlog.contextvars.get_contextvars()


@contextmanager
def query_context(tool: str, query_id: int) -> Iterator[None]:
    """Bind ``tool`` and ``query_id`` for the duration of one query.

    Previous values (if any) are restored on exit.
    """
    with structlog.contextvars.bound_contextvars(tool=tool, query_id=query_id):
        yield


configure_logging()
