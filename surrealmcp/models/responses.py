"""JSON error response builders for the SurrealMCP HTTP surface.

Every error leaves the service in the same envelope:

    {"error": {"code": "<machine code>", "message": "<human text>", ...}}

  | Exception               | Status | code                        |
  |-------------------------|--------|-----------------------------|
  | InvalidParameterError   | 400    | invalid_parameters          |
  | AuthenticationError     | 401    | authentication_failed       |
  |   (NOT_CONFIGURED)      | 503    | authentication_unavailable  |
  | UnknownToolError        | 404    | unknown_tool                |
  | QueryExecutionError     | 502    | query_failed                |

Security invariants:
  - Rejected snippets appear only as the bounded, sanitised ``excerpt``.
  - Authentication errors never say which configured token was closest, or
    how many tokens exist.
"""

from __future__ import annotations

from fastapi.responses import JSONResponse

from surrealmcp.auth.tokens import AuthenticationError, AuthErrorKind
from surrealmcp.guard.params import InvalidParameterError
from surrealmcp.tools.service import QueryExecutionError, UnknownToolError


def build_invalid_parameters_response(exc: InvalidParameterError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
                "parameter": exc.parameter,
                "reason": exc.reason,
                "excerpt": exc.excerpt,
            }
        },
    )


def build_authentication_response(exc: AuthenticationError) -> JSONResponse:
    """401 for missing/invalid credentials, 503 when no tokens are configured.

    401 responses carry ``WWW-Authenticate: Bearer`` so clients know which
    scheme to retry with.
    """
    if exc.kind is AuthErrorKind.NOT_CONFIGURED:
        status_code = 503
        headers = None
    else:
        status_code = 401
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": exc.code,
                "kind": exc.kind.value,
                "message": exc.message,
            }
        },
        headers=headers,
    )


def build_unknown_tool_response(exc: UnknownToolError) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"error": {"code": exc.code, "message": exc.message, "tool": exc.name}},
    )


def build_query_failed_response(exc: QueryExecutionError) -> JSONResponse:
    """502 — the query was well-formed and guarded but the database failed it."""
    return JSONResponse(
        status_code=502,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
                "query_id": exc.query_id,
            }
        },
    )
