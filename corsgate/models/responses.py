"""Denial and preflight HTTP response builders.

Provides the two responses the CORS filter writes itself, instead of passing
the request downstream:

  build_denial_response():
      Status from STATUS_BY_KIND (400 / 403 / 405), text/plain diagnostic body
      ``Cross-Origin Resource Sharing (CORS) Filter: <detail>``.
      MUST NOT carry any Access-Control-* header: denials emit nothing.

  build_preflight_response():
      HTTP 200, empty body, carrying exactly the headers computed by the
      preflight handler.

STATUS_BY_KIND is the only place error kinds are mapped to HTTP statuses.
"""

from __future__ import annotations

from starlette.responses import PlainTextResponse, Response

from corsgate.constants import DIAGNOSTIC_PREFIX
from corsgate.models.decision import CorsError, CorsErrorKind, HeaderPairs

STATUS_BY_KIND: dict[CorsErrorKind, int] = {
    CorsErrorKind.INVALID_REQUEST: 400,
    CorsErrorKind.ORIGIN_DENIED: 403,
    CorsErrorKind.UNSUPPORTED_METHOD: 405,
    CorsErrorKind.UNSUPPORTED_HEADER: 403,
    CorsErrorKind.GENERIC_DENIED: 403,
}


def status_for(error: CorsError) -> int:
    return STATUS_BY_KIND[error.kind]


def build_denial_response(error: CorsError) -> PlainTextResponse:
    """Build the short-circuit response for a failed CORS check.

    The body is written fresh; nothing produced downstream is ever included
    because the downstream application is not invoked for a denial.

    Args:
        error: The CorsError carried by the engine's DENY verdict.

    Returns:
        PlainTextResponse with the mapped status and a one-line diagnostic.
    """
    return PlainTextResponse(
        content=f"{DIAGNOSTIC_PREFIX}{error.detail}\n",
        status_code=status_for(error),
    )


def build_preflight_response(headers: HeaderPairs) -> Response:
    """Build the terminal response for a successful preflight request."""
    response = Response(status_code=200)
    for name, value in headers:
        response.headers.append(name, value)
    return response
