"""CORS filter middleware for Starlette / FastAPI applications.

Runs the policy engine on every request and applies its verdict:

  - PASS:    the request continues downstream; any CORS headers computed for
             an actual request are appended to the downstream response.
  - RESPOND: successful preflight; HTTP 200 with an empty body is returned
             and the downstream application is never invoked.
  - DENY:    short-circuit with the status and text/plain diagnostic for the
             error kind (see corsgate.models.responses.STATUS_BY_KIND).

The request tags are attached before any of the above as
``request.state.cors`` (CorsTags) and ``request.state.cors_attributes``
(dict keyed by the ``cors.*`` attribute names).

Registration:
    engine = PolicyEngine(PolicyConfig.from_mapping(settings))
    application.add_middleware(CORSFilterMiddleware, engine=engine)
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from corsgate.models.decision import Action
from corsgate.models.responses import build_denial_response, build_preflight_response, status_for
from corsgate.policy.config import PolicyConfig
from corsgate.policy.engine import PolicyEngine
from corsgate.utils.logger import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)


class CORSFilterMiddleware(BaseHTTPMiddleware):
    """Enforce a CORS policy in front of the downstream application.

    Pass either a ready ``engine`` or a ``policy`` mapping (parsed once, here).
    With neither, the default policy is used.

    Raises:
        ConfigError: At construction, if ``policy`` contains an invalid value.
    """

    def __init__(
        self,
        app: ASGIApp,
        engine: Optional[PolicyEngine] = None,
        policy: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(app)
        if engine is None:
            engine = PolicyEngine(PolicyConfig.from_mapping(policy))
        self.engine = engine

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        bind_request_context(method=request.method, path=request.url.path)
        try:
            verdict = self.engine.dispatch(request.headers, request.method)

            request.state.cors = verdict.tags
            request.state.cors_attributes = verdict.tags.as_attributes()

            if verdict.action == Action.DENY:
                assert verdict.error is not None
                logger.warning(
                    "CORS request denied",
                    kind=verdict.error.kind.value,
                    status_code=status_for(verdict.error),
                    detail=verdict.error.detail,
                    origin=verdict.tags.origin,
                )
                return build_denial_response(verdict.error)

            if verdict.action == Action.RESPOND:
                logger.debug("CORS preflight accepted", origin=verdict.tags.origin)
                return build_preflight_response(verdict.headers)

            response = await call_next(request)
            for name, value in verdict.headers:
                response.headers.append(name, value)
            return response
        finally:
            clear_request_context("method", "path")
