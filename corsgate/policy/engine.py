"""CORS policy engine: tagging, actual/preflight validation and dispatch.

PolicyEngine holds a reference to one immutable PolicyConfig and keeps no
per-request state, so a single instance serves every request concurrently.

handle_actual() and handle_preflight() run their checks in a fixed order and
return on the first failure. Response headers are only assembled after every
check for the branch has passed; a failed Decision carries no headers.

Check order, actual request:
  1. classified as ACTUAL                     else INVALID_REQUEST
  2. some Origin token allowed                else ORIGIN_DENIED
  3. method parses                            else UNSUPPORTED_METHOD (no method)
  4. method supported                         else UNSUPPORTED_METHOD

Check order, preflight request:
  1. classified as PREFLIGHT                  else INVALID_REQUEST
  2. some Origin token allowed                else ORIGIN_DENIED
  3. Access-Control-Request-Method present    else INVALID_REQUEST
  4. requested method parses                  else UNSUPPORTED_METHOD (no method)
  5. requested header names well-formed       else INVALID_REQUEST
  6. requested method supported               else UNSUPPORTED_METHOD
  7. every requested header supported         else UNSUPPORTED_HEADER (first one)

Step 5 must precede step 6: a malformed header list is a bad request even
when the method would also be rejected.
"""

from __future__ import annotations

import dataclasses
from typing import Mapping, Optional

from corsgate.constants import (
    ALLOW_CREDENTIALS_HEADER,
    ALLOW_HEADERS_HEADER,
    ALLOW_METHODS_HEADER,
    ALLOW_ORIGIN_HEADER,
    ANY_ORIGIN,
    EXPOSE_HEADERS_HEADER,
    LIST_SEPARATOR,
    MAX_AGE_HEADER,
    ORIGIN_HEADER,
    REQUEST_HEADERS_HEADER,
    REQUEST_METHOD_HEADER,
)
from corsgate.models.decision import Action, CorsErrorKind, Decision, Verdict
from corsgate.models.request import CorsTags, HTTPMethod, RequestType
from corsgate.policy.classifier import classify, get_header
from corsgate.policy.config import PolicyConfig, parse_words
from corsgate.policy.header_name import HeaderName, HeaderNameError
from corsgate.utils.logger import get_logger

logger = get_logger(__name__)


class PolicyEngine:
    """Applies one PolicyConfig to individual requests.

    Usage:
        engine = PolicyEngine(PolicyConfig.from_mapping(settings))
        verdict = engine.dispatch(request.headers, request.method)
    """

    def __init__(self, config: PolicyConfig) -> None:
        self.config = config

        # Pre-computed response header values (stable across requests)
        self.supported_methods: str = LIST_SEPARATOR.join(m.value for m in config.method_order)
        self.supported_headers: str = LIST_SEPARATOR.join(
            h.canonical for h in config.supported_header_order
        )
        self.exposed_headers: str = LIST_SEPARATOR.join(
            h.canonical for h in config.exposed_header_order
        )

    # ── Tagging ───────────────────────────────────────────────────────────────

    def tag(self, headers: Mapping[str, str], method: Optional[str]) -> CorsTags:
        """Describe the request for downstream handlers. Read-only; never fails."""
        request_type = classify(headers, method)

        if request_type == RequestType.ACTUAL:
            return CorsTags(
                is_cors_request=True,
                origin=get_header(headers, ORIGIN_HEADER),
                request_type=RequestType.ACTUAL.value,
            )
        if request_type == RequestType.PREFLIGHT:
            return CorsTags(
                is_cors_request=True,
                origin=get_header(headers, ORIGIN_HEADER),
                request_type=RequestType.PREFLIGHT.value,
                request_headers=get_header(headers, REQUEST_HEADERS_HEADER),
            )
        return CorsTags(is_cors_request=False)

    # ── Origin matching ───────────────────────────────────────────────────────

    def check_origin(self, origins: list[str]) -> Optional[str]:
        """Return the first origin token admitted by the policy, or None."""
        for origin in origins:
            if self.config.is_allowed_origin(origin):
                return origin
        return None

    # ── Actual requests ───────────────────────────────────────────────────────

    def handle_actual(self, headers: Mapping[str, str], method: Optional[str]) -> Decision:
        """Validate a simple/actual CORS request and build its response headers."""
        if classify(headers, method) != RequestType.ACTUAL:
            return Decision.deny(
                CorsErrorKind.INVALID_REQUEST, "Invalid simple/actual CORS request"
            )

        origin_header = get_header(headers, ORIGIN_HEADER) or ""
        request_origins = parse_words(origin_header)

        if self.check_origin(request_origins) is None:
            return Decision.deny(
                CorsErrorKind.ORIGIN_DENIED,
                "CORS origin denied",
                origins=tuple(request_origins),
            )

        parsed_method = HTTPMethod.parse(method)
        if parsed_method is None:
            return Decision.deny(
                CorsErrorKind.UNSUPPORTED_METHOD, f"Unsupported HTTP method: {method}"
            )

        if not self.config.is_supported_method(parsed_method):
            return Decision.deny(
                CorsErrorKind.UNSUPPORTED_METHOD, "Unsupported HTTP method", method=parsed_method
            )

        response_headers = [(ALLOW_ORIGIN_HEADER, origin_header)]
        if self.config.supports_credentials:
            response_headers.append((ALLOW_CREDENTIALS_HEADER, "true"))
        if self.exposed_headers:
            response_headers.append((EXPOSE_HEADERS_HEADER, self.exposed_headers))

        return Decision.allow(response_headers)

    # ── Preflight requests ────────────────────────────────────────────────────

    def handle_preflight(self, headers: Mapping[str, str], method: Optional[str]) -> Decision:
        """Validate a preflight CORS request and build its response headers."""
        if classify(headers, method) != RequestType.PREFLIGHT:
            return Decision.deny(CorsErrorKind.INVALID_REQUEST, "Invalid preflight CORS request")

        origin_header = get_header(headers, ORIGIN_HEADER) or ""
        request_origins = parse_words(origin_header)

        if self.check_origin(request_origins) is None:
            return Decision.deny(
                CorsErrorKind.ORIGIN_DENIED,
                "CORS origin denied",
                origins=tuple(request_origins),
            )

        request_method_header = get_header(headers, REQUEST_METHOD_HEADER)
        if request_method_header is None:
            return Decision.deny(
                CorsErrorKind.INVALID_REQUEST,
                "Invalid preflight CORS request: "
                "Missing Access-Control-Request-Method header",
            )

        requested_method = HTTPMethod.parse(request_method_header.upper())
        if requested_method is None:
            return Decision.deny(
                CorsErrorKind.UNSUPPORTED_METHOD,
                f"Unsupported HTTP method: {request_method_header}",
            )

        requested_headers: list[HeaderName] = []
        for name in parse_words(get_header(headers, REQUEST_HEADERS_HEADER) or ""):
            try:
                requested_headers.append(HeaderName(name))
            except HeaderNameError:
                return Decision.deny(
                    CorsErrorKind.INVALID_REQUEST,
                    "Invalid preflight CORS request: Bad request header value",
                )

        if not self.config.is_supported_method(requested_method):
            return Decision.deny(
                CorsErrorKind.UNSUPPORTED_METHOD,
                "Unsupported HTTP method",
                method=requested_method,
            )

        for header in requested_headers:
            if not self.config.is_supported_header(header):
                return Decision.deny(
                    CorsErrorKind.UNSUPPORTED_HEADER,
                    "Unsupported HTTP request header",
                    header=header,
                )

        response_headers: list[tuple[str, str]] = []
        if self.config.supports_credentials:
            response_headers.append((ALLOW_ORIGIN_HEADER, origin_header))
            response_headers.append((ALLOW_CREDENTIALS_HEADER, "true"))
        elif self.config.allow_any_origin:
            response_headers.append((ALLOW_ORIGIN_HEADER, ANY_ORIGIN))
        else:
            response_headers.append((ALLOW_ORIGIN_HEADER, origin_header))

        if self.config.max_age > 0:
            response_headers.append((MAX_AGE_HEADER, str(self.config.max_age)))

        response_headers.append((ALLOW_METHODS_HEADER, self.supported_methods))

        if self.supported_headers:
            response_headers.append((ALLOW_HEADERS_HEADER, self.supported_headers))

        return Decision.allow(response_headers)

    # ── Dispatch ──────────────────────────────────────────────────────────────

    def dispatch(self, headers: Mapping[str, str], method: Optional[str]) -> Verdict:
        """Decide what the filter does with a request.

        ACTUAL    → PASS with headers on success, DENY on failure
        PREFLIGHT → RESPOND with headers on success, DENY on failure
        OTHER     → PASS if generic requests are allowed, else DENY

        Requests that end as OTHER or INVALID_REQUEST are tagged as non-CORS.
        """
        tags = self.tag(headers, method)
        request_type = classify(headers, method)

        if request_type == RequestType.ACTUAL:
            decision = self.handle_actual(headers, method)
            if decision.ok:
                return Verdict(action=Action.PASS, tags=tags, headers=decision.headers)
            return self._deny(tags, decision)

        if request_type == RequestType.PREFLIGHT:
            decision = self.handle_preflight(headers, method)
            if decision.ok:
                return Verdict(action=Action.RESPOND, tags=tags, headers=decision.headers)
            return self._deny(tags, decision)

        if self.config.allow_generic_http_requests:
            logger.debug("Generic HTTP request passed through", method=method)
            return Verdict(action=Action.PASS, tags=tags)

        denial = Decision.deny(CorsErrorKind.GENERIC_DENIED, "Generic HTTP requests not allowed")
        return Verdict(action=Action.DENY, tags=tags, error=denial.error)

    @staticmethod
    def _deny(tags: CorsTags, decision: Decision) -> Verdict:
        assert decision.error is not None
        if decision.error.kind == CorsErrorKind.INVALID_REQUEST:
            tags = dataclasses.replace(tags, is_cors_request=False)
        return Verdict(action=Action.DENY, tags=tags, error=decision.error)
