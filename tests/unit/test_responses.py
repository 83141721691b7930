"""Unit tests for corsgate/models/responses.py — denial and preflight responses.

Verifies:
  - every CorsErrorKind maps to exactly one HTTP status
  - denial bodies carry the diagnostic prefix and the offending value
  - denial responses never carry Access-Control-* headers
  - successful preflight responses are 200 with an empty body
"""

from __future__ import annotations

import pytest

from corsgate.models.decision import CorsError, CorsErrorKind
from corsgate.models.request import HTTPMethod
from corsgate.models.responses import (
    STATUS_BY_KIND,
    build_denial_response,
    build_preflight_response,
    status_for,
)
from corsgate.policy.header_name import HeaderName


# ─── Status table ─────────────────────────────────────────────────────────────


class TestStatusTable:
    def test_every_kind_mapped(self) -> None:
        assert set(STATUS_BY_KIND) == set(CorsErrorKind)

    @pytest.mark.parametrize(
        "kind, status",
        [
            (CorsErrorKind.INVALID_REQUEST, 400),
            (CorsErrorKind.ORIGIN_DENIED, 403),
            (CorsErrorKind.UNSUPPORTED_METHOD, 405),
            (CorsErrorKind.UNSUPPORTED_HEADER, 403),
            (CorsErrorKind.GENERIC_DENIED, 403),
        ],
    )
    def test_status(self, kind: CorsErrorKind, status: int) -> None:
        assert status_for(CorsError(kind=kind, message="x")) == status


# ─── build_denial_response() ──────────────────────────────────────────────────


class TestBuildDenialResponse:
    """Tests for the short-circuit denial response builder."""

    def test_origin_denied_body(self) -> None:
        error = CorsError(
            kind=CorsErrorKind.ORIGIN_DENIED,
            message="CORS origin denied",
            origins=("http://evil.com",),
        )
        response = build_denial_response(error)
        assert response.status_code == 403
        assert response.body == (
            b"Cross-Origin Resource Sharing (CORS) Filter: CORS origin denied: http://evil.com\n"
        )

    def test_unsupported_method_body(self) -> None:
        error = CorsError(
            kind=CorsErrorKind.UNSUPPORTED_METHOD,
            message="Unsupported HTTP method",
            method=HTTPMethod.PUT,
        )
        response = build_denial_response(error)
        assert response.status_code == 405
        assert response.body.decode().endswith("Unsupported HTTP method: PUT\n")

    def test_unsupported_header_body(self) -> None:
        error = CorsError(
            kind=CorsErrorKind.UNSUPPORTED_HEADER,
            message="Unsupported HTTP request header",
            header=HeaderName("x-bar"),
        )
        response = build_denial_response(error)
        assert response.body.decode().endswith("Unsupported HTTP request header: X-Bar\n")

    def test_invalid_request_body_has_no_detail(self) -> None:
        error = CorsError(kind=CorsErrorKind.INVALID_REQUEST, message="Invalid preflight CORS request")
        response = build_denial_response(error)
        assert response.status_code == 400
        assert response.body == (
            b"Cross-Origin Resource Sharing (CORS) Filter: Invalid preflight CORS request\n"
        )

    def test_plain_text(self) -> None:
        error = CorsError(kind=CorsErrorKind.GENERIC_DENIED, message="Generic HTTP requests not allowed")
        response = build_denial_response(error)
        assert response.headers["content-type"].startswith("text/plain")

    def test_no_access_control_headers(self) -> None:
        """Denials emit no CORS response headers."""
        error = CorsError(kind=CorsErrorKind.ORIGIN_DENIED, message="CORS origin denied")
        response = build_denial_response(error)
        assert not any(name.lower().startswith("access-control-") for name in response.headers)


# ─── build_preflight_response() ───────────────────────────────────────────────


class TestBuildPreflightResponse:
    def test_status_and_empty_body(self) -> None:
        response = build_preflight_response(())
        assert response.status_code == 200
        assert response.body == b""

    def test_headers_applied_in_order(self) -> None:
        headers = (
            ("Access-Control-Allow-Origin", "http://example.com"),
            ("Access-Control-Allow-Credentials", "true"),
            ("Access-Control-Allow-Methods", "GET, POST"),
        )
        response = build_preflight_response(headers)
        assert response.headers["access-control-allow-origin"] == "http://example.com"
        assert response.headers["access-control-allow-credentials"] == "true"
        assert response.headers["access-control-allow-methods"] == "GET, POST"
        names = [name for name in response.headers if name.startswith("access-control-")]
        assert names == [
            "access-control-allow-origin",
            "access-control-allow-credentials",
            "access-control-allow-methods",
        ]
