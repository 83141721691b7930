"""Unit tests for corsgate/models — HTTPMethod, CorsTags and decision values."""

from __future__ import annotations

import dataclasses

import pytest

from corsgate.models.decision import Action, CorsError, CorsErrorKind, Decision, Verdict
from corsgate.models.request import CorsTags, HTTPMethod, RequestType


class TestHTTPMethod:
    @pytest.mark.parametrize("name", ["GET", "POST", "HEAD", "PUT", "DELETE", "TRACE", "OPTIONS", "CONNECT", "PATCH"])
    def test_known_names(self, name: str) -> None:
        method = HTTPMethod.parse(name)
        assert method is not None
        assert str(method) == name

    def test_lookup_is_case_sensitive(self) -> None:
        assert HTTPMethod.parse("get") is None

    @pytest.mark.parametrize("name", [None, "", "FETCH", " GET"])
    def test_unknown_names(self, name: str | None) -> None:
        assert HTTPMethod.parse(name) is None


class TestRequestType:
    def test_values(self) -> None:
        assert [t.value for t in RequestType] == ["actual", "preflight", "other"]


class TestCorsTags:
    def test_default_is_non_cors(self) -> None:
        assert CorsTags().as_attributes() == {"cors.isCorsRequest": False}

    def test_all_attributes(self) -> None:
        tags = CorsTags(
            is_cors_request=True,
            origin="http://a.com",
            request_type="preflight",
            request_headers="X-Foo",
        )
        assert tags.as_attributes() == {
            "cors.isCorsRequest": True,
            "cors.origin": "http://a.com",
            "cors.requestType": "preflight",
            "cors.requestHeaders": "X-Foo",
        }

    def test_read_only(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            CorsTags().origin = "http://a.com"  # type: ignore[misc]


class TestDecision:
    def test_allow(self) -> None:
        decision = Decision.allow([("Access-Control-Allow-Origin", "*")])
        assert decision.ok
        assert decision.headers == (("Access-Control-Allow-Origin", "*"),)
        assert decision.error is None

    def test_deny_carries_no_headers(self) -> None:
        decision = Decision.deny(CorsErrorKind.ORIGIN_DENIED, "CORS origin denied", origins=("http://x.com",))
        assert not decision.ok
        assert decision.headers == ()
        assert decision.error == CorsError(
            kind=CorsErrorKind.ORIGIN_DENIED,
            message="CORS origin denied",
            origins=("http://x.com",),
        )

    def test_detail_for_multiple_origins(self) -> None:
        error = CorsError(
            kind=CorsErrorKind.ORIGIN_DENIED,
            message="CORS origin denied",
            origins=("http://x.com", "http://y.com"),
        )
        assert error.detail == "CORS origin denied: http://x.com http://y.com"

    def test_detail_without_value(self) -> None:
        error = CorsError(kind=CorsErrorKind.UNSUPPORTED_METHOD, message="Unsupported HTTP method: FETCH")
        assert error.detail == "Unsupported HTTP method: FETCH"


class TestVerdict:
    def test_defaults(self) -> None:
        verdict = Verdict(action=Action.PASS)
        assert verdict.tags == CorsTags()
        assert verdict.headers == ()
        assert verdict.error is None
