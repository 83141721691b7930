"""Unit tests for corsgate.policy.origin — Origin parsing and identity.

Covers:
  - canonical string form for http, https, file and IP-literal origins
  - scheme and host case normalisation
  - unsupported / missing schemes and missing hosts rejected
  - IDNA ToASCII of internationalised host names
  - equality and hashing derived from the canonical form
  - suffix (host[:port]) used by suffix matching
"""

from __future__ import annotations

import dataclasses

import pytest

from corsgate.policy.origin import Origin, OriginError


class TestUnknownOrigin:
    """Absent and "null" origins collapse to Origin.UNKNOWN."""

    def test_none_is_unknown(self) -> None:
        assert Origin.parse(None) is Origin.UNKNOWN

    def test_literal_null_is_unknown(self) -> None:
        origin = Origin.parse("null")
        assert origin.is_unknown
        assert str(origin) == "null"

    def test_default_constructed_equals_unknown(self) -> None:
        assert Origin() == Origin.UNKNOWN


class TestCanonicalForm:
    def test_http(self) -> None:
        assert str(Origin.parse("http://example.com")) == "http://example.com"

    def test_uppercase_scheme_lowered(self) -> None:
        assert str(Origin.parse("HTTP://example.com")) == "http://example.com"

    def test_https(self) -> None:
        assert str(Origin.parse("https://example.com")) == "https://example.com"

    def test_file(self) -> None:
        assert str(Origin.parse("file:///data/file.xml")) == "file:///data/file.xml"

    def test_ip_with_port(self) -> None:
        assert str(Origin.parse("http://192.168.0.1:8080")) == "http://192.168.0.1:8080"

    def test_path_dropped_and_host_lowered(self) -> None:
        origin = Origin.parse("https://LOCALHOST:8080/my-app/upload.php")
        assert str(origin) == "https://localhost:8080"

    def test_ipv6_literal_bracketed(self) -> None:
        assert str(Origin.parse("http://[::1]:3000")) == "http://[::1]:3000"

    def test_absent_port_is_minus_one(self) -> None:
        assert Origin.parse("http://example.com").port == -1

    def test_explicit_default_port_kept(self) -> None:
        assert str(Origin.parse("http://example.com:80")) == "http://example.com:80"

    def test_idna_host_converted(self) -> None:
        origin = Origin.parse("http://bücher.example")
        assert origin.host == "xn--bcher-kva.example"
        assert str(origin) == "http://xn--bcher-kva.example"


class TestRejected:
    """Anything that is not an http, https or file origin raises OriginError."""

    @pytest.mark.parametrize(
        "raw",
        [
            "ftp://ftp.example.com",
            "example.com",
            "http://",
            "http://exa mple.com",
            "http://example.com:notaport",
            "http://under_score.example.com",
            "http://-leading.example.com",
            "",
        ],
    )
    def test_invalid_origin_raises(self, raw: str) -> None:
        with pytest.raises(OriginError):
            Origin.parse(raw)

    def test_origin_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            Origin.parse("ftp://ftp.example.com")


class TestEquality:
    """Identity is the canonical string form."""

    def test_case_variants_equal(self) -> None:
        assert Origin.parse("HTTP://Example.com") == Origin.parse("http://example.com")

    def test_path_ignored_for_equality(self) -> None:
        assert Origin.parse("http://MY.service.com") == Origin.parse("HTTP://my.service.com/my-app")

    def test_scheme_difference_not_equal(self) -> None:
        assert Origin.parse("http://MY.service.com") != Origin.parse("HTTPS://my.service.com/my-app")

    def test_equals_canonical_string(self) -> None:
        assert Origin.parse("http://my.service.com") == "http://my.service.com"

    def test_hash_matches_for_equal_origins(self) -> None:
        a = Origin.parse("HTTP://Example.com")
        b = Origin.parse("http://example.com")
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_immutable(self) -> None:
        origin = Origin.parse("http://example.com")
        with pytest.raises(dataclasses.FrozenInstanceError):
            origin.host = "evil.com"  # type: ignore[misc]


class TestSuffix:
    def test_suffix_with_port(self) -> None:
        assert Origin.parse("http://www.example.com:8080").suffix == "www.example.com:8080"

    def test_suffix_without_port(self) -> None:
        assert Origin.parse("https://example.com").suffix == "example.com"
