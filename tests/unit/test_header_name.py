"""Unit tests for corsgate.policy.header_name — header field name canonicalisation."""

from __future__ import annotations

import pytest

from corsgate.policy.header_name import HeaderName, HeaderNameError, canonicalize


class TestCanonicalize:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("content-type", "Content-Type"),
            ("CONTENT-TYPE", "Content-Type"),
            ("x-requested-with", "X-Requested-With"),
            ("X-ABC", "X-Abc"),
            ("A", "A"),
            ("  accept  ", "Accept"),
            ("x_custom-header", "X_custom-Header"),
            ("x-foo-", "X-Foo"),
            ("X-Foo--", "X-Foo"),
        ],
    )
    def test_canonical_form(self, raw: str, expected: str) -> None:
        assert canonicalize(raw) == expected

    def test_idempotent(self) -> None:
        """Canonicalising an already canonical name changes nothing."""
        once = canonicalize("x-requested-with")
        assert canonicalize(once) == once


class TestInvalidNames:
    @pytest.mark.parametrize("raw", ["", "   ", "1-abc", "Aaa Bbb", "X-r%b", "-leading", "ünïcode"])
    def test_invalid_name_raises(self, raw: str) -> None:
        with pytest.raises(HeaderNameError):
            canonicalize(raw)

    def test_header_name_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            HeaderName("")


class TestHeaderName:
    def test_constructor_canonicalises(self) -> None:
        assert HeaderName("x-requested-with").canonical == "X-Requested-With"

    def test_str_is_canonical(self) -> None:
        assert str(HeaderName("content-TYPE")) == "Content-Type"

    def test_case_variants_equal(self) -> None:
        """Equality is case-insensitive because both sides are canonicalised."""
        assert HeaderName("X-Requested-With") == HeaderName("x-REQUESTED-with")
        assert hash(HeaderName("accept")) == hash(HeaderName("ACCEPT"))

    def test_different_names_not_equal(self) -> None:
        assert HeaderName("Accept") != HeaderName("Accept-Language")

    def test_classmethod_matches_module_function(self) -> None:
        assert HeaderName.canonicalize("x-abc") == canonicalize("x-abc")
