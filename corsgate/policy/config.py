"""Immutable CORS access policy.

PolicyConfig is built exactly once from a generic string-keyed mapping
(``PolicyConfig.from_mapping``) and is read-only afterwards, so any number of
concurrent decisions may share it without locking.

Recognised keys (bare, or prefixed with ``cors.``):

  allowGenericHttpRequests   bool       default true
  allowOriginSuffixMatching  bool       default false
  allowOrigin                "*" | list default "*"
  supportedMethods           list       default "GET, POST, HEAD, OPTIONS"
  supportedHeaders           list       default ""
  exposedHeaders             list       default ""
  supportsCredentials        bool       default true
  maxAge                     int        default -1 (unset)

Lists are separated by commas and/or whitespace. Any invalid value raises
ConfigError; there is no partial policy.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from corsgate.constants import (
    ANY_ORIGIN,
    DEFAULT_ALLOW_GENERIC_HTTP_REQUESTS,
    DEFAULT_ALLOW_ORIGIN,
    DEFAULT_ALLOW_ORIGIN_SUFFIX_MATCHING,
    DEFAULT_EXPOSED_HEADERS,
    DEFAULT_MAX_AGE,
    DEFAULT_SUPPORTED_HEADERS,
    DEFAULT_SUPPORTED_METHODS,
    DEFAULT_SUPPORTS_CREDENTIALS,
    POLICY_KEY_PREFIX,
)
from corsgate.models.request import HTTPMethod
from corsgate.policy.header_name import HeaderName, HeaderNameError
from corsgate.policy.origin import Origin, OriginError
from corsgate.utils.logger import get_logger

logger = get_logger(__name__)

_WORD_SEPARATOR_RE = re.compile(r"\s*,\s*|\s+")

# ─── Policy keys ──────────────────────────────────────────────────────────────

KEY_ALLOW_GENERIC_HTTP_REQUESTS = "allowGenericHttpRequests"
KEY_ALLOW_ORIGIN_SUFFIX_MATCHING = "allowOriginSuffixMatching"
KEY_ALLOW_ORIGIN = "allowOrigin"
KEY_SUPPORTED_METHODS = "supportedMethods"
KEY_SUPPORTED_HEADERS = "supportedHeaders"
KEY_EXPOSED_HEADERS = "exposedHeaders"
KEY_SUPPORTS_CREDENTIALS = "supportsCredentials"
KEY_MAX_AGE = "maxAge"

POLICY_KEYS: frozenset[str] = frozenset({
    KEY_ALLOW_GENERIC_HTTP_REQUESTS,
    KEY_ALLOW_ORIGIN_SUFFIX_MATCHING,
    KEY_ALLOW_ORIGIN,
    KEY_SUPPORTED_METHODS,
    KEY_SUPPORTED_HEADERS,
    KEY_EXPOSED_HEADERS,
    KEY_SUPPORTS_CREDENTIALS,
    KEY_MAX_AGE,
})


class ConfigError(ValueError):
    """Raised when a policy value cannot be parsed. Fatal at startup."""


# ─── Parsing helpers ──────────────────────────────────────────────────────────


def parse_words(value: str) -> list[str]:
    """Split a comma and/or whitespace separated list. Empty input → [].

    Trailing empty tokens (from a trailing comma) are dropped.
    """
    trimmed = value.strip()
    if not trimmed:
        return []
    words = _WORD_SEPARATOR_RE.split(trimmed)
    while words and not words[-1]:
        words.pop()
    return words


def parse_bool(key: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ConfigError(f"Invalid boolean value for property {key}: {value!r}")


def parse_int(key: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        raise ConfigError(f"Invalid integer value for property {key}: {value!r}") from None


def _lookup(mapping: Mapping[str, Any], key: str, default: str) -> str:
    """Return the value for ``key`` (bare wins over ``cors.``-prefixed)."""
    for candidate in (key, POLICY_KEY_PREFIX + key):
        if candidate in mapping and mapping[candidate] is not None:
            raw = mapping[candidate]
            if isinstance(raw, bool):
                return "true" if raw else "false"
            return str(raw)
    return default


def _unique(items: list) -> tuple:
    return tuple(dict.fromkeys(items))


# ─── PolicyConfig ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PolicyConfig:
    """Parsed, immutable CORS access policy.

    ``supported_methods`` / ``supported_headers`` / ``exposed_headers`` are
    frozensets for membership tests; the ``*_order`` tuples keep the
    configured order for serialising response header values.
    """

    allow_generic_http_requests: bool = True
    allow_any_origin: bool = True
    allow_origin_suffix_matching: bool = False
    allowed_origins: frozenset[str] = frozenset()
    supported_methods: frozenset[HTTPMethod] = frozenset(
        {HTTPMethod.GET, HTTPMethod.POST, HTTPMethod.HEAD, HTTPMethod.OPTIONS}
    )
    supported_headers: frozenset[HeaderName] = frozenset()
    exposed_headers: frozenset[HeaderName] = frozenset()
    supports_credentials: bool = True
    max_age: int = -1
    method_order: tuple[HTTPMethod, ...] = field(
        default=(HTTPMethod.GET, HTTPMethod.POST, HTTPMethod.HEAD, HTTPMethod.OPTIONS),
        repr=False,
    )
    supported_header_order: tuple[HeaderName, ...] = field(default=(), repr=False)
    exposed_header_order: tuple[HeaderName, ...] = field(default=(), repr=False)

    @classmethod
    def defaults(cls) -> "PolicyConfig":
        return cls.from_mapping({})

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]] = None) -> "PolicyConfig":
        """Build a policy from a generic key → string mapping.

        Missing keys take their defaults; unrecognised keys are ignored.

        Raises:
            ConfigError: On a bad boolean, integer, origin URL, method name
                         or header name.
        """
        mapping = mapping or {}

        unknown = sorted(
            k for k in mapping
            if k not in POLICY_KEYS and k.removeprefix(POLICY_KEY_PREFIX) not in POLICY_KEYS
        )
        if unknown:
            logger.debug("Ignoring unknown policy keys", keys=unknown)

        allow_generic = parse_bool(
            KEY_ALLOW_GENERIC_HTTP_REQUESTS,
            _lookup(mapping, KEY_ALLOW_GENERIC_HTTP_REQUESTS, DEFAULT_ALLOW_GENERIC_HTTP_REQUESTS),
        )
        suffix_matching = parse_bool(
            KEY_ALLOW_ORIGIN_SUFFIX_MATCHING,
            _lookup(mapping, KEY_ALLOW_ORIGIN_SUFFIX_MATCHING, DEFAULT_ALLOW_ORIGIN_SUFFIX_MATCHING),
        )

        # ── Allowed origins ───────────────────────────────────────────────────
        origin_spec = _lookup(mapping, KEY_ALLOW_ORIGIN, DEFAULT_ALLOW_ORIGIN).strip()
        allowed_origins: list[str] = []
        allow_any = origin_spec == ANY_ORIGIN
        if not allow_any:
            for url in parse_words(origin_spec):
                try:
                    allowed_origins.append(str(Origin.parse(url)))
                except OriginError:
                    raise ConfigError(
                        f"Bad origin URL in property {KEY_ALLOW_ORIGIN}: {url}"
                    ) from None

        # ── Supported methods ─────────────────────────────────────────────────
        method_spec = _lookup(mapping, KEY_SUPPORTED_METHODS, DEFAULT_SUPPORTED_METHODS)
        methods: list[HTTPMethod] = []
        for name in parse_words(method_spec.upper()):
            method = HTTPMethod.parse(name)
            if method is None:
                raise ConfigError(
                    f"Bad HTTP method name in property {KEY_SUPPORTED_METHODS}: {name}"
                )
            methods.append(method)

        # ── Supported / exposed headers ───────────────────────────────────────
        supported_headers = _parse_header_list(
            KEY_SUPPORTED_HEADERS,
            _lookup(mapping, KEY_SUPPORTED_HEADERS, DEFAULT_SUPPORTED_HEADERS),
        )
        exposed_headers = _parse_header_list(
            KEY_EXPOSED_HEADERS,
            _lookup(mapping, KEY_EXPOSED_HEADERS, DEFAULT_EXPOSED_HEADERS),
        )

        supports_credentials = parse_bool(
            KEY_SUPPORTS_CREDENTIALS,
            _lookup(mapping, KEY_SUPPORTS_CREDENTIALS, DEFAULT_SUPPORTS_CREDENTIALS),
        )
        max_age = parse_int(KEY_MAX_AGE, _lookup(mapping, KEY_MAX_AGE, DEFAULT_MAX_AGE))

        method_order = _unique(methods)
        supported_order = _unique(supported_headers)
        exposed_order = _unique(exposed_headers)

        return cls(
            allow_generic_http_requests=allow_generic,
            allow_any_origin=allow_any,
            allow_origin_suffix_matching=suffix_matching,
            allowed_origins=frozenset(allowed_origins),
            supported_methods=frozenset(method_order),
            supported_headers=frozenset(supported_order),
            exposed_headers=frozenset(exposed_order),
            supports_credentials=supports_credentials,
            max_age=max_age,
            method_order=method_order,
            supported_header_order=supported_order,
            exposed_header_order=exposed_order,
        )

    # ── Origin checks ─────────────────────────────────────────────────────────

    def is_allowed_origin(self, origin: Optional[str]) -> bool:
        """Return True if the origin string is admitted by this policy.

        Without suffix matching the string must equal a configured canonical
        origin exactly; callers are not normalised here.
        """
        if self.allow_any_origin:
            return True
        if self.allow_origin_suffix_matching:
            return self.origin_suffix_allowed(origin)
        if origin is None:
            return False
        return origin in self.allowed_origins

    def origin_suffix_allowed(self, origin: Optional[str]) -> bool:
        """Match ``host[:port]`` suffixes of the same scheme. Never raises.

        The comparison is a plain ends-with on ``host[:port]``; it does not
        require a dot before the matched part.
        Origins without a host (file, unknown) never match.
        """
        try:
            request_origin = Origin.parse(origin)
        except OriginError:
            return False
        if request_origin.host is None:
            return False

        request_suffix = request_origin.suffix
        for allowed in self.allowed_origins:
            try:
                allowed_origin = Origin.parse(allowed)
            except OriginError:
                continue
            if allowed_origin.host is None:
                continue
            if (
                request_suffix.endswith(allowed_origin.suffix)
                and (request_origin.scheme or "").lower() == (allowed_origin.scheme or "").lower()
            ):
                return True
        return False

    # ── Method / header checks ────────────────────────────────────────────────

    def is_supported_method(self, method: HTTPMethod) -> bool:
        return method in self.supported_methods

    def is_supported_header(self, header: HeaderName) -> bool:
        return header in self.supported_headers


def _parse_header_list(key: str, value: str) -> list[HeaderName]:
    headers: list[HeaderName] = []
    for name in parse_words(value):
        try:
            headers.append(HeaderName(name))
        except HeaderNameError:
            raise ConfigError(f"Bad header field name in property {key}: {name}") from None
    return headers
