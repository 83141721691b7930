"""Decision contracts returned by the CORS policy engine.

Request-time policy failures are values, not exceptions: every handler returns
a :class:`Decision` that carries either the response headers to emit or a
:class:`CorsError`. The filter maps ``CorsError.kind`` to an HTTP status in a
single table (see :mod:`corsgate.models.responses`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

from corsgate.models.request import CorsTags, HTTPMethod

if TYPE_CHECKING:
    from corsgate.policy.header_name import HeaderName

HeaderPairs = tuple[tuple[str, str], ...]


class CorsErrorKind(str, Enum):
    """Closed set of request-time CORS failures."""

    INVALID_REQUEST = "invalid_request"
    ORIGIN_DENIED = "origin_denied"
    UNSUPPORTED_METHOD = "unsupported_method"
    UNSUPPORTED_HEADER = "unsupported_header"
    GENERIC_DENIED = "generic_denied"


class Action(str, Enum):
    """What the filter does with a request after dispatch.

    PASS:    continue downstream, applying any headers to its response.
    RESPOND: answer directly (successful preflight) with an empty body.
    DENY:    short-circuit with the diagnostic for the carried error.
    """

    PASS = "pass"
    RESPOND = "respond"
    DENY = "deny"


@dataclass(frozen=True)
class CorsError:
    """A typed request-time policy failure.

    Fields:
        kind:    Error category (drives the HTTP status).
        message: Human-readable reason, without offending values.
        origins: Origin tokens that failed the policy (ORIGIN_DENIED).
        method:  Offending method when it could be parsed (UNSUPPORTED_METHOD).
        header:  First offending requested header (UNSUPPORTED_HEADER).
    """

    kind: CorsErrorKind
    message: str
    origins: tuple[str, ...] = ()
    method: Optional[HTTPMethod] = None
    header: Optional["HeaderName"] = None

    @property
    def detail(self) -> str:
        """The message extended with the offending value, when there is one."""
        if self.kind == CorsErrorKind.ORIGIN_DENIED:
            return f"{self.message}: {' '.join(self.origins)}"
        if self.kind == CorsErrorKind.UNSUPPORTED_METHOD and self.method is not None:
            return f"{self.message}: {self.method.value}"
        if self.kind == CorsErrorKind.UNSUPPORTED_HEADER and self.header is not None:
            return f"{self.message}: {self.header.canonical}"
        return self.message


@dataclass(frozen=True)
class Decision:
    """Outcome of handle_actual() / handle_preflight().

    ``headers`` is only populated on success; a failed decision never carries
    partial response headers.
    """

    headers: HeaderPairs = ()
    error: Optional[CorsError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def allow(cls, headers: list[tuple[str, str]]) -> "Decision":
        return cls(headers=tuple(headers))

    @classmethod
    def deny(cls, kind: CorsErrorKind, message: str, **details: object) -> "Decision":
        return cls(error=CorsError(kind=kind, message=message, **details))  # type: ignore[arg-type]


@dataclass(frozen=True)
class Verdict:
    """Outcome of PolicyEngine.dispatch() for one request."""

    action: Action
    tags: CorsTags = field(default_factory=CorsTags)
    headers: HeaderPairs = ()
    error: Optional[CorsError] = None
