"""Per-request CORS contracts: HTTP methods, request types and request tags."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from corsgate.constants import (
    TAG_IS_CORS_REQUEST,
    TAG_ORIGIN,
    TAG_REQUEST_HEADERS,
    TAG_REQUEST_TYPE,
)


class HTTPMethod(str, Enum):
    """HTTP methods a policy may list as supported."""

    GET = "GET"
    POST = "POST"
    HEAD = "HEAD"
    PUT = "PUT"
    DELETE = "DELETE"
    TRACE = "TRACE"
    OPTIONS = "OPTIONS"
    CONNECT = "CONNECT"
    PATCH = "PATCH"

    @classmethod
    def parse(cls, name: Optional[str]) -> Optional["HTTPMethod"]:
        """Exact (case-sensitive) lookup. Returns None for unknown names."""
        if name is None:
            return None
        try:
            return cls(name)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


class RequestType(str, Enum):
    """CORS classification of an incoming request."""

    ACTUAL = "actual"
    PREFLIGHT = "preflight"
    OTHER = "other"


@dataclass(frozen=True)
class CorsTags:
    """Read-only CORS context attached to a request for downstream handlers.

    Fields:
        is_cors_request: True for actual and preflight requests.
        origin:          Raw Origin header value, None for non-CORS requests.
        request_type:    "actual" | "preflight" | None.
        request_headers: Raw Access-Control-Request-Headers (preflight only).
    """

    is_cors_request: bool = False
    origin: Optional[str] = None
    request_type: Optional[str] = None
    request_headers: Optional[str] = None

    def as_attributes(self) -> dict[str, object]:
        """Return the tags keyed by their ``cors.*`` attribute names.

        Keys whose value was never set are omitted.
        """
        attributes: dict[str, object] = {TAG_IS_CORS_REQUEST: self.is_cors_request}
        if self.origin is not None:
            attributes[TAG_ORIGIN] = self.origin
        if self.request_type is not None:
            attributes[TAG_REQUEST_TYPE] = self.request_type
        if self.request_headers is not None:
            attributes[TAG_REQUEST_HEADERS] = self.request_headers
        return attributes
