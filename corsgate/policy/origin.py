"""Origin parsing and normalisation.

An :class:`Origin` is the scheme + host + port (or scheme + path for
``file:`` URLs) of the context that issued a cross-origin request. The
canonical string form (``str(origin)``) is the identity: equality and hashing
both derive from it, so two spellings of the same origin compare equal.

Normalisation rules:
  - scheme is lower-cased and must be http, https or file
  - http/https hosts go through IDNA ToASCII, STD3 ASCII rules are enforced,
    then the result is lower-cased
  - IP literals are kept as written (lower-cased, IPv6 in brackets)
  - ports are kept as given; -1 marks an absent port
  - ``None`` or the literal ``"null"`` parse to :data:`Origin.UNKNOWN`
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import ClassVar, Optional
from urllib.parse import urlsplit

SUPPORTED_SCHEMES: frozenset[str] = frozenset({"http", "https", "file"})

_HOST_SCHEMES: frozenset[str] = frozenset({"http", "https"})

# STD3 ASCII rules: letters, digits and hyphen only.
_LDH_CHARS: frozenset[str] = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-"
)


class OriginError(ValueError):
    """Raised when a string cannot be parsed into a supported Origin."""


def _to_ascii_host(host: str) -> str:
    """Apply IDNA ToASCII with STD3 rules to a host name and lower-case it.

    Raises:
        OriginError: If the host is not a valid IDNA / STD3 host name.
    """
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        pass
    else:
        if address.version == 6:
            return f"[{address.compressed}]"
        return host.lower()

    try:
        ascii_host = host.encode("idna").decode("ascii")
    except UnicodeError as exc:
        raise OriginError(f"Bad origin URI: Invalid host name: {host}") from exc

    labels = ascii_host.split(".")
    # A single trailing dot denotes the root label
    if len(labels) > 1 and labels[-1] == "":
        labels = labels[:-1]
    for label in labels:
        if not label or not set(label) <= _LDH_CHARS:
            raise OriginError(f"Bad origin URI: Invalid host name: {host}")
        if label.startswith("-") or label.endswith("-"):
            raise OriginError(f"Bad origin URI: Invalid host name: {host}")

    return ascii_host.lower()


@dataclass(frozen=True, eq=False)
class Origin:
    """Immutable, normalised request origin.

    Build instances with :meth:`parse`; the fields are already normalised.
    ``scheme`` is None only for :data:`UNKNOWN`.
    """

    scheme: Optional[str] = None
    host: Optional[str] = None
    port: int = -1
    path: Optional[str] = None

    UNKNOWN: ClassVar["Origin"]

    @classmethod
    def parse(cls, raw: Optional[str]) -> "Origin":
        """Parse an Origin header value or configured origin URL.

        Raises:
            OriginError: On a malformed URI, a missing or unsupported scheme,
                         or an http/https URI without a valid host.
        """
        if raw is None or raw == "null":
            return cls.UNKNOWN

        if not raw or any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in raw):
            raise OriginError(f"Bad origin URI: {raw!r}")

        try:
            parts = urlsplit(raw)
        except ValueError as exc:
            raise OriginError(f"Bad origin URI: {exc}") from exc

        scheme = parts.scheme.lower()
        if not scheme:
            raise OriginError("Bad origin URI: Missing scheme, must be http, https or file")
        if scheme not in SUPPORTED_SCHEMES:
            raise OriginError("Bad origin URI: Scheme must be http, https or file")

        if scheme == "file":
            return cls(scheme=scheme, path=parts.path)

        host = parts.hostname
        if not host:
            raise OriginError("Bad origin URI: Missing host name / IP address")

        try:
            port = parts.port
        except ValueError as exc:
            raise OriginError(f"Bad origin URI: {exc}") from exc

        return cls(
            scheme=scheme,
            host=_to_ascii_host(host),
            port=port if port is not None else -1,
        )

    @property
    def is_unknown(self) -> bool:
        return self.scheme is None

    @property
    def suffix(self) -> str:
        """``host[:port]`` without the scheme; used by suffix matching."""
        host = self.host or ""
        if self.port != -1:
            return f"{host}:{self.port}"
        return host

    def __str__(self) -> str:
        if self.scheme is None:
            return "null"
        if self.scheme in _HOST_SCHEMES:
            if self.port != -1:
                return f"{self.scheme}://{self.host}:{self.port}"
            return f"{self.scheme}://{self.host}"
        return f"{self.scheme}://{self.path or ''}"

    def __hash__(self) -> int:
        return hash(str(self))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Origin):
            return str(self) == str(other)
        if isinstance(other, str):
            return str(self) == other
        return NotImplemented


Origin.UNKNOWN = Origin()
