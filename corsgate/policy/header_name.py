"""Case-insensitive HTTP header field names.

HeaderName canonicalises at construction (``x-requested-with`` becomes
``X-Requested-With``), so comparison afterwards is plain string equality.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Must begin with a letter, then only word characters and dashes.
_HEADER_NAME_RE = re.compile(r"^[A-Za-z][\w-]*$", re.ASCII)


class HeaderNameError(ValueError):
    """Raised for an empty or syntactically invalid header field name."""


def canonicalize(name: str) -> str:
    """Return the canonical ``Aaa-Bbb-Ccc`` form of a header field name.

    Raises:
        HeaderNameError: If the trimmed name is empty or has invalid syntax.
    """
    trimmed = name.strip()
    if not trimmed:
        raise HeaderNameError("The header field name must not be an empty string")
    if not _HEADER_NAME_RE.match(trimmed):
        raise HeaderNameError(f"The header field name has invalid syntax: {trimmed!r}")

    tokens = trimmed.lower().split("-")
    # Trailing dashes do not survive canonicalisation
    while tokens and not tokens[-1]:
        tokens.pop()
    return "-".join(token[:1].upper() + token[1:] for token in tokens)


@dataclass(frozen=True)
class HeaderName:
    """A header field name held in canonical form."""

    canonical: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "canonical", canonicalize(self.canonical))

    @classmethod
    def canonicalize(cls, name: str) -> str:
        return canonicalize(name)

    def __str__(self) -> str:
        return self.canonical
