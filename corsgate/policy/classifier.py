"""CORS request classification.

classify() is the single classification function: tagging, the actual and
preflight handlers, and dispatch all call it with the same inputs so they
can never disagree about a request's type.
"""

from __future__ import annotations

from typing import Mapping, Optional

from corsgate.constants import ORIGIN_HEADER, REQUEST_METHOD_HEADER
from corsgate.models.request import RequestType


def get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup that works on plain dicts too.

    Starlette ``Headers`` are already case-insensitive; plain mappings are
    scanned for a name that matches ignoring case.
    """
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def classify(headers: Mapping[str, str], method: Optional[str]) -> RequestType:
    """Classify a request from its headers and method.

    - no Origin header                                   → OTHER
    - Origin + OPTIONS + Access-Control-Request-Method   → PREFLIGHT
    - Origin otherwise                                   → ACTUAL
    """
    if get_header(headers, ORIGIN_HEADER) is None:
        return RequestType.OTHER

    if method == "OPTIONS" and get_header(headers, REQUEST_METHOD_HEADER) is not None:
        return RequestType.PREFLIGHT

    return RequestType.ACTUAL
