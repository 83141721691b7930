"""Shared constants for corsgate.

Header names, policy defaults and diagnostic strings used across modules are
defined here. No magic strings in other modules — import from here.
"""

# ─── Request headers read by the CORS engine ─────────────────────────────────

ORIGIN_HEADER: str = "Origin"
REQUEST_METHOD_HEADER: str = "Access-Control-Request-Method"
REQUEST_HEADERS_HEADER: str = "Access-Control-Request-Headers"

# ─── Response headers emitted by the CORS engine ─────────────────────────────

ALLOW_ORIGIN_HEADER: str = "Access-Control-Allow-Origin"
ALLOW_CREDENTIALS_HEADER: str = "Access-Control-Allow-Credentials"
EXPOSE_HEADERS_HEADER: str = "Access-Control-Expose-Headers"
MAX_AGE_HEADER: str = "Access-Control-Max-Age"
ALLOW_METHODS_HEADER: str = "Access-Control-Allow-Methods"
ALLOW_HEADERS_HEADER: str = "Access-Control-Allow-Headers"

# Separator used when serialising header / method lists into a single value.
LIST_SEPARATOR: str = ", "

# ─── Policy defaults ─────────────────────────────────────────────────────────

# Literal allowOrigin value that admits every origin.
ANY_ORIGIN: str = "*"

DEFAULT_ALLOW_GENERIC_HTTP_REQUESTS: str = "true"
DEFAULT_ALLOW_ORIGIN_SUFFIX_MATCHING: str = "false"
DEFAULT_ALLOW_ORIGIN: str = ANY_ORIGIN
DEFAULT_SUPPORTED_METHODS: str = "GET, POST, HEAD, OPTIONS"
DEFAULT_SUPPORTED_HEADERS: str = ""
DEFAULT_EXPOSED_HEADERS: str = ""
DEFAULT_SUPPORTS_CREDENTIALS: str = "true"
DEFAULT_MAX_AGE: str = "-1"

# Optional prefix accepted on policy keys (e.g. "cors.allowOrigin").
POLICY_KEY_PREFIX: str = "cors."

# ─── Diagnostics ─────────────────────────────────────────────────────────────

# Prefix of every text/plain denial body written by the filter.
DIAGNOSTIC_PREFIX: str = "Cross-Origin Resource Sharing (CORS) Filter: "

# Request tag keys, matching the attribute names downstream code expects.
TAG_IS_CORS_REQUEST: str = "cors.isCorsRequest"
TAG_ORIGIN: str = "cors.origin"
TAG_REQUEST_TYPE: str = "cors.requestType"
TAG_REQUEST_HEADERS: str = "cors.requestHeaders"
