"""corsgate — Cross-Origin Resource Sharing policy enforcement.

The policy engine (corsgate.policy) decides, per request, whether a CORS
request is allowed and which Access-Control-* headers to emit. The filter
(corsgate.filter) applies those decisions in front of a Starlette/FastAPI app.
"""

__version__ = "1.0.0"
