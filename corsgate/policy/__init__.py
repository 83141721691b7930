"""corsgate CORS policy.

Public API:
    Origin, OriginError         — origin parsing and normalisation
    HeaderName, HeaderNameError — canonical header field names
    PolicyConfig, ConfigError   — immutable access policy
    classify                    — request classification
    PolicyEngine                — per-request decisions
"""
from corsgate.policy.classifier import classify
from corsgate.policy.config import ConfigError, PolicyConfig
from corsgate.policy.engine import PolicyEngine
from corsgate.policy.header_name import HeaderName, HeaderNameError
from corsgate.policy.origin import Origin, OriginError

__all__ = [
    "ConfigError",
    "HeaderName",
    "HeaderNameError",
    "Origin",
    "OriginError",
    "PolicyConfig",
    "PolicyEngine",
    "classify",
]
