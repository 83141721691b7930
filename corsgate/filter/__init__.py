"""corsgate HTTP filter.

Public API:
    CORSFilterMiddleware — Starlette middleware applying a PolicyEngine verdict
"""
from corsgate.filter.middleware import CORSFilterMiddleware

__all__ = ["CORSFilterMiddleware"]
