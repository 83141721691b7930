"""Shared utilities for corsgate."""
