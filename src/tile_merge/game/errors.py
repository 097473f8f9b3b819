from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a session is constructed with unusable settings."""


class InvariantViolation(RuntimeError):
    """Raised when the engine reaches a state legal transitions cannot produce."""
