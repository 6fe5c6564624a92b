"""Adapter setup exceptions.

Request-time failures use ``querysvc.errors.QueryError``; these are only
raised while building or initializing adapters at startup.
"""


class AdapterError(Exception):
    """Base exception for adapter setup errors."""


class ConfigurationError(AdapterError):
    """Raised when adapter configuration is invalid or a dependency is missing."""
