"""Core module exports."""

from covenforcer.core.errors import (
    ConfigError,
    CovEnforcerError,
    ErrorCode,
    MalformedProfileError,
    ScopeMismatchError,
    UnreadableSourceError,
)
from covenforcer.core.logging import configure_logging, get_logger

__all__ = [
    # Errors
    "ConfigError",
    "CovEnforcerError",
    "ErrorCode",
    "MalformedProfileError",
    "ScopeMismatchError",
    "UnreadableSourceError",
    # Logging
    "configure_logging",
    "get_logger",
]
