"""Config module exports."""

from covenforcer.config.loader import load_config
from covenforcer.config.models import (
    EnforcerConfig,
    LoggingConfig,
    LogOutputConfig,
    compile_pattern,
)

__all__ = [
    "load_config",
    "compile_pattern",
    "EnforcerConfig",
    "LoggingConfig",
    "LogOutputConfig",
]
