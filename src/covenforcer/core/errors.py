"""covenforcer error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Profile
- 4xxx: Analysis
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Profile (3xxx)
    PROFILE_MALFORMED = 3001

    # Analysis (4xxx)
    SCOPE_MISMATCH = 4001
    SOURCE_UNREADABLE = 4002


@dataclass(frozen=True, slots=True)
class CovEnforcerError(Exception):
    """Base error with structured context for reports and JSON output."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'SCOPE_MISMATCH')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return self.message


class ConfigError(CovEnforcerError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class MalformedProfileError(CovEnforcerError):
    """A non-blank profile line is neither a mode line nor a coverage record."""

    @classmethod
    def at_line(cls, line: int) -> "MalformedProfileError":
        return cls(
            code=ErrorCode.PROFILE_MALFORMED,
            message=f"Invalid profile data format at line {line}",
            details={"line": line},
        )

    @property
    def line(self) -> int:
        return int(self.details["line"])


class ScopeMismatchError(CovEnforcerError):
    """The profile refers to source files outside the configured package."""

    @classmethod
    def for_scope(cls, scope: str) -> "ScopeMismatchError":
        return cls(
            code=ErrorCode.SCOPE_MISMATCH,
            message=(
                "coverage profile refers to source files that are not in the package "
                f'"{scope}"; use --package option to specify correct package path'
            ),
            details={"scope": scope},
        )

    @property
    def scope(self) -> str:
        return str(self.details["scope"])


class UnreadableSourceError(CovEnforcerError):
    """A source file needed for a code excerpt could not be read."""

    @classmethod
    def for_path(cls, path: str, cause: BaseException) -> "UnreadableSourceError":
        return cls(
            code=ErrorCode.SOURCE_UNREADABLE,
            message=f'unable to read file "{path}" ({cause})',
            details={"path": path, "reason": str(cause)},
        )

    @property
    def path(self) -> str:
        return str(self.details["path"])

