"""Pydantic configuration models.

Configuration Hierarchy (highest to lowest precedence):
1. Command-line options (kwargs to load_config())
2. Environment variables (COVENFORCER__KEY, COVENFORCER__SECTION__KEY)
3. Project YAML (.covenforcer.yaml in the working directory)
4. Global YAML (~/.config/covenforcer/config.yaml)
5. Built-in defaults (this file)

Examples:
    COVENFORCER__PACKAGE_PATH=github.com/example/project
    COVENFORCER__SKIP_FILES=_mock\\.go$
    COVENFORCER__LOGGING__LEVEL=DEBUG
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, Field, field_validator

if TYPE_CHECKING:
    from covenforcer.coverage.analyzer import AnalyzerOptions

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a user-supplied pattern, with a readable error."""
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValueError(f"Not a valid regular expression: {pattern} ({e})") from e


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        COVENFORCER__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. Report output is not affected.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class EnforcerConfig(BaseModel):
    """Resolved options for one coverage check."""

    package_path: str | None = Field(
        default=None,
        description="Base import path of the package. Inferred from go.mod or git if unset.",
    )
    skip_files: str | None = Field(
        default=None,
        description="Regex for file paths (relative to the package) to be ignored.",
    )
    skip_code: str | None = Field(
        default=None,
        description="Regex for source lines that mark an uncovered block as ignored.",
    )
    show_code: bool = Field(default=False, description="Display source of uncovered blocks.")
    package_stats: bool = Field(default=False, description="Show per-package statistics.")
    file_stats: bool = Field(default=False, description="Show per-file statistics.")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("package_path")
    @classmethod
    def normalize_package_path(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip().rstrip("/") or None

    @field_validator("skip_files", "skip_code")
    @classmethod
    def validate_pattern(cls, v: str | None) -> str | None:
        if not v:
            return None
        compile_pattern(v)
        return v

    def analyzer_options(
        self, package_path: str | None = None, source_root: Path | None = None
    ) -> AnalyzerOptions:
        """Build core analyzer options; package_path overrides the configured one."""
        from covenforcer.coverage.analyzer import AnalyzerOptions

        scope = package_path or self.package_path
        if not scope:
            raise ValueError("package_path is required")
        return AnalyzerOptions(
            package_path=scope,
            skip_files=compile_pattern(self.skip_files) if self.skip_files else None,
            skip_code=compile_pattern(self.skip_code) if self.skip_code else None,
            show_code=self.show_code,
            source_root=source_root,
        )
