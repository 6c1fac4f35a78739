"""Coverage analysis against a package scope, and filtered profile output.

analyze_coverage walks the deduplicated, sorted blocks of a profile and
groups them into packages and files relative to the configured package path:

- blocks outside the package path abort the analysis (ScopeMismatchError)
- files matching the skip-files pattern are excluded entirely
- uncovered blocks whose source matches the skip-code pattern are excluded
- everything else is counted; uncovered blocks are reported

Skipped records are kept on the result so that filter_profile can drop them
from the original profile for re-export.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

import structlog

from covenforcer.core.errors import ScopeMismatchError, UnreadableSourceError
from covenforcer.coverage.models import (
    AnalyzerFileResult,
    AnalyzerPackageResult,
    AnalyzerResult,
    CoverageProfile,
    CoverageRecord,
    UncoveredBlock,
)
from covenforcer.coverage.parser import write_profile

log = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class AnalyzerOptions:
    """Inputs to analyze_coverage.

    ``skip_files`` is searched in the file path relative to ``package_path``;
    ``skip_code`` is searched in each source line of an uncovered block.
    Source files are resolved against ``source_root`` (default: cwd).
    """

    package_path: str
    skip_files: re.Pattern[str] | None = None
    skip_code: re.Pattern[str] | None = None
    show_code: bool = False
    source_root: Path | None = None


@dataclass(slots=True)
class _FileAccumulator:
    file_name: str
    total_statements: int = 0
    covered_statements: int = 0
    uncovered_blocks: list[UncoveredBlock] = field(default_factory=list)

    def freeze(self) -> AnalyzerFileResult:
        return AnalyzerFileResult(
            file_name=self.file_name,
            total_statements=self.total_statements,
            covered_statements=self.covered_statements,
            uncovered_blocks=tuple(self.uncovered_blocks),
        )


@dataclass(slots=True)
class _PackageAccumulator:
    relative_path: str
    files: list[AnalyzerFileResult] = field(default_factory=list)

    def freeze(self) -> AnalyzerPackageResult:
        return AnalyzerPackageResult(relative_path=self.relative_path, files=tuple(self.files))


class _SourceReader:
    """Reads line ranges from source files, caching each file for one pass."""

    def __init__(self, root: Path) -> None:
        self._root = root
        self._cache: dict[str, list[str]] = {}

    def read_lines(self, path: str, start: int, end: int) -> list[str]:
        """Lines start..end inclusive (1-based); a short file yields fewer lines."""
        lines = self._cache.get(path)
        if lines is None:
            try:
                with (self._root / path).open(encoding="utf-8", newline="") as f:
                    lines = _split_lines(f.read())
            except (OSError, UnicodeDecodeError) as e:
                raise UnreadableSourceError.for_path(path, e) from e
            self._cache[path] = lines
        return lines[max(start, 1) - 1 : end]


def _split_lines(text: str) -> list[str]:
    """Split on "\\n" only, dropping one trailing "\\r" per line.

    str.splitlines also breaks on form feeds and Unicode separators, which
    would shift line numbers against the profile.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [ln[:-1] if ln.endswith("\r") else ln for ln in lines]


def _matches_code(pattern: re.Pattern[str], lines: list[str]) -> bool:
    """True if pattern matches non-empty text on any line."""
    for line in lines:
        match = pattern.search(line)
        if match is not None and match.group():
            return True
    return False


def _relative_package_path(package_path: str, scope: str) -> str:
    if package_path == scope:
        return ""
    if package_path.startswith(scope + "/"):
        return package_path[len(scope) + 1 :]
    raise ScopeMismatchError.for_scope(scope)


def analyze_coverage(profile: CoverageProfile, options: AnalyzerOptions) -> AnalyzerResult:
    """Apply the options to the profile to produce report data.

    Raises:
        ScopeMismatchError: A block lies outside options.package_path.
        UnreadableSourceError: Source was needed for an uncovered block but
            could not be read.
    """
    scope = options.package_path
    needs_source = options.show_code or options.skip_code is not None
    reader = _SourceReader(options.source_root or Path.cwd())

    packages: list[AnalyzerPackageResult] = []
    skipped_file_paths: list[str] = []
    skipped_blocks: list[CoverageRecord] = []

    current_package: _PackageAccumulator | None = None
    current_file: _FileAccumulator | None = None

    for block in profile.unique_blocks():
        package_path, file_name = block.code_range.package_path_and_file_name()
        relative_path = _relative_package_path(package_path, scope)
        file_path = f"{relative_path}/{file_name}" if relative_path else file_name

        if options.skip_files is not None and options.skip_files.search(file_path):
            skipped_blocks.append(block)
            if block.code_range.file_path not in skipped_file_paths:
                skipped_file_paths.append(block.code_range.file_path)
                log.debug("analysis.file_skipped", path=block.code_range.file_path)
            continue

        if current_package is None or current_package.relative_path != relative_path:
            if current_file is not None and current_package is not None:
                current_package.files.append(current_file.freeze())
                current_file = None
            if current_package is not None:
                packages.append(current_package.freeze())
            current_package = _PackageAccumulator(relative_path=relative_path)

        if current_file is None or current_file.file_name != file_name:
            if current_file is not None:
                current_package.files.append(current_file.freeze())
            current_file = _FileAccumulator(file_name=file_name)

        if block.is_covered:
            current_file.total_statements += block.statement_count
            current_file.covered_statements += block.statement_count
            continue

        text: tuple[str, ...] | None = None
        if needs_source:
            r = block.code_range
            lines = reader.read_lines(file_path, r.start_line, r.end_line)

            if options.skip_code is not None and _matches_code(options.skip_code, lines):
                skipped_blocks.append(block)
                log.debug(
                    "analysis.block_skipped",
                    path=r.file_path,
                    start_line=r.start_line,
                    end_line=r.end_line,
                )
                continue

            if options.show_code:
                text = tuple(lines)

        current_file.total_statements += block.statement_count
        current_file.uncovered_blocks.append(UncoveredBlock(code_range=block.code_range, text=text))

    if current_file is not None and current_package is not None:
        current_package.files.append(current_file.freeze())
    if current_package is not None:
        packages.append(current_package.freeze())

    result = AnalyzerResult(
        packages=tuple(packages),
        skipped_file_paths=tuple(skipped_file_paths),
        skipped_blocks=tuple(skipped_blocks),
    )
    log.info(
        "analysis.complete",
        packages=len(result.packages),
        uncovered=len(result.uncovered_blocks),
        skipped_files=len(result.skipped_file_paths),
        skipped_blocks=len(result.skipped_blocks),
    )
    return result


def filter_profile(profile: CoverageProfile, result: AnalyzerResult) -> CoverageProfile:
    """Drop the records the analysis skipped, keeping order and duplicates.

    Duplicates are kept on purpose: a range with both hit and not-hit records
    must round-trip unchanged.
    """
    skipped_ranges = {b.code_range for b in result.skipped_blocks}
    skipped_files = set(result.skipped_file_paths)
    return profile.with_record_filter(
        lambda r: r.code_range.file_path not in skipped_files
        and r.code_range not in skipped_ranges
    )


def write_filtered_profile(
    profile: CoverageProfile, result: AnalyzerResult, stream: TextIO
) -> CoverageProfile:
    """Write the filtered profile to a stream and return it."""
    filtered = filter_profile(profile, result)
    write_profile(filtered, stream)
    log.debug("profile.filtered", kept=len(filtered), dropped=len(profile) - len(filtered))
    return filtered
