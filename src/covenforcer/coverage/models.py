"""Coverage profile and analysis data model.

A profile is what ``go test -coverprofile`` writes: a coverage mode and an
ordered list of records, each giving a source range, its statement count and
its hit count. Analysis turns the profile into a package -> file -> uncovered
block hierarchy.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, replace
from typing import TextIO


@dataclass(frozen=True, slots=True)
class CodeRange:
    """A section of source code.

    ``file_path`` has the form "PACKAGE_PATH/FILE_PATH", where PACKAGE_PATH is
    the import path of the tested package. Lines and columns are 1-based.
    """

    file_path: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    def package_path_and_file_name(self) -> tuple[str, str]:
        """Split "github.com/a/b/c/d.go" into ("github.com/a/b/c", "d.go")."""
        package_path, sep, file_name = self.file_path.rpartition("/")
        if not sep:
            return "", self.file_path
        return package_path, file_name


@dataclass(frozen=True, slots=True)
class CoverageRecord:
    """One line of a coverage profile.

    ``coverage_count`` is 0/1 in "set" mode and a hit count in "count" and
    "atomic" modes.
    """

    code_range: CodeRange
    statement_count: int
    coverage_count: int

    @property
    def is_covered(self) -> bool:
        return self.coverage_count > 0


@dataclass(frozen=True, slots=True)
class CoverageProfile:
    """Parsed coverage profile, records in file order with duplicates kept."""

    mode: str = ""
    records: tuple[CoverageRecord, ...] = ()

    def __iter__(self) -> Iterator[CoverageRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def unique_blocks(self) -> list[CoverageRecord]:
        """Sorted records with one entry per code range."""
        from covenforcer.coverage.merge import unique_blocks

        return unique_blocks(self.records)

    def with_record_filter(self, retain: Callable[[CoverageRecord], bool]) -> CoverageProfile:
        """Copy of this profile without the records ``retain`` rejects."""
        return replace(self, records=tuple(r for r in self.records if retain(r)))

    def write_to(self, stream: TextIO) -> None:
        """Write the profile in the format it is parsed from."""
        from covenforcer.coverage.parser import write_profile

        write_profile(self, stream)


@dataclass(frozen=True, slots=True)
class UncoveredBlock:
    """A code range with no coverage.

    ``text`` holds the source lines from start line to end line, and is only
    set when code display was requested.
    """

    code_range: CodeRange
    text: tuple[str, ...] | None = None


@dataclass(frozen=True, slots=True)
class AnalyzerFileResult:
    """Per-file analysis; uncovered blocks ascend by start line."""

    file_name: str
    total_statements: int = 0
    covered_statements: int = 0
    uncovered_blocks: tuple[UncoveredBlock, ...] = ()


@dataclass(frozen=True, slots=True)
class AnalyzerPackageResult:
    """Per-package analysis.

    ``relative_path`` is the package's path within the scope: "" for the
    scope package itself, "a/b" for "<scope>/a/b". Files skipped by the file
    pattern are not listed.
    """

    relative_path: str
    files: tuple[AnalyzerFileResult, ...] = ()


@dataclass(frozen=True, slots=True)
class AnalyzerResult:
    """Result of analyze_coverage.

    ``skipped_file_paths`` are profile paths (scope included) excluded by the
    file pattern. ``skipped_blocks`` holds every record excluded by either
    the file pattern or the code pattern.
    """

    packages: tuple[AnalyzerPackageResult, ...] = ()
    skipped_file_paths: tuple[str, ...] = ()
    skipped_blocks: tuple[CoverageRecord, ...] = ()

    @property
    def uncovered_blocks(self) -> list[UncoveredBlock]:
        """All uncovered blocks in package, file, line order."""
        return [b for p in self.packages for f in p.files for b in f.uncovered_blocks]

    @property
    def passed(self) -> bool:
        return not self.uncovered_blocks
