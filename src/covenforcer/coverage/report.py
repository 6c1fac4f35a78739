"""Summary report built from an AnalyzerResult, and its terminal rendering.

Output schema for report_to_dict:
{
    "passed": bool,
    "packages": [
        {
            "package": str,               # full import path
            "total_statements": int,
            "covered_statements": int,
            "coverage_percent": int,
            "files": [
                {"file": str, "total_statements": int,
                 "covered_statements": int, "coverage_percent": int},
                ...
            ]
        },
        ...
    ],
    "uncovered_blocks": [
        {"path": str, "start_line": int, "end_line": int, "text": [str] | null},
        ...
    ]
}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.measure import Measurement
from rich.table import Table
from rich.text import Text

from covenforcer.coverage.models import AnalyzerResult, UncoveredBlock

PASS_MESSAGE = "Coverage scan passes!"
FAIL_MESSAGE = "Uncovered blocks detected:"

_UNBOUNDED_WIDTH = 1_000_000


@dataclass(frozen=True, slots=True)
class SummaryCoverage:
    total_statements: int = 0
    covered_statements: int = 0

    @property
    def covered_percent(self) -> int:
        """Whole-number percentage; 100 when there is nothing to cover."""
        if self.total_statements == 0:
            return 100
        return self.covered_statements * 100 // self.total_statements

    def __add__(self, other: SummaryCoverage) -> SummaryCoverage:
        return SummaryCoverage(
            total_statements=self.total_statements + other.total_statements,
            covered_statements=self.covered_statements + other.covered_statements,
        )

    def describe(self) -> tuple[str, str]:
        return (
            f"{self.covered_statements}/{self.total_statements}",
            f"({self.covered_percent}%)",
        )


@dataclass(frozen=True, slots=True)
class SummaryFile:
    file_name: str
    coverage: SummaryCoverage


@dataclass(frozen=True, slots=True)
class SummaryPackage:
    full_package_path: str
    files: tuple[SummaryFile, ...]
    coverage: SummaryCoverage


@dataclass(frozen=True, slots=True)
class SummaryReport:
    """Display-oriented view of an AnalyzerResult."""

    packages: tuple[SummaryPackage, ...]
    uncovered_blocks: tuple[UncoveredBlock, ...]

    @property
    def passed(self) -> bool:
        return not self.uncovered_blocks


def build_summary_report(result: AnalyzerResult, package_path: str) -> SummaryReport:
    """Aggregate per-file counts into packages, sorted by full package path.

    Args:
        result: Analysis result.
        package_path: The package scope the analysis ran with.
    """
    packages: list[SummaryPackage] = []
    blocks: list[UncoveredBlock] = []

    for p in result.packages:
        full_path = f"{package_path}/{p.relative_path}" if p.relative_path else package_path
        files: list[SummaryFile] = []
        total = SummaryCoverage()
        for f in p.files:
            coverage = SummaryCoverage(f.total_statements, f.covered_statements)
            total += coverage
            files.append(SummaryFile(file_name=f.file_name, coverage=coverage))
            blocks.extend(f.uncovered_blocks)
        packages.append(
            SummaryPackage(full_package_path=full_path, files=tuple(files), coverage=total)
        )

    packages.sort(key=lambda p: p.full_package_path)
    return SummaryReport(packages=tuple(packages), uncovered_blocks=tuple(blocks))


def _stats_table(
    report: SummaryReport, console: Console, *, package_stats: bool, file_stats: bool
) -> Table:
    table = Table(box=None, show_header=False, pad_edge=False, padding=(0, 1))
    for _ in range(3):
        table.add_column(no_wrap=True)

    for p in report.packages:
        if package_stats:
            table.add_row(Text(p.full_package_path), *p.coverage.describe())
        if file_stats:
            for f in p.files:
                if package_stats:
                    desc = "  " + f.file_name
                else:
                    desc = f"{p.full_package_path}/{f.file_name}"
                table.add_row(Text(desc), *f.coverage.describe())

    # Natural width, not the console's: long package paths must not crop the counts.
    unbounded = console.options.update_width(_UNBOUNDED_WIDTH)
    table.width = Measurement.get(console, unbounded, table).maximum
    return table


def render_report(
    report: SummaryReport,
    console: Console,
    *,
    package_stats: bool = False,
    file_stats: bool = False,
    show_code: bool = False,
) -> bool:
    """Print the report; returns whether the scan passed."""
    if package_stats or file_stats:
        table = _stats_table(
            report, console, package_stats=package_stats, file_stats=file_stats
        )
        console.print(table, crop=False)
        console.print()

    if report.passed:
        console.print(PASS_MESSAGE, markup=False, highlight=False)
        return True

    console.print(FAIL_MESSAGE, markup=False, highlight=False)
    for block in report.uncovered_blocks:
        r = block.code_range
        if show_code:
            console.print()
        console.print(
            f"{r.file_path} {r.start_line}-{r.end_line}",
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
        if show_code and block.text:
            for offset, line in enumerate(block.text):
                console.print(
                    f"{r.start_line + offset}>\t{line}",
                    markup=False,
                    highlight=False,
                    soft_wrap=True,
                )
    return False


def report_to_dict(report: SummaryReport) -> dict[str, Any]:
    """Structured form of the report, for JSON output."""

    def _cov(c: SummaryCoverage) -> dict[str, int]:
        return {
            "total_statements": c.total_statements,
            "covered_statements": c.covered_statements,
            "coverage_percent": c.covered_percent,
        }

    return {
        "passed": report.passed,
        "packages": [
            {
                "package": p.full_package_path,
                **_cov(p.coverage),
                "files": [{"file": f.file_name, **_cov(f.coverage)} for f in p.files],
            }
            for p in report.packages
        ],
        "uncovered_blocks": [
            {
                "path": b.code_range.file_path,
                "start_line": b.code_range.start_line,
                "end_line": b.code_range.end_line,
                "text": list(b.text) if b.text is not None else None,
            }
            for b in report.uncovered_blocks
        ],
    }
