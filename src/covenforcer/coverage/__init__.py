"""Go coverage profile parsing, deduplication, analysis and reporting.

Usage:
    from covenforcer.coverage import AnalyzerOptions, analyze_coverage, load_profile

    profile = load_profile(Path("coverage.out"))
    result = analyze_coverage(profile, AnalyzerOptions(package_path="github.com/me/pkg"))

    with open("filtered.out", "w") as f:
        write_filtered_profile(profile, result, f)
"""

from covenforcer.coverage.analyzer import (
    AnalyzerOptions,
    analyze_coverage,
    filter_profile,
    write_filtered_profile,
)
from covenforcer.coverage.merge import block_sort_key, unique_blocks
from covenforcer.coverage.models import (
    AnalyzerFileResult,
    AnalyzerPackageResult,
    AnalyzerResult,
    CodeRange,
    CoverageProfile,
    CoverageRecord,
    UncoveredBlock,
)
from covenforcer.coverage.parser import (
    format_record,
    load_profile,
    parse_record,
    read_profile,
    write_profile,
)
from covenforcer.coverage.report import (
    SummaryCoverage,
    SummaryFile,
    SummaryPackage,
    SummaryReport,
    build_summary_report,
    render_report,
    report_to_dict,
)

__all__ = [
    # Models
    "AnalyzerFileResult",
    "AnalyzerPackageResult",
    "AnalyzerResult",
    "CodeRange",
    "CoverageProfile",
    "CoverageRecord",
    "UncoveredBlock",
    # Parser
    "format_record",
    "load_profile",
    "parse_record",
    "read_profile",
    "write_profile",
    # Merge
    "block_sort_key",
    "unique_blocks",
    # Analysis
    "AnalyzerOptions",
    "analyze_coverage",
    "filter_profile",
    "write_filtered_profile",
    # Report
    "SummaryCoverage",
    "SummaryFile",
    "SummaryPackage",
    "SummaryReport",
    "build_summary_report",
    "render_report",
    "report_to_dict",
]
