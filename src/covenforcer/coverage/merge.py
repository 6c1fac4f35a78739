"""Reduction of duplicate profile records to one record per code range.

"go test" can write many records for the same code range as it walks the
covered code paths. A range counts as covered if any of its records has a
nonzero count:

- some record has count > 0: keep the last such record, in input order
- all records have count == 0: keep the first record

Positive counts are not summed or maxed; the last positive record wins.
"""

from collections.abc import Iterable

from covenforcer.coverage.models import CodeRange, CoverageRecord


def block_sort_key(record: CoverageRecord) -> tuple[str, str, int]:
    """Sort by package path, then file name, then start line."""
    package_path, file_name = record.code_range.package_path_and_file_name()
    return package_path, file_name, record.code_range.start_line


def unique_blocks(records: Iterable[CoverageRecord]) -> list[CoverageRecord]:
    """Deduplicate records by code range and sort them.

    Args:
        records: Profile records in file order.

    Returns:
        One record per distinct CodeRange, sorted by block_sort_key.
    """
    by_range: dict[CodeRange, CoverageRecord] = {}
    for record in records:
        if record.is_covered or record.code_range not in by_range:
            by_range[record.code_range] = record

    return sorted(by_range.values(), key=block_sort_key)
