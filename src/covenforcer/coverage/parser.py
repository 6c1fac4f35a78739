"""Go coverage profile reader and writer.

Go test produces coverage profiles with format:
mode: set|count|atomic
<package>/<file>:<startline>.<startcol>,<endline>.<endcol> <numstmt> <count>

Example:
mode: set
github.com/user/pkg/main.go:10.2,12.16 3 1
github.com/user/pkg/main.go:15.2,20.16 5 0

- mode: set (0/1), count (hit count), atomic (thread-safe count)
- numstmt: number of statements in block
- count: execution count (0 = not covered)

The same range may appear many times, once per traced code path. Records are
kept exactly as read; see merge.unique_blocks for the reduced view.
"""

import re
from pathlib import Path
from typing import TextIO

import structlog

from covenforcer.core.errors import MalformedProfileError
from covenforcer.coverage.models import CodeRange, CoverageProfile, CoverageRecord

log = structlog.get_logger()

MODE_PREFIX = "mode:"

# The path may itself contain colons; only the trailing range/count suffix is fixed.
_RECORD_RE = re.compile(r"^(.*):(\d+)\.(\d+),(\d+)\.(\d+) +(\d+) +(\d+)$")


def parse_record(line: str) -> CoverageRecord | None:
    """Parse one trimmed record line, or return None if it doesn't match."""
    match = _RECORD_RE.match(line)
    if match is None:
        return None
    path, start_line, start_col, end_line, end_col, numstmt, count = match.groups()
    return CoverageRecord(
        code_range=CodeRange(
            file_path=path,
            start_line=int(start_line),
            start_column=int(start_col),
            end_line=int(end_line),
            end_column=int(end_col),
        ),
        statement_count=int(numstmt),
        coverage_count=int(count),
    )


def read_profile(stream: TextIO) -> CoverageProfile:
    """Parse a coverage profile from a text stream.

    Raises:
        MalformedProfileError: A non-blank line is neither "mode:" nor a record.
        OSError: Reading the stream failed.
    """
    mode = ""
    records: list[CoverageRecord] = []

    for line_number, raw in enumerate(stream, start=1):
        line = raw.strip()
        if not line:
            continue

        if line.startswith(MODE_PREFIX):
            mode = line[len(MODE_PREFIX) :].strip()
            continue

        record = parse_record(line)
        if record is None:
            raise MalformedProfileError.at_line(line_number)
        records.append(record)

    log.debug("profile.parsed", mode=mode, records=len(records))
    return CoverageProfile(mode=mode, records=tuple(records))


def load_profile(path: Path) -> CoverageProfile:
    """Open and parse a profile file. OSError propagates."""
    with path.open(encoding="utf-8") as f:
        return read_profile(f)


def format_record(record: CoverageRecord) -> str:
    r = record.code_range
    return (
        f"{r.file_path}:{r.start_line}.{r.start_column},{r.end_line}.{r.end_column} "
        f"{record.statement_count} {record.coverage_count}"
    )


def write_profile(profile: CoverageProfile, stream: TextIO) -> None:
    """Write a profile in the same format that read_profile accepts."""
    stream.write(f"{MODE_PREFIX} {profile.mode}\n")
    for record in profile.records:
        stream.write(format_record(record) + "\n")
