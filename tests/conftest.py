"""Shared fixtures: sample coverage profiles and the source files they cover.

Profiles are written to a temporary directory together with source files
laid out relative to the package path, so that analysis with
``source_root=<dir>`` can read code excerpts.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog

from covenforcer.coverage import CoverageProfile, read_profile

BASIC_PROFILE = """\
mode: set
base-package/first:3.4,5.2 1 0
base-package/first:1.1,2.1 2 0
base-package/otherpackage/first:2.1,2.10 1 0
base-package/second:1.1,5.1 5 0
base-package/third:1.1,2.1 2 0
base-package/second:1.1,5.1 5 0
base-package/third:3.1,4.1 2 1
base-package/third:4.1,5.1 2 0
"""

ANALYZER_PROFILE = """\
mode: set
package-path/file1:1.1,2.1 1 0
package-path/file1:3.1,4.1 1 0
package-path/file2-skip:1.1,5.1 3 0
package-path/file3:1.1,2.1 1 0
package-path/file3:3.1,4.1 2 0
package-path/file3:3.1,4.1 2 1
package-path/file3:4.1,5.1 1 0
"""

REPORT_NOT_PASS_PROFILE = """\
mode: set
base-package/first:1.1,2.1 2 1
base-package/first:3.1,4.1 2 0
base-package/second:1.1,4.1 4 1
base-package/third:1.1,2.1 0 1
base-package/otherpackage/first:1.1,3.1 7 0
"""

REPORT_PASS_PROFILE = """\
mode: set
base-package/first:1.1,2.1 2 1
base-package/second:1.1,4.1 4 1
"""

SOURCE_FILES = {
    "first": [f"first file line {n}" for n in range(1, 6)],
    "second": [f"second file line {n}" for n in range(1, 6)],
    "third": [f"third file line {n}" for n in range(1, 6)],
    "otherpackage/first": [f"other package first file line {n}" for n in range(1, 4)],
    "file1": ["file 1 line 1", "file 1 line 2", "file 1 line 3 SKIPME", "file 1 line 4"],
    "file2-skip": [f"file 2 line {n}" for n in range(1, 6)],
    "file3": [f"file 3 line {n}" for n in range(1, 6)],
}


def _parse(text: str) -> CoverageProfile:
    return read_profile(io.StringIO(text))


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """Directory holding the sample source files, relative to the package."""
    for rel_path, lines in SOURCE_FILES.items():
        path = tmp_path / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n")
    return tmp_path


@pytest.fixture
def basic_profile() -> CoverageProfile:
    return _parse(BASIC_PROFILE)


@pytest.fixture
def analyzer_profile() -> CoverageProfile:
    return _parse(ANALYZER_PROFILE)


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Reset structlog and stdlib logging between tests."""
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


@pytest.fixture
def report_not_pass_profile() -> CoverageProfile:
    return _parse(REPORT_NOT_PASS_PROFILE)


@pytest.fixture
def report_pass_profile() -> CoverageProfile:
    return _parse(REPORT_PASS_PROFILE)


@pytest.fixture
def parse_profile() -> Callable[[str], CoverageProfile]:
    """Parse profile text from a string."""
    return _parse


@pytest.fixture
def profile_texts() -> dict[str, str]:
    """Raw text of the sample profiles, keyed by name."""
    return {
        "basic": BASIC_PROFILE,
        "analyzer": ANALYZER_PROFILE,
        "report_not_pass": REPORT_NOT_PASS_PROFILE,
        "report_pass": REPORT_PASS_PROFILE,
    }
