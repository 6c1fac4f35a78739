"""Package path inference for the directory being checked.

The package path is the import path that prefixes every file path in the
coverage profile. It is read from go.mod when present, otherwise derived
from the URL of the git "origin" remote.
"""

from __future__ import annotations

import re
from pathlib import Path

import pygit2
import structlog

log = structlog.get_logger()

GO_MOD_FILE = "go.mod"
MODULE_PREFIX = "module "
ORIGIN_REMOTE = "origin"

_REMOTE_URL_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^git@(.*):(.*)\.git$"), r"\1/\2"),
    (re.compile(r"^https?://(.*)\.git$"), r"\1"),
    (re.compile(r"^ssh://git@(.*)\.git$"), r"\1"),
)


def package_path_from_go_mod(directory: Path) -> str | None:
    """Module path from the first line of go.mod, if it declares one."""
    go_mod = directory / GO_MOD_FILE
    try:
        with go_mod.open(encoding="utf-8") as f:
            first_line = f.readline().rstrip("\r\n")
    except OSError:
        return None
    if first_line.startswith(MODULE_PREFIX):
        return first_line[len(MODULE_PREFIX) :].strip() or None
    return None


def package_path_from_remote_url(url: str) -> str | None:
    """Map a git remote URL to an import path.

    Examples:
        git@github.com:org/repo.git -> github.com/org/repo
        https://github.com/org/repo.git -> github.com/org/repo
        ssh://git@github.com/org/repo.git -> github.com/org/repo
    """
    url = url.strip()
    for pattern, template in _REMOTE_URL_PATTERNS:
        match = pattern.match(url)
        if match is not None:
            return match.expand(template)
    return None


def origin_remote_url(directory: Path) -> str | None:
    """URL of the "origin" remote of the repository enclosing directory."""
    repo_path = pygit2.discover_repository(str(directory))
    if repo_path is None:
        return None
    try:
        repo = pygit2.Repository(repo_path)
    except pygit2.GitError:
        return None
    if ORIGIN_REMOTE not in [r.name for r in repo.remotes]:
        return None
    url: str | None = repo.remotes[ORIGIN_REMOTE].url
    return url


def infer_package_path(directory: Path | None = None) -> str | None:
    """Infer the package path for directory (default: cwd).

    Returns None when neither go.mod nor the origin remote gives one.
    """
    directory = directory or Path.cwd()

    from_go_mod = package_path_from_go_mod(directory)
    if from_go_mod:
        log.debug("scope.inferred", source="go.mod", package_path=from_go_mod)
        return from_go_mod

    url = origin_remote_url(directory)
    if url:
        from_remote = package_path_from_remote_url(url)
        if from_remote:
            log.debug("scope.inferred", source="git", url=url, package_path=from_remote)
            return from_remote
        log.debug("scope.unrecognized_remote", url=url)

    return None
