"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() source precedence and validation
"""

from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from covenforcer.config.loader import (
    GLOBAL_CONFIG_PATH,
    PROJECT_CONFIG_NAME,
    _deep_merge,
    _load_yaml,
    load_config,
)
from covenforcer.core.errors import ConfigError, ErrorCode


@pytest.fixture
def global_config(tmp_path: Path) -> Generator[Path, None, None]:
    """Point the global config at a file under tmp_path (absent until written)."""
    path = tmp_path / "global" / "config.yaml"
    with patch("covenforcer.config.loader.GLOBAL_CONFIG_PATH", path):
        yield path


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    return path


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        """Returns empty dict when file doesn't exist."""
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("skip_files: _mock\\.go$\nlogging:\n  level: DEBUG\n")

        assert _load_yaml(yaml_file) == {
            "skip_files": "_mock\\.go$",
            "logging": {"level": "DEBUG"},
        }

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert _load_yaml(yaml_file) == {}

    def test_raises_config_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        """Raises ConfigError for invalid YAML syntax."""
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("logging:\n  level:\n    - invalid: [unclosed")

        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_raises_config_error_for_non_mapping(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            _load_yaml(yaml_file)


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_override_wins(self) -> None:
        assert _deep_merge({"a": 1, "b": 2}, {"b": 3}) == {"a": 1, "b": 3}

    def test_nested_merge(self) -> None:
        """Nested dicts are merged recursively."""
        base = {"logging": {"level": "INFO", "outputs": []}}
        override = {"logging": {"level": "DEBUG"}}
        assert _deep_merge(base, override) == {"logging": {"level": "DEBUG", "outputs": []}}

    def test_override_replaces_non_dict(self) -> None:
        base: dict[str, Any] = {"a": {"nested": 1}}
        assert _deep_merge(base, {"a": "simple"}) == {"a": "simple"}

    def test_does_not_mutate_base(self) -> None:
        base = {"a": 1}
        _deep_merge(base, {"b": 2})
        assert base == {"a": 1}


class TestLoadConfig:
    """Tests for load_config function."""

    def test_returns_defaults_when_no_files(self, global_config: Path, project_dir: Path) -> None:
        config = load_config(project_dir)

        assert config.package_path is None
        assert config.skip_files is None
        assert not config.show_code
        assert config.logging.level == "WARNING"

    def test_loads_project_config(self, global_config: Path, project_dir: Path) -> None:
        (project_dir / PROJECT_CONFIG_NAME).write_text(
            "package_path: github.com/me/proj\nskip_code: NOCOVER\nfile_stats: true\n"
        )

        config = load_config(project_dir)

        assert config.package_path == "github.com/me/proj"
        assert config.skip_code == "NOCOVER"
        assert config.file_stats

    def test_project_config_overrides_global(self, global_config: Path, project_dir: Path) -> None:
        global_config.parent.mkdir(parents=True)
        global_config.write_text("skip_files: global\nskip_code: GLOBAL\n")
        (project_dir / PROJECT_CONFIG_NAME).write_text("skip_files: project\n")

        config = load_config(project_dir)

        assert config.skip_files == "project"
        assert config.skip_code == "GLOBAL"

    def test_env_vars_override_yaml(self, global_config: Path, project_dir: Path) -> None:
        (project_dir / PROJECT_CONFIG_NAME).write_text("logging:\n  level: INFO\n")

        with patch.dict(
            os.environ,
            {"COVENFORCER__LOGGING__LEVEL": "ERROR", "COVENFORCER__PACKAGE_PATH": "env/pkg"},
        ):
            config = load_config(project_dir)

        assert config.logging.level == "ERROR"
        assert config.package_path == "env/pkg"

    def test_kwargs_override_all(self, global_config: Path, project_dir: Path) -> None:
        (project_dir / PROJECT_CONFIG_NAME).write_text("package_path: yaml/pkg\n")

        with patch.dict(os.environ, {"COVENFORCER__PACKAGE_PATH": "env/pkg"}):
            config = load_config(project_dir, package_path="cli/pkg")

        assert config.package_path == "cli/pkg"

    def test_none_kwargs_are_ignored(self, global_config: Path, project_dir: Path) -> None:
        (project_dir / PROJECT_CONFIG_NAME).write_text("package_path: yaml/pkg\nshow_code: true\n")

        config = load_config(project_dir, package_path=None, show_code=None)

        assert config.package_path == "yaml/pkg"
        assert config.show_code

    def test_package_path_trailing_slash_trimmed(
        self, global_config: Path, project_dir: Path
    ) -> None:
        config = load_config(project_dir, package_path="github.com/me/proj/")

        assert config.package_path == "github.com/me/proj"

    def test_invalid_pattern_raises_config_error(
        self, global_config: Path, project_dir: Path
    ) -> None:
        (project_dir / PROJECT_CONFIG_NAME).write_text("skip_files: '(unclosed'\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(project_dir)

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE
        assert exc_info.value.details["field"] == "skip_files"

    def test_invalid_level_raises_config_error(
        self, global_config: Path, project_dir: Path
    ) -> None:
        with (
            patch.dict(os.environ, {"COVENFORCER__LOGGING__LEVEL": "LOUD"}),
            pytest.raises(ConfigError, match="logging.level"),
        ):
            load_config(project_dir)

    def test_malformed_yaml_raises_config_error(
        self, global_config: Path, project_dir: Path
    ) -> None:
        (project_dir / PROJECT_CONFIG_NAME).write_text("skip_files: [unclosed\n")

        with pytest.raises(ConfigError, match=PROJECT_CONFIG_NAME):
            load_config(project_dir)


class TestGlobalConfigPath:
    """Tests for GLOBAL_CONFIG_PATH constant."""

    def test_is_in_user_config(self) -> None:
        assert isinstance(GLOBAL_CONFIG_PATH, Path)
        assert GLOBAL_CONFIG_PATH.parts[-2:] == ("covenforcer", "config.yaml")
