"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority, used for command-line options)
2. Environment variables (COVENFORCER__KEY)
3. Project config (.covenforcer.yaml in the working directory)
4. Global config (~/.config/covenforcer/config.yaml)
5. Built-in defaults (lowest priority)
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from covenforcer.config.models import EnforcerConfig, LoggingConfig
from covenforcer.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/covenforcer/config.yaml").expanduser()
PROJECT_CONFIG_NAME = ".covenforcer.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source."""

    class CovEnforcerSettings(BaseSettings):
        """Root config. Env vars: COVENFORCER__PACKAGE_PATH, COVENFORCER__LOGGING__LEVEL, etc."""

        model_config = SettingsConfigDict(
            env_prefix="COVENFORCER__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        package_path: str | None = None
        skip_files: str | None = None
        skip_code: str | None = None
        show_code: bool = False
        package_stats: bool = False
        file_stats: bool = False
        logging: LoggingConfig = LoggingConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml files
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return CovEnforcerSettings


def _invalid(e: ValidationError) -> ConfigError:
    err = e.errors()[0]
    field = ".".join(str(loc) for loc in err["loc"])
    return ConfigError.invalid_value(field, err.get("input"), err["msg"])


def load_config(directory: Path | None = None, **kwargs: Any) -> EnforcerConfig:
    """Load config: defaults < global YAML < project YAML < env vars < kwargs.

    Args:
        directory: Directory holding .covenforcer.yaml. Defaults to cwd.
        **kwargs: Override values (highest precedence). None values are ignored.

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    directory = directory or Path.cwd()

    yaml_config = _deep_merge(
        _load_yaml(GLOBAL_CONFIG_PATH),
        _load_yaml(directory / PROJECT_CONFIG_NAME),
    )
    overrides = {k: v for k, v in kwargs.items() if v is not None}

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**overrides)
        return EnforcerConfig.model_validate(settings.model_dump())
    except ValidationError as e:
        raise _invalid(e) from e
