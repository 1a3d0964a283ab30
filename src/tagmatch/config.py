"""Configuration management for tagmatch.

Loads configuration from YAML files and environment variables using Pydantic.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from tagmatch.matcher import check_syntax, parse_tags

DEFAULT_CONFIG_PATH = Path("tagmatch.yaml")

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


class TagRule(BaseModel):
    """A named expression gating some piece of work on the active tags."""

    name: str = Field(..., min_length=1, description="Human-readable name for this rule")
    expression: str = Field(default="", description="Tag expression the active tags must satisfy")
    enabled: bool = Field(default=True, description="Whether this rule is evaluated")
    description: str | None = Field(default=None, description="Optional note shown by `tagmatch rules`")

    @field_validator("expression", mode="before")
    @classmethod
    def validate_expression(cls, v: Any) -> str:
        """Trim the expression and reject unbalanced parentheses."""
        if v is None:
            return ""
        v = str(v).strip()
        check_syntax(v)
        return v


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="WARNING", description="Log level")
    format: str = Field(default="console", description="Log format (console or json)")
    file: Path | None = Field(default=None, description="Optional log file path")

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: Any) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if isinstance(v, str):
            v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v

    @field_validator("format", mode="before")
    @classmethod
    def validate_format(cls, v: Any) -> str:
        """Validate log format."""
        if isinstance(v, str):
            v = v.lower()
        if v not in {"console", "json"}:
            raise ValueError(f"Invalid log format: {v}")
        return v


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="TAGMATCH_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    tags: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Active tags (contexts, labels) for this run",
    )
    rules: list[TagRule] = Field(default_factory=list)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment wins over values loaded from YAML
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> list[str]:
        """Accept "a, b" as well as a list of tags."""
        return list(parse_tags(v))

    @field_validator("rules")
    @classmethod
    def unique_rule_names(cls, v: list[TagRule]) -> list[TagRule]:
        """Reject duplicate rule names."""
        seen: set[str] = set()
        for rule in v:
            if rule.name in seen:
                raise ValueError(f"Duplicate rule name: {rule.name}")
            seen.add(rule.name)
        return v


def load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Dictionary containing the configuration.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the YAML is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        config = yaml.safe_load(f)

    return config or {}


def expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand environment variables in configuration values.

    Supports ${VAR_NAME} syntax. Unset variables expand to "".

    Args:
        config: Configuration dictionary.

    Returns:
        Configuration with environment variables expanded.
    """

    def expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _ENV_VAR_PATTERN.sub(lambda m: os.environ.get(m.group(1), ""), value)
        elif isinstance(value, dict):
            return {k: expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [expand_value(item) for item in value]
        return value

    return expand_value(config)


def load_settings(config_path: Path | None = None) -> Settings:
    """Load application settings from YAML file and environment variables.

    Environment variables take precedence over YAML configuration.

    Args:
        config_path: Optional path to YAML config file. If not provided,
                    looks for tagmatch.yaml in the current directory and
                    falls back to defaults when it is absent.

    Returns:
        Validated Settings object.

    Raises:
        FileNotFoundError: If an explicit config_path doesn't exist.
    """
    yaml_config: dict[str, Any] = {}
    if config_path is not None:
        yaml_config = expand_env_vars(load_yaml_config(config_path))
    elif DEFAULT_CONFIG_PATH.exists():
        yaml_config = expand_env_vars(load_yaml_config(DEFAULT_CONFIG_PATH))

    return Settings(**yaml_config)


# Global settings instance (lazy-loaded)
_settings: Settings | None = None


def get_settings(config_path: Path | None = None, reload: bool = False) -> Settings:
    """Get the global settings instance.

    Args:
        config_path: Optional path to config file for initial load.
        reload: Force reload of settings.

    Returns:
        The global Settings instance.
    """
    global _settings
    if _settings is None or reload:
        _settings = load_settings(config_path)
    return _settings
