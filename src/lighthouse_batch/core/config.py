"""Configuration loading and management."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .types import BatchConfig

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent.parent / "configs" / "default.yaml"

# Environment variables mapped onto config keys
ENV_OVERRIDES = {
    "LIGHTHOUSE_BIN": ("lighthouse", "binary"),
    "CHROME_PATH": ("browser", "executable_path"),
}


class ConfigError(ValueError):
    """Raised when configuration cannot be loaded or validated."""


def load_yaml(file_path: Path) -> dict[str, Any]:
    """Load YAML configuration file.

    Args:
        file_path: Path to YAML file

    Returns:
        Parsed YAML as dictionary (empty for an empty file)

    Raises:
        FileNotFoundError: If file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    with open(file_path, encoding="utf-8") as f:
        result: dict[str, Any] | None = yaml.safe_load(f)
        return result or {}


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two configuration dictionaries.

    Args:
        base: Base configuration
        override: Override configuration (takes precedence)

    Returns:
        Merged configuration
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def env_overrides(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Collect config overrides from environment variables."""
    environ = dict(os.environ) if environ is None else environ
    overrides: dict[str, Any] = {}
    for var, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            overrides.setdefault(section, {})[key] = value
    return overrides


def load_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    base_path: Path | None = None,
) -> BatchConfig:
    """Load and merge configuration from files and overrides.

    Precedence, lowest first: ``configs/default.yaml``, ``config_path``,
    ``overrides``.

    Args:
        config_path: Optional user config file
        overrides: Runtime overrides (CLI flags, environment)
        base_path: Base config file (default: configs/default.yaml)

    Returns:
        Validated BatchConfig instance

    Raises:
        ConfigError: If a file is missing/unparsable or validation fails
    """
    base_path = base_path or DEFAULT_CONFIG_PATH

    try:
        config_dict = load_yaml(base_path) if base_path.exists() else {}

        if config_path is not None:
            config_dict = merge_configs(config_dict, load_yaml(config_path))
    except (FileNotFoundError, yaml.YAMLError) as e:
        raise ConfigError(str(e)) from e

    if overrides:
        config_dict = merge_configs(config_dict, overrides)

    try:
        return BatchConfig(**config_dict)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
