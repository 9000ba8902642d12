"""
Configuration loader with deep merge.

Precedence (lowest to highest):
1. Defaults (defined in the Pydantic schemas)
2. YAML file
3. Environment variables
4. CLI arguments

The merge is recursive so keys are preserved at every level.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..errors import ConfigError
from .schema import AppConfig


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two dictionaries.

    Example:
        >>> deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"b": 99}, "d": 4})
        {'a': {'b': 99, 'c': 2}, 'd': 4}
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_config(config_path: Path | None) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Returns:
        The parsed mapping, or an empty dict when config_path is None.

    Raises:
        ConfigError: If the file does not exist, is not valid YAML, or is
            not a mapping.
    """
    if not config_path:
        return {}

    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read configuration file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {config_path} must contain a mapping")
    return data


def load_env_overrides() -> dict[str, Any]:
    """Load overrides from environment variables.

    Supported variables:
        OWNERSDB_OUT_DIR: overrides output.dir
        OWNERSDB_TARGET_BRANCH: overrides cache.target_branch
        OWNERSDB_LOG_LEVEL: overrides logging.level
        OWNERSDB_LOG_FILE: overrides logging.file
    """
    overrides: dict[str, Any] = {}

    if out_dir := os.environ.get("OWNERSDB_OUT_DIR"):
        overrides.setdefault("output", {})["dir"] = out_dir

    if branch := os.environ.get("OWNERSDB_TARGET_BRANCH"):
        overrides.setdefault("cache", {})["target_branch"] = branch

    if log_level := os.environ.get("OWNERSDB_LOG_LEVEL"):
        overrides.setdefault("logging", {})["level"] = log_level.lower()

    if log_file := os.environ.get("OWNERSDB_LOG_FILE"):
        overrides.setdefault("logging", {})["file"] = log_file

    return overrides


def apply_cli_overrides(config_dict: dict[str, Any], cli_args: dict[str, Any]) -> dict[str, Any]:
    """Apply overrides from CLI arguments (None values are ignored)."""
    overrides: dict[str, Any] = {}

    if cli_args.get("out_dir"):
        overrides.setdefault("output", {})["dir"] = cli_args["out_dir"]

    if cli_args.get("target_branch"):
        overrides.setdefault("cache", {})["target_branch"] = cli_args["target_branch"]

    if cli_args.get("log_level"):
        overrides.setdefault("logging", {})["level"] = cli_args["log_level"]

    if cli_args.get("log_file"):
        overrides.setdefault("logging", {})["file"] = cli_args["log_file"]

    if cli_args.get("verbose"):
        overrides.setdefault("logging", {})["verbose"] = cli_args["verbose"]

    return deep_merge(config_dict, overrides)


def load_config(
    config_path: Path | None = None,
    cli_args: dict[str, Any] | None = None,
) -> AppConfig:
    """Load and validate the full application configuration.

    Raises:
        ConfigError: If the YAML file is missing or invalid, or the merged
            configuration fails validation.
    """
    cli_args = cli_args or {}

    merged = deep_merge(load_yaml_config(config_path), load_env_overrides())
    merged = apply_cli_overrides(merged, cli_args)

    try:
        return AppConfig(**merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
