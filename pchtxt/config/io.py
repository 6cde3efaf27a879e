"""Config I/O utilities."""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ConfigurationError, ValidationError
from .models import AppConfig, validate_config

logger = logging.getLogger(__name__)

METADATA_KEY = "_metadata"

# environment variable -> (section, key)
ENV_OVERRIDES = {
    "PCHTXT_LOG_LEVEL": ("logging", "level"),
    "PCHTXT_LOG_JSON": ("logging", "json"),
    "PCHTXT_OUTPUT_DIR": ("output", "output_dir"),
}


def get_config_path() -> Path:
    """Path of the bundled default configuration."""
    return Path(__file__).resolve().parent / "config.json"


def _read_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    path = Path(config_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file: {exc}", file_path=str(path)) from exc
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Malformed config file: {exc}", "CONFIG_SYNTAX",
                                 file_path=str(path)) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("Config root must be a mapping", file_path=str(path))
    return data


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(config_data: Dict[str, Any]) -> Dict[str, Any]:
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value is None:
            continue
        config_data.setdefault(section, {})[key] = value
        logger.debug("Config override from %s: %s.%s", env_name, section, key)
    return config_data


def load_config_data(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Load the raw configuration mapping: defaults, user file, environment."""
    data = _read_file(get_config_path())
    if config_path is not None:
        data = _deep_merge(data, _read_file(config_path))
    return _apply_env_overrides(data)


def load_config(config_path: Optional[Union[str, Path]] = None) -> AppConfig:
    """Load and validate the application configuration.

    Args:
        config_path: Optional JSON or YAML file layered over the defaults

    Raises:
        ConfigurationError: if a file cannot be read or parsed
        ValidationError: if the merged configuration is invalid
    """
    data = load_config_data(config_path)
    data.pop(METADATA_KEY, None)
    try:
        return validate_config(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        field_name = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(
            f"Invalid configuration: {first.get('msg', exc)}",
            field_name=field_name or None,
            file_path=str(config_path) if config_path else None,
        ) from exc


def save_config(config: AppConfig, config_path: Union[str, Path]) -> Path:
    """Write a configuration as JSON or YAML, chosen by file suffix."""
    path = Path(config_path)
    data = config.model_dump(by_alias=True)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                yaml.safe_dump(data, f, sort_keys=False)
            else:
                json.dump(data, f, indent=2)
    except OSError as exc:
        raise ConfigurationError(f"Cannot write config file: {exc}", file_path=str(path)) from exc
    return path
