"""
Configuration management for the artist sorter.

This module handles loading and validating configuration from YAML files
with sensible defaults and environment variable support.
"""

import json
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

from utils.exceptions import ConfigurationError

ENV_PREFIX = "ARTIST_SORTER_"


@dataclass
class FilesystemConfig:
    music_extensions: list = field(default_factory=lambda: [
        '.mp3', '.flac', '.wav', '.aac', '.ogg', '.m4a', '.wma'
    ])


@dataclass
class SortingConfig:
    # Answers accepted by the confirmation prompt (compared lowercased)
    confirm_answers: list = field(default_factory=lambda: ['y', 'yes', 'д', 'да'])
    # Use the embedded artist tag when the filename cannot be parsed
    tag_fallback: bool = False


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024
    backup_count: int = 5


@dataclass
class SorterConfig:
    """Structured configuration with defaults."""

    filesystem: FilesystemConfig = field(default_factory=FilesystemConfig)
    sorting: SortingConfig = field(default_factory=SortingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file with defaults and environment variable support.

    Args:
        config_path: Path to configuration file (optional)

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If configuration is invalid
    """
    config_dict = _dataclass_to_dict(SorterConfig())

    if config_path is not None:
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {config_path}: {e}")

        if file_config:
            if not isinstance(file_config, dict):
                raise ConfigurationError(f"Config file must contain a mapping: {config_path}")
            config_dict = _merge_configs(config_dict, file_config)

    config_dict = _apply_env_overrides(config_dict)

    _validate_config(config_dict)

    return config_dict


def _dataclass_to_dict(obj) -> Dict[str, Any]:
    """Convert dataclass to dictionary recursively."""
    if hasattr(obj, '__dataclass_fields__'):
        return {name: _dataclass_to_dict(getattr(obj, name)) for name in obj.__dataclass_fields__}
    elif isinstance(obj, dict):
        return {k: _dataclass_to_dict(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_dataclass_to_dict(item) for item in obj]
    else:
        return obj


def _merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge configuration dictionaries.

    Args:
        base: Base configuration dictionary
        override: Override configuration dictionary

    Returns:
        Merged configuration dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Environment variables are prefixed with ARTIST_SORTER_ and use double
    underscores to separate nested keys.

    Examples:
        ARTIST_SORTER_LOGGING__LEVEL=DEBUG
        ARTIST_SORTER_SORTING__TAG_FALLBACK=true
    """
    for env_var, value in os.environ.items():
        if not env_var.startswith(ENV_PREFIX):
            continue

        key_path = env_var[len(ENV_PREFIX):].lower().split('__')
        _set_nested_value(config, key_path, _convert_env_value(value))

    return config


def _convert_env_value(value: str) -> Any:
    """Convert environment variable string to appropriate Python type."""
    if value.lower() in ('true', 'yes', 'on'):
        return True
    elif value.lower() in ('false', 'no', 'off'):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    if value.startswith(('[', '{')):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def _set_nested_value(config: Dict[str, Any], key_path: list, value: Any):
    """Set a value in a nested dictionary using a list of keys."""
    current = config

    for key in key_path[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]

    current[key_path[-1]] = value


def _validate_config(config: Dict[str, Any]):
    """
    Validate configuration values.

    Args:
        config: Configuration dictionary to validate

    Raises:
        ConfigurationError: If configuration is invalid
    """
    filesystem_config = config.get('filesystem', {})

    extensions = filesystem_config.get('music_extensions', [])
    if not isinstance(extensions, list) or not extensions:
        raise ConfigurationError("filesystem.music_extensions must be a non-empty list")
    for ext in extensions:
        if not isinstance(ext, str) or not ext.startswith('.') or len(ext) < 2:
            raise ConfigurationError(
                f"filesystem.music_extensions entries must look like '.mp3', got {ext!r}"
            )

    sorting_config = config.get('sorting', {})

    answers = sorting_config.get('confirm_answers', [])
    if not isinstance(answers, list) or not answers:
        raise ConfigurationError("sorting.confirm_answers must be a non-empty list")
    if not all(isinstance(a, str) and a.strip() for a in answers):
        raise ConfigurationError("sorting.confirm_answers entries must be non-empty strings")

    if not isinstance(sorting_config.get('tag_fallback', False), bool):
        raise ConfigurationError("sorting.tag_fallback must be a boolean")

    logging_config = config.get('logging', {})

    log_level = logging_config.get('level', 'INFO')
    valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if not isinstance(log_level, str) or log_level.upper() not in valid_levels:
        raise ConfigurationError(f"logging.level must be one of {valid_levels}")

    max_file_size = logging_config.get('max_file_size', 1)
    if not isinstance(max_file_size, int) or max_file_size < 1:
        raise ConfigurationError("logging.max_file_size must be a positive integer")

    backup_count = logging_config.get('backup_count', 0)
    if not isinstance(backup_count, int) or backup_count < 0:
        raise ConfigurationError("logging.backup_count must be a non-negative integer")


def get_config_template() -> str:
    """
    Get a YAML template for the configuration file.

    Returns:
        YAML configuration template as string
    """
    return """# Configuration for artist-sorter
filesystem:
  music_extensions:
    - .mp3
    - .flac
    - .wav
    - .aac
    - .ogg
    - .m4a
    - .wma

sorting:
  # Answers accepted by the confirmation prompt (case-insensitive)
  confirm_answers: ["y", "yes", "д", "да"]
  # Fall back to the embedded artist tag for files named without "Artist - Title"
  tag_fallback: false

logging:
  level: INFO
  format: "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
  file: null
  max_file_size: 10485760
  backup_count: 5
"""
