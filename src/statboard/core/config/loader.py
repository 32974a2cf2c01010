"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import (
    DEFAULT_BASE_URL,
    MAX_TIMEOUT_SECONDS,
    MIN_TIMEOUT_SECONDS,
    StatboardConfig,
)

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config multiple times per session
_config_cache: StatboardConfig | None = None


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/statboard/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "statboard" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)

    Returns:
        Path to .statboard.json in the project root
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".statboard.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`.
    Nested dicts are merged, not replaced.

    Example:
        >>> deep_merge({"a": 1, "b": {"x": 10}}, {"b": {"y": 30}})
        {'a': 1, 'b': {'x': 10, 'y': 30}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            return None
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None


def _ensure_section(config_dict: dict[str, Any], section: str) -> dict[str, Any]:
    if not isinstance(config_dict.get(section), dict):
        config_dict[section] = {}
    return config_dict[section]


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override all config files.

    Supported env vars:
        STATBOARD_BASE_URL - overrides source.base_url
        STATBOARD_DOMAIN - overrides source.domain
        STATBOARD_TIMEOUT - overrides source.timeout_seconds
        STATBOARD_STALE_HOURS - overrides freshness.stale_threshold_hours

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if base_url := os.environ.get("STATBOARD_BASE_URL"):
        _ensure_section(result, "source")["base_url"] = base_url

    if domain := os.environ.get("STATBOARD_DOMAIN"):
        _ensure_section(result, "source")["domain"] = domain

    if timeout_str := os.environ.get("STATBOARD_TIMEOUT"):
        try:
            timeout = float(timeout_str)
        except ValueError:
            logger.warning("Invalid STATBOARD_TIMEOUT value '%s', ignoring", timeout_str)
        else:
            if not MIN_TIMEOUT_SECONDS <= timeout <= MAX_TIMEOUT_SECONDS:
                logger.warning(
                    "STATBOARD_TIMEOUT must be between %s and %s, got %s, ignoring",
                    MIN_TIMEOUT_SECONDS,
                    MAX_TIMEOUT_SECONDS,
                    timeout,
                )
            else:
                _ensure_section(result, "source")["timeout_seconds"] = timeout

    if stale_str := os.environ.get("STATBOARD_STALE_HOURS"):
        try:
            stale_hours = float(stale_str)
        except ValueError:
            logger.warning("Invalid STATBOARD_STALE_HOURS value '%s', ignoring", stale_str)
        else:
            if stale_hours <= 0:
                logger.warning(
                    "STATBOARD_STALE_HOURS must be > 0, got %s, ignoring", stale_hours
                )
            else:
                _ensure_section(result, "freshness")["stale_threshold_hours"] = stale_hours

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "source": {
            "base_url": DEFAULT_BASE_URL,
            "domain": "spotify",
            "timeout_seconds": 10.0,
        },
        "freshness": {"stale_threshold_hours": 24.0},
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> StatboardConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (STATBOARD_*)
        2. Project config (.statboard.json)
        3. User config (~/.config/statboard/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .statboard.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated StatboardConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = StatboardConfig(**merged)
    _config_cache = config

    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
