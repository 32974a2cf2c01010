"""
Configuration models and loading.

This module provides Pydantic models for statboard configuration
with multi-layer merging: defaults < user < project < env vars.
"""

from .loader import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
)
from .env import load_layered_env
from .models import FreshnessConfig, SourceConfig, StatboardConfig

__all__ = [
    # Models
    "FreshnessConfig",
    "SourceConfig",
    "StatboardConfig",
    # Loader functions
    "clear_cache",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
    "load_layered_env",
]
