"""
.env support for STATBOARD_* settings.

Only keys starting with ``STATBOARD_`` are read from .env files, so a
project .env shared with other tools cannot leak unrelated variables into
the process. The files feed the same env overrides ``load_config`` applies.

Precedence:
    exported shell variables > project .env / .env.local > user .env
"""

import logging
import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

from .loader import clear_cache, get_xdg_config_home

logger = logging.getLogger(__name__)

ENV_PREFIX = "STATBOARD_"


def get_user_env_path() -> Path:
    """Return ~/.config/statboard/.env (or XDG equivalent)."""
    return get_xdg_config_home() / "statboard" / ".env"


def get_project_env_paths(project_dir: Path | None = None) -> list[Path]:
    """Return the project .env files, lowest precedence first."""
    base = project_dir if project_dir is not None else Path.cwd()
    return [base / ".env", base / ".env.local"]


def read_env_file(path: Path) -> dict[str, str]:
    """Return the STATBOARD_* assignments in one .env file."""
    if not path.is_file():
        return {}
    return {
        key: value
        for key, value in dotenv_values(path).items()
        if key.startswith(ENV_PREFIX) and value is not None
    }


def collect_env_settings(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> dict[str, str]:
    """
    Merge STATBOARD_* settings from the user and project .env files.

    Later files win, so project values replace user values.
    """
    if user_env_paths is None:
        user_env_paths = [get_user_env_path()]
    if project_env_paths is None:
        project_env_paths = get_project_env_paths(project_dir)

    settings: dict[str, str] = {}
    for path in [*user_env_paths, *project_env_paths]:
        settings.update(read_env_file(Path(path)))
    return settings


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> dict[str, str]:
    """
    Export .env settings that the shell has not already set.

    Clears the config cache when anything was exported, so the next
    ``load_config()`` sees the new values.

    Returns:
        The settings that were exported
    """
    settings = collect_env_settings(
        project_dir=project_dir,
        user_env_paths=user_env_paths,
        project_env_paths=project_env_paths,
    )

    applied: dict[str, str] = {}
    for key, value in settings.items():
        if key in os.environ:
            continue
        os.environ[key] = value
        applied[key] = value

    if applied:
        logger.debug("Loaded %s from .env files", ", ".join(sorted(applied)))
        clear_cache()
    return applied
