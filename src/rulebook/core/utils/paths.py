"""Project root and config directory resolution.

Resolution priority for the project root:
1. RULEBOOK_PROJECT_ROOT environment variable
2. Nearest ancestor of the working directory holding ``.rulebook/`` or ``.git/``
3. The working directory itself
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from rulebook.core.exceptions import ConfigError

PROJECT_ROOT_ENV = "RULEBOOK_PROJECT_ROOT"
PROJECT_CONFIG_DIR = ".rulebook"
_ROOT_MARKERS = (PROJECT_CONFIG_DIR, ".git")


def find_project_root(start: Path) -> Optional[Path]:
    """Walk up from ``start`` looking for a project marker directory."""
    current = start.resolve()
    for candidate in (current, *current.parents):
        if any((candidate / marker).exists() for marker in _ROOT_MARKERS):
            return candidate
    return None


def resolve_project_root(start: Optional[Path] = None) -> Path:
    """Resolve the project root.

    Raises:
        ConfigError: If RULEBOOK_PROJECT_ROOT points at a missing path or
            at the project config directory itself.
    """
    env_root = os.environ.get(PROJECT_ROOT_ENV)
    if env_root:
        env_path = Path(env_root).expanduser().resolve()
        if not env_path.exists():
            raise ConfigError(
                f"{PROJECT_ROOT_ENV} points at missing path: {env_path}",
                context={"path": str(env_path)},
            )
        if env_path.name == PROJECT_CONFIG_DIR:
            raise ConfigError(
                f"{PROJECT_ROOT_ENV} points to {PROJECT_CONFIG_DIR} directory: {env_path}. "
                "It must point to the project root.",
                context={"path": str(env_path)},
            )
        return env_path

    cwd = (start or Path.cwd()).resolve()
    return find_project_root(cwd) or cwd


def get_project_config_dir(repo_root: Path) -> Path:
    """Return ``<repo_root>/.rulebook``."""
    return Path(repo_root) / PROJECT_CONFIG_DIR


__all__ = [
    "PROJECT_ROOT_ENV",
    "PROJECT_CONFIG_DIR",
    "find_project_root",
    "resolve_project_root",
    "get_project_config_dir",
]
