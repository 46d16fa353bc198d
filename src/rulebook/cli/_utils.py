"""Shared CLI utility functions."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict, Tuple

from rulebook.core.audit.stdlib_logging import configure_stdlib_logging
from rulebook.core.config import ConfigManager
from rulebook.core.exceptions import ConfigError
from rulebook.core.utils.paths import resolve_project_root


def get_repo_root(args: argparse.Namespace) -> Path:
    """Get repository root from ``--repo-root`` or auto-detect.

    Raises:
        ConfigError: If ``--repo-root`` names a directory that does not exist
    """
    raw = getattr(args, "repo_root", None)
    if raw:
        root = Path(raw).expanduser().resolve()
        if not root.is_dir():
            raise ConfigError(f"Repository root does not exist: {root}", context={"path": str(root)})
        return root
    return resolve_project_root()


def load_cli_config(args: argparse.Namespace) -> Tuple[Path, Dict[str, Any]]:
    """Resolve the repo root, load its config and apply ``logging.file``."""
    repo_root = get_repo_root(args)
    config = ConfigManager(repo_root).load_config()

    logging_cfg = config.get("logging") or {}
    log_file = logging_cfg.get("file")
    if log_file:
        log_path = Path(log_file)
        if not log_path.is_absolute():
            log_path = repo_root / log_path
        configure_stdlib_logging(log_path=log_path, level=str(logging_cfg.get("level") or "INFO"))
    return repo_root, config


__all__ = ["get_repo_root", "load_cli_config"]
