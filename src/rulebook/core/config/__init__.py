"""Configuration loading for rulebook."""
from __future__ import annotations

from .manager import ENV_PREFIX, ConfigManager, get_nested

__all__ = ["ConfigManager", "ENV_PREFIX", "get_nested"]
