"""File I/O helpers (text, YAML)."""
from __future__ import annotations

from .core import atomic_write, ensure_directory, ensure_parent_dir, read_text, write_text
from .yaml import dump_yaml_string, iter_yaml_files, read_yaml

__all__ = [
    "atomic_write",
    "ensure_directory",
    "ensure_parent_dir",
    "read_text",
    "write_text",
    "read_yaml",
    "dump_yaml_string",
    "iter_yaml_files",
]
