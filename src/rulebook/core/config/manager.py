"""
rulebook configuration management (YAML layers + environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import yaml

from rulebook.core.exceptions import ConfigError
from rulebook.core.schema.validation import validate_payload
from rulebook.core.utils.io import iter_yaml_files, read_yaml
from rulebook.core.utils.merge import deep_merge
from rulebook.core.utils.paths import get_project_config_dir, resolve_project_root
from rulebook.data import get_data_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "RULEBOOK_"
# Env vars with this prefix that are not config overrides.
_RESERVED_ENV_KEYS = {"PROJECT_ROOT"}


class ConfigManager:
    """Load, merge, and validate rulebook configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: RULEBOOK_<section>__<key>
    2. Project config: <repo>/.rulebook/config/*.yaml (alphabetical order)
    3. Bundled defaults: rulebook.data/config/*.yaml (alphabetical order)
    """

    ARRAY_APPEND_MARKER = object()

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = Path(repo_root) if repo_root is not None else resolve_project_root()
        self.core_config_dir = get_data_path("config")
        self.project_config_dir = get_project_config_dir(self.repo_root) / "config"

    # ---------- Env overrides ----------

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _parse_env_key(self, raw: str) -> List[Union[str, int, object]]:
        segs = raw.split("__")
        processed: List[Union[str, int, object]] = []
        for seg in segs:
            if seg == "":
                raise ConfigError(
                    f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'.",
                    context={"key": raw},
                )
            if seg.isdigit():
                processed.append(int(seg))
            elif seg.upper() == "APPEND":
                processed.append(self.ARRAY_APPEND_MARKER)
            else:
                processed.append(seg.lower())
        return processed

    def _iter_env_overrides(self) -> Iterator[Tuple[List[Union[str, int, object]], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            if not raw or raw.upper() in _RESERVED_ENV_KEYS:
                continue
            yield self._parse_env_key(raw), self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[Union[str, int, object]], value: Any) -> None:
        cur: Any = root
        for i, part in enumerate(path[:-1]):
            nxt = path[i + 1]
            if isinstance(part, int) or part is self.ARRAY_APPEND_MARKER:
                raise ConfigError("Invalid env override: list index/APPEND may only appear at leaf")
            if not isinstance(cur, dict):
                raise ConfigError("Invalid env override: path traverses a non-mapping value")
            if part not in cur:
                cur[part] = [] if (isinstance(nxt, int) or nxt is self.ARRAY_APPEND_MARKER) else {}
            cur = cur[part]

        leaf = path[-1]
        if leaf is self.ARRAY_APPEND_MARKER:
            if not isinstance(cur, list):
                raise ConfigError("Invalid env override: APPEND requires a list")
            cur.append(value)
        elif isinstance(leaf, int):
            if not isinstance(cur, list):
                raise ConfigError("Invalid env override: index assignment requires a list")
            while len(cur) <= leaf:
                cur.append(None)
            cur[leaf] = value
        else:
            if not isinstance(cur, dict):
                raise ConfigError("Invalid env override: key assignment requires a mapping")
            cur[leaf] = value

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, typed_value in self._iter_env_overrides():
            logger.debug("Applying env override %s", path)
            self._set_nested(cfg, path, typed_value)

    # ---------- Loading ----------

    def _load_directory(self, directory: Path, cfg: Dict[str, Any]) -> Dict[str, Any]:
        """Merge all YAML files from ``directory`` into ``cfg``; missing dirs are ignored."""
        for path in iter_yaml_files(directory):
            try:
                module_cfg = read_yaml(path, default={}, raise_on_error=True) or {}
            except (OSError, yaml.YAMLError) as exc:
                raise ConfigError(
                    f"Invalid YAML in {path}: {exc}", context={"path": str(path)}
                ) from exc
            if not isinstance(module_cfg, dict):
                raise ConfigError(
                    f"Config file {path} must contain a YAML mapping",
                    context={"path": str(path)},
                )
            logger.debug("Merging config file %s", path)
            cfg = deep_merge(cfg, module_cfg)
        return cfg

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load the merged configuration.

        Args:
            validate: Validate the merged result against the bundled schema

        Raises:
            ConfigError: On invalid YAML, malformed env overrides or schema errors
        """
        cfg: Dict[str, Any] = {}
        cfg = self._load_directory(self.core_config_dir, cfg)
        cfg = self._load_directory(self.project_config_dir, cfg)
        self.apply_env_overrides(cfg)

        if validate:
            validate_payload(cfg, "config")
        return cfg

    def get(self, key: str, default: Any = None) -> Any:
        """Return a dotted config value (``validation.check_order``)."""
        return get_nested(self.load_config(), key, default)


def get_nested(cfg: Dict[str, Any], key: str, default: Any = None) -> Any:
    current: Any = cfg
    for part in key.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


__all__ = ["ConfigManager", "ENV_PREFIX", "get_nested"]
