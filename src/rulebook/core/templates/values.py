"""Template values from YAML files and ``key=value`` assignments."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import yaml

from rulebook.core.exceptions import TemplateRenderError
from rulebook.core.utils.io import read_yaml
from rulebook.core.utils.merge import deep_merge


def parse_assignment(raw: str) -> Dict[str, Any]:
    """Parse ``a.b=value`` into ``{"a": {"b": value}}``.

    Values are YAML scalars or flow collections, so ``tags=[a, b]`` yields a
    list and ``draft=true`` a bool.

    Raises:
        TemplateRenderError: If the assignment has no ``=`` or an empty key
    """
    if "=" not in raw:
        raise TemplateRenderError(f"Invalid assignment {raw!r}: expected KEY=VALUE")
    key, _, value = raw.partition("=")
    parts = key.strip().split(".")
    if not parts or any(not p for p in parts):
        raise TemplateRenderError(f"Invalid assignment {raw!r}: empty key")

    try:
        parsed: Any = yaml.safe_load(value) if value.strip() else ""
    except yaml.YAMLError:
        parsed = value
    if parsed is None:
        parsed = ""
    # "title=Rules: REST" is text, not a block mapping.
    if isinstance(parsed, dict) and not value.lstrip().startswith("{"):
        parsed = value

    result: Dict[str, Any] = {parts[-1]: parsed}
    for part in reversed(parts[:-1]):
        result = {part: result}
    return result


def load_values(
    values_file: Optional[Path] = None,
    assignments: Iterable[str] = (),
) -> Dict[str, Any]:
    """Merge values from a YAML file and assignments (assignments win)."""
    values: Dict[str, Any] = {}
    if values_file is not None:
        try:
            data = read_yaml(Path(values_file), raise_on_error=True)
        except (OSError, yaml.YAMLError) as exc:
            raise TemplateRenderError(
                f"Cannot read values file {values_file}: {exc}",
                context={"path": str(values_file)},
            ) from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise TemplateRenderError(
                f"Values file {values_file} must contain a YAML mapping",
                context={"path": str(values_file)},
            )
        values = deep_merge(values, data)
    for raw in assignments:
        values = deep_merge(values, parse_assignment(raw))
    return values


__all__ = ["parse_assignment", "load_values"]
