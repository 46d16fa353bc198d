"""Template discovery.

Templates are markdown files named ``<name>.md.template`` with an optional
YAML frontmatter block:

    ---
    name: rule-document
    kind: rule
    description: ...
    output: "{{ rules_dir }}/{{ slug }}.md"
    defaults:
      level: Team
    ---

Bundled templates live in ``rulebook/data/templates``; project templates in
``<repo>/<paths.templates_dir>`` override bundled ones with the same name.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from rulebook.core.exceptions import DocumentParseError, TemplateNotFoundError
from rulebook.core.utils.io import read_text
from rulebook.core.utils.text import parse_frontmatter
from rulebook.data import get_data_path

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".md.template"


@dataclass
class Template:
    name: str
    path: Path
    body: str
    source: str  # "bundled" | "project"
    kind: Optional[str] = None
    description: str = ""
    output: Optional[str] = None
    defaults: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": str(self.path),
            "source": self.source,
            "kind": self.kind,
            "description": self.description,
            "output": self.output,
        }


def load_template(path: Path, *, source: str) -> Template:
    """Read a template file and split its frontmatter from the body.

    Raises:
        DocumentParseError: If the frontmatter is invalid
    """
    text = read_text(path)
    try:
        parsed = parse_frontmatter(text)
    except ValueError as exc:
        raise DocumentParseError(f"{path}: {exc}", context={"path": str(path)}) from exc

    meta = parsed.frontmatter
    default_name = path.name[: -len(TEMPLATE_SUFFIX)] if path.name.endswith(TEMPLATE_SUFFIX) else path.stem
    defaults = meta.get("defaults") or {}
    if not isinstance(defaults, dict):
        raise DocumentParseError(
            f"{path}: 'defaults' must be a mapping", context={"path": str(path)}
        )
    return Template(
        name=str(meta.get("name") or default_name),
        path=path,
        body=parsed.content,
        source=source,
        kind=meta.get("kind"),
        description=str(meta.get("description") or ""),
        output=meta.get("output"),
        defaults=dict(defaults),
    )


class TemplateRegistry:
    """Discover bundled and project templates."""

    def __init__(self, repo_root: Optional[Path] = None, *, templates_dir: str = "templates") -> None:
        self.bundled_dir = get_data_path("templates")
        self.project_dir = Path(repo_root) / templates_dir if repo_root is not None else None

    def _scan(self, directory: Optional[Path], source: str) -> Dict[str, Template]:
        found: Dict[str, Template] = {}
        if directory is None or not directory.is_dir():
            return found
        for path in sorted(directory.glob(f"*{TEMPLATE_SUFFIX}")):
            template = load_template(path, source=source)
            found[template.name] = template
        return found

    def all(self) -> Dict[str, Template]:
        templates = self._scan(self.bundled_dir, "bundled")
        for name, template in self._scan(self.project_dir, "project").items():
            if name in templates:
                logger.debug("Project template %s overrides bundled template", name)
            templates[name] = template
        return templates

    def names(self) -> List[str]:
        return sorted(self.all())

    def get(self, name: str) -> Template:
        """Return a template by name, or by explicit file path.

        Raises:
            TemplateNotFoundError: If no template matches
        """
        candidate = Path(name)
        if candidate.suffix and candidate.is_file():
            return load_template(candidate, source="file")

        templates = self.all()
        if name not in templates:
            raise TemplateNotFoundError(
                f"Template not found: {name}. Available: {', '.join(sorted(templates)) or 'none'}",
                context={"template": name},
            )
        return templates[name]


__all__ = ["TEMPLATE_SUFFIX", "Template", "TemplateRegistry", "load_template"]
