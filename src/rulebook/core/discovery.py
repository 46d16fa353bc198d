"""
Discovery of rule documents in a repository.

Documents live under ``paths.rules_dir`` (searched recursively). ``README.md``
files are index pages, not documents, and are skipped. Every discovered file
is a ``rule`` document unless its frontmatter declares another ``kind``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from rulebook.core.utils.io import read_text
from rulebook.core.utils.text import parse_frontmatter

logger = logging.getLogger(__name__)

DEFAULT_KIND = "rule"


@dataclass
class DocumentRecord:
    """A discovered markdown document."""

    path: Path
    kind: str = DEFAULT_KIND
    category: Optional[str] = None  # first directory below the rules dir

    def relpath(self, repo_root: Optional[Path] = None) -> Path:
        if repo_root is None:
            return self.path
        try:
            return self.path.relative_to(repo_root)
        except ValueError:
            return self.path


def _declared_kind(path: Path) -> Optional[str]:
    try:
        parsed = parse_frontmatter(read_text(path))
    except (OSError, ValueError) as exc:
        # The validator reports unreadable documents; discovery only lists them.
        logger.debug("Cannot read frontmatter of %s: %s", path, exc)
        return None
    kind = parsed.frontmatter.get("kind")
    return str(kind) if kind else None


def rules_dir(repo_root: Path, config: Dict[str, Any]) -> Path:
    paths = config.get("paths") or {}
    return Path(repo_root) / str(paths.get("rules_dir", "rules"))


def discover_documents(repo_root: Path, config: Dict[str, Any]) -> List[DocumentRecord]:
    """Return documents under the configured rules directory, sorted by path."""
    root = rules_dir(repo_root, config)
    records: List[DocumentRecord] = []
    if not root.is_dir():
        logger.debug("Rules directory %s does not exist", root)
        return records

    for path in sorted(root.rglob("*.md")):
        if path.name == "README.md" or not path.is_file():
            continue
        rel = path.relative_to(root)
        category = rel.parts[0] if len(rel.parts) > 1 else None
        records.append(
            DocumentRecord(
                path=path,
                kind=_declared_kind(path) or DEFAULT_KIND,
                category=category,
            )
        )
    logger.debug("Discovered %d document(s) under %s", len(records), root)
    return records


def expand_paths(paths: List[Path]) -> List[Path]:
    """Expand directories into their markdown files (``README.md`` skipped)."""
    expanded: List[Path] = []
    for path in paths:
        if path.is_dir():
            expanded.extend(
                p for p in sorted(path.rglob("*.md")) if p.is_file() and p.name != "README.md"
            )
        else:
            expanded.append(path)
    return expanded


__all__ = ["DEFAULT_KIND", "DocumentRecord", "discover_documents", "expand_paths", "rules_dir"]
