"""Text helpers: YAML frontmatter, heading normalization and shingling."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Set, Tuple

import yaml

# Matches content between the first pair of '---' markers
FRONTMATTER_PATTERN = re.compile(
    r"^---\s*\n(.*?)\n---\s*\n?",
    re.DOTALL,
)

_HEADING_PREFIX_RE = re.compile(r"^[^\w]*(?:\d+(?:\.\d+)*\.?\s+)?")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class ParsedDocument:
    """Result of splitting a document into frontmatter and body.

    Attributes:
        frontmatter: Parsed YAML frontmatter as a dictionary
        content: The markdown content after the frontmatter
        offset: Number of lines consumed by the frontmatter block
    """

    frontmatter: Dict[str, Any]
    content: str
    offset: int = 0


def parse_frontmatter(content: str) -> ParsedDocument:
    """Parse YAML frontmatter from markdown content.

    Content without a leading ``---`` block yields an empty frontmatter
    and the full content.

    Raises:
        ValueError: If the frontmatter is not a YAML mapping or is invalid YAML
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return ParsedDocument(frontmatter={}, content=content)

    raw_yaml = match.group(1)
    try:
        parsed = yaml.safe_load(raw_yaml)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in frontmatter: {e}") from e
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Frontmatter must be a YAML mapping, got {type(parsed).__name__}")

    consumed = content[: match.end()]
    return ParsedDocument(
        frontmatter=parsed,
        content=content[match.end():],
        offset=consumed.count("\n"),
    )


def normalize_heading(text: str) -> str:
    """Normalize a heading for comparison.

    Drops leading decorations and numbering ("## 3. Rules", "## 🎯 Context"),
    trailing '#' markers and colons, folds case and collapses whitespace.

    Example:
        >>> normalize_heading("  2.  Core   Principles ")
        'core principles'
        >>> normalize_heading("📋 TL;DR:")
        'tl;dr'
    """
    cleaned = text.strip().rstrip("#").strip().rstrip(":").strip()
    cleaned = _HEADING_PREFIX_RE.sub("", cleaned, count=1)
    return _WHITESPACE_RE.sub(" ", cleaned).strip().lower()


def strip_headings_and_code(text: str) -> str:
    """Remove fenced code blocks and ATX headings to reduce false positives."""
    stripped = re.sub(r"```[\s\S]*?```", "\n", text)
    lines = [ln for ln in stripped.splitlines() if not ln.strip().startswith("#")]
    return "\n".join(lines)


def tokenize(text: str) -> List[str]:
    """Tokenize text into lowercase words."""
    return re.findall(r"[A-Za-z0-9_]+", text.lower())


def shingles(words: List[str], k: int = 12) -> Set[Tuple[str, ...]]:
    """Generate k-word shingles from a list of words."""
    if k <= 0 or len(words) < k:
        return set()
    return {tuple(words[i : i + k]) for i in range(0, len(words) - k + 1)}


__all__ = [
    "FRONTMATTER_PATTERN",
    "ParsedDocument",
    "parse_frontmatter",
    "normalize_heading",
    "strip_headings_and_code",
    "tokenize",
    "shingles",
]
