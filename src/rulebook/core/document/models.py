"""
Data models for parsed rule documents.

- Section: an H2 section with its body and source line
- Rule: a single identified rule (``RULE-001``) with its tier
- RuleDocument: the structured view of a whole markdown document
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class Section:
    """A top-level (H2) section.

    Attributes:
        heading: Heading text as written (without ``##``)
        line: 1-based line number of the heading
        body: Section text up to the next H2 heading
        name: Canonical schema name when the heading matched a known section
    """

    heading: str
    line: int
    body: str = ""
    name: Optional[str] = None


@dataclass
class Rule:
    """A single identified rule."""

    identifier: str
    text: str
    line: int
    tier: Optional[str] = None
    # Tier named inline on the rule line, e.g. "(Should Have)"
    tagged_tier: Optional[str] = None


@dataclass
class DocumentContext:
    applies_to: str = ""
    level: str = ""
    audience: str = ""
    extra: Dict[str, str] = field(default_factory=dict)


@dataclass
class CodeSample:
    language: str
    code: str
    label: str = ""


@dataclass
class Patterns:
    good: List[CodeSample] = field(default_factory=list)
    bad: List[CodeSample] = field(default_factory=list)


@dataclass
class RuleException:
    reason: str
    process: str = ""


@dataclass
class DocumentReference:
    """A link from ``Related Rules`` to another document."""

    target: str
    label: str = ""
    line: int = 0

    @property
    def is_external(self) -> bool:
        return "://" in self.target or self.target.startswith(("mailto:", "#"))

    @property
    def path_part(self) -> str:
        """Target without any ``#anchor`` suffix."""
        return self.target.split("#", 1)[0]


@dataclass
class RuleDocument:
    """Structured view of a rule document (or any schema-checked document)."""

    title: Optional[str] = None
    title_line: int = 0
    kind: str = "rule"
    path: Optional[Path] = None
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    context: DocumentContext = field(default_factory=DocumentContext)
    principles: List[str] = field(default_factory=list)
    rules: List[Rule] = field(default_factory=list)
    patterns: Patterns = field(default_factory=Patterns)
    decision_framework: List[str] = field(default_factory=list)
    exceptions: List[RuleException] = field(default_factory=list)
    quality_gates: List[str] = field(default_factory=list)
    related: List[DocumentReference] = field(default_factory=list)
    references: List[str] = field(default_factory=list)
    tldr: str = ""
    sections: List[Section] = field(default_factory=list)
    # Identifier-looking tokens that failed the configured pattern
    malformed_ids: List[Rule] = field(default_factory=list)

    def section(self, name: str) -> Optional[Section]:
        """First section with canonical ``name``."""
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def rules_by_tier(self) -> Dict[str, List[Rule]]:
        grouped: Dict[str, List[Rule]] = {}
        for rule in self.rules:
            grouped.setdefault(rule.tagged_tier or rule.tier or "untiered", []).append(rule)
        return grouped

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["path"] = str(self.path) if self.path else None
        return data


__all__ = [
    "Section",
    "Rule",
    "DocumentContext",
    "CodeSample",
    "Patterns",
    "RuleException",
    "DocumentReference",
    "RuleDocument",
]
