"""Markdown builders for rule documents.

``rule_document()`` returns a document that passes validation with the
bundled configuration. Keyword arguments replace or drop parts of it so each
test states only the mistake it is about.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

DEFAULT_RULES: Dict[Optional[str], List[str]] = {
    "Must Have": [
        "- **RULE-001**: Use plural nouns for collection resources",
        "- **RULE-002**: Return problem+json bodies for errors",
    ],
    "Should Have": ["- **RULE-101**: Support cursor pagination on list endpoints"],
    "Could Have": ["- **RULE-201**: Offer sparse fieldsets"],
}

SECTION_BODIES: Dict[str, str] = {
    "Context": "- **Applies to**: HTTP APIs\n- **Level**: Team\n- **Audience**: Backend developers",
    "Core Principles": "1. Resources are nouns\n2. Errors are explicit",
    "Patterns & Anti-Patterns": (
        "### Good\n\n```python\nclient.get('/users')\n```\n\n"
        "### Bad\n\n```python\nclient.get('/getUsers')\n```"
    ),
    "Decision Framework": "1. Is it a resource?\n2. Is the operation idempotent?",
    "Exceptions": "- **Legacy endpoints**: Record the exception in the API changelog",
    "Quality Gates": "- [ ] OpenAPI linter passes\n- [ ] Reviewed by an API owner",
    "TL;DR": "Nouns for resources, explicit errors, paginate lists.",
}

DEFAULT_ORDER: Sequence[str] = (
    "Context",
    "Core Principles",
    "Rules",
    "Patterns & Anti-Patterns",
    "Decision Framework",
    "Exceptions",
    "Quality Gates",
    "Related Rules",
    "TL;DR",
)


def rules_body(rules: Dict[Optional[str], List[str]]) -> str:
    """Render rule lines grouped under ``### <tier>`` headings (``None``: no heading)."""
    chunks: List[str] = []
    for tier, lines in rules.items():
        if tier is not None:
            chunks.append(f"### {tier}")
        chunks.append("\n".join(lines))
    return "\n\n".join(chunks)


def rule_document(
    *,
    title: Optional[str] = "REST API Design Rules",
    rules: Optional[Dict[Optional[str], List[str]]] = None,
    omit: Iterable[str] = (),
    related: Optional[List[str]] = None,
    order: Optional[Sequence[str]] = None,
    headings: Optional[Dict[str, str]] = None,
    frontmatter: Optional[str] = None,
) -> str:
    """Build a rule document.

    Args:
        title: H1 title (``None`` drops it)
        rules: Rule lines per tier heading (default: one valid set)
        omit: Section names to leave out
        related: Lines for ``Related Rules`` (default: "None yet.")
        order: Section order (default: canonical order)
        headings: Replacement heading text per section name
        frontmatter: Raw YAML for a leading ``---`` block
    """
    omitted = set(omit)
    headings = headings or {}
    bodies = dict(SECTION_BODIES)
    bodies["Rules"] = rules_body(DEFAULT_RULES if rules is None else rules)
    bodies["Related Rules"] = "\n".join(related) if related else "None yet."

    parts: List[str] = []
    if frontmatter is not None:
        parts.append(f"---\n{frontmatter.strip()}\n---")
    if title is not None:
        parts.append(f"# {title}")
    for name in order or DEFAULT_ORDER:
        if name in omitted:
            continue
        parts.append(f"## {headings.get(name, name)}\n\n{bodies[name]}")
    return "\n\n".join(parts) + "\n"


def feature_spec_document(*, omit: Iterable[str] = ()) -> str:
    omitted = set(omit)
    sections = {
        "Overview": "Let teams export rule documents as PDF.",
        "User Stories": "- As a lead, I want a PDF so that I can share rules offline",
        "Requirements": "1. Export one document\n2. Keep tier headings",
        "Acceptance Criteria": "- [ ] PDF contains every rule",
        "Out of Scope": "- Batch export",
    }
    parts = ["# PDF Export"]
    for name, body in sections.items():
        if name in omitted:
            continue
        parts.append(f"## {name}\n\n{body}")
    return "\n\n".join(parts) + "\n"


def line_of(text: str, needle: str, occurrence: int = 1) -> int:
    """1-based line number of the ``occurrence``-th line containing ``needle``."""
    seen = 0
    for number, line in enumerate(text.splitlines(), start=1):
        if needle in line:
            seen += 1
            if seen == occurrence:
                return number
    raise AssertionError(f"{needle!r} occurrence {occurrence} not found")
