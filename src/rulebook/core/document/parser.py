"""Markdown parser for schema-checked documents.

Splits a document into its H1 title and H2 sections, matches section
headings against the document kind's schema, and extracts the structured
fields of a rule document (context, principles, tiered rules, patterns,
decision framework, exceptions, quality gates, related references).

Headings and identifiers inside fenced code blocks are ignored so that code
samples in ``Patterns & Anti-Patterns`` never count as structure.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from rulebook.core.exceptions import DocumentParseError
from rulebook.core.schema import DocumentKind, DocumentSchema
from rulebook.core.utils.io import read_text
from rulebook.core.utils.text import parse_frontmatter

from .models import (
    CodeSample,
    DocumentContext,
    DocumentReference,
    Patterns,
    Rule,
    RuleDocument,
    RuleException,
    Section,
)

logger = logging.getLogger(__name__)

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")
_FENCE_RE = re.compile(r"^\s*(`{3,}|~{3,})\s*([\w+#.-]*)")
_LIST_ITEM_RE = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+(.*)$")
_CHECKBOX_RE = re.compile(r"^\[[ xX]\]\s*")
_RULE_LEAD_RE = re.compile(r"^(?:#{1,6}\s+|\s*(?:[-*+]|\d+[.)])\s+)?[\s*_`]*")
_RULE_TEXT_TRIM = " \t*_`:.-–—"
_BRACKETED_RE = re.compile(r"[(\[]([^)\]]+)[)\]]")
_LINK_RE = re.compile(r"\[([^\]]*)\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)")
_CODE_PATH_RE = re.compile(r"`([^`\s]+\.md(?:#[^`\s]*)?)`")
_BOLD_LEAD_RE = re.compile(r"^\*\*(.+?)\*\*\s*[:\-–—]?\s*(.*)$")
_STANDALONE_LABEL_RE = re.compile(r"^\s*(?:\*\*|__)?([^*_`]{1,60}?)(?:\*\*|__)?\s*:?\s*$")

_BAD_WORDS = {"bad", "anti", "avoid", "don't", "dont", "wrong", "incorrect"}
_GOOD_WORDS = {"good", "correct", "prefer", "preferred", "recommended", "do"}


@dataclass
class _Line:
    number: int
    text: str
    in_fence: bool


def _scan(lines: List[str], start: int) -> Iterator[Tuple[_Line, Optional[str]]]:
    """Yield lines with fence state.

    The second element is ``"open"``/``"close"`` for fence delimiter lines
    (with the info string stored on the delimiter line) and None otherwise.
    """
    fence: Optional[str] = None
    for offset, text in enumerate(lines):
        number = start + offset
        m = _FENCE_RE.match(text)
        if m:
            marker = m.group(1)
            if fence is None:
                fence = marker[0] * len(marker)
                yield _Line(number, text, True), "open"
                continue
            if marker[0] == fence[0] and len(marker) >= len(fence) and not m.group(2):
                fence = None
                yield _Line(number, text, True), "close"
                continue
        yield _Line(number, text, fence is not None), None


def _list_items(body: str) -> List[str]:
    items: List[str] = []
    for line, delim in _scan(body.splitlines(), 1):
        if line.in_fence or delim:
            continue
        m = _LIST_ITEM_RE.match(line.text)
        if m:
            item = _CHECKBOX_RE.sub("", m.group(1).strip()).strip()
            if item:
                items.append(item)
    return items


def _pattern_side(label: str) -> Optional[str]:
    """Classify a patterns sub-heading as the good or bad side."""
    low = label.lower()
    words = set(re.findall(r"[a-z']+", low))
    if "❌" in low or words & _BAD_WORDS:
        return "bad"
    if "✅" in low or words & _GOOD_WORDS:
        return "good"
    return None


def _context_key(raw: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", raw.strip().lower()).strip("_")


class DocumentParser:
    """Parse markdown text into a :class:`RuleDocument`."""

    def __init__(self, schema: DocumentSchema) -> None:
        self.schema = schema

    # ---------- Entry points ----------

    def parse_file(self, path: Path, *, kind: Optional[str] = None) -> RuleDocument:
        try:
            text = read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentParseError(
                f"Cannot read document {path}: {exc}", context={"path": str(path)}
            ) from exc
        return self.parse(text, kind=kind, path=Path(path))

    def parse(
        self,
        text: str,
        *,
        kind: Optional[str] = None,
        path: Optional[Path] = None,
    ) -> RuleDocument:
        """Parse ``text``.

        Args:
            text: Full markdown content (frontmatter allowed)
            kind: Document kind; defaults to frontmatter ``kind`` then ``rule``
            path: Source path, used for reporting and reference resolution

        Raises:
            DocumentParseError: If the frontmatter is invalid
            ConfigError: If the document kind is unknown
        """
        try:
            parsed = parse_frontmatter(text)
        except ValueError as exc:
            raise DocumentParseError(
                f"{path or '<text>'}: {exc}", context={"path": str(path) if path else None}
            ) from exc

        kind_name = kind or str(parsed.frontmatter.get("kind") or "rule")
        doc_kind = self.schema.get_kind(kind_name)
        doc = RuleDocument(kind=kind_name, path=path, frontmatter=parsed.frontmatter)

        lines = parsed.content.splitlines()
        self._split_sections(doc, lines, start=parsed.offset + 1, kind=doc_kind)
        self._extract_fields(doc, doc_kind)
        logger.debug(
            "Parsed %s: %d sections, %d rules", path or "<text>", len(doc.sections), len(doc.rules)
        )
        return doc

    # ---------- Structure ----------

    def _split_sections(
        self, doc: RuleDocument, lines: List[str], *, start: int, kind: DocumentKind
    ) -> None:
        current: Optional[Section] = None
        body: List[str] = []

        def close() -> None:
            if current is not None:
                current.body = "\n".join(body)

        for line, delim in _scan(lines, start):
            if not line.in_fence and delim is None:
                m = _HEADING_RE.match(line.text)
                if m and len(m.group(1)) == 1 and doc.title is None:
                    doc.title = m.group(2).strip()
                    doc.title_line = line.number
                    continue
                if m and len(m.group(1)) == 2:
                    close()
                    heading = m.group(2).strip()
                    spec = kind.match_section(heading)
                    current = Section(
                        heading=heading,
                        line=line.number,
                        name=spec.name if spec else None,
                    )
                    doc.sections.append(current)
                    body = []
                    continue
            if current is not None:
                body.append(line.text)
        close()

    # ---------- Fields ----------

    def _extract_fields(self, doc: RuleDocument, kind: DocumentKind) -> None:
        for section in doc.sections:
            name = section.name
            if name is None:
                continue
            if name == "Context":
                doc.context = self._parse_context(section.body)
            elif name == "Core Principles":
                doc.principles.extend(_list_items(section.body))
            elif name == "Rules" and kind.rule_ids:
                self._parse_rules(doc, section)
            elif name == "Patterns & Anti-Patterns":
                self._parse_patterns(doc.patterns, section.body)
            elif name == "Decision Framework":
                doc.decision_framework.extend(_list_items(section.body))
            elif name == "Exceptions":
                doc.exceptions.extend(self._parse_exceptions(section.body))
            elif name == "Quality Gates":
                doc.quality_gates.extend(_list_items(section.body))
            elif name == "Related Rules":
                doc.related.extend(self._parse_references(section))
            elif name == "References":
                doc.references.extend(_list_items(section.body))
            elif name == "TL;DR":
                doc.tldr = section.body.strip()

    def _parse_context(self, body: str) -> DocumentContext:
        ctx = DocumentContext()
        for item in _list_items(body) or [ln.strip() for ln in body.splitlines() if ln.strip()]:
            plain = item.replace("**", "").replace("__", "")
            if ":" not in plain:
                continue
            key, value = plain.split(":", 1)
            norm = _context_key(key)
            value = value.strip()
            if norm in ("applies_to", "scope"):
                ctx.applies_to = value
            elif norm == "level":
                ctx.level = value
            elif norm == "audience":
                ctx.audience = value
            elif norm:
                ctx.extra[norm] = value
        return ctx

    def _parse_rules(self, doc: RuleDocument, section: Section) -> None:
        convention = self.schema.rule_ids
        current_tier: Optional[str] = None
        tier_level: Optional[int] = None

        for line, delim in _scan(section.body.splitlines(), section.line + 1):
            if line.in_fence or delim:
                continue
            stripped = _RULE_LEAD_RE.sub("", line.text, count=1)
            candidate = convention.find_candidate(stripped)
            if candidate is None:
                heading = _HEADING_RE.match(line.text)
                if heading:
                    level = len(heading.group(1))
                    tier = convention.tier_for_text(heading.group(2))
                    # Deeper headings inherit the enclosing tier.
                    if tier:
                        current_tier, tier_level = tier.name, level
                    elif tier_level is None or level <= tier_level:
                        current_tier, tier_level = None, None
                continue

            identifier = candidate.group(0).rstrip(".-")
            rest = stripped[len(identifier):].lstrip(_RULE_TEXT_TRIM).rstrip(" \t*_`")
            tagged: Optional[str] = None
            for bracket in _BRACKETED_RE.findall(rest):
                for tier in convention.tiers:
                    if tier.has_label(bracket):
                        tagged = tier.name
                        break
                if tagged:
                    break

            rule = Rule(
                identifier=identifier,
                text=rest,
                line=line.number,
                tier=current_tier,
                tagged_tier=tagged,
            )
            if convention.is_well_formed(identifier):
                doc.rules.append(rule)
            else:
                doc.malformed_ids.append(rule)

    def _parse_patterns(self, patterns: Patterns, body: str) -> None:
        bucket: Optional[List[CodeSample]] = None
        label = ""
        language = ""
        code: List[str] = []

        for line, delim in _scan(body.splitlines(), 1):
            if delim == "open":
                m = _FENCE_RE.match(line.text)
                language = m.group(2) if m else ""
                code = []
                continue
            if delim == "close":
                if bucket is not None:
                    bucket.append(CodeSample(language=language, code="\n".join(code), label=label))
                continue
            if line.in_fence:
                code.append(line.text)
                continue

            heading = _HEADING_RE.match(line.text)
            candidate_label: Optional[str] = None
            if heading:
                candidate_label = heading.group(2)
            elif line.text.strip() and not _LIST_ITEM_RE.match(line.text):
                m = _STANDALONE_LABEL_RE.match(line.text)
                if m and line.text.strip().startswith(("**", "__", "✅", "❌")):
                    candidate_label = m.group(1)
            if candidate_label is None:
                continue

            side = _pattern_side(candidate_label)
            if side == "bad":
                bucket, label = patterns.bad, candidate_label.strip()
            elif side == "good":
                bucket, label = patterns.good, candidate_label.strip()

    def _parse_exceptions(self, body: str) -> List[RuleException]:
        out: List[RuleException] = []
        for item in _list_items(body):
            m = _BOLD_LEAD_RE.match(item)
            if m:
                out.append(RuleException(reason=m.group(1).strip(), process=m.group(2).strip()))
                continue
            low = item.lower()
            idx = low.find("process:")
            if idx >= 0:
                reason = item[:idx].strip(" ;,.-")
                if reason.lower().startswith("reason:"):
                    reason = reason[len("reason:"):].strip()
                out.append(RuleException(reason=reason, process=item[idx + len("process:"):].strip()))
            else:
                out.append(RuleException(reason=item))
        return out

    def _parse_references(self, section: Section) -> List[DocumentReference]:
        refs: List[DocumentReference] = []
        for line, delim in _scan(section.body.splitlines(), section.line + 1):
            if line.in_fence or delim:
                continue
            for label, target in _LINK_RE.findall(line.text):
                refs.append(DocumentReference(target=target, label=label, line=line.number))
            for target in _CODE_PATH_RE.findall(line.text):
                if any(r.target == target and r.line == line.number for r in refs):
                    continue
                refs.append(DocumentReference(target=target, line=line.number))
        return refs


def parse_document(
    text: str,
    schema: DocumentSchema,
    *,
    kind: Optional[str] = None,
    path: Optional[Path] = None,
) -> RuleDocument:
    """Convenience wrapper around :class:`DocumentParser`."""
    return DocumentParser(schema).parse(text, kind=kind, path=path)


__all__ = ["DocumentParser", "parse_document"]
