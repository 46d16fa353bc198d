"""
Document schema validator.

Checks a parsed document against its kind's section schema and the tiered
rule-identifier convention. Every check runs on every document: a missing
section never hides a duplicate identifier, and all missing sections are
reported together.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from rulebook.core.document import DocumentParser, Rule, RuleDocument
from rulebook.core.exceptions import RulebookError
from rulebook.core.schema import DocumentKind, DocumentSchema

from .findings import Finding, FindingCode, ValidationReport

logger = logging.getLogger(__name__)


class DocumentValidator:
    """Validate rule documents (and other schema-checked kinds)."""

    def __init__(
        self,
        schema: DocumentSchema,
        *,
        repo_root: Optional[Path] = None,
        check_order: bool = True,
        resolve_references: bool = True,
        strict: bool = False,
    ) -> None:
        self.schema = schema
        self.parser = DocumentParser(schema)
        self.repo_root = Path(repo_root) if repo_root is not None else None
        self.check_order = check_order
        self.resolve_references = resolve_references
        self.strict = strict

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        *,
        repo_root: Optional[Path] = None,
        strict: Optional[bool] = None,
    ) -> "DocumentValidator":
        validation = config.get("validation") or {}
        return cls(
            DocumentSchema.from_config(config),
            repo_root=repo_root,
            check_order=bool(validation.get("check_order", True)),
            resolve_references=bool(validation.get("resolve_references", True)),
            strict=bool(validation.get("strict", False)) if strict is None else strict,
        )

    # ---------- Entry points ----------

    def validate_text(
        self,
        text: str,
        *,
        path: Optional[Path] = None,
        kind: Optional[str] = None,
    ) -> ValidationReport:
        return self.validate_document(self.parser.parse(text, kind=kind, path=path))

    def validate_file(self, path: Path, *, kind: Optional[str] = None) -> ValidationReport:
        return self.validate_document(self.parser.parse_file(Path(path), kind=kind))

    def validate_paths(
        self, paths: Iterable[Path], *, kind: Optional[str] = None
    ) -> List[ValidationReport]:
        """Validate independent files in sequence.

        A file that cannot be parsed (bad frontmatter, unknown kind) yields a
        failed report carrying the error; the remaining files are still checked.
        """
        reports: List[ValidationReport] = []
        for path in paths:
            try:
                reports.append(self.validate_file(path, kind=kind))
            except RulebookError as exc:
                logger.info("Cannot validate %s: %s", path, exc)
                reports.append(
                    ValidationReport(
                        path=Path(path),
                        kind=kind or "unknown",
                        strict=self.strict,
                        error=str(exc),
                    )
                )
        return reports

    def validate_document(self, doc: RuleDocument) -> ValidationReport:
        kind = self.schema.get_kind(doc.kind)
        findings: List[Finding] = []

        findings.extend(self._check_title(doc))
        findings.extend(self._check_sections(doc, kind))
        if self.check_order:
            findings.extend(self._check_order(doc, kind))
        if kind.rule_ids:
            findings.extend(self._check_rule_ids(doc))
        if self.resolve_references:
            findings.extend(self._check_references(doc))

        report = ValidationReport(path=doc.path, kind=doc.kind, findings=findings, strict=self.strict)
        logger.info(
            "Validated %s: %d error(s), %d warning(s)",
            doc.path or "<text>",
            len(report.errors),
            len(report.warnings),
        )
        return report

    # ---------- Checks ----------

    def _check_title(self, doc: RuleDocument) -> List[Finding]:
        if doc.title:
            return []
        return [Finding.create(FindingCode.MISSING_TITLE, "Document has no H1 title")]

    def _check_sections(self, doc: RuleDocument, kind: DocumentKind) -> List[Finding]:
        findings: List[Finding] = []
        seen: Dict[str, int] = {}

        for section in doc.sections:
            if section.name is None:
                continue
            if section.name in seen:
                findings.append(
                    Finding.create(
                        FindingCode.DUPLICATE_SECTION,
                        f"Section '{section.name}' appears more than once "
                        f"(first on line {seen[section.name]})",
                        subject=section.name,
                        line=section.line,
                    )
                )
            else:
                seen[section.name] = section.line

        for spec in kind.required_sections:
            if spec.name not in seen:
                findings.append(
                    Finding.create(
                        FindingCode.MISSING_SECTION,
                        f"Missing required section '{spec.name}'",
                        subject=spec.name,
                    )
                )
        return findings

    def _check_order(self, doc: RuleDocument, kind: DocumentKind) -> List[Finding]:
        order = {spec.name: i for i, spec in enumerate(kind.sections)}
        findings: List[Finding] = []
        seen: set[str] = set()
        latest: Optional[str] = None

        for section in doc.sections:
            if section.name is None or section.name in seen:
                continue
            seen.add(section.name)
            if latest is not None and order[section.name] < order[latest]:
                findings.append(
                    Finding.create(
                        FindingCode.SECTION_ORDER,
                        f"Section '{section.name}' should come before '{latest}'",
                        subject=section.name,
                        line=section.line,
                    )
                )
                continue
            latest = section.name
        return findings

    def _check_rule_ids(self, doc: RuleDocument) -> List[Finding]:
        convention = self.schema.rule_ids
        findings: List[Finding] = []

        for bad in doc.malformed_ids:
            findings.append(
                Finding.create(
                    FindingCode.MALFORMED_RULE_ID,
                    f"Malformed rule identifier '{bad.identifier}' "
                    f"(expected pattern {convention.pattern})",
                    subject=bad.identifier,
                    line=bad.line,
                )
            )

        first_seen: Dict[str, int] = {}
        reported: set[str] = set()
        for rule in doc.rules:
            if rule.identifier in first_seen:
                if rule.identifier not in reported:
                    reported.add(rule.identifier)
                    findings.append(
                        Finding.create(
                            FindingCode.DUPLICATE_RULE_ID,
                            f"Duplicate rule identifier '{rule.identifier}' "
                            f"(first defined on line {first_seen[rule.identifier]})",
                            subject=rule.identifier,
                            line=rule.line,
                        )
                    )
            else:
                first_seen[rule.identifier] = rule.line

            findings.extend(self._check_tier(rule))
        return findings

    def _check_tier(self, rule: Rule) -> List[Finding]:
        convention = self.schema.rule_ids
        number = convention.number(rule.identifier)
        expected = convention.tier_for_number(number) if number is not None else None
        if expected is None:
            return [
                Finding.create(
                    FindingCode.TIER_MISMATCH,
                    f"Rule '{rule.identifier}' is outside every tier range",
                    subject=rule.identifier,
                    line=rule.line,
                )
            ]

        actual_name = rule.tagged_tier or rule.tier
        if actual_name is None:
            return [
                Finding.create(
                    FindingCode.UNTIERED_RULE,
                    f"Rule '{rule.identifier}' is not under a tier heading "
                    f"(expected '{expected.label}')",
                    subject=rule.identifier,
                    line=rule.line,
                )
            ]
        if actual_name != expected.name:
            actual = convention.get_tier(actual_name)
            return [
                Finding.create(
                    FindingCode.TIER_MISMATCH,
                    f"Rule '{rule.identifier}' is tagged '{actual.label}' but its number "
                    f"belongs to '{expected.label}' ({expected.minimum}-{expected.maximum})",
                    subject=rule.identifier,
                    line=rule.line,
                )
            ]
        return []

    def _check_references(self, doc: RuleDocument) -> List[Finding]:
        findings: List[Finding] = []
        for ref in doc.related:
            if ref.is_external or not ref.path_part:
                continue
            target = ref.path_part
            bases: List[Path] = []
            if target.startswith("/"):
                # Links like /rules/http.md are relative to the repository root.
                target = target.lstrip("/")
                if self.repo_root is not None:
                    bases.append(self.repo_root)
            else:
                if doc.path is not None:
                    bases.append(Path(doc.path).parent)
                if self.repo_root is not None:
                    bases.append(self.repo_root)
            if not bases:
                logger.debug("Skipping reference %s: no base directory", ref.target)
                continue

            if any((base / target).exists() for base in bases):
                continue
            findings.append(
                Finding.create(
                    FindingCode.UNRESOLVED_REFERENCE,
                    f"Related reference '{ref.target}' does not resolve to an existing file",
                    subject=ref.target,
                    line=ref.line,
                )
            )
        return findings


def validate_text(
    text: str,
    config: Dict[str, Any],
    *,
    path: Optional[Path] = None,
    kind: Optional[str] = None,
    repo_root: Optional[Path] = None,
) -> ValidationReport:
    """Validate markdown text using a loaded configuration."""
    validator = DocumentValidator.from_config(config, repo_root=repo_root)
    return validator.validate_text(text, path=path, kind=kind)


__all__ = ["DocumentValidator", "validate_text"]
