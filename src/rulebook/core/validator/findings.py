"""
Findings and reports produced by the document validator.

A finding is an authoring mistake (missing section, malformed rule ID),
never a runtime failure. A report passes when it holds no error finding.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class FindingCode(str, Enum):
    MISSING_TITLE = "missing-title"
    MISSING_SECTION = "missing-section"
    DUPLICATE_SECTION = "duplicate-section"
    SECTION_ORDER = "section-order"
    MALFORMED_RULE_ID = "malformed-rule-id"
    DUPLICATE_RULE_ID = "duplicate-rule-id"
    TIER_MISMATCH = "tier-mismatch"
    UNTIERED_RULE = "untiered-rule"
    UNRESOLVED_REFERENCE = "unresolved-reference"


# Codes reported as warnings; everything else is an error.
WARNING_CODES = frozenset({FindingCode.SECTION_ORDER, FindingCode.UNTIERED_RULE})


@dataclass(frozen=True)
class Finding:
    """A single validation finding.

    Attributes:
        code: Machine-readable finding code
        message: Human-readable description
        subject: What the finding is about (section name, rule ID, path)
        line: 1-based source line when known
        severity: ``error`` or ``warning``
    """

    code: FindingCode
    message: str
    subject: str = ""
    line: Optional[int] = None
    severity: Severity = Severity.ERROR

    @classmethod
    def create(
        cls,
        code: FindingCode,
        message: str,
        *,
        subject: str = "",
        line: Optional[int] = None,
    ) -> "Finding":
        severity = Severity.WARNING if code in WARNING_CODES else Severity.ERROR
        return cls(code=code, message=message, subject=subject, line=line, severity=severity)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "severity": self.severity.value,
            "message": self.message,
            "subject": self.subject,
            "line": self.line,
        }

    def format(self, path: Optional[Path] = None) -> str:
        location = str(path) if path else "<text>"
        if self.line:
            location = f"{location}:{self.line}"
        return f"{location}: {self.severity.value} [{self.code.value}] {self.message}"


@dataclass
class ValidationReport:
    """All findings for one document."""

    path: Optional[Path]
    kind: str
    findings: List[Finding] = field(default_factory=list)
    strict: bool = False
    # Set when the file could not be parsed at all
    error: Optional[str] = None

    @property
    def errors(self) -> List[Finding]:
        return [f for f in self.findings if f.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[Finding]:
        return [f for f in self.findings if f.severity is Severity.WARNING]

    @property
    def passed(self) -> bool:
        if self.error:
            return False
        if self.strict:
            return not self.findings
        return not self.errors

    def codes(self) -> List[str]:
        return [f.code.value for f in self.findings]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": str(self.path) if self.path else None,
            "kind": self.kind,
            "passed": self.passed,
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "findings": [f.to_dict() for f in self.findings],
            "error": self.error,
        }


__all__ = [
    "Severity",
    "FindingCode",
    "WARNING_CODES",
    "Finding",
    "ValidationReport",
]
