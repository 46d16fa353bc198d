"""
Document schema validator.

- findings.py: Finding, FindingCode, Severity, ValidationReport
- validator.py: DocumentValidator (sections, order, rule IDs, references)
"""
from __future__ import annotations

from .findings import WARNING_CODES, Finding, FindingCode, Severity, ValidationReport
from .validator import DocumentValidator, validate_text

__all__ = [
    "Finding",
    "FindingCode",
    "Severity",
    "ValidationReport",
    "WARNING_CODES",
    "DocumentValidator",
    "validate_text",
]
