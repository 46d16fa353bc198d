"""
Rule document model and markdown parser.

- models.py: RuleDocument, Rule, Section and the structured fields
- parser.py: DocumentParser turning markdown into a RuleDocument
"""
from __future__ import annotations

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
from .parser import DocumentParser, parse_document

__all__ = [
    "CodeSample",
    "DocumentContext",
    "DocumentReference",
    "Patterns",
    "Rule",
    "RuleDocument",
    "RuleException",
    "Section",
    "DocumentParser",
    "parse_document",
]
