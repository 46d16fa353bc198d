"""
Document schema for rulebook.

- models.py: section sets per document kind and the tiered rule-ID convention
- validation.py: JSON Schema validation of structured YAML payloads
"""
from __future__ import annotations

from .models import DocumentKind, DocumentSchema, RuleIdConvention, SectionSpec, TierSpec
from .validation import load_schema, validate_payload

__all__ = [
    "DocumentKind",
    "DocumentSchema",
    "RuleIdConvention",
    "SectionSpec",
    "TierSpec",
    "load_schema",
    "validate_payload",
]
