"""Document schema: section sets per document kind and the rule-ID convention.

The schema is built from the ``documents`` and ``rule_ids`` config keys so
projects can add sections, aliases or kinds without code changes.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from rulebook.core.exceptions import ConfigError
from rulebook.core.utils.text import normalize_heading


@dataclass(frozen=True)
class SectionSpec:
    """A known top-level (H2) section of a document kind."""

    name: str
    required: bool = False
    aliases: tuple[str, ...] = ()

    def matches(self, heading: str) -> bool:
        norm = normalize_heading(heading)
        return norm == normalize_heading(self.name) or any(
            norm == normalize_heading(alias) for alias in self.aliases
        )


@dataclass(frozen=True)
class TierSpec:
    """A MoSCoW tier with its identifier number range (inclusive)."""

    name: str
    label: str
    minimum: int
    maximum: int
    keywords: tuple[str, ...] = ()

    def contains(self, number: int) -> bool:
        return self.minimum <= number <= self.maximum

    def has_label(self, text: str) -> bool:
        return self.label.lower() in text.lower()

    def has_keyword(self, text: str) -> bool:
        words = set(re.findall(r"[a-z]+", text.lower()))
        return any(k.lower() in words for k in self.keywords)


@dataclass
class RuleIdConvention:
    """Identifier prefix/pattern and tier ranges."""

    prefix: str
    pattern: str
    tiers: List[TierSpec] = field(default_factory=list)

    def __post_init__(self) -> None:
        try:
            self._regex = re.compile(rf"^(?:{self.pattern})$")
        except re.error as exc:
            raise ConfigError(
                f"Invalid rule_ids.pattern {self.pattern!r}: {exc}",
                context={"pattern": self.pattern},
            ) from exc
        prefix = re.escape(self.prefix)
        # Exact-case prefix, or any-case prefix followed by a digit ("rule-001").
        self._candidate = re.compile(
            rf"(?:{prefix}[\w.-]*|(?i:{prefix})(?=[\w.-]*\d)[\w.-]*)"
        )

    def is_well_formed(self, identifier: str) -> bool:
        return bool(self._regex.match(identifier))

    def find_candidate(self, text: str) -> Optional[re.Match[str]]:
        """Match an identifier-looking token (prefix, any case) at the start of ``text``."""
        return self._candidate.match(text)

    def number(self, identifier: str) -> Optional[int]:
        digits = re.findall(r"\d+", identifier[len(self.prefix):])
        return int(digits[0]) if digits else None

    def tier_for_number(self, number: int) -> Optional[TierSpec]:
        for tier in self.tiers:
            if tier.contains(number):
                return tier
        return None

    def tier_for_text(self, text: str) -> Optional[TierSpec]:
        """Tier named by a heading or inline tag; full labels win over keywords."""
        for tier in self.tiers:
            if tier.has_label(text):
                return tier
        for tier in self.tiers:
            if tier.has_keyword(text):
                return tier
        return None

    def get_tier(self, name: str) -> TierSpec:
        for tier in self.tiers:
            if tier.name == name:
                return tier
        raise KeyError(name)

    def format_id(self, number: int) -> str:
        """Format an identifier using the prefix and zero-padded number."""
        return f"{self.prefix}{number:03d}"


@dataclass
class DocumentKind:
    """Section schema for one kind of document (``rule``, ``feature-spec``)."""

    name: str
    sections: List[SectionSpec]
    rule_ids: bool = False
    description: str = ""

    @property
    def required_sections(self) -> List[SectionSpec]:
        return [s for s in self.sections if s.required]

    def match_section(self, heading: str) -> Optional[SectionSpec]:
        for spec in self.sections:
            if spec.matches(heading):
                return spec
        return None

    def find(self, name: str) -> Optional[SectionSpec]:
        for spec in self.sections:
            if spec.name == name:
                return spec
        return None


class DocumentSchema:
    """All document kinds plus the shared rule-ID convention."""

    def __init__(self, kinds: Dict[str, DocumentKind], rule_ids: RuleIdConvention) -> None:
        self.kinds = kinds
        self.rule_ids = rule_ids

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "DocumentSchema":
        kinds: Dict[str, DocumentKind] = {}
        for name, cfg in (config.get("documents") or {}).items():
            sections = [
                SectionSpec(
                    name=str(s["name"]),
                    required=bool(s.get("required", False)),
                    aliases=tuple(str(a) for a in s.get("aliases") or ()),
                )
                for s in cfg.get("sections") or []
            ]
            kinds[name] = DocumentKind(
                name=name,
                sections=sections,
                rule_ids=bool(cfg.get("rule_ids", False)),
                description=str(cfg.get("description", "")),
            )

        ids_cfg = config.get("rule_ids") or {}
        tiers = [
            TierSpec(
                name=tier_name,
                label=str(t.get("label", tier_name)),
                minimum=int(t["min"]),
                maximum=int(t["max"]),
                keywords=tuple(str(k) for k in t.get("keywords") or ()),
            )
            for tier_name, t in (ids_cfg.get("tiers") or {}).items()
        ]
        convention = RuleIdConvention(
            prefix=str(ids_cfg.get("prefix", "RULE-")),
            pattern=str(ids_cfg.get("pattern", r"RULE-\d{3}")),
            tiers=tiers,
        )
        return cls(kinds, convention)

    def get_kind(self, name: str) -> DocumentKind:
        if name not in self.kinds:
            raise ConfigError(
                f"Unknown document kind: {name}. Known kinds: {sorted(self.kinds)}",
                context={"kind": name},
            )
        return self.kinds[name]


__all__ = [
    "SectionSpec",
    "TierSpec",
    "RuleIdConvention",
    "DocumentKind",
    "DocumentSchema",
]
