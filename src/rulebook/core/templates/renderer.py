"""Template rendering.

Templates are rendered with Jinja2. Placeholders are the template body's
undeclared variables; values come from the template's ``defaults``, the
caller's values and a few built-ins (``rules_dir``, ``tiers``, ``today``).
Every missing placeholder is reported at once and nothing is rendered.

For ``rule`` templates, rule entries given per tier without identifiers
are numbered from the tier's range start (``RULE-001``, ``RULE-101``, ...).
"""
from __future__ import annotations

import datetime as _dt
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Set

from jinja2 import Environment, StrictUndefined, TemplateError, meta

from rulebook.core.exceptions import TemplateRenderError
from rulebook.core.schema import DocumentSchema, RuleIdConvention

from .registry import Template

logger = logging.getLogger(__name__)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lowercase, hyphen-separated slug.

    Example:
        >>> slugify("REST API Design Rules")
        'rest-api-design-rules'
    """
    return _SLUG_RE.sub("-", text.lower()).strip("-")


@dataclass
class RenderResult:
    template: Template
    text: str
    output_path: Optional[str] = None


def number_rules(rules: Any, convention: RuleIdConvention, *, template: str = "") -> Dict[str, List[Dict[str, str]]]:
    """Normalize ``{tier: [text | {id, text}]}`` into identified rule entries.

    Raises:
        TemplateRenderError: For unknown tiers, malformed entries or a tier
            running out of identifiers
    """
    if rules is None:
        rules = {}
    if not isinstance(rules, Mapping):
        raise TemplateRenderError(
            "'rules' must be a mapping of tier name to a list of rules", template=template
        )

    known = {tier.name for tier in convention.tiers}
    unknown = sorted(set(rules) - known)
    if unknown:
        raise TemplateRenderError(
            f"Unknown rule tier(s): {', '.join(unknown)}. Known tiers: {', '.join(sorted(known))}",
            template=template,
        )

    numbered: Dict[str, List[Dict[str, str]]] = {}
    for tier in convention.tiers:
        entries = rules.get(tier.name) or []
        if not isinstance(entries, list):
            raise TemplateRenderError(f"rules.{tier.name} must be a list", template=template)

        explicit: Set[int] = set()
        for entry in entries:
            if isinstance(entry, Mapping) and entry.get("id"):
                num = convention.number(str(entry["id"]))
                if num is not None:
                    explicit.add(num)

        next_number = tier.minimum
        out: List[Dict[str, str]] = []
        for entry in entries:
            if isinstance(entry, Mapping):
                text = str(entry.get("text", "")).strip()
                ident = str(entry["id"]) if entry.get("id") else None
            else:
                text = str(entry).strip()
                ident = None
            if not text:
                raise TemplateRenderError(
                    f"Empty rule text in rules.{tier.name}", template=template
                )
            if ident is None:
                while next_number in explicit:
                    next_number += 1
                if next_number > tier.maximum:
                    raise TemplateRenderError(
                        f"Too many {tier.label} rules: identifiers {tier.minimum}-{tier.maximum} exhausted",
                        template=template,
                    )
                ident = convention.format_id(next_number)
                next_number += 1
            out.append({"id": ident, "text": text})
        numbered[tier.name] = out
    return numbered


class TemplateRenderer:
    """Render :class:`Template` objects with user-supplied values."""

    def __init__(
        self,
        convention: RuleIdConvention,
        *,
        builtins: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.convention = convention
        self.builtins = dict(builtins or {})
        # Control blocks sit on their own lines; trimming keeps them from leaving blank lines.
        self.env = Environment(
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            autoescape=False,
        )

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "TemplateRenderer":
        paths = config.get("paths") or {}
        return cls(
            DocumentSchema.from_config(config).rule_ids,
            builtins={
                "rules_dir": paths.get("rules_dir", "rules"),
                "templates_dir": paths.get("templates_dir", "templates"),
            },
        )

    def placeholders(self, template: Template) -> List[str]:
        """Return the template body's undeclared variables, sorted."""
        try:
            ast = self.env.parse(template.body)
        except TemplateError as exc:
            raise TemplateRenderError(
                f"Template {template.name} has invalid syntax: {exc}", template=template.name
            ) from exc
        return sorted(meta.find_undeclared_variables(ast))

    def build_context(self, template: Template, values: Mapping[str, Any]) -> Dict[str, Any]:
        context: Dict[str, Any] = {
            "today": _dt.date.today().isoformat(),
            "tiers": [
                {"name": t.name, "label": t.label, "min": t.minimum, "max": t.maximum}
                for t in self.convention.tiers
            ],
            **self.builtins,
        }
        context.update(template.defaults)
        context.update(values)
        if "slug" not in context and context.get("title"):
            context["slug"] = slugify(str(context["title"]))
        if template.kind == "rule" or "rules" in context:
            context["rules"] = number_rules(
                context.get("rules"), self.convention, template=template.name
            )
        return context

    def missing(self, template: Template, values: Mapping[str, Any]) -> List[str]:
        context = self.build_context(template, values)
        return [name for name in self.placeholders(template) if name not in context]

    def render(self, template: Template, values: Mapping[str, Any]) -> RenderResult:
        """Render ``template``.

        Raises:
            TemplateRenderError: If placeholders are missing or rendering fails
        """
        context = self.build_context(template, values)
        missing = [name for name in self.placeholders(template) if name not in context]
        if missing:
            raise TemplateRenderError(
                f"Missing value(s) for template {template.name}: {', '.join(missing)}",
                template=template.name,
                missing=missing,
            )

        try:
            text = self.env.from_string(template.body).render(**context)
            output_path = (
                self.env.from_string(template.output).render(**context) if template.output else None
            )
        except TemplateError as exc:
            raise TemplateRenderError(
                f"Failed to render template {template.name}: {exc}", template=template.name
            ) from exc

        logger.info("Rendered template %s", template.name)
        return RenderResult(template=template, text=text, output_path=output_path)


__all__ = ["RenderResult", "TemplateRenderer", "number_rules", "slugify"]
