"""
Templates for scaffolding rule documents and feature specifications.

- registry.py: discovery of bundled and project templates
- renderer.py: Jinja2 rendering with missing-placeholder reporting
- values.py: values from YAML files and KEY=VALUE assignments
"""
from __future__ import annotations

from .registry import TEMPLATE_SUFFIX, Template, TemplateRegistry, load_template
from .renderer import RenderResult, TemplateRenderer, number_rules, slugify
from .values import load_values, parse_assignment

__all__ = [
    "TEMPLATE_SUFFIX",
    "Template",
    "TemplateRegistry",
    "load_template",
    "RenderResult",
    "TemplateRenderer",
    "number_rules",
    "slugify",
    "load_values",
    "parse_assignment",
]
