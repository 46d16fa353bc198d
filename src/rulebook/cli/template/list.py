"""
Rulebook template list command.

SUMMARY: List available document templates
"""
from __future__ import annotations

import argparse
import sys

from rulebook.cli import OutputFormatter, add_standard_flags, load_cli_config
from rulebook.core.config import get_nested
from rulebook.core.templates import TemplateRegistry, TemplateRenderer

SUMMARY = "List available document templates"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--placeholders",
        action="store_true",
        help="Also list each template's placeholders",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root, config = load_cli_config(args)
        registry = TemplateRegistry(
            repo_root, templates_dir=str(get_nested(config, "paths.templates_dir", "templates"))
        )
        templates = registry.all()
        renderer = TemplateRenderer.from_config(config)
        rows = []
        for name in sorted(templates):
            template = templates[name]
            row = template.to_dict()
            row["placeholders"] = renderer.placeholders(template)
            rows.append(row)
    except Exception as e:
        formatter.error(e, error_code="template_error")
        return 1

    if formatter.json_mode:
        formatter.json_output({"templates": rows})
        return 0

    for row in rows:
        line = f"{row['name']}  [{row['source']}]"
        if row["kind"]:
            line += f"  kind: {row['kind']}"
        formatter.text(line)
        if row["description"]:
            formatter.text(f"  {row['description']}")
        if args.placeholders:
            formatter.text(f"  placeholders: {', '.join(row['placeholders']) or '(none)'}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
