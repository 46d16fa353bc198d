"""
Rulebook template render command.

SUMMARY: Render a document template with values

Values come from a YAML file (``--values``) and ``--set KEY=VALUE`` pairs,
with ``--set`` taking precedence. The rendered document is printed to stdout
unless ``--output`` is given; ``--output`` without a path writes to the
template's default output location under the repository root.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from rulebook.cli import (
    OutputFormatter,
    add_dry_run_flag,
    add_force_flag,
    add_json_flag,
    add_repo_root_flag,
    load_cli_config,
)
from rulebook.core.config import get_nested
from rulebook.core.exceptions import TemplateRenderError
from rulebook.core.schema import DocumentSchema
from rulebook.core.templates import TemplateRegistry, TemplateRenderer, load_values
from rulebook.core.utils.io import write_text
from rulebook.core.validator import DocumentValidator

SUMMARY = "Render a document template with values"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("name", help="Template name (see 'template list') or path to a template file")
    parser.add_argument(
        "--values",
        type=str,
        help="YAML file with template values",
    )
    parser.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Set a template value (repeatable; dotted keys nest)",
    )
    parser.add_argument(
        "--output",
        "-o",
        nargs="?",
        const="",
        default=None,
        help="Write to this file (no value: the template's default output path)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate the rendered document before printing or writing it",
    )
    add_force_flag(parser)
    add_dry_run_flag(parser)
    add_json_flag(parser)
    add_repo_root_flag(parser)


def _resolve_target(args: argparse.Namespace, repo_root: Path, default_output: Optional[str]) -> Optional[Path]:
    if args.output is None:
        return None
    if args.output:
        return Path(args.output)
    if not default_output:
        raise TemplateRenderError(
            f"Template {args.name} declares no output path; pass --output PATH"
        )
    return repo_root / default_output


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root, config = load_cli_config(args)
        registry = TemplateRegistry(
            repo_root, templates_dir=str(get_nested(config, "paths.templates_dir", "templates"))
        )
        template = registry.get(args.name)
        values = load_values(Path(args.values) if args.values else None, args.assignments)
        result = TemplateRenderer.from_config(config).render(template, values)
        target = _resolve_target(args, repo_root, result.output_path)

        report = None
        if args.check:
            kind = template.kind if template.kind in DocumentSchema.from_config(config).kinds else None
            validator = DocumentValidator.from_config(config, repo_root=repo_root)
            report = validator.validate_text(result.text, path=target, kind=kind)
    except TemplateRenderError as e:
        if e.missing and not formatter.json_mode:
            formatter.error(e)
            for name in e.missing:
                formatter.text(f"  missing: {name}")
        else:
            formatter.error(e, error_code="render_error")
        return 1
    except Exception as e:
        formatter.error(e, error_code="render_error")
        return 1

    if report is not None and not report.passed:
        if formatter.json_mode:
            formatter.json_output({"status": "invalid", "report": report.to_dict()})
        else:
            for finding in report.findings:
                formatter.text(finding.format(target))
            formatter.text(f"Rendered {template.name} does not pass validation")
        return 1

    if target is None:
        if formatter.json_mode:
            formatter.json_output({"template": template.name, "text": result.text})
        elif not args.dry_run:
            sys.stdout.write(result.text)
        else:
            formatter.text(f"Would print {template.name} to stdout")
        return 0

    exists = target.exists()
    if exists and not args.force:
        formatter.error(f"{target} already exists (use --force to overwrite)", error_code="exists")
        return 1

    data = {"template": template.name, "path": str(target), "overwrite": exists}
    if args.dry_run:
        formatter.success({**data, "dry_run": True}, f"Would write {target}", status="dry_run")
        return 0

    write_text(target, result.text)
    formatter.success(data, f"Wrote {target}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
