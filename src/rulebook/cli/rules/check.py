"""
Rulebook rules check command.

SUMMARY: Validate rule documents against their schema
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rulebook.cli import OutputFormatter, add_standard_flags, load_cli_config
from rulebook.core.discovery import discover_documents, expand_paths
from rulebook.core.validator import DocumentValidator, ValidationReport

SUMMARY = "Validate rule documents against their schema"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "paths",
        nargs="*",
        help="Documents or directories to check (default: every document under paths.rules_dir)",
    )
    parser.add_argument(
        "--kind",
        type=str,
        help="Document kind to validate as (default: frontmatter 'kind', else 'rule')",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail on warnings too",
    )
    add_standard_flags(parser)


def _display_path(path: Optional[Path], repo_root: Path) -> Optional[Path]:
    if path is None:
        return None
    try:
        return Path(path).resolve().relative_to(repo_root)
    except ValueError:
        return Path(path)


def _format_report(report: ValidationReport, repo_root: Path) -> List[str]:
    shown = _display_path(report.path, repo_root)
    if report.error:
        return [f"{shown or '<text>'}: FAILED (could not be checked: {report.error})"]
    lines =[finding.format(shown) for finding in report.findings]
    status = "ok" if report.passed else "FAILED"
    lines.append(
        f"{shown or '<text>'}: {status} "
        f"({len(report.errors)} error(s), {len(report.warnings)} warning(s))"
    )
    return lines


def main(args: argparse.Namespace) -> int:
    """Validate documents - delegates to DocumentValidator."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root, config = load_cli_config(args)
        validator = DocumentValidator.from_config(config, repo_root=repo_root, strict=args.strict)

        if args.paths:
            missing = [p for p in args.paths if not Path(p).exists()]
            if missing:
                formatter.error(f"Path not found: {', '.join(missing)}")
                return 1
            paths = expand_paths([Path(p) for p in args.paths])
        else:
            paths = [record.path for record in discover_documents(repo_root, config)]

        reports = validator.validate_paths(paths, kind=args.kind)
    except Exception as e:
        formatter.error(e, error_code="check_error")
        return 1

    passed = all(r.passed for r in reports)
    failed = sum(1 for r in reports if not r.passed)

    if formatter.json_mode:
        formatter.json_output(
            {
                "passed": passed,
                "checked": len(reports),
                "failed": failed,
                "documents": [r.to_dict() for r in reports],
            }
        )
    else:
        if not reports:
            formatter.text("No documents found.")
        for report in reports:
            for line in _format_report(report, repo_root):
                formatter.text(line)
        if reports:
            formatter.text(f"\n{len(reports)} document(s) checked, {failed} failed")

    return 0 if passed else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
