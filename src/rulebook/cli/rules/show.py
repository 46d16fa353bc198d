"""
Rulebook rules show command.

SUMMARY: Show the parsed structure of a rule document
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rulebook.cli import OutputFormatter, add_standard_flags, load_cli_config
from rulebook.core.document import DocumentParser, RuleDocument
from rulebook.core.schema import DocumentSchema

SUMMARY = "Show the parsed structure of a rule document"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("path", help="Document to show")
    parser.add_argument(
        "--kind",
        type=str,
        help="Document kind to parse as (default: frontmatter 'kind', else 'rule')",
    )
    add_standard_flags(parser)


def _print_document(formatter: OutputFormatter, doc: RuleDocument, schema: DocumentSchema) -> None:
    formatter.text(f"# {doc.title or '(untitled)'}")
    formatter.text_kv("kind", doc.kind)
    if doc.context.applies_to:
        formatter.text_kv("applies to", doc.context.applies_to)
    if doc.context.level:
        formatter.text_kv("level", doc.context.level)
    if doc.context.audience:
        formatter.text_kv("audience", doc.context.audience)

    formatter.text("\nSections:")
    for section in doc.sections:
        label = section.name or f"{section.heading} (unknown)"
        formatter.text(f"  {section.line:>4}  {label}")

    if doc.rules:
        formatter.text("\nRules:")
        grouped = doc.rules_by_tier()
        for tier in schema.rule_ids.tiers:
            for rule in grouped.get(tier.name, []):
                formatter.text(f"  {rule.identifier} [{tier.label}] {rule.text}")
        for rule in grouped.get("untiered", []):
            formatter.text(f"  {rule.identifier} [untiered] {rule.text}")

    if doc.related:
        formatter.text("\nRelated:")
        for ref in doc.related:
            formatter.text(f"  {ref.label or ref.target} -> {ref.target}")

    if doc.quality_gates:
        formatter.text(f"\nQuality gates: {len(doc.quality_gates)}")
    if doc.tldr:
        formatter.text(f"\nTL;DR: {doc.tldr}")


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        _repo_root, config = load_cli_config(args)
        schema = DocumentSchema.from_config(config)
        doc = DocumentParser(schema).parse_file(Path(args.path), kind=args.kind)
    except Exception as e:
        formatter.error(e, error_code="show_error")
        return 1

    if formatter.json_mode:
        formatter.json_output(doc.to_dict())
    else:
        _print_document(formatter, doc, schema)
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
