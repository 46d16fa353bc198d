"""
Rulebook rules list command.

SUMMARY: List rule documents with per-tier rule counts
"""
from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, List

from rulebook.cli import OutputFormatter, add_standard_flags, load_cli_config
from rulebook.core.discovery import discover_documents
from rulebook.core.document import DocumentParser
from rulebook.core.schema import DocumentSchema

SUMMARY = "List rule documents with per-tier rule counts"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--kind",
        type=str,
        help="Only list documents of this kind",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root, config = load_cli_config(args)
        schema = DocumentSchema.from_config(config)
        parser = DocumentParser(schema)
        tier_names = [tier.name for tier in schema.rule_ids.tiers]

        rows: List[Dict[str, Any]] = []
        for record in discover_documents(repo_root, config):
            if args.kind and record.kind != args.kind:
                continue
            doc = parser.parse_file(record.path, kind=record.kind)
            grouped = doc.rules_by_tier()
            rows.append(
                {
                    "path": str(record.relpath(repo_root)),
                    "kind": record.kind,
                    "category": record.category,
                    "title": doc.title,
                    "rules": {name: len(grouped.get(name, [])) for name in tier_names},
                    "untiered": len(grouped.get("untiered", [])),
                }
            )
    except Exception as e:
        formatter.error(e, error_code="list_error")
        return 1

    if formatter.json_mode:
        formatter.json_output({"documents": rows, "count": len(rows)})
        return 0

    if not rows:
        formatter.text("No documents found.")
        return 0
    for row in rows:
        counts = ", ".join(f"{name}: {count}" for name, count in row["rules"].items())
        if row["untiered"]:
            counts += f", untiered: {row['untiered']}"
        title = row["title"] or "(untitled)"
        formatter.text(f"{row['path']}  [{row['kind']}]  {title}")
        if row["kind"] == "rule":
            formatter.text(f"  {counts}")
    formatter.text(f"\n{len(rows)} document(s)")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
