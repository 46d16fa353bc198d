"""
Rulebook rules audit command.

SUMMARY: Report near-duplicate rule documents
"""
from __future__ import annotations

import argparse
import sys

from rulebook.cli import OutputFormatter, add_standard_flags, load_cli_config
from rulebook.core.audit import duplication_matrix
from rulebook.core.config import get_nested
from rulebook.core.discovery import discover_documents

SUMMARY = "Report near-duplicate rule documents"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--min-similarity",
        type=float,
        help="Minimum Jaccard similarity to report (default: audit.min_similarity)",
    )
    parser.add_argument(
        "--shingle-size",
        type=int,
        help="Words per shingle (default: audit.shingle_size)",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root, config = load_cli_config(args)
        min_similarity = args.min_similarity
        if min_similarity is None:
            min_similarity = float(get_nested(config, "audit.min_similarity", 0.8))
        k = args.shingle_size or int(get_nested(config, "audit.shingle_size", 12))
        if not 0.0 <= min_similarity <= 1.0:
            formatter.error("--min-similarity must be between 0 and 1")
            return 1
        if k < 1:
            formatter.error("--shingle-size must be at least 1")
            return 1

        records = discover_documents(repo_root, config)
        pairs = duplication_matrix(records, k=k, min_similarity=min_similarity)
    except Exception as e:
        formatter.error(e, error_code="audit_error")
        return 1

    if formatter.json_mode:
        formatter.json_output(
            {
                "documents": len(records),
                "shingle_size": k,
                "min_similarity": min_similarity,
                "pairs": [p.to_dict(repo_root) for p in pairs],
            }
        )
        return 0

    if not pairs:
        formatter.text(
            f"No duplicates at similarity >= {min_similarity:.2f} across {len(records)} document(s)."
        )
        return 0
    for pair in pairs:
        formatter.text(
            f"{pair.similarity:.2f}  {pair.a.relpath(repo_root)} <-> {pair.b.relpath(repo_root)}"
        )
    formatter.text(f"\n{len(pairs)} similar pair(s) across {len(records)} document(s)")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
