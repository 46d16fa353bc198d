"""
Rulebook config show command.

SUMMARY: Show current configuration

Displays the merged configuration from bundled defaults, project overrides
(``.rulebook/config/*.yaml``) and ``RULEBOOK_*`` environment variables.
"""
from __future__ import annotations

import argparse
import sys
from typing import Any, Dict

from rulebook.cli import OutputFormatter, add_standard_flags, load_cli_config
from rulebook.core.config import get_nested
from rulebook.core.utils.io import dump_yaml_string

SUMMARY = "Show current configuration"

_MISSING = object()


def _nest_key(key: str, value: Any) -> Dict[str, Any]:
    """Nest a dot-notation key into a YAML/JSON-friendly mapping."""
    parts = [p for p in str(key).split(".") if p]
    out = value
    for part in reversed(parts):
        out = {part: out}
    return out


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "key",
        nargs="?",
        help="Specific configuration key to show (e.g., 'validation.strict')",
    )
    parser.add_argument(
        "--format",
        choices=["json", "yaml"],
        default="yaml",
        help="Output format (default: yaml)",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    """Show configuration - delegates to ConfigManager."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        _repo_root, config = load_cli_config(args)
    except Exception as e:
        formatter.error(e, error_code="config_show_error")
        return 1

    output_format = "json" if args.json else args.format

    data: Any = config
    if args.key:
        value = get_nested(config, args.key, _MISSING)
        if value is _MISSING:
            formatter.error(f"Key not found: {args.key}", error_code="key_not_found")
            return 1
        data = _nest_key(args.key, value)

    if output_format == "json":
        formatter.json_output(data)
    else:
        formatter.text(dump_yaml_string(data).rstrip())
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
