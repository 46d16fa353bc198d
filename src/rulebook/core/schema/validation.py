"""Shared schema validation utilities.

rulebook validates structured YAML payloads (the merged configuration)
using JSON Schema. Schemas are stored as YAML files under
``rulebook/data/schemas/`` and loaded in a single, consistent way.
"""
from __future__ import annotations

from typing import Any, Dict, List

from jsonschema import Draft202012Validator

from rulebook.core.exceptions import SchemaValidationError
from rulebook.data import get_data_path, read_yaml


def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load a bundled schema dict.

    Automatically appends ``.schema.yaml`` if no extension is present.

    Raises:
        FileNotFoundError: If the schema file doesn't exist.
        ValueError: If the schema is not a YAML mapping.
    """
    if not schema_name.endswith((".yaml", ".yml")):
        schema_name = f"{schema_name}.schema.yaml"

    path = get_data_path("schemas", schema_name)
    if not path.exists():
        raise FileNotFoundError(f"Schema not found: {path}")
    schema = read_yaml("schemas", schema_name)
    if not isinstance(schema, dict):
        raise ValueError(f"Schema {schema_name} must be a YAML mapping")
    return schema


def _format_error_path(path: List[Any]) -> str:
    return ".".join(str(p) for p in path) or "<root>"


def validate_payload(payload: Any, schema_name: str) -> None:
    """Validate ``payload`` against a bundled schema.

    All schema errors are collected and reported together.

    Raises:
        SchemaValidationError: If validation fails.
    """
    schema = load_schema(schema_name)
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.path])
    if not errors:
        return

    messages = [f"{_format_error_path(list(e.path))}: {e.message}" for e in errors]
    raise SchemaValidationError(
        f"Schema validation failed for {schema_name}:\n  " + "\n  ".join(messages),
        context={"schema": schema_name, "errors": messages},
    )


__all__ = ["load_schema", "validate_payload"]
