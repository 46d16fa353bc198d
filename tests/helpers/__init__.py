"""Test helper modules for the rulebook test suite.

- documents: markdown builders for rule and feature-spec documents
- io_utils: small writers for YAML config files
"""
from __future__ import annotations
