"""Shared utilities for rulebook core modules."""
