"""Repository audits and process-level logging setup."""
from __future__ import annotations

from .duplication import DuplicatePair, build_shingle_index, duplication_matrix, jaccard, text_shingles
from .stdlib_logging import (
    configure_stdlib_logging,
    enable_verbose_logging,
    level_from_name,
    reset_stdlib_logging_for_tests,
    suppress_lastresort_in_json_mode,
)

__all__ = [
    "DuplicatePair",
    "build_shingle_index",
    "duplication_matrix",
    "jaccard",
    "text_shingles",
    "configure_stdlib_logging",
    "enable_verbose_logging",
    "level_from_name",
    "reset_stdlib_logging_for_tests",
    "suppress_lastresort_in_json_mode",
]
