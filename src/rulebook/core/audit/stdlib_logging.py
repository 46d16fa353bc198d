from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from rulebook.core.utils.io import ensure_directory

_CONFIGURED_LOG_PATH: Optional[str] = None
_RULEBOOK_FILE_HANDLER: Optional[logging.Handler] = None
_RULEBOOK_STDERR_HANDLER: Optional[logging.Handler] = None
_JSON_MODE_NULL_HANDLER: Optional[logging.Handler] = None

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def level_from_name(name: str) -> int:
    """Map ``"debug"``/``"INFO"``... to a logging level (INFO when unknown)."""
    level = getattr(logging, str(name).upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_stdlib_logging(*, log_path: Path, level: str = "INFO") -> None:
    """Configure stdlib logging to write to ``log_path`` (no stderr handler).

    Idempotent per-process: if already configured for the same file, no-op.
    """
    global _CONFIGURED_LOG_PATH, _RULEBOOK_FILE_HANDLER

    resolved = str(Path(log_path).resolve())
    if _CONFIGURED_LOG_PATH == resolved and _RULEBOOK_FILE_HANDLER is not None:
        return

    ensure_directory(Path(resolved).parent)

    root = logging.getLogger()
    root.setLevel(level_from_name(level))

    # FileHandler is a StreamHandler too; only drop handlers bound to stdout/stderr.
    for h in list(root.handlers):
        if h is _RULEBOOK_STDERR_HANDLER:
            continue
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) in (sys.stdout, sys.stderr):
            root.removeHandler(h)
            h.close()

    if _RULEBOOK_FILE_HANDLER is not None:
        root.removeHandler(_RULEBOOK_FILE_HANDLER)
        _RULEBOOK_FILE_HANDLER.close()
        _RULEBOOK_FILE_HANDLER = None

    fh = logging.FileHandler(resolved, encoding="utf-8")
    fh.setLevel(level_from_name(level))
    fh.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(fh)

    _RULEBOOK_FILE_HANDLER = fh
    _CONFIGURED_LOG_PATH = resolved


def enable_verbose_logging() -> None:
    """Send DEBUG records to stderr (``--verbose``)."""
    global _RULEBOOK_STDERR_HANDLER

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    if _RULEBOOK_STDERR_HANDLER is not None:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    _RULEBOOK_STDERR_HANDLER = handler


def suppress_lastresort_in_json_mode() -> None:
    """Keep stdlib logging's lastResort handler off stderr in ``--json`` mode.

    With no handlers configured, WARNING+ records fall through to the implicit
    ``lastResort`` handler. A NullHandler on the root logger stops that without
    changing logger levels.
    """
    global _JSON_MODE_NULL_HANDLER

    root = logging.getLogger()
    if root.handlers or _JSON_MODE_NULL_HANDLER is not None:
        return
    _JSON_MODE_NULL_HANDLER = logging.NullHandler()
    root.addHandler(_JSON_MODE_NULL_HANDLER)


def reset_stdlib_logging_for_tests() -> None:
    """Test-only: remove handlers installed by this module."""
    global _CONFIGURED_LOG_PATH, _RULEBOOK_FILE_HANDLER, _RULEBOOK_STDERR_HANDLER, _JSON_MODE_NULL_HANDLER
    root = logging.getLogger()
    for h in (_RULEBOOK_FILE_HANDLER, _RULEBOOK_STDERR_HANDLER, _JSON_MODE_NULL_HANDLER):
        if h is None:
            continue
        root.removeHandler(h)
        h.close()
    root.setLevel(logging.WARNING)
    _CONFIGURED_LOG_PATH = None
    _RULEBOOK_FILE_HANDLER = None
    _RULEBOOK_STDERR_HANDLER = None
    _JSON_MODE_NULL_HANDLER = None


__all__ = [
    "configure_stdlib_logging",
    "enable_verbose_logging",
    "level_from_name",
    "reset_stdlib_logging_for_tests",
    "suppress_lastresort_in_json_mode",
]
