from __future__ import annotations

from typing import Any, Dict, Mapping


class RulebookError(Exception):
    """Base exception for rulebook."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigError(RulebookError, ValueError):
    """Raised when configuration cannot be loaded or is invalid."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        RulebookError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class SchemaValidationError(ConfigError):
    """Raised when a payload fails JSON Schema validation."""


class DocumentParseError(RulebookError, ValueError):
    """Raised when a markdown document cannot be read or parsed."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        RulebookError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class TemplateNotFoundError(RulebookError, FileNotFoundError):
    """Raised when a named template cannot be found."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        RulebookError.__init__(self, message, context=context)
        FileNotFoundError.__init__(self, message)


class TemplateRenderError(RulebookError):
    """Raised when a template cannot be rendered."""

    def __init__(
        self,
        message: str,
        *,
        template: str | None = None,
        missing: list[str] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if template:
            ctx["template"] = template
        if missing:
            ctx["missing"] = list(missing)
        super().__init__(message, context=ctx)
        self.missing = list(missing or [])


__all__ = [
    "RulebookError",
    "ConfigError",
    "SchemaValidationError",
    "DocumentParseError",
    "TemplateNotFoundError",
    "TemplateRenderError",
]
