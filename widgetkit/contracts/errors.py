# ==============================
# Error Taxonomy
# ==============================
"""
Exceptions raised by widgetkit.

Every error raised by this package derives from WidgetKitError and also from
the closest builtin, so callers can catch either.

Propagation rules:
- Errors raised during resolution surface to the render caller unchanged.
- Nothing here is retried; resolution is deterministic.
"""

from __future__ import annotations

from typing import Optional


class WidgetKitError(Exception):
    """Base class for all widgetkit errors."""


class ConfigurationError(WidgetKitError, RuntimeError):
    """No engine is bound and none could be created, or settings are invalid."""


class PathLookupError(WidgetKitError, KeyError):
    """A dotted data path could not be walked."""

    def __init__(self, path: str, segment: Optional[str] = None) -> None:
        self.path = path
        self.segment = segment
        super().__init__(path)

    def __str__(self) -> str:
        if self.segment is None or self.segment == self.path:
            return f"Cannot resolve '{self.path}'"
        return f"Cannot resolve '{self.path}': no '{self.segment}'"


class PatternMismatchError(WidgetKitError, ValueError):
    """A bracketed token looked like a sub-part shorthand but was malformed."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"Malformed sub-part token: {token!r}")


class TemplateSyntaxError(WidgetKitError, ValueError):
    """Template source could not be parsed."""


class TemplateNotFound(WidgetKitError, KeyError):
    """No target with the requested name is registered on the engine."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown template target: {self.name}"
