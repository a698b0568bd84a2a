# ==============================
# Variable Resolution
# ==============================
"""
Answers template variable lookups on behalf of a widget.

A ResolutionContext is created per render. The engine calls `get(name)` once
per placeholder, and the first matching rule wins:

1. `instance`        -> the widget itself (shadows any data key of that name)
2. `#part`           -> widget.get_id(part)
3. `.part`           -> widget.get_part_class_name(part)
4. `<node#part>`     -> widget.get_part_html(part, node)
5. data has `get`    -> data.get(name)
6. otherwise         -> dotted walk through data ("user.name")

Shorthands only make sense when data is flat; dotted access goes through
rule 6 only.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple

from widgetkit.contracts.errors import PathLookupError, PatternMismatchError
from widgetkit.contracts.widget import WidgetLike


__all__ = [
    "INSTANCE_NAME",
    "NestedData",
    "ResolutionContext",
    "StructuredData",
    "TemplateData",
    "class_filter",
    "id_filter",
    "match_part_token",
    "part_filter",
    "resolve",
]

logger = logging.getLogger(__name__)

INSTANCE_NAME = "instance"

PART_RE = re.compile(r"<([\w-]+)#([\w-]+)>")
_PART_SHAPE_RE = re.compile(r"^\s*<[^<>]*#[^<>]*>\s*$")

_MISSING = object()


# ==============================
# Widget Filters
# ==============================


def id_filter(part: str, instance: WidgetLike) -> str:
    return instance.get_id(part)


def class_filter(part: str, instance: WidgetLike) -> str:
    return instance.get_part_class_name(part)


def part_filter(part: str, node_name: str, instance: WidgetLike) -> str:
    return instance.get_part_html(part, node_name)


def match_part_token(name: str, *, strict: bool = False) -> Optional[Tuple[str, str]]:
    """
    Return (node_name, part) for a `<node#part>` token, else None.

    A token shaped like `<...#...>` whose segments use characters outside
    `[\\w-]` is not a shorthand. With strict=True it raises
    PatternMismatchError instead of returning None.
    """
    m = PART_RE.search(name)
    if m:
        return m.group(1), m.group(2)
    if strict and _PART_SHAPE_RE.match(name):
        raise PatternMismatchError(name)
    return None


# ==============================
# Data Variants
# ==============================


class TemplateData(ABC):
    """Caller data seen through a single lookup operation."""

    @abstractmethod
    def lookup(self, name: str) -> Any:
        ...

    @staticmethod
    def of(data: Any) -> "TemplateData":
        """
        Pick the variant once, up front.

        Mappings always walk paths even though dict has its own `get`;
        any other object with a callable `get` is treated as an accessor.
        """
        if isinstance(data, TemplateData):
            return data
        if not isinstance(data, Mapping) and callable(getattr(data, "get", None)):
            return StructuredData(data)
        return NestedData(data)


class StructuredData(TemplateData):
    def __init__(self, source: Any) -> None:
        self._get: Callable[[str], Any] = source.get

    def lookup(self, name: str) -> Any:
        return self._get(name)


class NestedData(TemplateData):
    def __init__(self, source: Any) -> None:
        self._source = source

    def lookup(self, name: str) -> Any:
        current = self._source
        for segment in name.split("."):
            current = _step(current, segment)
            if current is _MISSING:
                logger.debug("template path lookup failed: %s (at %s)", name, segment)
                raise PathLookupError(name, segment)
        return current


def _step(current: Any, segment: str) -> Any:
    if isinstance(current, Mapping):
        return current[segment] if segment in current else _MISSING
    if isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
        try:
            idx = int(segment)
        except ValueError:
            return _MISSING
        if idx < 0 or idx >= len(current):
            return _MISSING
        return current[idx]
    if current is None or not segment:
        return _MISSING
    return getattr(current, segment, _MISSING)


# ==============================
# Resolution Context
# ==============================


class ResolutionContext:
    """Per-render pairing of caller data and the owning widget."""

    def __init__(self, data: Any, instance: WidgetLike) -> None:
        self.data = TemplateData.of({} if data is None else data)
        self.instance = instance

    def get(self, name: str) -> Any:
        if name == INSTANCE_NAME:
            return self.instance
        if name.startswith("#"):
            return id_filter(name[1:], self.instance)
        if name.startswith("."):
            return class_filter(name[1:], self.instance)
        part = match_part_token(name)
        if part is not None:
            node_name, part_name = part
            return part_filter(part_name, node_name, self.instance)
        return self.data.lookup(name)


def resolve(name: str, data: Any, instance: WidgetLike) -> Any:
    return ResolutionContext(data, instance).get(name)
