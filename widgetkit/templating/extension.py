# ==============================
# Engine Extension
# ==============================
"""
Pairs an engine with its extension status.

The widget filters are installed through ExtendedEngine.install_filters(),
which is a no-op after the first call. The status lives on the wrapper, never
on the engine object itself.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from widgetkit.templating.resolver import class_filter, id_filter, part_filter


logger = logging.getLogger(__name__)


Filter = Callable[..., Any]

WIDGET_FILTERS: Dict[str, Filter] = {
    "id": id_filter,
    "class": class_filter,
    "part": part_filter,
}


class EngineLike(Protocol):
    def render(self, name: str, context: Any) -> str:
        ...

    def compile(self, content: str) -> Callable[[Any], str]:
        ...

    def add_filter(self, name: str, fn: Filter) -> None:
        ...


class ExtendedEngine:
    """An engine plus whether the widget filters are installed on it."""

    __slots__ = ("engine", "_extended")

    def __init__(self, engine: EngineLike, *, extended: bool = False) -> None:
        self.engine = engine
        self._extended = extended

    @property
    def extended(self) -> bool:
        return self._extended

    def install_filters(self, extra: Optional[Mapping[str, Filter]] = None) -> bool:
        """
        Register id/class/part, plus any `extra` filters, once.
        Returns True if this call installed them.
        """
        if self._extended:
            return False
        for name, fn in {**WIDGET_FILTERS, **(extra or {})}.items():
            self.engine.add_filter(name, fn)
        self._extended = True
        logger.debug(
            "installed widget filters on %s",
            type(self.engine).__name__,
            extra={"engine": type(self.engine).__name__},
        )
        return True

    def __repr__(self) -> str:
        return f"ExtendedEngine({self.engine!r}, extended={self._extended})"
