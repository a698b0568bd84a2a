# ==============================
# Widget Template Helper
# ==============================
"""
Render entry points for one widget instance.

Usage:

    engine = TemplateEngine()
    engine.parse(MY_WIDGET_TEMPLATES)

    class MyWidget:
        def __init__(self) -> None:
            self.helper = TemplateHelper(self)
            self.helper.set_template_engine(engine)

        def build(self) -> str:
            return self.helper.render_template("content", {"title": self.title})

Engines are bound per widget class, so every instance of MyWidget shares one.
Inside templates:
- `${#main}` / `${main | id(${instance})}`           -> generated id
- `${.main}` / `${main | class(${instance})}`        -> generated class
- `${<div#body>}` / `${body | part('div', ${instance})}` -> sub-part HTML

Data must be flat to use these; `data` keys named `instance` are unreachable.
Widget-specific filters go on a helper subclass:

    class ChartHelper(TemplateHelper):
        filters = {"percent": lambda value: f"{value:.0%}"}

They are installed only when an engine is first extended, so an engine
already bound elsewhere keeps the filters it got then.
If you need none of the widget shorthands, `engine.render(target, data)`
skips the resolution layer entirely.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Dict, Optional

from widgetkit.contracts.widget import WidgetLike
from widgetkit.logging.logger import LogContext, with_context
from widgetkit.templating.extension import EngineLike, ExtendedEngine, Filter
from widgetkit.templating.registry import EngineRegistry, class_key, get_registry
from widgetkit.templating.resolver import ResolutionContext


logger = logging.getLogger(__name__)


class TemplateHelper:
    # installed next to id/class/part the first time an engine is extended
    filters: ClassVar[Dict[str, Filter]] = {}

    def __init__(self, widget: WidgetLike, *, registry: Optional[EngineRegistry] = None) -> None:
        self.widget = widget
        self._registry = registry

    @property
    def registry(self) -> EngineRegistry:
        return self._registry if self._registry is not None else get_registry()

    def get_template_engine(self) -> EngineLike:
        return self.registry.get_engine(self.widget, self.filters)

    def set_template_engine(self, engine: EngineLike) -> ExtendedEngine:
        return self.registry.set_engine(self.widget, engine, self.filters)

    def render_template(self, target: str, data: Optional[Any] = None) -> str:
        """Render the named target of the bound engine."""
        engine = self.get_template_engine()
        self._log(target).debug("rendering template target")
        return engine.render(target, ResolutionContext({} if data is None else data, self.widget))

    def render(self, content: str, data: Optional[Any] = None) -> str:
        """Compile `content` and render it once."""
        engine = self.get_template_engine()
        self._log().debug("rendering inline template")
        renderer = engine.compile(content)
        return renderer(ResolutionContext({} if data is None else data, self.widget))

    def _log(self, target: Optional[str] = None) -> logging.LoggerAdapter:
        return with_context(logger, LogContext(widget=class_key(self.widget), target=target))
