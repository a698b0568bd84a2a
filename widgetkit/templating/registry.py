# ==============================
# Engine Registry
# ==============================
"""
One template engine per widget class.

Design:
- Registry stores class key ("module.QualName") -> ExtendedEngine
- Engines are created lazily on first lookup, unless create_default is off
- Every engine passing through the registry is wrapped once and extended once,
  however many classes share it
- A wrapper is dropped once no class is bound to its engine; binding that
  engine again re-installs the same filters over themselves

Initialization order: the module singleton is created by the first
get_registry() call. configure_registry(settings) replaces it; call it at
startup, before any widget renders.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from widgetkit.config.schema import Settings
from widgetkit.contracts.errors import ConfigurationError
from widgetkit.templating.engine import TemplateEngine
from widgetkit.templating.extension import EngineLike, ExtendedEngine, Filter


logger = logging.getLogger(__name__)

EngineFactory = Callable[[], EngineLike]


def class_key(owner: Any) -> str:
    cls = owner if isinstance(owner, type) else type(owner)
    return f"{cls.__module__}.{cls.__qualname__}"


class EngineRegistry:
    def __init__(
        self,
        *,
        engine_factory: Optional[EngineFactory] = TemplateEngine,
        create_default: bool = True,
    ) -> None:
        self._engine_factory = engine_factory
        self._create_default = create_default and engine_factory is not None
        self._bindings: Dict[str, ExtendedEngine] = {}
        # id(engine) -> wrapper; the wrapper holds the engine so ids stay unique
        self._wrappers: Dict[int, ExtendedEngine] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "EngineRegistry":
        return cls(
            engine_factory=lambda: TemplateEngine.from_settings(settings),
            create_default=settings.templating.create_default_engine,
        )

    def wrap(self, engine: EngineLike) -> ExtendedEngine:
        wrapper = self._wrappers.get(id(engine))
        if wrapper is None:
            wrapper = ExtendedEngine(engine)
            self._wrappers[id(engine)] = wrapper
        return wrapper

    def get_engine(self, owner: Any, filters: Optional[Mapping[str, Filter]] = None) -> EngineLike:
        key = class_key(owner)
        bound = self._bindings.get(key)
        if bound is None:
            bound = self._bind(key, self._create_engine(key), filters)
        return bound.engine

    def set_engine(
        self,
        owner: Any,
        engine: EngineLike,
        filters: Optional[Mapping[str, Filter]] = None,
    ) -> ExtendedEngine:
        if engine is None:
            raise ConfigurationError(f"Cannot bind an empty template engine to {class_key(owner)}")
        return self._bind(class_key(owner), engine, filters)

    def is_bound(self, owner: Any) -> bool:
        return class_key(owner) in self._bindings

    def unbind(self, owner: Any) -> Optional[EngineLike]:
        removed = self._bindings.pop(class_key(owner), None)
        if removed is None:
            return None
        self._release(removed)
        return removed.engine

    def bound_classes(self) -> List[str]:
        return sorted(self._bindings)

    def _bind(self, key: str, engine: EngineLike, filters: Optional[Mapping[str, Filter]] = None) -> ExtendedEngine:
        wrapper = self.wrap(engine)
        if not wrapper.extended:
            wrapper.install_filters(filters)
        previous = self._bindings.get(key)
        self._bindings[key] = wrapper
        if previous is not None and previous is not wrapper:
            self._release(previous)
        logger.debug("bound template engine to %s", key, extra={"widget": key})
        return wrapper

    def _release(self, wrapper: ExtendedEngine) -> None:
        if any(bound is wrapper for bound in self._bindings.values()):
            return
        if self._wrappers.get(id(wrapper.engine)) is wrapper:
            del self._wrappers[id(wrapper.engine)]

    def _create_engine(self, key: str) -> EngineLike:
        if not self._create_default or self._engine_factory is None:
            raise ConfigurationError(f"No template engine bound to {key}")
        try:
            engine = self._engine_factory()
        except Exception as exc:
            raise ConfigurationError(f"Could not create a template engine for {key}: {exc}") from exc
        if engine is None:
            raise ConfigurationError(f"No template engine bound to {key}")
        logger.debug("created default template engine for %s", key, extra={"widget": key})
        return engine


# ==============================
# Module Singleton
# ==============================

_registry: Optional[EngineRegistry] = None


def get_registry() -> EngineRegistry:
    global _registry
    if _registry is None:
        _registry = EngineRegistry()
    return _registry


def configure_registry(settings: Settings) -> EngineRegistry:
    global _registry
    _registry = EngineRegistry.from_settings(settings)
    return _registry


def reset_registry() -> None:
    global _registry
    _registry = None
