# ==============================
# Testing Fixtures
# ==============================
from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from tests.fakes import FakeWidget
from widgetkit.templating.engine import TemplateEngine
from widgetkit.templating.registry import EngineRegistry, reset_registry


@pytest.fixture
def widget() -> FakeWidget:
    return FakeWidget()


@pytest.fixture
def registry() -> EngineRegistry:
    """Isolated registry so bindings never leak between tests."""
    return EngineRegistry()


@pytest.fixture
def engine() -> TemplateEngine:
    return TemplateEngine()


@pytest.fixture(autouse=True)
def _clean_global_registry() -> Iterator[None]:
    reset_registry()
    yield
    reset_registry()
