# ==============================
# Bootstrap Tests
# ==============================
from __future__ import annotations

import logging
import textwrap

import pytest

from tests.fakes import FakeWidget
from widgetkit.bootstrap import configure
from widgetkit.config.schema import Settings, TemplatingConfig
from widgetkit.contracts.errors import ConfigurationError
from widgetkit.logging.logger import JsonLineFormatter
from widgetkit.templating.helper import TemplateHelper
from widgetkit.templating.registry import get_registry


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield root
    root.handlers = saved_handlers
    root.setLevel(saved_level)


def test_configure_with_explicit_settings(restore_root_logger) -> None:
    settings = Settings(templating=TemplatingConfig(default_filter="html"))
    assert configure(settings) is settings
    assert isinstance(restore_root_logger.handlers[0].formatter, JsonLineFormatter)
    assert get_registry().get_engine(FakeWidget()).default_filter == "html"


def test_configure_loads_from_files_and_env(tmp_path, restore_root_logger) -> None:
    configs = tmp_path / "configs"
    configs.mkdir()
    (configs / "logging.yaml").write_text(textwrap.dedent("""\
    level: WARNING
    """), encoding="utf-8")

    settings = configure(
        repo_root=str(tmp_path),
        env={"WIDGETKIT__TEMPLATING__CREATE_DEFAULT_ENGINE": "false"},
    )

    assert settings.logging.level == "WARNING"
    assert restore_root_logger.level == logging.WARNING
    with pytest.raises(ConfigurationError):
        TemplateHelper(FakeWidget()).render("x")
