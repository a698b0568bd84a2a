# ==============================
# Library Bootstrap
# ==============================
"""
One call wiring settings, logging and the engine registry.

Call once at startup, before any widget renders:

    settings = configure()                    # reads configs/, .env, env
    settings = configure(Settings(...))       # or pass settings explicitly
"""

from __future__ import annotations

from typing import Dict, Optional

from widgetkit.config.loader import load_settings
from widgetkit.config.schema import Settings
from widgetkit.logging.logger import bootstrap_logger
from widgetkit.templating.registry import configure_registry


def configure(
    settings: Optional[Settings] = None,
    *,
    repo_root: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
) -> Settings:
    if settings is None:
        settings = load_settings(repo_root=repo_root, env=env)
    logger = bootstrap_logger(settings)
    configure_registry(settings)
    logger.debug(
        "widgetkit configured (default engine: %s)",
        "on" if settings.templating.create_default_engine else "off",
    )
    return settings
