# ==============================
# Config Schemas (Pydantic)
# ==============================
"""
Pydantic settings models for widgetkit.

Notes:
- No env reads here. No file IO here. Pure types + defaults.
- loader.py builds a single Settings object with precedence merging.

Precedence (implemented in loader.py):
env > .env > configs/*.yaml > defaults
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ==============================
# Templating Settings
# ==============================


class TemplatingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    create_default_engine: bool = Field(
        default=True,
        description="Create an engine on first use when a widget class has none bound.",
    )
    default_filter: Optional[str] = Field(
        default=None,
        description="Filter applied to every placeholder not ending in `raw` (e.g. 'html').",
    )


# ==============================
# Logging Settings
# ==============================


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: str = Field(default="INFO")
    console: bool = Field(default=True)


# ==============================
# Top-Level Settings
# ==============================


class Settings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    templating: TemplatingConfig = Field(default_factory=TemplatingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
