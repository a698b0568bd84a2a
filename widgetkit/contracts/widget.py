# ==============================
# Widget Contract
# ==============================
"""
Capabilities a widget instance must expose to be rendered through templates.

The widget framework owns these objects; widgetkit only calls into them.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class WidgetLike(Protocol):
    def get_id(self, part: str) -> str:
        """DOM id generated for the named part."""
        ...

    def get_part_class_name(self, part: str) -> str:
        """CSS class generated for the named part."""
        ...

    def get_part_html(self, part: str, node_name: str) -> str:
        """Markup of the named sub-part, wrapped in a `node_name` element."""
        ...
