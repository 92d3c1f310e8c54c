"""Tools served by the jokes MCP server."""

from __future__ import annotations

from ..tools import ToolDescriptor, ToolHandler, ToolRegistry
from .jokes import (
    CHUCK_CATEGORIES,
    CHUCK_JOKE,
    DAD_JOKE,
    YO_MAMA_JOKE,
    get_chuck_categories,
    get_chuck_joke,
    get_dad_joke,
    get_yo_mama_joke,
)
from .weather import WEATHER, get_weather

DEFAULT_TOOLS: tuple[tuple[ToolDescriptor, ToolHandler], ...] = (
    (CHUCK_JOKE, get_chuck_joke),
    (CHUCK_CATEGORIES, get_chuck_categories),
    (DAD_JOKE, get_dad_joke),
    (YO_MAMA_JOKE, get_yo_mama_joke),
    (WEATHER, get_weather),
)


def build_registry() -> ToolRegistry:
    """Create a registry holding every built-in tool."""
    registry = ToolRegistry()
    for descriptor, handler in DEFAULT_TOOLS:
        registry.register(descriptor, handler)
    return registry


__all__ = ["DEFAULT_TOOLS", "build_registry"]
