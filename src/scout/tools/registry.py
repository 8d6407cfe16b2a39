"""Tool registry: name → definition, built once at startup."""

from __future__ import annotations

import logging
from typing import Any

from scout.tools.base import ToolDefinition

logger = logging.getLogger(__name__)


class ToolRegistry:
    """The fixed capability set advertised to the model.

    Registering a name twice is a configuration error and raises ValueError;
    the first registration is kept.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}

    def register(self, definition: ToolDefinition) -> None:
        if definition.name in self._tools:
            raise ValueError(f"Tool '{definition.name}' is already registered")
        self._tools[definition.name] = definition
        logger.debug("Registered tool: %s", definition.name)

    def resolve(self, name: str) -> ToolDefinition | None:
        """Look up a tool. ``None`` means the model asked for something we don't have."""
        return self._tools.get(name)

    def schema_manifest(self) -> list[dict[str, Any]]:
        """Descriptors for every tool, in registration order."""
        return [tool.schema() for tool in self._tools.values()]

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools
