"""Tool catalog: name lookup and model-facing metadata."""

import logging
from typing import Any, Dict, List, Optional

from .base import BaseTool
from ..models.tool_models import ToolCategory

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Name-keyed catalog of the assistant's tools.

    PATTERN: Filled once at startup, then frozen for the process lifetime
    CRITICAL: Only metadata leaves the registry; executors are looked up by name
    GOTCHA: Registration order is the order tools are offered to the model
    """

    def __init__(self):
        self._tools: Dict[str, BaseTool] = {}
        self._frozen = False

    def register_tool(self, tool: BaseTool) -> None:
        """
        Add a tool to the catalog.

        Args:
            tool: Tool instance

        Raises:
            ValueError: If another tool already uses the name
            RuntimeError: If the catalog is frozen
        """
        if self._frozen:
            raise RuntimeError(f"Cannot register '{tool.name}': tool registry is frozen")
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        self._tools[tool.name] = tool
        logger.debug(f"Registered tool {tool.name} ({tool.category.value})")

    def freeze(self) -> None:
        self._frozen = True
        logger.info(f"Tool catalog ready: {', '.join(self._tools)}")

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def get_tool(self, tool_name: str) -> Optional[BaseTool]:
        return self._tools.get(tool_name)

    def has_tool(self, tool_name: str) -> bool:
        return tool_name in self._tools

    def get_tool_count(self) -> int:
        return len(self._tools)

    def list_tools(self, category: Optional[ToolCategory] = None) -> List[BaseTool]:
        """
        Registered tools in registration order.

        Args:
            category: Only tools of this category

        Returns:
            List of tools
        """
        return [t for t in self._tools.values() if category is None or t.category == category]

    def list_tool_names(self, category: Optional[ToolCategory] = None) -> List[str]:
        return [tool.name for tool in self.list_tools(category)]

    def list_tool_metadata(self, category: Optional[ToolCategory] = None) -> List[Dict[str, Any]]:
        """
        Metadata the model sees: name, description, category and argument schema.

        Args:
            category: Only tools of this category

        Returns:
            Plain JSON-ready dictionaries, no executors
        """
        return [tool.get_schema().to_metadata() for tool in self.list_tools(category)]
