"""The assistant's tool catalog."""

import logging
from typing import Optional

from .implementations import (
    GetInventorySummaryTool,
    GetLowStockProductsTool,
    GetProductInfoTool,
    GetRecentSalesTool,
    GetSalesAnalyticsTool,
    GetSalesByCustomerTool,
    GetSalesByDateRangeTool,
    GetTopSellingProductsTool,
    SearchProductsTool,
)
from .registry import ToolRegistry
from ..repository.base import InventoryRepository

logger = logging.getLogger(__name__)

TOOL_CLASSES = [
    GetLowStockProductsTool,
    GetProductInfoTool,
    GetSalesAnalyticsTool,
    GetInventorySummaryTool,
    SearchProductsTool,
    GetRecentSalesTool,
    GetSalesByDateRangeTool,
    GetTopSellingProductsTool,
    GetSalesByCustomerTool,
]


def build_tool_registry(
    repository: InventoryRepository,
    registry: Optional[ToolRegistry] = None,
) -> ToolRegistry:
    """
    Register the nine read-only tools and freeze the registry.

    Args:
        repository: Inventory read model the tools query
        registry: Registry to populate (default: a new one)

    Returns:
        Frozen registry
    """
    registry = registry or ToolRegistry()

    for tool_class in TOOL_CLASSES:
        registry.register_tool(tool_class(repository))

    registry.freeze()
    return registry
