"""Tool implementations for the inventory assistant."""

from .inventory_tools import (
    GetLowStockProductsTool,
    GetProductInfoTool,
    GetInventorySummaryTool,
    SearchProductsTool,
)
from .sales_tools import (
    GetSalesAnalyticsTool,
    GetRecentSalesTool,
    GetSalesByDateRangeTool,
    GetTopSellingProductsTool,
    GetSalesByCustomerTool,
)

__all__ = [
    # Inventory tools
    "GetLowStockProductsTool",
    "GetProductInfoTool",
    "GetInventorySummaryTool",
    "SearchProductsTool",
    # Sales tools
    "GetSalesAnalyticsTool",
    "GetRecentSalesTool",
    "GetSalesByDateRangeTool",
    "GetTopSellingProductsTool",
    "GetSalesByCustomerTool",
]
