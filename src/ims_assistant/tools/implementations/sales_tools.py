"""Sales tools: analytics, recent transactions, rankings and customer history."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .common import RepositoryTool, iso, money, since_filter, summarize_by_product
from ...models.inventory_models import FilterOp, QueryFilter
from ...models.tool_models import ToolCategory, ToolParameter, ToolSchema
from ...repository.base import InventoryRepository

logger = logging.getLogger(__name__)

MAX_DAYS = 3650
ANALYTICS_TOP_PRODUCTS = 10
RANGE_TOP_PRODUCTS = 20
RANGE_MAX_DAYS = 92
CUSTOMER_RECENT_SALES = 10
DATE_FORMAT = "%Y-%m-%d"


def _days_parameter(default: int) -> ToolParameter:
    return ToolParameter(
        name="days",
        type="integer",
        description=f"Number of days to look back (default: {default})",
        default=default,
        minimum=1,
        maximum=MAX_DAYS,
    )


def _parse_date(value: str) -> Optional[datetime]:
    try:
        return datetime.strptime(value, DATE_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def _totals(lines) -> Dict[str, Any]:
    total_sales = len(lines)
    total_revenue = sum(line.sale.total_amount for line in lines)
    return {
        "totalSales": total_sales,
        "totalRevenue": money(total_revenue),
        "totalProfit": money(sum(line.profit for line in lines)),
        "totalQuantity": sum(line.sale.quantity for line in lines),
        "averageOrderValue": money(total_revenue / total_sales) if total_sales else 0,
    }


class GetSalesAnalyticsTool(RepositoryTool):
    """Revenue and profit over a trailing window, optionally per product."""

    def __init__(self, repository: InventoryRepository):
        super().__init__(
            name="get_sales_analytics",
            category=ToolCategory.ANALYTICS,
            repository=repository,
        )

    def _build_schema(self) -> ToolSchema:
        """Build tool schema."""
        return ToolSchema(
            name=self.name,
            description=(
                "Get sales analytics for a specific time period. "
                "Can group by product to see top sellers."
            ),
            category=self.category,
            parameters=[
                _days_parameter(30),
                ToolParameter(
                    name="groupBy",
                    type="string",
                    description="Group results by product to see top sellers",
                    enum=["product"],
                ),
            ],
            returns="Sales totals with an optional top-10 product breakdown",
        )

    async def execute(self, days: int = 30, group_by: Optional[str] = None) -> Dict[str, Any]:
        lines = await self._sale_lines([since_filter(days)])
        totals = _totals(lines)

        top_products = None
        if group_by == "product":
            top_products = summarize_by_product(lines)[:ANALYTICS_TOP_PRODUCTS]

        return {
            "period": f"Last {days} days",
            "totalSales": totals["totalSales"],
            "totalRevenue": totals["totalRevenue"],
            "totalProfit": totals["totalProfit"],
            "averageOrderValue": totals["averageOrderValue"],
            "topProducts": top_products,
        }


class GetRecentSalesTool(RepositoryTool):
    """Latest sales, optionally for one product code."""

    def __init__(self, repository: InventoryRepository):
        super().__init__(
            name="get_recent_sales",
            category=ToolCategory.SALES,
            repository=repository,
        )

    def _build_schema(self) -> ToolSchema:
        """Build tool schema."""
        return ToolSchema(
            name=self.name,
            description=(
                "Get recent sales transactions. "
                "Can filter by product code and limit results (max 50)."
            ),
            category=self.category,
            parameters=[
                ToolParameter(
                    name="limit",
                    type="integer",
                    description="Number of sales to return (default: 10, max: 50)",
                    default=10,
                    minimum=1,
                    maximum=50,
                ),
                ToolParameter(
                    name="productCode",
                    type="string",
                    description="Filter by product code",
                ),
            ],
            returns="Most recent sales, newest first",
        )

    async def execute(self, limit: int = 10, product_code: Optional[str] = None) -> Dict[str, Any]:
        lines = await self._sale_lines(newest_first=True)
        if product_code:
            lines = [line for line in lines if line.product.code == product_code]

        sales = [
            {
                "id": line.sale.id,
                "productName": line.product.name,
                "productCode": line.product.code,
                "size": line.variant.size,
                "color": line.variant.color,
                "quantity": line.sale.quantity,
                "sellingPrice": line.sale.selling_price,
                "totalAmount": line.sale.total_amount,
                "customerName": line.sale.customer_name or "N/A",
                "saleDate": iso(line.sale.sale_date),
                "notes": line.sale.notes,
            }
            for line in lines[:limit]
        ]

        return {"count": len(sales), "sales": sales}


class GetSalesByDateRangeTool(RepositoryTool):
    """
    Sales totals between two calendar dates.

    CRITICAL: endDate is inclusive (the whole UTC day counts)
    GOTCHA: Day breakdown is capped; ``truncated`` tells the model
    """

    def __init__(self, repository: InventoryRepository):
        super().__init__(
            name="get_sales_by_date_range",
            category=ToolCategory.ANALYTICS,
            repository=repository,
        )

    def _build_schema(self) -> ToolSchema:
        """Build tool schema."""
        return ToolSchema(
            name=self.name,
            description=(
                "Get sales data for a specific date range. Can group by product or day. "
                "Dates should be in YYYY-MM-DD format."
            ),
            category=self.category,
            parameters=[
                ToolParameter(
                    name="startDate",
                    type="string",
                    description="Start date in YYYY-MM-DD format",
                    required=True,
                ),
                ToolParameter(
                    name="endDate",
                    type="string",
                    description="End date in YYYY-MM-DD format",
                    required=True,
                ),
                ToolParameter(
                    name="groupBy",
                    type="string",
                    description="Group results by product or day",
                    enum=["product", "day"],
                ),
            ],
            returns="Sales totals with an optional product or daily breakdown",
        )

    async def execute(
        self,
        start_date: str,
        end_date: str,
        group_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        start = _parse_date(start_date)
        end = _parse_date(end_date)
        if start is None or end is None:
            return {"error": "Invalid date format. Use YYYY-MM-DD format."}
        if start > end:
            return {"error": "startDate must not be after endDate"}

        lines = await self._sale_lines(
            [
                QueryFilter(field="sale_date", op=FilterOp.GTE, value=start),
                QueryFilter(field="sale_date", op=FilterOp.LT, value=end + timedelta(days=1)),
            ]
        )

        breakdown: Optional[List[Dict[str, Any]]] = None
        truncated = False

        if group_by == "product":
            ranked = summarize_by_product(lines)
            truncated = len(ranked) > RANGE_TOP_PRODUCTS
            breakdown = ranked[:RANGE_TOP_PRODUCTS]

        elif group_by == "day":
            daily: Dict[str, Dict[str, Any]] = {}
            for line in lines:
                key = line.sale.sale_date.astimezone(timezone.utc).strftime(DATE_FORMAT)
                row = daily.setdefault(
                    key,
                    {"date": key, "totalSales": 0, "totalRevenue": 0.0, "totalQuantity": 0},
                )
                row["totalSales"] += 1
                row["totalRevenue"] += line.sale.total_amount
                row["totalQuantity"] += line.sale.quantity

            days = sorted(daily.values(), key=lambda r: r["date"])
            truncated = len(days) > RANGE_MAX_DAYS
            breakdown = days[:RANGE_MAX_DAYS]
            for row in breakdown:
                row["totalRevenue"] = money(row["totalRevenue"])

        result = {"period": f"{start_date} to {end_date}", **_totals(lines), "breakdown": breakdown}
        if group_by:
            result["truncated"] = truncated
        return result


class GetTopSellingProductsTool(RepositoryTool):
    """Products ranked by revenue over a trailing window."""

    def __init__(self, repository: InventoryRepository):
        super().__init__(
            name="get_top_selling_products",
            category=ToolCategory.ANALYTICS,
            repository=repository,
        )

    def _build_schema(self) -> ToolSchema:
        """Build tool schema."""
        return ToolSchema(
            name=self.name,
            description=(
                "Get top selling products ranked by revenue. "
                "Returns detailed sales metrics for each product."
            ),
            category=self.category,
            parameters=[
                _days_parameter(30),
                ToolParameter(
                    name="limit",
                    type="integer",
                    description="Number of products to return (default: 10, max: 20)",
                    default=10,
                    minimum=1,
                    maximum=20,
                ),
            ],
            returns="Products ranked by revenue with quantity and profit",
        )

    async def execute(self, days: int = 30, limit: int = 10) -> Dict[str, Any]:
        lines = await self._sale_lines([since_filter(days)])
        products = summarize_by_product(lines, with_profit=True)[:limit]

        return {
            "period": f"Last {days} days",
            "count": len(products),
            "products": products,
        }


class GetSalesByCustomerTool(RepositoryTool):
    """Purchase history for customers matching a partial name."""

    def __init__(self, repository: InventoryRepository):
        super().__init__(
            name="get_sales_by_customer",
            category=ToolCategory.SALES,
            repository=repository,
        )

    def _build_schema(self) -> ToolSchema:
        """Build tool schema."""
        return ToolSchema(
            name=self.name,
            description=(
                "Get all sales transactions for a specific customer. "
                "Provides customer purchase history and metrics."
            ),
            category=self.category,
            parameters=[
                ToolParameter(
                    name="customerName",
                    type="string",
                    description="Customer name (partial match supported)",
                    required=True,
                    min_length=1,
                ),
                _days_parameter(365),
            ],
            returns="Customer totals with the 10 latest sales",
        )

    async def execute(self, customer_name: str, days: int = 365) -> Dict[str, Any]:
        lines = await self._sale_lines(
            [
                QueryFilter(field="customer_name", op=FilterOp.CONTAINS, value=customer_name),
                since_filter(days),
            ],
            newest_first=True,
        )

        if not lines:
            return {"error": f"No sales found for customer: {customer_name}"}

        totals = _totals(lines)
        return {
            "customerName": lines[0].sale.customer_name,
            "period": f"Last {days} days",
            "totalSales": totals["totalSales"],
            "totalRevenue": totals["totalRevenue"],
            "totalQuantity": totals["totalQuantity"],
            "averageOrderValue": totals["averageOrderValue"],
            "sales": [
                {
                    "id": line.sale.id,
                    "productName": line.product.name,
                    "productCode": line.product.code,
                    "size": line.variant.size,
                    "color": line.variant.color,
                    "quantity": line.sale.quantity,
                    "totalAmount": line.sale.total_amount,
                    "saleDate": iso(line.sale.sale_date),
                    "notes": line.sale.notes,
                }
                for line in lines[:CUSTOMER_RECENT_SALES]
            ],
        }
