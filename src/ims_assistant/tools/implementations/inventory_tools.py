"""Inventory tools: stock levels, product lookup and catalog search."""

import logging
from typing import Any, Dict, List, Optional

from .common import RepositoryTool
from ...models.inventory_models import FilterOp, QueryFilter
from ...models.tool_models import ToolCategory, ToolParameter, ToolSchema
from ...repository.base import InventoryRepository

logger = logging.getLogger(__name__)

MAX_LOW_STOCK_ROWS = 50
MAX_PRODUCT_MATCHES = 10
MAX_SEARCH_RESULTS = 20


def _catalog_filters(category: Optional[str], brand: Optional[str]) -> List[QueryFilter]:
    filters = []
    if category:
        filters.append(QueryFilter(field="category", op=FilterOp.EQ, value=category))
    if brand:
        filters.append(QueryFilter(field="brand", op=FilterOp.EQ, value=brand))
    return filters


class GetLowStockProductsTool(RepositoryTool):
    """
    List variants at or below their minimum stock level.

    GOTCHA: Out-of-stock variants are included unless minStockOnly is set
    """

    def __init__(self, repository: InventoryRepository):
        super().__init__(
            name="get_low_stock_products",
            category=ToolCategory.INVENTORY,
            repository=repository,
        )

    def _build_schema(self) -> ToolSchema:
        """Build tool schema."""
        return ToolSchema(
            name=self.name,
            description=(
                "Get products that are running low on stock or out of stock. "
                "Set minStockOnly to true to exclude out-of-stock items."
            ),
            category=self.category,
            parameters=[
                ToolParameter(
                    name="minStockOnly",
                    type="boolean",
                    description="If true, only return low stock items (not out of stock)",
                ),
            ],
            returns="Low-stock variants, lowest stock first",
        )

    async def execute(self, min_stock_only: bool = False) -> Dict[str, Any]:
        products = {p.id: p for p in await self._products()}
        variants_by_product = await self._variants_by_product()

        rows = []
        for product_id, variants in variants_by_product.items():
            product = products.get(product_id)
            if product is None:
                continue
            for variant in variants:
                if not variant.is_low_stock:
                    continue
                if min_stock_only and variant.stock_quantity == 0:
                    continue
                rows.append(
                    {
                        "productName": product.name,
                        "productCode": product.code,
                        "size": variant.size,
                        "color": variant.color,
                        "currentStock": variant.stock_quantity,
                        "minStock": variant.min_stock_quantity,
                        "status": "Out of Stock" if variant.stock_quantity == 0 else "Low Stock",
                    }
                )

        rows.sort(key=lambda r: (r["currentStock"], r["productName"]))

        return {
            "count": min(len(rows), MAX_LOW_STOCK_ROWS),
            "totalMatches": len(rows),
            "products": rows[:MAX_LOW_STOCK_ROWS],
        }


class GetProductInfoTool(RepositoryTool):
    """
    Look up products by exact code or partial name.

    PATTERN: Code wins over name when both are given
    """

    def __init__(self, repository: InventoryRepository):
        super().__init__(
            name="get_product_info",
            category=ToolCategory.INVENTORY,
            repository=repository,
        )

    def _build_schema(self) -> ToolSchema:
        """Build tool schema."""
        return ToolSchema(
            name=self.name,
            description="Get detailed information about a specific product by code or name.",
            category=self.category,
            parameters=[
                ToolParameter(
                    name="productCode",
                    type="string",
                    description="The unique product code",
                    min_length=1,
                ),
                ToolParameter(
                    name="productName",
                    type="string",
                    description="The product name (partial match)",
                    min_length=1,
                ),
            ],
            returns="Matching products with their variants",
        )

    async def execute(
        self,
        product_code: Optional[str] = None,
        product_name: Optional[str] = None,
    ) -> Any:
        if product_code:
            condition = QueryFilter(field="code", op=FilterOp.EQ, value=product_code)
        elif product_name:
            condition = QueryFilter(field="name", op=FilterOp.CONTAINS, value=product_name)
        else:
            return {"error": "Please provide either productCode or productName"}

        products = (await self._products([condition]))[:MAX_PRODUCT_MATCHES]
        if not products:
            return {"error": "Product not found"}

        variants_by_product = await self._variants_by_product()

        result = []
        for product in products:
            variants = variants_by_product.get(product.id, [])
            result.append(
                {
                    "code": product.code,
                    "name": product.name,
                    "category": product.category,
                    "brand": product.brand,
                    "totalVariants": len(variants),
                    "totalStock": sum(v.stock_quantity for v in variants),
                    "variants": [
                        {
                            "size": v.size,
                            "color": v.color,
                            "stock": v.stock_quantity,
                            "minStock": v.min_stock_quantity,
                            "buyingPrice": v.buying_price,
                            "sellingPrice": v.selling_price,
                        }
                        for v in variants
                    ],
                }
            )
        return result


class GetInventorySummaryTool(RepositoryTool):
    """Stock totals and category breakdown, optionally filtered."""

    def __init__(self, repository: InventoryRepository):
        super().__init__(
            name="get_inventory_summary",
            category=ToolCategory.INVENTORY,
            repository=repository,
        )

    def _build_schema(self) -> ToolSchema:
        """Build tool schema."""
        return ToolSchema(
            name=self.name,
            description="Get a summary of inventory statistics. Can filter by category or brand.",
            category=self.category,
            parameters=[
                ToolParameter(name="category", type="string", description="Filter by category"),
                ToolParameter(name="brand", type="string", description="Filter by brand"),
            ],
            returns="Product, variant and stock counts with a category breakdown",
        )

    async def execute(
        self,
        category: Optional[str] = None,
        brand: Optional[str] = None,
    ) -> Dict[str, Any]:
        products = await self._products(_catalog_filters(category, brand))
        variants_by_product = await self._variants_by_product()

        total_variants = 0
        total_stock = 0
        out_of_stock = 0
        low_stock = 0
        categories: Dict[str, int] = {}

        for product in products:
            categories[product.category] = categories.get(product.category, 0) + 1
            for variant in variants_by_product.get(product.id, []):
                total_variants += 1
                total_stock += variant.stock_quantity
                if variant.stock_quantity == 0:
                    out_of_stock += 1
                elif variant.is_low_stock:
                    low_stock += 1

        return {
            "totalProducts": len(products),
            "totalVariants": total_variants,
            "totalStock": total_stock,
            "outOfStock": out_of_stock,
            "lowStock": low_stock,
            "categories": [{"name": name, "count": count} for name, count in categories.items()],
        }


class SearchProductsTool(RepositoryTool):
    """
    Search products by name or code, with category and brand filters.

    GOTCHA: Results are capped at 20 after the in-stock filter
    """

    def __init__(self, repository: InventoryRepository):
        super().__init__(
            name="search_products",
            category=ToolCategory.INVENTORY,
            repository=repository,
        )

    def _build_schema(self) -> ToolSchema:
        """Build tool schema."""
        return ToolSchema(
            name=self.name,
            description=(
                "Search for products by name, code, category, or brand. "
                "Returns up to 20 results."
            ),
            category=self.category,
            parameters=[
                ToolParameter(
                    name="query",
                    type="string",
                    description="Search query for product name or code",
                ),
                ToolParameter(name="category", type="string", description="Filter by category"),
                ToolParameter(name="brand", type="string", description="Filter by brand"),
                ToolParameter(
                    name="inStockOnly",
                    type="boolean",
                    description="Only show products with stock available",
                ),
            ],
            returns="Matching products with stock and price range",
        )

    async def execute(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
        brand: Optional[str] = None,
        in_stock_only: bool = False,
    ) -> Dict[str, Any]:
        products = await self._products(_catalog_filters(category, brand))

        if query:
            needle = query.lower()
            products = [
                p for p in products if needle in p.name.lower() or needle in p.code.lower()
            ]

        variants_by_product = await self._variants_by_product()

        results = []
        for product in products:
            variants = variants_by_product.get(product.id, [])
            total_stock = sum(v.stock_quantity for v in variants)
            if in_stock_only and total_stock <= 0:
                continue

            prices = [v.selling_price for v in variants]
            min_price = min(prices) if prices else 0
            max_price = max(prices) if prices else 0

            results.append(
                {
                    "code": product.code,
                    "name": product.name,
                    "category": product.category,
                    "brand": product.brand,
                    "variantCount": len(variants),
                    "totalStock": total_stock,
                    "priceRange": min_price if min_price == max_price else f"{min_price} - {max_price}",
                    "inStock": total_stock > 0,
                }
            )
            if len(results) >= MAX_SEARCH_RESULTS:
                break

        return {"count": len(results), "products": results}
