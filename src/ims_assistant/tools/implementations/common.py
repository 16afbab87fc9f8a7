"""Shared plumbing for tools backed by the inventory repository."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from ..base import BaseTool
from ...models.inventory_models import (
    FilterOp,
    Product,
    QueryFilter,
    RecordKind,
    Sale,
    SortSpec,
    Variant,
)
from ...models.message_models import utc_now
from ...models.tool_models import ToolCategory
from ...repository.base import InventoryRepository

logger = logging.getLogger(__name__)


def money(value: float) -> float:
    """Round a money amount to cents."""
    return round(float(value), 2)


def iso(value: datetime) -> str:
    return value.isoformat()


@dataclass
class SaleLine:
    """A sale joined with its variant and product."""

    sale: Sale
    variant: Variant
    product: Product

    @property
    def profit(self) -> float:
        return (self.sale.selling_price - self.variant.buying_price) * self.sale.quantity


class RepositoryTool(BaseTool):
    """
    Base class for read-only tools over an InventoryRepository.

    PATTERN: Tool with repository dependency injected at construction
    CRITICAL: Tools only read; the repository exposes no writes
    """

    def __init__(self, name: str, category: ToolCategory, repository: InventoryRepository):
        """
        Initialize repository-backed tool.

        Args:
            name: Tool name
            category: Tool category
            repository: Inventory read model
        """
        super().__init__(name=name, category=category)
        self.repository = repository

    async def _products(self, filters: Optional[List[QueryFilter]] = None) -> List[Product]:
        return await self.repository.find_many(
            RecordKind.PRODUCT,
            filters=filters,
            sort=[SortSpec(field="name")],
        )

    async def _variants_by_product(self) -> Dict[str, List[Variant]]:
        grouped: Dict[str, List[Variant]] = {}
        for variant in await self.repository.find_many(RecordKind.VARIANT):
            grouped.setdefault(variant.product_id, []).append(variant)
        return grouped

    async def _sale_lines(
        self,
        filters: Optional[List[QueryFilter]] = None,
        newest_first: bool = False,
    ) -> List[SaleLine]:
        """
        Load sales joined with their variant and product.

        Sales whose variant or product is missing from the read model are
        skipped.

        Args:
            filters: Sale filters
            newest_first: Order by sale date descending

        Returns:
            Joined sale lines
        """
        sales = await self.repository.find_many(
            RecordKind.SALE,
            filters=filters,
            sort=[SortSpec(field="sale_date", descending=newest_first)],
        )

        variants = {v.id: v for v in await self.repository.find_many(RecordKind.VARIANT)}
        products = {p.id: p for p in await self.repository.find_many(RecordKind.PRODUCT)}

        lines = []
        for sale in sales:
            variant = variants.get(sale.variant_id)
            product = products.get(variant.product_id) if variant else None
            if variant is None or product is None:
                self.logger.warning(f"Skipping sale {sale.id} with unknown variant {sale.variant_id}")
                continue
            lines.append(SaleLine(sale=sale, variant=variant, product=product))
        return lines


def since_filter(days: int, now: Optional[datetime] = None) -> QueryFilter:
    """Sales on or after ``days`` days ago."""
    start = (now or utc_now()) - timedelta(days=days)
    return QueryFilter(field="sale_date", op=FilterOp.GTE, value=start)


def summarize_by_product(lines: Iterable[SaleLine], with_profit: bool = False) -> List[Dict]:
    """
    Aggregate sale lines per product code, highest revenue first.

    Args:
        lines: Joined sale lines
        with_profit: Include category, brand and profit per product

    Returns:
        Per-product rows
    """
    rows: Dict[str, Dict] = {}

    for line in lines:
        product = line.product
        row = rows.get(product.code)
        if row is None:
            row = {"productName": product.name, "productCode": product.code}
            if with_profit:
                row["category"] = product.category
                row["brand"] = product.brand
            row.update(totalQuantity=0, totalRevenue=0.0, salesCount=0)
            if with_profit:
                row["totalProfit"] = 0.0
            rows[product.code] = row

        row["totalQuantity"] += line.sale.quantity
        row["totalRevenue"] += line.sale.total_amount
        row["salesCount"] += 1
        if with_profit:
            row["totalProfit"] += line.profit

    ranked = sorted(rows.values(), key=lambda r: r["totalRevenue"], reverse=True)
    for row in ranked:
        row["totalRevenue"] = money(row["totalRevenue"])
        if with_profit:
            row["totalProfit"] = money(row["totalProfit"])
    return ranked
