"""In-memory inventory repository."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .base import InventoryRepository, Record
from ..models.inventory_models import (
    AggregateOp,
    FilterOp,
    Product,
    QueryFilter,
    RecordKind,
    Sale,
    SortSpec,
    Variant,
)

logger = logging.getLogger(__name__)


def _matches(record: Record, condition: QueryFilter) -> bool:
    value = getattr(record, condition.field, None)
    target = condition.value
    op = condition.op

    if op == FilterOp.EQ:
        return value == target
    if op == FilterOp.NE:
        return value != target
    if op == FilterOp.CONTAINS:
        if value is None or target is None:
            return False
        return str(target).lower() in str(value).lower()

    # Ordering comparisons never match missing values
    if value is None or target is None:
        return False
    if op == FilterOp.GT:
        return value > target
    if op == FilterOp.GTE:
        return value >= target
    if op == FilterOp.LT:
        return value < target
    if op == FilterOp.LTE:
        return value <= target

    raise ValueError(f"Unsupported filter operator: {op}")


class InMemoryInventoryRepository(InventoryRepository):
    """
    Repository over records held in process memory.

    Records are indexed by kind and id; queries scan the collection.
    """

    def __init__(
        self,
        products: Optional[Iterable[Product]] = None,
        variants: Optional[Iterable[Variant]] = None,
        sales: Optional[Iterable[Sale]] = None,
    ):
        """
        Initialize repository.

        Args:
            products: Product records
            variants: Variant records
            sales: Sale records
        """
        self._records: Dict[RecordKind, Dict[str, Record]] = {
            RecordKind.PRODUCT: {p.id: p for p in products or []},
            RecordKind.VARIANT: {v.id: v for v in variants or []},
            RecordKind.SALE: {s.id: s for s in sales or []},
        }

        logger.info(
            f"Loaded inventory repository: "
            f"{len(self._records[RecordKind.PRODUCT])} products, "
            f"{len(self._records[RecordKind.VARIANT])} variants, "
            f"{len(self._records[RecordKind.SALE])} sales"
        )

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "InMemoryInventoryRepository":
        """
        Build a repository from a seed document.

        The document holds ``products`` (each with nested ``variants``) and
        ``sales``. Variant ids default to ``<code>-<index>``.

        Args:
            document: Parsed seed document

        Returns:
            Populated repository
        """
        products: List[Product] = []
        variants: List[Variant] = []

        for product_data in document.get("products", []):
            product_data = dict(product_data)
            variant_list = product_data.pop("variants", [])
            product_data.setdefault("id", product_data["code"])
            product = Product.model_validate(product_data)
            products.append(product)

            for index, variant_data in enumerate(variant_list, start=1):
                variant_data = dict(variant_data)
                variant_data.setdefault("id", f"{product.code}-{index}")
                variant_data.setdefault("product_id", product.id)
                variants.append(Variant.model_validate(variant_data))

        sales = [Sale.model_validate(s) for s in document.get("sales", [])]
        return cls(products=products, variants=variants, sales=sales)

    @classmethod
    def from_seed_file(cls, path: Union[str, Path]) -> "InMemoryInventoryRepository":
        """
        Load a repository from a JSON seed file.

        Args:
            path: Path to the seed document

        Returns:
            Populated repository
        """
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)

        logger.info(f"Loading inventory seed file {path}")
        return cls.from_document(document)

    async def find_by_id(self, kind: RecordKind, record_id: str) -> Optional[Record]:
        return self._records[RecordKind(kind)].get(record_id)

    async def find_many(
        self,
        kind: RecordKind,
        filters: Optional[List[QueryFilter]] = None,
        sort: Optional[List[SortSpec]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Record]:
        records = [
            r
            for r in self._records[RecordKind(kind)].values()
            if all(_matches(r, f) for f in filters or [])
        ]

        # Stable sorts applied last-key-first give multi-key ordering
        for spec in reversed(sort or []):
            records.sort(
                key=lambda r: (getattr(r, spec.field, None) is None, getattr(r, spec.field, None)),
                reverse=spec.descending,
            )

        records = records[offset:]
        if limit is not None:
            records = records[:limit]
        return records

    async def aggregate(
        self,
        kind: RecordKind,
        op: AggregateOp,
        field: Optional[str] = None,
        group_by: Optional[str] = None,
        filters: Optional[List[QueryFilter]] = None,
    ) -> Dict[Any, float]:
        if op == AggregateOp.SUM and not field:
            raise ValueError("SUM aggregation requires a field")

        records = await self.find_many(kind, filters=filters)
        totals: Dict[Any, float] = {}

        for record in records:
            key = getattr(record, group_by, None) if group_by else None
            if op == AggregateOp.COUNT:
                totals[key] = totals.get(key, 0) + 1
            else:
                totals[key] = totals.get(key, 0) + float(getattr(record, field) or 0)

        return totals
