"""Read-only repository contract over the inventory read model."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from ..models.inventory_models import (
    AggregateOp,
    Product,
    QueryFilter,
    RecordKind,
    Sale,
    SortSpec,
    Variant,
)

logger = logging.getLogger(__name__)

Record = Union[Product, Variant, Sale]


class InventoryRepository(ABC):
    """
    Abstract read-only repository consumed by tool executors.

    CRITICAL: Implementations must never mutate domain state.
    """

    @abstractmethod
    async def find_by_id(self, kind: RecordKind, record_id: str) -> Optional[Record]:
        """
        Fetch one record by id.

        Args:
            kind: Record collection
            record_id: Record identifier

        Returns:
            Record or None if not found
        """
        pass

    @abstractmethod
    async def find_many(
        self,
        kind: RecordKind,
        filters: Optional[List[QueryFilter]] = None,
        sort: Optional[List[SortSpec]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Record]:
        """
        Fetch records matching all filters.

        Args:
            kind: Record collection
            filters: Conditions combined with AND
            sort: Sort keys, applied in order
            limit: Maximum records to return
            offset: Records to skip

        Returns:
            Matching records
        """
        pass

    @abstractmethod
    async def aggregate(
        self,
        kind: RecordKind,
        op: AggregateOp,
        field: Optional[str] = None,
        group_by: Optional[str] = None,
        filters: Optional[List[QueryFilter]] = None,
    ) -> Dict[Any, float]:
        """
        Aggregate a field over matching records.

        Args:
            kind: Record collection
            op: SUM of ``field`` or COUNT of records
            field: Field to sum (required for SUM)
            group_by: Field to group by; None aggregates everything under key None
            filters: Conditions combined with AND

        Returns:
            Mapping of group key to aggregate value
        """
        pass
