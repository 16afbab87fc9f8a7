"""Domain read-model records for products, variants and sales."""

from pydantic import BaseModel, Field, field_validator
from typing import Any, Optional
from enum import Enum
from datetime import datetime, timezone

from .message_models import utc_now


class RecordKind(str, Enum):
    """Record collections exposed by the inventory repository."""

    PRODUCT = "product"
    VARIANT = "variant"
    SALE = "sale"


class Product(BaseModel):
    """A catalog product; stock lives on its variants."""

    id: str
    code: str
    name: str
    category: str
    brand: Optional[str] = None
    image_url: Optional[str] = None


class Variant(BaseModel):
    """A sellable size/color combination of a product."""

    id: str
    product_id: str
    size: str
    color: str
    stock_quantity: int = Field(default=0, ge=0)
    min_stock_quantity: int = Field(default=0, ge=0)
    buying_price: float
    selling_price: float

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.min_stock_quantity


class Sale(BaseModel):
    """A recorded sale of one variant."""

    id: str
    variant_id: str
    user_id: str
    quantity: int = Field(gt=0)
    selling_price: float
    total_amount: float
    customer_name: Optional[str] = None
    notes: Optional[str] = None
    sale_date: datetime = Field(default_factory=utc_now)

    @field_validator("sale_date")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps in seed files are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class FilterOp(str, Enum):
    """Comparison operators supported by repository filters."""

    EQ = "eq"
    NE = "ne"
    CONTAINS = "contains"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"


class QueryFilter(BaseModel):
    """Single field condition; CONTAINS is a case-insensitive substring match."""

    field: str
    op: FilterOp = FilterOp.EQ
    value: Any = None


class SortSpec(BaseModel):
    """Sort key for find_many."""

    field: str
    descending: bool = False


class AggregateOp(str, Enum):
    """Aggregations supported by the repository."""

    SUM = "sum"
    COUNT = "count"
