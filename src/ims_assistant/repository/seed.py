"""Built-in sample inventory used when no seed file is configured."""

import logging
import random
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from .memory import InMemoryInventoryRepository
from ..models.message_models import utc_now

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS: List[Dict[str, Any]] = [
    {
        "code": "IPH15P",
        "name": "iPhone 15 Pro",
        "category": "Electronics",
        "brand": "Apple",
        "variants": [
            {"color": "Black", "size": "128GB", "buying_price": 850, "selling_price": 999, "stock_quantity": 15, "min_stock_quantity": 5},
            {"color": "Black", "size": "256GB", "buying_price": 950, "selling_price": 1099, "stock_quantity": 12, "min_stock_quantity": 5},
            {"color": "White", "size": "512GB", "buying_price": 1100, "selling_price": 1299, "stock_quantity": 8, "min_stock_quantity": 3},
        ],
    },
    {
        "code": "SGS24",
        "name": "Samsung Galaxy S24",
        "category": "Electronics",
        "brand": "Samsung",
        "variants": [
            {"color": "Gray", "size": "128GB", "buying_price": 650, "selling_price": 799, "stock_quantity": 20, "min_stock_quantity": 5},
            {"color": "Black", "size": "256GB", "buying_price": 750, "selling_price": 899, "stock_quantity": 5, "min_stock_quantity": 3},
        ],
    },
    {
        "code": "MBA-M3",
        "name": "MacBook Air M3",
        "category": "Electronics",
        "brand": "Apple",
        "variants": [
            {"color": "Silver", "size": "8GB/256GB", "buying_price": 950, "selling_price": 1099, "stock_quantity": 10, "min_stock_quantity": 3},
            {"color": "Space Gray", "size": "16GB/512GB", "buying_price": 1200, "selling_price": 1399, "stock_quantity": 7, "min_stock_quantity": 2},
        ],
    },
    {
        "code": "SONY-WH1000XM5",
        "name": "Sony WH-1000XM5",
        "category": "Electronics",
        "brand": "Sony",
        "variants": [
            {"color": "Black", "size": "Standard", "buying_price": 280, "selling_price": 349, "stock_quantity": 25, "min_stock_quantity": 5},
            {"color": "Silver", "size": "Standard", "buying_price": 280, "selling_price": 349, "stock_quantity": 18, "min_stock_quantity": 5},
        ],
    },
    {
        "code": "NIKE-AM270",
        "name": "Nike Air Max 270",
        "category": "Footwear",
        "brand": "Nike",
        "variants": [
            {"color": "Black", "size": "9", "buying_price": 80, "selling_price": 120, "stock_quantity": 15, "min_stock_quantity": 3},
            {"color": "White", "size": "9", "buying_price": 80, "selling_price": 120, "stock_quantity": 3, "min_stock_quantity": 2},
            {"color": "White", "size": "10", "buying_price": 80, "selling_price": 120, "stock_quantity": 2, "min_stock_quantity": 2},
        ],
    },
    {
        "code": "LEVI-501",
        "name": "Levi's 501 Jeans",
        "category": "Clothing",
        "brand": "Levi's",
        "variants": [
            {"color": "Blue", "size": "32", "buying_price": 40, "selling_price": 69, "stock_quantity": 20, "min_stock_quantity": 5},
            {"color": "Black", "size": "32", "buying_price": 40, "selling_price": 69, "stock_quantity": 0, "min_stock_quantity": 5},
        ],
    },
    {
        "code": "COKE-12PK",
        "name": "Coca-Cola 12-Pack",
        "category": "Food & Beverage",
        "brand": "Coca-Cola",
        "variants": [
            {"color": "Red", "size": "355ml x 12", "buying_price": 4, "selling_price": 6.99, "stock_quantity": 50, "min_stock_quantity": 20},
        ],
    },
    {
        "code": "DYSN-V15",
        "name": "Dyson V15 Vacuum",
        "category": "Home & Kitchen",
        "brand": "Dyson",
        "variants": [
            {"color": "Gold", "size": "Standard", "buying_price": 450, "selling_price": 599, "stock_quantity": 4, "min_stock_quantity": 2},
        ],
    },
]


def generate_sample_sales(
    variants: List[Dict[str, Any]],
    count: int = 250,
    days: int = 180,
    seed: int = 42,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """
    Generate deterministic sample sales spread over the trailing window.

    Args:
        variants: Variant documents with ``id`` and ``selling_price``
        count: Number of sales to generate
        days: Length of the window in days
        seed: Random seed
        now: End of the window (default: current UTC time)

    Returns:
        Sale documents
    """
    rng = random.Random(seed)
    now = now or utc_now()
    start = now - timedelta(days=days)
    window_seconds = int((now - start).total_seconds())

    sales = []
    for index in range(count):
        variant = rng.choice(variants)
        quantity = rng.randint(1, 3)
        customer = f"Customer {rng.randint(0, 99)}" if rng.random() > 0.3 else None
        sales.append(
            {
                "id": f"sale-{index + 1:04d}",
                "variant_id": variant["id"],
                "user_id": rng.choice(["admin", "staff"]),
                "quantity": quantity,
                "selling_price": variant["selling_price"],
                "total_amount": round(variant["selling_price"] * quantity, 2),
                "customer_name": customer,
                "notes": "Regular customer" if rng.random() > 0.7 else None,
                "sale_date": start + timedelta(seconds=rng.randint(0, window_seconds)),
            }
        )
    return sales


def build_sample_document(sales_count: int = 250, seed: int = 42) -> Dict[str, Any]:
    """
    Build the sample seed document.

    Returns:
        Document accepted by InMemoryInventoryRepository.from_document()
    """
    products = []
    variants = []
    for product in SAMPLE_PRODUCTS:
        product = dict(product)
        product_variants = []
        for index, variant in enumerate(product["variants"], start=1):
            variant = dict(variant, id=f"{product['code']}-{index}")
            product_variants.append(variant)
            variants.append(variant)
        product["variants"] = product_variants
        products.append(product)

    return {
        "products": products,
        "sales": generate_sample_sales(variants, count=sales_count, seed=seed),
    }


def create_sample_repository(sales_count: int = 250, seed: int = 42) -> InMemoryInventoryRepository:
    """Repository preloaded with the sample catalog."""
    logger.info("Using built-in sample inventory")
    return InMemoryInventoryRepository.from_document(
        build_sample_document(sales_count=sales_count, seed=seed)
    )
