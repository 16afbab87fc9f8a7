"""Read-only inventory repository."""

from .base import InventoryRepository
from .memory import InMemoryInventoryRepository
from .seed import build_sample_document, create_sample_repository

__all__ = [
    "InventoryRepository",
    "InMemoryInventoryRepository",
    "build_sample_document",
    "create_sample_repository",
]
