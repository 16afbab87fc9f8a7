"""Durable checkpoint stores for conversation threads."""

from .base import CheckpointStore
from .memory_store import InMemoryCheckpointStore
from .sqlite_store import SQLiteCheckpointStore
from .postgres_store import PostgresCheckpointStore

__all__ = [
    "CheckpointStore",
    "InMemoryCheckpointStore",
    "SQLiteCheckpointStore",
    "PostgresCheckpointStore",
]
