"""Checkpoint store management for conversation persistence."""

import asyncio
import logging
from typing import Optional

from ..checkpoint import (
    CheckpointStore,
    InMemoryCheckpointStore,
    PostgresCheckpointStore,
    SQLiteCheckpointStore,
)
from ..config.checkpoint_config import CheckpointBackend, CheckpointConfig
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


def create_checkpoint_store(config: CheckpointConfig) -> CheckpointStore:
    """
    Create the store for the configured backend.

    Args:
        config: Checkpoint configuration

    Returns:
        Unopened checkpoint store

    Raises:
        ConfigurationError: If the backend is unknown or incompletely configured
    """
    try:
        backend = CheckpointBackend(str(config.backend).lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown checkpoint backend '{config.backend}'. "
            f"Use one of: {', '.join(b.value for b in CheckpointBackend)}"
        )

    if backend == CheckpointBackend.MEMORY:
        return InMemoryCheckpointStore()

    if backend == CheckpointBackend.SQLITE:
        return SQLiteCheckpointStore(config.sqlite_path)

    if not config.database_url:
        raise ConfigurationError("DATABASE_URL is required for the postgres checkpoint backend")

    return PostgresCheckpointStore(
        config.database_url,
        min_connections=config.pool_min_connections,
        max_connections=config.pool_max_connections,
        sslmode=config.postgres_sslmode,
    )


class CheckpointManager:
    """
    Owner of the process's checkpoint store.

    PATTERN: Lazy initialization, like the provider setup in services
    CRITICAL: The backend is chosen once; every caller shares one handle
    GOTCHA: Concurrent first callers wait on the lock instead of racing setup()
    """

    def __init__(
        self,
        config: Optional[CheckpointConfig] = None,
        store: Optional[CheckpointStore] = None,
    ):
        """
        Initialize checkpoint manager.

        Args:
            config: Checkpoint configuration (creates default if None)
            store: Pre-built store; skips backend selection, also after close()
        """
        self.config = config or CheckpointConfig()
        self._injected_store = store
        self._store = store
        self._ready = False
        self._lock = asyncio.Lock()

    async def get_store(self) -> CheckpointStore:
        """
        Get the checkpoint store, creating and setting it up on first use.

        Returns:
            Ready checkpoint store

        Raises:
            ConfigurationError: If the backend configuration is invalid
            StoreError: If the backend cannot be set up
        """
        if self._ready and self._store is not None:
            return self._store

        async with self._lock:
            if not self._ready:
                store = self._store or create_checkpoint_store(self.config)
                await store.setup()
                self._store = store
                self._ready = True
                logger.info(f"Created {store.backend_name} checkpoint store")

        return self._store

    async def close(self) -> None:
        """
        Close the store; the next get_store() sets it up again.

        GOTCHA: An injected store is reopened, never replaced by the
        configured backend
        """
        async with self._lock:
            if self._store is not None and self._ready:
                await self._store.close()
            self._store = self._injected_store
            self._ready = False


_manager: Optional[CheckpointManager] = None


def get_checkpoint_manager() -> CheckpointManager:
    """
    Process-wide checkpoint manager.

    Returns:
        The shared CheckpointManager
    """
    global _manager
    if _manager is None:
        _manager = CheckpointManager()
    return _manager


def reset_checkpoint_manager() -> None:
    """Forget the process-wide manager (tests and CLI teardown)."""
    global _manager
    _manager = None
