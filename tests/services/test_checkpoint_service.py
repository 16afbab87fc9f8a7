"""Tests for checkpoint store management."""

import asyncio

import pytest

from ims_assistant.checkpoint import (
    InMemoryCheckpointStore,
    PostgresCheckpointStore,
    SQLiteCheckpointStore,
)
from ims_assistant.config.checkpoint_config import CheckpointConfig
from ims_assistant.errors import ConfigurationError
from ims_assistant.models.checkpoint_models import Checkpoint
from ims_assistant.models.message_models import assistant_message, user_message
from ims_assistant.services.checkpoint_service import (
    CheckpointManager,
    create_checkpoint_store,
    get_checkpoint_manager,
    reset_checkpoint_manager,
)


class CountingStore(InMemoryCheckpointStore):
    def __init__(self):
        super().__init__()
        self.setups = 0
        self.closed = 0

    async def setup(self):
        self.setups += 1
        await asyncio.sleep(0)

    async def close(self):
        self.closed += 1
        await super().close()


def test_memory_backend():
    store = create_checkpoint_store(CheckpointConfig(backend="memory"))

    assert isinstance(store, InMemoryCheckpointStore)


def test_sqlite_backend(tmp_path):
    """Test backend names are case-insensitive."""
    store = create_checkpoint_store(
        CheckpointConfig(backend="SQLite", sqlite_path=str(tmp_path / "c.db"))
    )

    assert isinstance(store, SQLiteCheckpointStore)


def test_postgres_backend_does_not_connect_eagerly():
    store = create_checkpoint_store(
        CheckpointConfig(backend="postgres", database_url="postgresql://u:p@localhost:1/db")
    )

    assert isinstance(store, PostgresCheckpointStore)


def test_postgres_without_url_rejected():
    with pytest.raises(ConfigurationError):
        create_checkpoint_store(CheckpointConfig(backend="postgres", database_url=None))


def test_unknown_backend_rejected():
    with pytest.raises(ConfigurationError) as exc_info:
        create_checkpoint_store(CheckpointConfig(backend="mongodb"))

    assert "mongodb" in str(exc_info.value)


@pytest.mark.asyncio
async def test_store_set_up_once():
    """Test concurrent first callers share one setup."""
    store = CountingStore()
    manager = CheckpointManager(store=store)

    results = await asyncio.gather(*(manager.get_store() for _ in range(5)))

    assert all(result is store for result in results)
    assert store.setups == 1


@pytest.mark.asyncio
async def test_close_resets_manager(tmp_path):
    manager = CheckpointManager(CheckpointConfig(backend="sqlite", sqlite_path=str(tmp_path / "c.db")))

    first = await manager.get_store()
    await manager.close()
    second = await manager.get_store()

    assert first is not second
    await manager.close()


@pytest.mark.asyncio
async def test_close_before_use_is_safe():
    store = CountingStore()
    manager = CheckpointManager(store=store)

    await manager.close()

    assert store.closed == 0


def test_process_wide_manager():
    reset_checkpoint_manager()
    try:
        assert get_checkpoint_manager() is get_checkpoint_manager()
    finally:
        reset_checkpoint_manager()


@pytest.mark.asyncio
async def test_injected_store_reopened_after_close(tmp_path):
    """Test close() keeps an injected store instead of falling back to config."""
    store = SQLiteCheckpointStore(tmp_path / "injected.db")
    manager = CheckpointManager(CheckpointConfig(backend="memory"), store=store)
    checkpoint = Checkpoint(thread_id="t1", messages=[user_message("hi"), assistant_message("hello")])

    await (await manager.get_store()).save("t1", checkpoint)
    await manager.close()
    reopened = await manager.get_store()

    try:
        assert reopened is store
        assert (await reopened.load("t1")) == checkpoint
    finally:
        await manager.close()
