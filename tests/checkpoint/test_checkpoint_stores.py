"""Tests for checkpoint stores (memory, SQLite, and PostgreSQL when available)."""

import os
import uuid

import pytest

from ims_assistant.checkpoint import (
    InMemoryCheckpointStore,
    PostgresCheckpointStore,
    SQLiteCheckpointStore,
)
from ims_assistant.errors import CheckpointConflictError, StoreUnavailableError, ValidationError
from ims_assistant.models.checkpoint_models import Checkpoint
from ims_assistant.models.message_models import ToolCall, assistant_message, tool_message, user_message

POSTGRES_URL = os.getenv("TEST_DATABASE_URL")


def make_checkpoint(thread_id, parent=None, text="hello", step=0):
    return Checkpoint(
        thread_id=thread_id,
        parent_checkpoint_id=parent.checkpoint_id if parent else None,
        messages=[
            user_message(text),
            assistant_message(None, [ToolCall(id="c1", name="search_products", arguments={"query": "x"})]),
            tool_message("c1", '{"count": 0, "products": []}'),
            assistant_message(f"reply to {text}"),
        ],
        metadata={"source": "chat", "step": step, "round_trips": 1},
    )


@pytest.fixture(params=["memory", "sqlite", "postgres"])
def store(request, tmp_path):
    """Unopened checkpoint store for each backend."""
    if request.param == "memory":
        return InMemoryCheckpointStore()
    if request.param == "sqlite":
        return SQLiteCheckpointStore(tmp_path / "checkpoints.db")
    if not POSTGRES_URL:
        pytest.skip("TEST_DATABASE_URL not set")
    return PostgresCheckpointStore(POSTGRES_URL)


def thread_name():
    return f"thread-{uuid.uuid4().hex[:8]}"


@pytest.mark.asyncio
async def test_unseen_thread_is_empty(store):
    """Test loading a thread that was never saved."""
    await store.setup()
    try:
        assert await store.load(thread_name()) is None
        assert await store.load_history(thread_name()) == []
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_save_and_load_round_trip(store):
    """Test a checkpoint reads back unchanged."""
    await store.setup()
    try:
        thread_id = thread_name()
        checkpoint = make_checkpoint(thread_id)

        await store.save(thread_id, checkpoint)
        loaded = await store.load(thread_id)

        assert loaded == checkpoint
        assert loaded.messages[1].tool_calls[0].arguments == {"query": "x"}
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_history_newest_first(store):
    """Test history ordering and limit."""
    await store.setup()
    try:
        thread_id = thread_name()
        first = make_checkpoint(thread_id, text="one")
        second = make_checkpoint(thread_id, parent=first, text="two", step=1)
        third = make_checkpoint(thread_id, parent=second, text="three", step=2)
        for checkpoint in (first, second, third):
            await store.save(thread_id, checkpoint)

        history = await store.load_history(thread_id)
        limited = await store.load_history(thread_id, limit=2)

        assert [c.checkpoint_id for c in history] == [
            third.checkpoint_id,
            second.checkpoint_id,
            first.checkpoint_id,
        ]
        assert [c.checkpoint_id for c in limited] == [third.checkpoint_id, second.checkpoint_id]
        assert (await store.load(thread_id)).checkpoint_id == third.checkpoint_id
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_duplicate_save_is_noop(store):
    """Test saving the same checkpoint twice keeps one copy."""
    await store.setup()
    try:
        thread_id = thread_name()
        checkpoint = make_checkpoint(thread_id)

        await store.save(thread_id, checkpoint)
        await store.save(thread_id, checkpoint)

        assert len(await store.load_history(thread_id)) == 1
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_stale_parent_conflicts(store):
    """Test a save based on an old head is rejected."""
    await store.setup()
    try:
        thread_id = thread_name()
        first = make_checkpoint(thread_id)
        await store.save(thread_id, first)
        await store.save(thread_id, make_checkpoint(thread_id, parent=first, step=1))

        with pytest.raises(CheckpointConflictError):
            await store.save(thread_id, make_checkpoint(thread_id, parent=first, step=1))

        with pytest.raises(CheckpointConflictError):
            await store.save(thread_id, make_checkpoint(thread_id))
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_thread_mismatch_rejected(store):
    """Test a checkpoint cannot be saved under another thread."""
    await store.setup()
    try:
        with pytest.raises(ValidationError):
            await store.save("other", make_checkpoint(thread_name()))
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_threads_are_independent(store):
    """Test checkpoints never leak between threads."""
    await store.setup()
    try:
        a, b = thread_name(), thread_name()
        await store.save(a, make_checkpoint(a, text="a"))

        assert await store.load(b) is None
        assert len(await store.load_history(a)) == 1
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_sqlite_persists_across_instances(tmp_path):
    """Test a reopened SQLite file keeps its checkpoints."""
    path = tmp_path / "nested" / "checkpoints.db"
    checkpoint = make_checkpoint("t1")

    first = SQLiteCheckpointStore(path)
    await first.setup()
    await first.save("t1", checkpoint)
    await first.close()

    second = SQLiteCheckpointStore(path)
    await second.setup()
    try:
        assert (await second.load("t1")) == checkpoint
    finally:
        await second.close()


@pytest.mark.asyncio
async def test_sqlite_unopenable_path_is_unavailable(tmp_path):
    """Test a directory path surfaces as an unavailable store."""
    store = SQLiteCheckpointStore(tmp_path)

    with pytest.raises(StoreUnavailableError):
        await store.setup()
