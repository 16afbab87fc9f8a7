"""Tests for the agent orchestrator."""

import asyncio
import json

import pytest

from conftest import ScriptedChatModel, call, reply
from ims_assistant.checkpoint.memory_store import InMemoryCheckpointStore
from ims_assistant.checkpoint.sqlite_store import SQLiteCheckpointStore
from ims_assistant.core.prompts import LIMIT_REACHED_MESSAGE
from ims_assistant.errors import (
    ModelInvocationError,
    StoreUnavailableError,
    TurnTimeoutError,
    ValidationError,
)
from ims_assistant.models.message_models import MessageRole
from ims_assistant.services.agent_service import validate_thread_id


class FlakyStore(InMemoryCheckpointStore):
    """Memory store whose first saves fail as unavailable."""

    def __init__(self, failures: int):
        super().__init__()
        self.failures = failures
        self.save_attempts = 0

    async def save(self, thread_id, checkpoint):
        self.save_attempts += 1
        if self.failures:
            self.failures -= 1
            raise StoreUnavailableError("database restarting")
        return await super().save(thread_id, checkpoint)


@pytest.mark.asyncio
async def test_low_stock_turn(make_orchestrator, checkpoint_store):
    """Test a tool-using turn commits one checkpoint with the full exchange."""
    orchestrator = make_orchestrator(
        [call("get_low_stock_products"), reply("Widget Red is out of stock.")]
    )

    response = await orchestrator.chat("t1", "Which products are low on stock?")

    assert response.thread_id == "t1"
    assert response.content == "Widget Red is out of stock."

    history = await checkpoint_store.load_history("t1")
    assert len(history) == 1
    checkpoint = history[0]
    assert checkpoint.checkpoint_id == response.checkpoint_id
    assert [m.role for m in checkpoint.messages] == [
        MessageRole.USER,
        MessageRole.ASSISTANT,
        MessageRole.TOOL,
        MessageRole.ASSISTANT,
    ]
    assert json.loads(checkpoint.messages[2].content)["count"] == 2
    assert checkpoint.metadata["round_trips"] == 1
    assert checkpoint.metadata["limit_reached"] is False


@pytest.mark.asyncio
async def test_round_trip_cap_ends_turn(make_orchestrator):
    """Test a model that keeps calling tools is stopped after five round trips."""
    model = ScriptedChatModel([call("get_inventory_summary")], repeat_last=True)
    orchestrator = make_orchestrator(model=model)

    response = await orchestrator.chat("t1", "Summarize everything")
    state = await orchestrator.get_state("t1")

    assert len(model.calls) == 6
    assert response.content == LIMIT_REACHED_MESSAGE
    assert state.metadata["limit_reached"] is True
    assert state.metadata["round_trips"] == 5


@pytest.mark.asyncio
async def test_failing_tool_does_not_abort_turn(make_orchestrator, monkeypatch):
    """Test a tool exception reaches the model as a tool result."""
    async def broken(self, **kwargs):
        raise RuntimeError("repository offline")

    from ims_assistant.tools.implementations.inventory_tools import GetInventorySummaryTool

    monkeypatch.setattr(GetInventorySummaryTool, "execute", broken)

    def answer(messages):
        payload = json.loads(messages[-1].content)
        assert payload == {"error": "repository offline"}
        return reply("The inventory service is unavailable right now.")

    orchestrator = make_orchestrator([call("get_inventory_summary"), answer])

    response = await orchestrator.chat("t1", "Summary please")

    assert response.content == "The inventory service is unavailable right now."


@pytest.mark.asyncio
async def test_invalid_tool_arguments_reach_model(make_orchestrator):
    """Test rejected arguments produce an error result and the turn continues."""
    seen = []

    def answer(messages):
        seen.append(json.loads(messages[-1].content))
        return reply("Please give a positive limit.")

    orchestrator = make_orchestrator([call("get_recent_sales", {"limit": 500}), answer])

    await orchestrator.chat("t1", "Show sales")

    assert seen[0]["error"] == "invalid arguments"


@pytest.mark.asyncio
async def test_turns_chain_checkpoints(make_orchestrator):
    """Test each turn adds exactly one checkpoint linked to the previous head."""
    model = ScriptedChatModel([reply("one"), reply("two"), reply("three")])
    orchestrator = make_orchestrator(model=model)

    first = await orchestrator.chat("t1", "first")
    second = await orchestrator.chat("t1", "second")
    third = await orchestrator.chat("t1", "third")

    history = await orchestrator.get_history("t1")
    assert [c.checkpoint_id for c in history] == [
        third.checkpoint_id,
        second.checkpoint_id,
        first.checkpoint_id,
    ]
    assert history[0].parent_checkpoint_id == second.checkpoint_id
    assert history[2].parent_checkpoint_id is None
    assert [c.metadata["step"] for c in history] == [2, 1, 0]
    assert len(history[0].messages) == 6

    # Previous turns are sent back to the model
    assert [m.content for m in model.calls[2]["messages"]] == [
        "first", "one", "second", "two", "third",
    ]

    assert len(await orchestrator.get_history("t1", limit=1)) == 1


@pytest.mark.asyncio
async def test_concurrent_turns_on_one_thread_serialize(make_orchestrator):
    """Test overlapping turns on a thread both commit, one after the other."""
    running = []
    overlap = []

    async def slow_reply(messages):
        running.append(1)
        if len(running) > 1:
            overlap.append(1)
        await asyncio.sleep(0.05)
        running.pop()
        return reply(f"seen {len(messages)}")

    orchestrator = make_orchestrator([slow_reply, slow_reply])

    first, second = await asyncio.gather(
        orchestrator.chat("t1", "a"),
        orchestrator.chat("t1", "b"),
    )

    assert not overlap
    history = await orchestrator.get_history("t1")
    assert len(history) == 2
    assert history[0].parent_checkpoint_id == history[1].checkpoint_id
    assert {first.content, second.content} == {"seen 1", "seen 3"}
    assert orchestrator.locks.active_threads() == 0


@pytest.mark.asyncio
async def test_different_threads_run_concurrently(make_orchestrator):
    """Test turns on different threads overlap."""
    running = []
    peak = []

    async def slow_reply(messages):
        running.append(1)
        peak.append(len(running))
        await asyncio.sleep(0.05)
        running.pop()
        return reply(messages[-1].content)

    orchestrator = make_orchestrator([slow_reply, slow_reply])

    results = await asyncio.gather(orchestrator.chat("a", "x"), orchestrator.chat("b", "y"))

    assert [r.content for r in results] == ["x", "y"]
    assert max(peak) == 2


@pytest.mark.asyncio
async def test_timeout_saves_nothing(make_orchestrator, checkpoint_store):
    """Test a timed-out turn leaves the thread unchanged."""
    async def too_slow(messages):
        await asyncio.sleep(1)
        return reply("late")

    orchestrator = make_orchestrator([reply("hi"), too_slow])
    await orchestrator.chat("t1", "hello")

    with pytest.raises(TurnTimeoutError):
        await orchestrator.chat("t1", "slow question", timeout=0.05)

    history = await checkpoint_store.load_history("t1")
    assert len(history) == 1
    assert history[0].messages[-1].content == "hi"


@pytest.mark.asyncio
async def test_model_failure_saves_nothing(make_orchestrator, checkpoint_store):
    orchestrator = make_orchestrator([ModelInvocationError("provider down")])

    with pytest.raises(ModelInvocationError):
        await orchestrator.chat("t1", "hello")

    assert await checkpoint_store.load("t1") is None


@pytest.mark.asyncio
async def test_save_retried_when_store_unavailable(make_orchestrator):
    """Test a transient store outage is retried without duplicating the turn."""
    store = FlakyStore(failures=1)
    orchestrator = make_orchestrator([reply("ok")], store=store)

    response = await orchestrator.chat("t1", "hello")

    assert store.save_attempts == 2
    history = await store.load_history("t1")
    assert [c.checkpoint_id for c in history] == [response.checkpoint_id]


@pytest.mark.asyncio
async def test_save_gives_up_after_retries(make_orchestrator):
    store = FlakyStore(failures=5)
    orchestrator = make_orchestrator([reply("ok")], store=store)

    with pytest.raises(StoreUnavailableError):
        await orchestrator.chat("t1", "hello")

    assert store.save_attempts == 2
    assert await store.load("t1") is None


@pytest.mark.asyncio
async def test_state_of_unseen_thread(make_orchestrator):
    """Test reads of an unseen thread are empty and create nothing."""
    orchestrator = make_orchestrator()

    state = await orchestrator.get_state("nobody")

    assert state.checkpoint_id is None
    assert state.values == {"messages": []}
    assert await orchestrator.get_history("nobody") == []
    assert await orchestrator.get_chat_messages("nobody") == []


@pytest.mark.asyncio
async def test_get_state_is_stable(make_orchestrator):
    orchestrator = make_orchestrator([reply("hi")])
    response = await orchestrator.chat("t1", "hello")

    first = await orchestrator.get_state("t1")
    second = await orchestrator.get_state("t1")

    assert first == second
    assert first.checkpoint_id == response.checkpoint_id
    assert first.next == []


@pytest.mark.asyncio
async def test_chat_messages_hide_tool_traffic(make_orchestrator):
    """Test the display view keeps only the user question and final answer."""
    orchestrator = make_orchestrator([call("get_inventory_summary"), reply("63 units in stock.")])
    await orchestrator.chat("t1", "How much stock?")

    messages = await orchestrator.get_chat_messages("t1")

    assert [(m.role, m.content) for m in messages] == [
        (MessageRole.USER, "How much stock?"),
        (MessageRole.ASSISTANT, "63 units in stock."),
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("thread_id", ["", "has space", "tab\there", "x" * 129])
async def test_invalid_thread_ids_rejected(make_orchestrator, thread_id):
    orchestrator = make_orchestrator([reply("never")])

    with pytest.raises(ValidationError):
        await orchestrator.chat(thread_id, "hello")
    with pytest.raises(ValidationError):
        await orchestrator.get_state(thread_id)


@pytest.mark.asyncio
async def test_invalid_messages_rejected(make_orchestrator, agent_config):
    orchestrator = make_orchestrator([reply("never")])

    with pytest.raises(ValidationError):
        await orchestrator.chat("t1", "   ")
    with pytest.raises(ValidationError):
        await orchestrator.chat("t1", "x" * (agent_config.max_message_chars + 1))
    with pytest.raises(ValidationError):
        await orchestrator.get_history("t1", limit=0)


def test_validate_thread_id_accepts_uuid_like_ids():
    assert validate_thread_id("user-42:session_7") == "user-42:session_7"


def test_list_tools(make_orchestrator):
    tools = make_orchestrator().list_tools()

    assert len(tools) == 9
    assert {"name", "description", "parameters"} <= set(tools[0])


@pytest.mark.asyncio
async def test_close_releases_model_and_store(make_orchestrator):
    model = ScriptedChatModel([reply("hi")])
    orchestrator = make_orchestrator(model=model)
    await orchestrator.chat("t1", "hello")

    await orchestrator.close()

    assert model.closed


@pytest.mark.asyncio
@pytest.mark.parametrize("backend", ["memory", "sqlite"])
async def test_committed_checkpoints_never_change(make_orchestrator, tmp_path, backend):
    """Test later turns leave earlier checkpoints byte-for-byte intact."""
    store = (
        InMemoryCheckpointStore()
        if backend == "memory"
        else SQLiteCheckpointStore(tmp_path / "checkpoints.db")
    )
    orchestrator = make_orchestrator(
        [call("get_low_stock_products"), reply("one"), reply("two"), reply("three")],
        store=store,
    )

    await orchestrator.chat("t1", "first")
    first = (await orchestrator.get_history("t1"))[0].model_dump()

    await orchestrator.chat("t1", "second")
    await orchestrator.chat("t1", "third")

    history = await orchestrator.get_history("t1")
    assert len(history) == 3
    assert history[-1].model_dump() == first
    await orchestrator.close()


@pytest.mark.asyncio
async def test_blank_final_reply_saves_nothing(make_orchestrator, checkpoint_store):
    """Test a turn whose final answer has no content is not committed."""
    orchestrator = make_orchestrator([reply("   ")])

    with pytest.raises(ModelInvocationError):
        await orchestrator.chat("t1", "hello")

    assert await checkpoint_store.load("t1") is None
    assert await orchestrator.get_chat_messages("t1") == []
