"""Tests for conversation state utilities."""

import pytest

from ims_assistant.core.state import (
    build_checkpoint,
    create_initial_state,
    last_assistant_message,
    pending_tool_calls,
    validate_message_sequence,
)
from ims_assistant.errors import ValidationError
from ims_assistant.models.message_models import (
    ToolCall,
    assistant_message,
    tool_message,
    user_message,
)


def two_calls():
    return assistant_message(
        None,
        [
            ToolCall(id="a", name="get_low_stock_products"),
            ToolCall(id="b", name="get_inventory_summary"),
        ],
    )


def test_create_initial_state():
    """Test the new message is appended to the loaded history."""
    history = [user_message("hi"), assistant_message("hello")]

    state = create_initial_state("t1", history, user_message("stock?"))

    assert state["thread_id"] == "t1"
    assert [m.content for m in state["messages"]] == ["hi", "hello", "stock?"]
    assert state["round_trips"] == 0
    assert state["model_calls"] == 0
    assert state["limit_reached"] is False
    assert len(history) == 2


def test_valid_sequence_passes():
    messages = [
        user_message("q"),
        two_calls(),
        tool_message("a", "{}"),
        tool_message("b", "{}"),
        assistant_message("done"),
    ]

    validate_message_sequence(messages)


def test_orphan_tool_message_rejected():
    """Test a tool result without a preceding call."""
    with pytest.raises(ValidationError):
        validate_message_sequence([user_message("q"), tool_message("a", "{}")])


def test_out_of_order_tool_results_rejected():
    with pytest.raises(ValidationError):
        validate_message_sequence(
            [user_message("q"), two_calls(), tool_message("b", "{}"), tool_message("a", "{}")]
        )


def test_unanswered_calls_rejected_unless_pending_allowed():
    """Test calls must be answered before the next message or the end."""
    messages = [user_message("q"), two_calls(), tool_message("a", "{}")]

    with pytest.raises(ValidationError):
        validate_message_sequence(messages)
    with pytest.raises(ValidationError):
        validate_message_sequence(messages + [assistant_message("early")])

    validate_message_sequence(messages, allow_pending=True)


def test_pending_tool_calls():
    """Test only unanswered calls of the last request are returned."""
    messages = [user_message("q"), two_calls()]

    assert [c.id for c in pending_tool_calls(messages)] == ["a", "b"]
    assert [c.id for c in pending_tool_calls(messages + [tool_message("a", "{}")])] == ["b"]
    assert pending_tool_calls(messages + [tool_message("a", "{}"), tool_message("b", "{}")]) == []
    assert pending_tool_calls([user_message("q")]) == []
    assert pending_tool_calls([]) == []


def test_last_assistant_message():
    messages = [user_message("q"), assistant_message("first"), user_message("again")]

    assert last_assistant_message(messages).content == "first"
    assert last_assistant_message([user_message("q")]) is None


def test_build_checkpoint_first_turn():
    """Test the first checkpoint of a thread has no parent and step 0."""
    state = create_initial_state("t1", [], user_message("q"))
    state["messages"] = state["messages"] + [assistant_message("a")]
    state["model_calls"] = 1

    checkpoint = build_checkpoint("t1", state)

    assert checkpoint.parent_checkpoint_id is None
    assert checkpoint.next is None
    assert checkpoint.metadata == {
        "source": "chat",
        "step": 0,
        "round_trips": 0,
        "model_calls": 1,
        "limit_reached": False,
    }


def test_build_checkpoint_links_parent():
    """Test later checkpoints point at the previous head."""
    first_state = create_initial_state("t1", [], user_message("q"))
    first_state["messages"] = first_state["messages"] + [assistant_message("a")]
    first = build_checkpoint("t1", first_state)

    second_state = create_initial_state("t1", first.messages, user_message("q2"))
    second_state["messages"] = second_state["messages"] + [assistant_message("a2")]
    second = build_checkpoint("t1", second_state, first)

    assert second.parent_checkpoint_id == first.checkpoint_id
    assert second.metadata["step"] == 1
    assert second.checkpoint_id != first.checkpoint_id


def test_build_checkpoint_rejects_broken_pairing():
    state = create_initial_state("t1", [], user_message("q"))
    state["messages"] = state["messages"] + [two_calls()]

    with pytest.raises(ValidationError):
        build_checkpoint("t1", state)
