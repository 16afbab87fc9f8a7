"""State management utilities for the conversation graph."""

import logging
from typing import Any, Dict, List, Optional

from ..errors import ValidationError
from ..models.checkpoint_models import Checkpoint
from ..models.message_models import Message, MessageRole, ToolCall
from ..models.state_models import ConversationState

logger = logging.getLogger(__name__)


def create_initial_state(
    thread_id: str,
    history: List[Message],
    message: Message,
) -> ConversationState:
    """
    Create the state a chat turn starts from.

    Args:
        thread_id: Conversation thread
        history: Messages of the latest checkpoint
        message: The new user message

    Returns:
        ConversationState TypedDict initialized
    """
    state: ConversationState = {
        "thread_id": thread_id,
        "messages": list(history) + [message],
        # Control flow
        "round_trips": 0,
        "model_calls": 0,
        "limit_reached": False,
    }
    return state


def validate_message_sequence(messages: List[Message], allow_pending: bool = False) -> None:
    """
    Check that tool results pair up with the calls that requested them.

    Every tool message must answer the next unanswered call of the nearest
    preceding assistant message, and every call must be answered before the
    next non-tool message.

    Args:
        messages: Thread messages, oldest first
        allow_pending: Accept unanswered calls at the end of the list

    Raises:
        ValidationError: On an orphaned, misordered or missing tool result
    """
    pending: List[str] = []

    for index, message in enumerate(messages):
        if message.role == MessageRole.TOOL:
            if not pending or message.tool_call_id != pending[0]:
                raise ValidationError(
                    f"Tool message at position {index} answers unexpected call "
                    f"'{message.tool_call_id}'"
                )
            pending.pop(0)
            continue

        if pending:
            raise ValidationError(
                f"Message at position {index} follows unanswered tool calls: {pending}"
            )
        if message.has_tool_calls:
            pending = [call.id for call in message.tool_calls]

    if pending and not allow_pending:
        raise ValidationError(f"Thread ends with unanswered tool calls: {pending}")


def pending_tool_calls(messages: List[Message]) -> List[ToolCall]:
    """
    Calls of the last assistant message that have no tool result yet.

    Args:
        messages: Thread messages, oldest first

    Returns:
        Unanswered calls in request order
    """
    answered = set()
    for message in reversed(messages):
        if message.role == MessageRole.TOOL:
            answered.add(message.tool_call_id)
            continue
        if message.has_tool_calls:
            return [call for call in message.tool_calls if call.id not in answered]
        return []
    return []


def last_assistant_message(messages: List[Message]) -> Optional[Message]:
    return next((m for m in reversed(messages) if m.role == MessageRole.ASSISTANT), None)


def build_checkpoint(
    thread_id: str,
    state: ConversationState,
    parent: Optional[Checkpoint] = None,
) -> Checkpoint:
    """
    Snapshot a finished turn as the thread's next checkpoint.

    Args:
        thread_id: Conversation thread
        state: Final graph state
        parent: Previous head checkpoint, if any

    Returns:
        New checkpoint whose parent is the previous head
    """
    messages = state.get("messages", [])
    validate_message_sequence(messages)

    step = parent.metadata.get("step", -1) + 1 if parent else 0
    metadata: Dict[str, Any] = {
        "source": "chat",
        "step": step,
        "round_trips": state.get("round_trips", 0),
        "model_calls": state.get("model_calls", 0),
        "limit_reached": state.get("limit_reached", False),
    }

    return Checkpoint(
        thread_id=thread_id,
        parent_checkpoint_id=parent.checkpoint_id if parent else None,
        messages=messages,
        next=None,
        metadata=metadata,
    )
