"""Views over a thread's persisted history."""

import logging
from typing import List, Optional

from ..models.checkpoint_models import Checkpoint, ThreadState
from ..models.message_models import ChatMessage, Message, MessageRole

logger = logging.getLogger(__name__)


def select_prompt_window(messages: List[Message], max_messages: int) -> List[Message]:
    """
    Most recent messages to send to the model.

    The window starts at a user message so a tool result is never sent
    without the call that requested it. It may therefore exceed
    ``max_messages``.

    Args:
        messages: Full thread history, oldest first
        max_messages: Target window size

    Returns:
        Suffix of ``messages``
    """
    if len(messages) <= max_messages:
        return list(messages)

    start = len(messages) - max_messages
    while start > 0 and messages[start].role != MessageRole.USER:
        start -= 1

    if start > 0:
        logger.debug(f"Prompt window drops {start} of {len(messages)} messages")
    return list(messages[start:])


def to_chat_messages(messages: List[Message]) -> List[ChatMessage]:
    """
    Display view of a thread: user turns and assistant replies only.

    System and tool messages are dropped, as are assistant messages with
    blank content (pure tool-call requests).
    """
    return [
        ChatMessage(role=m.role, content=m.content, timestamp=m.timestamp)
        for m in messages
        if m.role in (MessageRole.USER, MessageRole.ASSISTANT)
        and m.content
        and m.content.strip()
    ]


def build_thread_state(thread_id: str, checkpoint: Optional[Checkpoint]) -> ThreadState:
    if checkpoint is None:
        return ThreadState(thread_id=thread_id)

    return ThreadState(
        thread_id=thread_id,
        checkpoint_id=checkpoint.checkpoint_id,
        values={"messages": list(checkpoint.messages)},
        next=[checkpoint.next] if checkpoint.next else [],
        metadata=dict(checkpoint.metadata),
        created_at=checkpoint.created_at,
    )
