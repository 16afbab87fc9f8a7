"""Node functions for the conversation graph.

CRITICAL: Nodes return the full new message list; they never mutate state.
"""

import json
import logging
from typing import Any, Dict

from .history import select_prompt_window
from .prompts import LIMIT_REACHED_MESSAGE, SKIPPED_TOOL_CALL_ERROR, SYSTEM_PROMPT
from .state import pending_tool_calls
from ..errors import ModelInvocationError
from ..llm.base import BaseChatModel
from ..models.message_models import MessageRole, assistant_message, tool_message
from ..models.state_models import ConversationState
from ..models.tool_models import ToolRequest
from ..tools.executor import ToolExecutor
from ..tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


async def agent_node(
    state: ConversationState,
    model: BaseChatModel,
    registry: ToolRegistry,
    max_history_messages: int = 40,
) -> Dict[str, Any]:
    """
    Ask the model for the next assistant message.

    CRITICAL: Model failures propagate and abort the turn.

    Args:
        state: Current turn state
        model: Chat model
        registry: Tool registry; only metadata is sent
        max_history_messages: Prompt window size

    Returns:
        State updates dictionary
    """
    messages = state.get("messages", [])
    window = select_prompt_window(messages, max_history_messages)

    response = await model.invoke(SYSTEM_PROMPT, window, registry.list_tool_metadata())
    if response.role != MessageRole.ASSISTANT:
        raise ModelInvocationError(f"Model returned a '{response.role.value}' message")
    if not response.has_tool_calls and not (response.content and response.content.strip()):
        # Every committed turn ends with visible assistant content
        raise ModelInvocationError("Model returned an empty reply")

    model_calls = state.get("model_calls", 0) + 1
    logger.debug(
        f"Agent step {model_calls} on thread {state.get('thread_id')}: "
        f"{len(response.tool_calls)} tool call(s)"
    )

    return {
        "messages": messages + [response],
        "model_calls": model_calls,
    }


async def tools_node(state: ConversationState, executor: ToolExecutor) -> Dict[str, Any]:
    """
    Run the requested tools sequentially, in request order.

    Tool failures become tool-result messages; they never abort the turn.

    Args:
        state: Current turn state
        executor: Tool executor

    Returns:
        State updates dictionary
    """
    messages = list(state.get("messages", []))

    for call in pending_tool_calls(messages):
        result = await executor.execute_tool(
            ToolRequest(
                tool_name=call.name,
                parameters=call.arguments,
                tool_call_id=call.id,
                thread_id=state.get("thread_id"),
            )
        )
        messages.append(tool_message(call.id, result.to_content()))

    return {
        "messages": messages,
        "round_trips": state.get("round_trips", 0) + 1,
    }


async def limit_node(state: ConversationState) -> Dict[str, Any]:
    """
    End a turn that hit the round-trip cap.

    Pending calls are answered with an error so the history stays well formed,
    then a diagnostic assistant reply closes the turn.

    Args:
        state: Current turn state

    Returns:
        State updates dictionary
    """
    messages = list(state.get("messages", []))
    skipped = pending_tool_calls(messages)

    logger.warning(
        f"Thread {state.get('thread_id')} hit the round-trip limit after "
        f"{state.get('round_trips', 0)} round trips; skipping {len(skipped)} tool call(s)"
    )

    for call in skipped:
        messages.append(tool_message(call.id, json.dumps({"error": SKIPPED_TOOL_CALL_ERROR})))
    messages.append(assistant_message(LIMIT_REACHED_MESSAGE))

    return {
        "messages": messages,
        "limit_reached": True,
    }
