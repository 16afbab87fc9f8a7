"""Conversation graph: state, nodes, edges and workflow."""

from .state import (
    build_checkpoint,
    create_initial_state,
    last_assistant_message,
    pending_tool_calls,
    validate_message_sequence,
)
from .history import build_thread_state, select_prompt_window, to_chat_messages
from .nodes import agent_node, limit_node, tools_node
from .edges import route_from_agent
from .workflow import create_conversation_graph, recursion_limit_for
from .prompts import SYSTEM_PROMPT

__all__ = [
    "build_checkpoint",
    "create_initial_state",
    "last_assistant_message",
    "pending_tool_calls",
    "validate_message_sequence",
    "build_thread_state",
    "select_prompt_window",
    "to_chat_messages",
    "agent_node",
    "limit_node",
    "tools_node",
    "route_from_agent",
    "create_conversation_graph",
    "recursion_limit_for",
    "SYSTEM_PROMPT",
]
