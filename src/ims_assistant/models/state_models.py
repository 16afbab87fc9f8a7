"""State models for the conversation graph."""

from typing import List, TypedDict
from enum import Enum

from .message_models import Message


class GraphNode(str, Enum):
    """Nodes of the conversation graph."""

    AGENT = "agent"
    TOOLS = "tools"
    LIMIT = "limit"


# TypedDict for LangGraph state (required format)
class ConversationState(TypedDict, total=False):
    """
    State schema for one chat turn.

    CRITICAL: TypedDict is required by StateGraph, not a Pydantic model.
    Nodes return the full new message list; there is no reducer.
    """

    thread_id: str
    messages: List[Message]

    # Control flow
    round_trips: int
    model_calls: int
    limit_reached: bool
