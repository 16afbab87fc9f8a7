"""Conditional edge logic for the conversation graph.

CRITICAL: Edge functions must return node names as strings.
"""

import logging
from typing import Literal

from ..models.state_models import ConversationState

logger = logging.getLogger(__name__)

EdgeDecision = Literal["tools", "limit", "end"]


def route_from_agent(state: ConversationState, max_round_trips: int) -> EdgeDecision:
    """
    Route after the model speaks.

    Args:
        state: Current turn state
        max_round_trips: Round-trip cap for one turn

    Returns:
        "tools" to run requested calls, "limit" when the cap is reached,
        "end" for a final answer
    """
    messages = state.get("messages", [])
    last = messages[-1] if messages else None

    if last is None or not last.has_tool_calls:
        logger.debug("Routing from agent: final answer")
        return "end"

    round_trips = state.get("round_trips", 0)
    if round_trips >= max_round_trips:
        logger.debug(f"Routing from agent: limit ({round_trips}/{max_round_trips})")
        return "limit"

    logger.debug(f"Routing from agent: tools ({round_trips + 1}/{max_round_trips})")
    return "tools"
