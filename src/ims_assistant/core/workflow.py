"""Conversation graph built on LangGraph.

CRITICAL patterns:
- Use TypedDict for state schema
- Conditional edges must return node names as strings
- Compiled without a checkpointer; the checkpoint store persists whole turns
"""

import logging

from langgraph.graph import END, StateGraph

from .edges import route_from_agent
from .nodes import agent_node, limit_node, tools_node
from ..llm.base import BaseChatModel
from ..models.state_models import ConversationState, GraphNode
from ..tools.executor import ToolExecutor
from ..tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def recursion_limit_for(max_round_trips: int) -> int:
    """
    LangGraph step budget for one turn.

    A turn runs at most max_round_trips agent/tools pairs, then one more
    agent step and possibly the limit node.
    """
    return 2 * max_round_trips + 5


def create_conversation_graph(
    model: BaseChatModel,
    registry: ToolRegistry,
    executor: ToolExecutor,
    max_round_trips: int = 5,
    max_history_messages: int = 40,
):
    """
    Create the agent/tools state machine for one chat turn.

    Args:
        model: Chat model deciding between answering and calling tools
        registry: Tool registry (metadata for the model)
        executor: Tool executor
        max_round_trips: Round-trip cap per turn
        max_history_messages: Prompt window size

    Returns:
        Compiled StateGraph
    """
    logger.info(f"Creating conversation graph (max_round_trips={max_round_trips})")

    # CRITICAL: Must use TypedDict, not Pydantic model
    graph = StateGraph(ConversationState)

    async def agent(state: ConversationState):
        return await agent_node(
            state,
            model=model,
            registry=registry,
            max_history_messages=max_history_messages,
        )

    async def tools(state: ConversationState):
        return await tools_node(state, executor=executor)

    def route(state: ConversationState):
        return route_from_agent(state, max_round_trips)

    graph.add_node(GraphNode.AGENT.value, agent)
    graph.add_node(GraphNode.TOOLS.value, tools)
    graph.add_node(GraphNode.LIMIT.value, limit_node)

    # CRITICAL: Router functions must return node names as strings
    graph.add_conditional_edges(
        GraphNode.AGENT.value,
        route,
        {
            "tools": GraphNode.TOOLS.value,
            "limit": GraphNode.LIMIT.value,
            "end": END,
        },
    )
    graph.add_edge(GraphNode.TOOLS.value, GraphNode.AGENT.value)
    graph.add_edge(GraphNode.LIMIT.value, END)

    graph.set_entry_point(GraphNode.AGENT.value)

    compiled = graph.compile()
    logger.info("Conversation graph compiled successfully")
    return compiled
