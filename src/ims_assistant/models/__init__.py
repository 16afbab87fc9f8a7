"""Data models for the inventory assistant."""

from .message_models import (
    ChatMessage,
    Message,
    MessageRole,
    ToolCall,
    assistant_message,
    tool_message,
    user_message,
)
from .checkpoint_models import ChatResponse, Checkpoint, ThreadState
from .tool_models import (
    ToolCategory,
    ToolParameter,
    ToolRequest,
    ToolResult,
    ToolSchema,
    ToolStatus,
)
from .inventory_models import (
    AggregateOp,
    FilterOp,
    Product,
    QueryFilter,
    RecordKind,
    Sale,
    SortSpec,
    Variant,
)
from .state_models import ConversationState, GraphNode

__all__ = [
    # Messages
    "ChatMessage",
    "Message",
    "MessageRole",
    "ToolCall",
    "assistant_message",
    "tool_message",
    "user_message",
    # Checkpoints
    "ChatResponse",
    "Checkpoint",
    "ThreadState",
    # Tools
    "ToolCategory",
    "ToolParameter",
    "ToolRequest",
    "ToolResult",
    "ToolSchema",
    "ToolStatus",
    # Inventory
    "AggregateOp",
    "FilterOp",
    "Product",
    "QueryFilter",
    "RecordKind",
    "Sale",
    "SortSpec",
    "Variant",
    # Graph state
    "ConversationState",
    "GraphNode",
]
