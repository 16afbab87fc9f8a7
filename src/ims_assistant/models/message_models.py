"""Conversation message models."""

from pydantic import BaseModel, Field
from typing import Dict, Any, Optional, List
from enum import Enum
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class MessageRole(str, Enum):
    """Roles a message can carry in a thread."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolCall(BaseModel):
    """A model request to run one tool."""

    id: str = Field(description="Provider-assigned call identifier")
    name: str = Field(description="Name of the requested tool")
    arguments: Dict[str, Any] = Field(default_factory=dict)


class Message(BaseModel):
    """
    One entry in a conversation thread.

    Tool messages reference the call they answer via tool_call_id.
    """

    role: MessageRole
    content: Optional[str] = Field(default=None)
    tool_calls: List[ToolCall] = Field(default_factory=list)
    tool_call_id: Optional[str] = Field(default=None)
    timestamp: datetime = Field(default_factory=utc_now)

    class Config:
        """Pydantic configuration."""

        frozen = True

    @property
    def has_tool_calls(self) -> bool:
        return self.role == MessageRole.ASSISTANT and len(self.tool_calls) > 0


class ChatMessage(BaseModel):
    """Display-ready message returned to clients."""

    role: MessageRole
    content: str
    timestamp: datetime


def user_message(content: str) -> Message:
    return Message(role=MessageRole.USER, content=content)


def assistant_message(
    content: Optional[str],
    tool_calls: Optional[List[ToolCall]] = None,
) -> Message:
    return Message(
        role=MessageRole.ASSISTANT,
        content=content,
        tool_calls=tool_calls or [],
    )


def tool_message(tool_call_id: str, content: str) -> Message:
    return Message(role=MessageRole.TOOL, content=content, tool_call_id=tool_call_id)
