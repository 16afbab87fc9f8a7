"""Checkpoint data models for thread persistence."""

from pydantic import BaseModel, Field
from typing import Dict, Any, Optional, List
from datetime import datetime
import uuid

from .message_models import Message, utc_now


class Checkpoint(BaseModel):
    """
    Immutable snapshot of a thread after one completed chat turn.

    CRITICAL: Checkpoints are never mutated once written; a new turn always
    produces a new checkpoint whose parent is the previous head.
    """

    thread_id: str
    checkpoint_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    parent_checkpoint_id: Optional[str] = None
    messages: List[Message] = Field(default_factory=list)
    next: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)

    class Config:
        """Pydantic configuration."""

        frozen = True

    def to_record(self) -> Dict[str, Any]:
        """
        Convert to the JSON-ready storage shape.

        Returns:
            Dictionary with messages and metadata as plain JSON values
        """
        return self.model_dump(mode="json")

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Checkpoint":
        """
        Rebuild a checkpoint from its storage shape.

        Args:
            record: Dictionary produced by to_record() or read from a backend

        Returns:
            Checkpoint instance
        """
        return cls.model_validate(record)


class ThreadState(BaseModel):
    """Current state of a thread as seen by clients."""

    thread_id: str
    checkpoint_id: Optional[str] = None
    values: Dict[str, Any] = Field(default_factory=lambda: {"messages": []})
    next: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None


class ChatResponse(BaseModel):
    """Result of one chat turn."""

    thread_id: str
    checkpoint_id: str
    content: str
