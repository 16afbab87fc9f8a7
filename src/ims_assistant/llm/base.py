"""Base chat model abstraction."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from ..models.message_models import Message

logger = logging.getLogger(__name__)


class BaseChatModel(ABC):
    """
    Abstract base class for tool-calling chat models.

    All providers must implement async invocation and follow consistent
    error handling patterns.
    """

    def __init__(self, model_name: str):
        """
        Initialize chat model.

        Args:
            model_name: Provider model identifier
        """
        self.model_name = model_name
        self.logger = logging.getLogger(f"{__name__}.{model_name}")

    @abstractmethod
    async def invoke(
        self,
        system_prompt: str,
        messages: List[Message],
        tools: List[Dict[str, Any]],
    ) -> Message:
        """
        Produce the next assistant message.

        CRITICAL: Must be async for use in the conversation graph
        CRITICAL: Only tool metadata is sent, never executors

        Args:
            system_prompt: Fixed instruction prompt
            messages: Conversation window, oldest first
            tools: Tool metadata (name, description, parameters schema)

        Returns:
            Assistant message, possibly carrying tool calls

        Raises:
            ModelInvocationError: When the provider fails after retries
            ConfigurationError: On missing or rejected credentials
        """
        pass

    async def close(self) -> None:
        """Release provider connections."""
        pass
