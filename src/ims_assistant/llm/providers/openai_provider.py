"""OpenAI-compatible provider for tool-calling chat completions."""

import json
import logging
import uuid
from typing import Any, Dict, List, Optional

from openai import (
    APIConnectionError,
    APIError as OpenAIAPIError,
    AsyncOpenAI,
    AuthenticationError,
    InternalServerError,
    PermissionDeniedError,
    RateLimitError as OpenAIRateLimitError,
)

from ..base import BaseChatModel
from ...config.agent_config import AgentConfig
from ...errors import ConfigurationError, ModelInvocationError
from ...models.message_models import (
    Message,
    MessageRole,
    ToolCall,
    assistant_message,
)
from ...tools.retry import RetryManager

logger = logging.getLogger(__name__)

RAW_ARGUMENTS_KEY = "__raw_arguments__"

# APITimeoutError is a subclass of APIConnectionError
RETRYABLE_ERRORS = (APIConnectionError, OpenAIRateLimitError, InternalServerError)


def to_openai_messages(system_prompt: str, messages: List[Message]) -> List[Dict[str, Any]]:
    """
    Convert thread messages to chat-completions format.

    Args:
        system_prompt: Prepended as the first system message
        messages: Conversation window

    Returns:
        Messages in OpenAI format
    """
    converted: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]

    for message in messages:
        if message.role == MessageRole.TOOL:
            converted.append(
                {
                    "role": "tool",
                    "tool_call_id": message.tool_call_id,
                    "content": message.content or "",
                }
            )
        elif message.has_tool_calls:
            converted.append(
                {
                    "role": "assistant",
                    "content": message.content,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.name,
                                "arguments": json.dumps(call.arguments),
                            },
                        }
                        for call in message.tool_calls
                    ],
                }
            )
        else:
            converted.append({"role": message.role.value, "content": message.content or ""})

    return converted


def to_openai_tools(tools: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Wrap tool metadata as function definitions."""
    return [
        {
            "type": "function",
            "function": {
                "name": tool["name"],
                "description": tool["description"],
                "parameters": tool["parameters"],
            },
        }
        for tool in tools
    ]


def decode_arguments(raw: Optional[str]) -> Dict[str, Any]:
    """
    Decode tool-call arguments sent by the model.

    GOTCHA: Undecodable or non-object arguments are kept under
    RAW_ARGUMENTS_KEY so schema validation rejects them in-conversation

    Args:
        raw: JSON text from the provider

    Returns:
        Arguments dictionary
    """
    if not raw:
        return {}
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        return {RAW_ARGUMENTS_KEY: raw}
    if not isinstance(decoded, dict):
        return {RAW_ARGUMENTS_KEY: raw}
    return decoded


def parse_completion_message(message: Any) -> Message:
    """
    Build an assistant Message from a completion choice message.

    Args:
        message: ``choices[0].message`` of a chat completion

    Returns:
        Assistant message with decoded tool calls
    """
    tool_calls = [
        ToolCall(
            id=call.id or f"call_{uuid.uuid4().hex[:24]}",
            name=call.function.name,
            arguments=decode_arguments(call.function.arguments),
        )
        for call in message.tool_calls or []
    ]
    return assistant_message(message.content, tool_calls)


class OpenAIChatModel(BaseChatModel):
    """
    Chat model over any OpenAI-compatible chat-completions endpoint.

    PATTERN: Official OpenAI SDK with async client
    CRITICAL: SDK retries are disabled; RetryManager owns the backoff
    GOTCHA: The API key is checked on first invoke, not at construction
    """

    def __init__(self, config: Optional[AgentConfig] = None, client: Optional[AsyncOpenAI] = None):
        """
        Initialize provider.

        Args:
            config: Agent configuration (creates default if None)
            client: Pre-built client (tests)
        """
        self.config = config or AgentConfig()
        super().__init__(self.config.llm_model)
        self._client = client
        self.retry_manager = RetryManager(
            max_retries=self.config.llm_max_retries,
            backoff_factor=self.config.llm_backoff_factor,
            max_delay=self.config.llm_max_delay,
            retry_on=RETRYABLE_ERRORS,
        )

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.config.llm_api_key:
                raise ConfigurationError(
                    "No model API key configured. Set LLM_API_KEY or OPENAI_API_KEY."
                )
            self._client = AsyncOpenAI(
                api_key=self.config.llm_api_key,
                base_url=self.config.llm_base_url,
                timeout=self.config.llm_timeout_seconds,
                max_retries=0,
            )
        return self._client

    async def _complete(self, request: Dict[str, Any]) -> Any:
        return await self.client.chat.completions.create(**request)

    async def invoke(
        self,
        system_prompt: str,
        messages: List[Message],
        tools: List[Dict[str, Any]],
    ) -> Message:
        request: Dict[str, Any] = {
            "model": self.model_name,
            "messages": to_openai_messages(system_prompt, messages),
            "temperature": self.config.temperature,
        }
        if tools:
            request["tools"] = to_openai_tools(tools)

        try:
            response = await self.retry_manager.execute_with_retry(
                self._complete, request, operation=f"{self.model_name} completion"
            )

        except (AuthenticationError, PermissionDeniedError) as e:
            self.logger.error(f"Model provider rejected credentials: {e}")
            raise ConfigurationError(f"Model provider rejected credentials: {e}") from e
        except RETRYABLE_ERRORS as e:
            raise ModelInvocationError(f"Model provider unavailable: {e}") from e
        except OpenAIAPIError as e:
            self.logger.error(f"Model API error: {e}")
            raise ModelInvocationError(f"Model API error: {e}") from e

        if not response.choices:
            raise ModelInvocationError("Model returned no choices")

        message = parse_completion_message(response.choices[0].message)
        self.logger.debug(
            f"Model returned {len(message.tool_calls)} tool call(s), "
            f"content={'yes' if message.content else 'no'}"
        )
        return message

    async def close(self) -> None:
        """Close OpenAI client."""
        if self._client is not None:
            await self._client.close()
            self._client = None
