"""Agent orchestration service: chat turns and thread history."""

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from .checkpoint_service import CheckpointManager
from .thread_locks import ThreadLockManager
from ..checkpoint.base import CheckpointStore
from ..config.agent_config import AgentConfig
from ..core.history import build_thread_state, to_chat_messages
from ..core.state import build_checkpoint, create_initial_state, last_assistant_message
from ..core.workflow import create_conversation_graph, recursion_limit_for
from ..errors import IMSAssistantError, StoreUnavailableError, TurnTimeoutError, ValidationError
from ..llm.base import BaseChatModel
from ..models.checkpoint_models import ChatResponse, Checkpoint, ThreadState
from ..models.message_models import ChatMessage, user_message
from ..models.state_models import ConversationState
from ..tools.executor import ToolExecutor
from ..tools.registry import ToolRegistry
from ..tools.retry import RetryManager

logger = logging.getLogger(__name__)

MAX_THREAD_ID_LENGTH = 128
_THREAD_ID_PATTERN = re.compile(r"^[^\s\x00-\x1f\x7f]+$")


def validate_thread_id(thread_id: Any) -> str:
    """
    Check a caller-supplied thread id.

    Raises:
        ValidationError: If empty, too long, or containing whitespace or
            control characters
    """
    if not isinstance(thread_id, str) or not thread_id:
        raise ValidationError("thread_id must be a non-empty string")
    if len(thread_id) > MAX_THREAD_ID_LENGTH:
        raise ValidationError(f"thread_id must be at most {MAX_THREAD_ID_LENGTH} characters")
    if not _THREAD_ID_PATTERN.match(thread_id):
        raise ValidationError("thread_id must not contain whitespace or control characters")
    return thread_id


class AgentOrchestrator:
    """
    High-level chat service over the conversation graph.

    PATTERN: Facade like the other services; single entry point for chat
    CRITICAL: A turn is committed completely (one checkpoint) or not at all
    CRITICAL: Turns on one thread are serialized; other threads run freely
    GOTCHA: The timeout covers load and graph run, never the save
    """

    def __init__(
        self,
        model: BaseChatModel,
        registry: ToolRegistry,
        checkpoint_manager: CheckpointManager,
        config: Optional[AgentConfig] = None,
        lock_manager: Optional[ThreadLockManager] = None,
    ):
        """
        Initialize agent orchestrator.

        Args:
            model: Chat model
            registry: Frozen tool registry
            checkpoint_manager: Owner of the checkpoint store
            config: Agent configuration (creates default if None)
            lock_manager: Per-thread locks (creates one if None)
        """
        self.config = config or AgentConfig()
        self.model = model
        self.registry = registry
        self.checkpoint_manager = checkpoint_manager
        self.locks = lock_manager or ThreadLockManager()

        self.executor = ToolExecutor(registry, default_timeout=self.config.tool_timeout_seconds)
        self.graph = create_conversation_graph(
            model=model,
            registry=registry,
            executor=self.executor,
            max_round_trips=self.config.max_round_trips,
            max_history_messages=self.config.max_history_messages,
        )
        self.store_retry = RetryManager(
            max_retries=self.config.store_max_retries,
            backoff_factor=self.config.store_backoff_factor,
            max_delay=self.config.store_max_delay,
            retry_on=(StoreUnavailableError,),
        )

        logger.info(
            f"Agent orchestrator initialized with {registry.get_tool_count()} tools "
            f"(model={model.model_name})"
        )

    def _validate_message(self, message: Any) -> str:
        if not isinstance(message, str) or not message.strip():
            raise ValidationError("message must be a non-empty string")
        if len(message) > self.config.max_message_chars:
            raise ValidationError(
                f"message must be at most {self.config.max_message_chars} characters"
            )
        return message

    async def _load(self, store: CheckpointStore, thread_id: str) -> Optional[Checkpoint]:
        return await self.store_retry.execute_with_retry(
            store.load, thread_id, operation=f"load thread {thread_id}"
        )

    async def _run_turn(
        self,
        store: CheckpointStore,
        thread_id: str,
        message: str,
    ) -> Tuple[Optional[Checkpoint], ConversationState]:
        parent = await self._load(store, thread_id)
        history = list(parent.messages) if parent else []

        initial_state = create_initial_state(thread_id, history, user_message(message))
        final_state = await self.graph.ainvoke(
            initial_state,
            config={"recursion_limit": recursion_limit_for(self.config.max_round_trips)},
        )
        return parent, final_state

    async def chat(
        self,
        thread_id: str,
        message: str,
        timeout: Optional[float] = None,
    ) -> ChatResponse:
        """
        Run one chat turn and persist it.

        Args:
            thread_id: Conversation thread (created on first use)
            message: User message
            timeout: Seconds allowed for load and graph run
                (default: config.chat_timeout_seconds)

        Returns:
            ChatResponse with the new checkpoint id and the assistant reply

        Raises:
            ValidationError: On a malformed thread id or message
            TurnTimeoutError: If the turn exceeded the timeout; nothing saved
            ModelInvocationError: If the model failed; nothing saved
            StoreError: If the checkpoint store failed
            ConfigurationError: On missing credentials or backend settings
        """
        validate_thread_id(thread_id)
        self._validate_message(message)
        timeout = timeout if timeout is not None else self.config.chat_timeout_seconds

        store = await self.checkpoint_manager.get_store()

        async with self.locks.hold(thread_id):
            try:
                turn = self._run_turn(store, thread_id, message)
                if timeout is not None:
                    parent, final_state = await asyncio.wait_for(turn, timeout=timeout)
                else:
                    parent, final_state = await turn
            except asyncio.TimeoutError:
                logger.error(f"Turn on thread {thread_id} timed out after {timeout}s")
                raise TurnTimeoutError(f"Chat turn timed out after {timeout}s")
            except IMSAssistantError as e:
                logger.error(f"Turn on thread {thread_id} aborted: {e}")
                raise

            checkpoint = build_checkpoint(thread_id, final_state, parent)
            await self.store_retry.execute_with_retry(
                store.save, thread_id, checkpoint, operation=f"save thread {thread_id}"
            )

        logger.info(
            f"Committed checkpoint {checkpoint.checkpoint_id} on thread {thread_id} "
            f"(step={checkpoint.metadata['step']}, "
            f"round_trips={checkpoint.metadata['round_trips']})"
        )

        reply = last_assistant_message(checkpoint.messages)
        return ChatResponse(
            thread_id=thread_id,
            checkpoint_id=checkpoint.checkpoint_id,
            content=(reply.content if reply and reply.content else ""),
        )

    async def get_state(self, thread_id: str) -> ThreadState:
        """
        Current state of a thread.

        Args:
            thread_id: Conversation thread

        Returns:
            ThreadState; empty for an unseen thread
        """
        validate_thread_id(thread_id)
        store = await self.checkpoint_manager.get_store()
        return build_thread_state(thread_id, await self._load(store, thread_id))

    async def get_history(self, thread_id: str, limit: Optional[int] = None) -> List[Checkpoint]:
        """
        Checkpoints of a thread, newest first.

        Args:
            thread_id: Conversation thread
            limit: Maximum checkpoints to return

        Returns:
            Checkpoints; empty for an unseen thread
        """
        validate_thread_id(thread_id)
        if limit is not None and limit < 1:
            raise ValidationError("limit must be a positive integer")

        store = await self.checkpoint_manager.get_store()
        return await self.store_retry.execute_with_retry(
            store.load_history, thread_id, limit, operation=f"load history {thread_id}"
        )

    async def get_chat_messages(self, thread_id: str) -> List[ChatMessage]:
        """
        Display view of a thread.

        Args:
            thread_id: Conversation thread

        Returns:
            User and assistant messages with visible content, in order
        """
        validate_thread_id(thread_id)
        store = await self.checkpoint_manager.get_store()
        checkpoint = await self._load(store, thread_id)
        return to_chat_messages(checkpoint.messages) if checkpoint else []

    def list_tools(self) -> List[Dict[str, Any]]:
        return self.registry.list_tool_metadata()

    async def close(self) -> None:
        """Close the model client and the checkpoint store."""
        await self.model.close()
        await self.checkpoint_manager.close()
