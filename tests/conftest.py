"""Shared fixtures: a small inventory and a scripted chat model."""

from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from ims_assistant.config.agent_config import AgentConfig
from ims_assistant.llm.base import BaseChatModel
from ims_assistant.models.message_models import Message, ToolCall, assistant_message, utc_now
from ims_assistant.repository.memory import InMemoryInventoryRepository
from ims_assistant.services.checkpoint_service import CheckpointManager
from ims_assistant.checkpoint.memory_store import InMemoryCheckpointStore
from ims_assistant.main import create_orchestrator

ScriptStep = Union[Message, Exception, Callable[[List[Message]], Any]]


class ScriptedChatModel(BaseChatModel):
    """
    Chat model replaying a fixed script of replies.

    Each step is a Message to return, an exception to raise, or a callable
    receiving the prompt messages (sync or async) and returning a Message.
    """

    def __init__(self, script: Optional[List[ScriptStep]] = None, repeat_last: bool = False):
        super().__init__("scripted")
        self.script = list(script or [])
        self.repeat_last = repeat_last
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    async def invoke(self, system_prompt, messages, tools) -> Message:
        self.calls.append({"system_prompt": system_prompt, "messages": list(messages), "tools": tools})

        if not self.script:
            raise AssertionError("Scripted model ran out of replies")
        step = self.script[0] if (self.repeat_last and len(self.script) == 1) else self.script.pop(0)

        if isinstance(step, Exception):
            raise step
        if callable(step):
            result = step(list(messages))
            if hasattr(result, "__await__"):
                result = await result
            return result
        return step

    async def close(self) -> None:
        self.closed = True


def reply(content: str) -> Message:
    return assistant_message(content)


def call(name: str, arguments: Optional[Dict[str, Any]] = None, call_id: str = "call_1") -> Message:
    return assistant_message(None, [ToolCall(id=call_id, name=name, arguments=arguments or {})])


def inventory_document(now=None) -> Dict[str, Any]:
    """
    Two products, four variants, seven sales.

    Three sales fall in the last 30 days, one 40 days ago, three in March 2024.
    """
    now = now or utc_now()
    return {
        "products": [
            {
                "code": "WID-1",
                "name": "Widget",
                "category": "Tools",
                "brand": "Acme",
                "variants": [
                    {"color": "Red", "size": "S", "stock_quantity": 0, "min_stock_quantity": 2, "buying_price": 5, "selling_price": 10},
                    {"color": "Blue", "size": "M", "stock_quantity": 3, "min_stock_quantity": 5, "buying_price": 5, "selling_price": 12},
                    {"color": "Green", "size": "L", "stock_quantity": 50, "min_stock_quantity": 5, "buying_price": 5, "selling_price": 10},
                ],
            },
            {
                "code": "GAD-2",
                "name": "Gadget Pro",
                "category": "Electronics",
                "brand": "Globex",
                "variants": [
                    {"color": "Black", "size": "Std", "stock_quantity": 10, "min_stock_quantity": 2, "buying_price": 100, "selling_price": 150},
                ],
            },
        ],
        "sales": [
            {"id": "s1", "variant_id": "WID-1-2", "user_id": "u1", "quantity": 2, "selling_price": 12, "total_amount": 24, "customer_name": "Alice Smith", "sale_date": now - timedelta(days=1)},
            {"id": "s2", "variant_id": "GAD-2-1", "user_id": "u1", "quantity": 1, "selling_price": 150, "total_amount": 150, "customer_name": "Bob", "sale_date": now - timedelta(days=2)},
            {"id": "s3", "variant_id": "WID-1-3", "user_id": "u2", "quantity": 3, "selling_price": 10, "total_amount": 30, "customer_name": "Alice Smith", "notes": "Regular customer", "sale_date": now - timedelta(days=10)},
            {"id": "s4", "variant_id": "GAD-2-1", "user_id": "u2", "quantity": 2, "selling_price": 150, "total_amount": 300, "sale_date": now - timedelta(days=40)},
            {"id": "s5", "variant_id": "WID-1-2", "user_id": "u1", "quantity": 1, "selling_price": 12, "total_amount": 12, "customer_name": "Carol", "sale_date": "2024-03-01T10:00:00"},
            {"id": "s6", "variant_id": "GAD-2-1", "user_id": "u1", "quantity": 1, "selling_price": 150, "total_amount": 150, "customer_name": "Carol", "sale_date": "2024-03-02T23:30:00"},
            {"id": "s7", "variant_id": "WID-1-2", "user_id": "u2", "quantity": 1, "selling_price": 12, "total_amount": 12, "customer_name": "Dave", "sale_date": "2024-03-05T00:00:00"},
        ],
    }


@pytest.fixture
def repository():
    """Small inventory repository."""
    return InMemoryInventoryRepository.from_document(inventory_document())


@pytest.fixture
def agent_config():
    """Agent configuration with fast retries and no timeout."""
    return AgentConfig(
        llm_api_key="test-key",
        llm_max_retries=3,
        llm_backoff_factor=0,
        llm_max_delay=0,
        max_round_trips=5,
        chat_timeout_seconds=None,
        tool_timeout_seconds=5,
        store_max_retries=2,
        store_backoff_factor=0,
        store_max_delay=0,
    )


@pytest.fixture
def checkpoint_store():
    """In-memory checkpoint store."""
    return InMemoryCheckpointStore()


@pytest.fixture
def make_orchestrator(repository, agent_config, checkpoint_store):
    """Factory building an orchestrator around a scripted model."""

    def factory(script=None, model=None, store=None, config=None, **kwargs):
        model = model or ScriptedChatModel(script, **kwargs)
        manager = CheckpointManager(store=store or checkpoint_store)
        return create_orchestrator(
            agent_config=config or agent_config,
            repository=repository,
            model=model,
            checkpoint_manager=manager,
        )

    return factory
