"""Application wiring for the inventory assistant."""

import logging
from pathlib import Path
from typing import Optional, Union

from .config.agent_config import AgentConfig
from .config.checkpoint_config import CheckpointConfig
from .llm.base import BaseChatModel
from .llm.providers.openai_provider import OpenAIChatModel
from .repository.base import InventoryRepository
from .repository.memory import InMemoryInventoryRepository
from .repository.seed import create_sample_repository
from .services.agent_service import AgentOrchestrator
from .services.checkpoint_service import CheckpointManager, get_checkpoint_manager
from .tools.catalog import build_tool_registry

logger = logging.getLogger(__name__)


def create_orchestrator(
    agent_config: Optional[AgentConfig] = None,
    checkpoint_config: Optional[CheckpointConfig] = None,
    repository: Optional[InventoryRepository] = None,
    model: Optional[BaseChatModel] = None,
    checkpoint_manager: Optional[CheckpointManager] = None,
    seed_file: Optional[Union[str, Path]] = None,
) -> AgentOrchestrator:
    """
    Wire configuration, store, repository, tools and model together.

    Nothing connects here: the store opens on first use and the model
    client is created on the first invoke.

    Args:
        agent_config: Agent configuration (creates default if None)
        checkpoint_config: Checkpoint configuration; when given, a dedicated
            manager is created instead of the process-wide one
        repository: Inventory read model (default: seed file or sample data)
        model: Chat model (default: OpenAI-compatible provider)
        checkpoint_manager: Pre-built checkpoint manager
        seed_file: JSON seed document for the in-memory repository

    Returns:
        Ready AgentOrchestrator
    """
    agent_config = agent_config or AgentConfig()

    if repository is None:
        if seed_file:
            repository = InMemoryInventoryRepository.from_seed_file(seed_file)
        else:
            repository = create_sample_repository()

    if checkpoint_manager is None:
        if checkpoint_config is not None:
            checkpoint_manager = CheckpointManager(checkpoint_config)
        else:
            checkpoint_manager = get_checkpoint_manager()

    registry = build_tool_registry(repository)
    model = model or OpenAIChatModel(agent_config)

    return AgentOrchestrator(
        model=model,
        registry=registry,
        checkpoint_manager=checkpoint_manager,
        config=agent_config,
    )
