"""Services for the inventory assistant."""

from .agent_service import AgentOrchestrator, validate_thread_id
from .checkpoint_service import (
    CheckpointManager,
    create_checkpoint_store,
    get_checkpoint_manager,
    reset_checkpoint_manager,
)
from .thread_locks import ThreadLockManager

__all__ = [
    "AgentOrchestrator",
    "validate_thread_id",
    "CheckpointManager",
    "create_checkpoint_store",
    "get_checkpoint_manager",
    "reset_checkpoint_manager",
    "ThreadLockManager",
]
