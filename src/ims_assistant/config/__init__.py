"""Configuration for the inventory assistant."""

from .agent_config import AgentConfig
from .checkpoint_config import CheckpointBackend, CheckpointConfig

__all__ = [
    "AgentConfig",
    "CheckpointBackend",
    "CheckpointConfig",
]
