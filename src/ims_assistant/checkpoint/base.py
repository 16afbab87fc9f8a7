"""Checkpoint store contract."""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from ..errors import CheckpointConflictError, ValidationError
from ..models.checkpoint_models import Checkpoint

logger = logging.getLogger(__name__)


class CheckpointStore(ABC):
    """
    Append-only, per-thread checkpoint log.

    PATTERN: One backend per process, chosen at startup
    CRITICAL: Checkpoints are never updated or deleted once written
    CRITICAL: Saving an existing checkpoint id is a no-op, so retries are safe
    GOTCHA: A save whose parent is not the current head is a conflict
    """

    backend_name = "base"

    async def setup(self) -> None:
        """Create tables or connections. Safe to call more than once."""
        pass

    @abstractmethod
    async def save(self, thread_id: str, checkpoint: Checkpoint) -> None:
        """
        Append a checkpoint to a thread.

        Args:
            thread_id: Thread the checkpoint belongs to
            checkpoint: Checkpoint to persist

        Raises:
            ValidationError: If the checkpoint belongs to another thread
            CheckpointConflictError: If the parent is not the thread head
            StoreError: If the backend fails
        """
        pass

    @abstractmethod
    async def load(self, thread_id: str) -> Optional[Checkpoint]:
        """
        Load the latest checkpoint of a thread.

        Args:
            thread_id: Thread identifier

        Returns:
            Latest checkpoint or None for an unseen thread
        """
        pass

    @abstractmethod
    async def load_history(
        self, thread_id: str, limit: Optional[int] = None
    ) -> List[Checkpoint]:
        """
        Load a thread's checkpoints, newest first.

        Args:
            thread_id: Thread identifier
            limit: Maximum checkpoints to return

        Returns:
            Checkpoints ordered newest first
        """
        pass

    async def close(self) -> None:
        """Release connections."""
        pass

    @staticmethod
    def check_thread(thread_id: str, checkpoint: Checkpoint) -> None:
        if checkpoint.thread_id != thread_id:
            raise ValidationError(
                f"Checkpoint {checkpoint.checkpoint_id} belongs to thread "
                f"'{checkpoint.thread_id}', not '{thread_id}'"
            )

    @staticmethod
    def check_parent(checkpoint: Checkpoint, head_id: Optional[str]) -> None:
        if checkpoint.parent_checkpoint_id != head_id:
            raise CheckpointConflictError(
                f"Thread '{checkpoint.thread_id}' moved on: head is {head_id}, "
                f"checkpoint {checkpoint.checkpoint_id} expects {checkpoint.parent_checkpoint_id}"
            )
