"""In-process checkpoint store."""

import logging
from typing import Dict, List, Optional

from .base import CheckpointStore
from ..models.checkpoint_models import Checkpoint

logger = logging.getLogger(__name__)


class InMemoryCheckpointStore(CheckpointStore):
    """
    Checkpoint store held in a dict; lost when the process exits.

    GOTCHA: save() never awaits, so it is atomic within one event loop
    """

    backend_name = "memory"

    def __init__(self):
        self._threads: Dict[str, List[Checkpoint]] = {}

    async def save(self, thread_id: str, checkpoint: Checkpoint) -> None:
        self.check_thread(thread_id, checkpoint)
        chain = self._threads.setdefault(thread_id, [])

        if any(c.checkpoint_id == checkpoint.checkpoint_id for c in chain):
            logger.debug(f"Checkpoint {checkpoint.checkpoint_id} already saved")
            return

        self.check_parent(checkpoint, chain[-1].checkpoint_id if chain else None)
        chain.append(checkpoint)
        logger.debug(f"Saved checkpoint {checkpoint.checkpoint_id} for thread {thread_id}")

    async def load(self, thread_id: str) -> Optional[Checkpoint]:
        chain = self._threads.get(thread_id)
        return chain[-1] if chain else None

    async def load_history(
        self, thread_id: str, limit: Optional[int] = None
    ) -> List[Checkpoint]:
        history = list(reversed(self._threads.get(thread_id, [])))
        return history[:limit] if limit is not None else history

    async def close(self) -> None:
        self._threads.clear()
