"""
SQLite checkpoint store.

Embedded single-file backend for local and single-machine deployments.
Blocking sqlite3 calls run in worker threads so the event loop never waits
on disk I/O.
"""

import asyncio
import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

from .base import CheckpointStore
from ..errors import StoreError, StoreUnavailableError
from ..models.checkpoint_models import Checkpoint

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCHEMA = """
CREATE TABLE IF NOT EXISTS checkpoints (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    thread_id TEXT NOT NULL,
    checkpoint_id TEXT NOT NULL,
    parent_checkpoint_id TEXT,
    record TEXT NOT NULL,
    created_at TEXT NOT NULL,
    UNIQUE (thread_id, checkpoint_id)
);
CREATE INDEX IF NOT EXISTS idx_checkpoints_thread_seq ON checkpoints (thread_id, seq);
"""


class SQLiteCheckpointStore(CheckpointStore):
    """
    Checkpoint store over a single SQLite file.

    PATTERN: Connection per worker thread, all tracked for close()
    CRITICAL: Writes run in BEGIN IMMEDIATE so the head check and the insert
    are atomic across processes
    GOTCHA: "database is locked" is treated as unavailable and retried upstream
    """

    backend_name = "sqlite"

    def __init__(self, db_path: Union[str, Path], busy_timeout: float = 5.0):
        """
        Initialize SQLite store.

        Args:
            db_path: Path to database file (created if it doesn't exist)
            busy_timeout: Seconds to wait for a competing writer
        """
        self.db_path = Path(db_path)
        self.busy_timeout = busy_timeout
        self._local = threading.local()
        self._connections: List[sqlite3.Connection] = []
        self._connections_lock = threading.Lock()

    def _get_connection(self) -> sqlite3.Connection:
        """
        Get thread-local database connection.

        Returns:
            SQLite connection for current thread
        """
        conn = getattr(self._local, "connection", None)
        if conn is None:
            conn = sqlite3.connect(
                str(self.db_path),
                timeout=self.busy_timeout,
                isolation_level=None,
                check_same_thread=False,
            )
            conn.row_factory = sqlite3.Row
            self._local.connection = conn
            with self._connections_lock:
                self._connections.append(conn)
        return conn

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.OperationalError as e:
            raise StoreUnavailableError(f"SQLite checkpoint store unavailable: {e}") from e
        except sqlite3.Error as e:
            raise StoreError(f"SQLite checkpoint store error: {e}") from e

    def _setup(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._get_connection()
        conn.execute("PRAGMA journal_mode=WAL")
        conn.executescript(SCHEMA)

    async def setup(self) -> None:
        await self._run(self._setup)
        logger.info(f"SQLite checkpoint store ready at {self.db_path}")

    def _save(self, thread_id: str, checkpoint: Checkpoint) -> bool:
        conn = self._get_connection()
        conn.execute("BEGIN IMMEDIATE")
        try:
            exists = conn.execute(
                "SELECT 1 FROM checkpoints WHERE thread_id = ? AND checkpoint_id = ?",
                (thread_id, checkpoint.checkpoint_id),
            ).fetchone()
            if exists:
                conn.execute("ROLLBACK")
                return False

            head = conn.execute(
                "SELECT checkpoint_id FROM checkpoints WHERE thread_id = ? "
                "ORDER BY seq DESC LIMIT 1",
                (thread_id,),
            ).fetchone()
            self.check_parent(checkpoint, head["checkpoint_id"] if head else None)

            record = checkpoint.to_record()
            conn.execute(
                "INSERT INTO checkpoints "
                "(thread_id, checkpoint_id, parent_checkpoint_id, record, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    thread_id,
                    checkpoint.checkpoint_id,
                    checkpoint.parent_checkpoint_id,
                    json.dumps(record),
                    record["created_at"],
                ),
            )
            conn.execute("COMMIT")
            return True
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise

    async def save(self, thread_id: str, checkpoint: Checkpoint) -> None:
        self.check_thread(thread_id, checkpoint)
        inserted = await self._run(self._save, thread_id, checkpoint)
        if inserted:
            logger.debug(f"Saved checkpoint {checkpoint.checkpoint_id} for thread {thread_id}")
        else:
            logger.debug(f"Checkpoint {checkpoint.checkpoint_id} already saved")

    def _fetch(self, thread_id: str, limit: Optional[int]) -> List[Dict[str, Any]]:
        query = "SELECT record FROM checkpoints WHERE thread_id = ? ORDER BY seq DESC"
        params: tuple = (thread_id,)
        if limit is not None:
            query += " LIMIT ?"
            params = (thread_id, limit)

        rows = self._get_connection().execute(query, params).fetchall()
        return [json.loads(row["record"]) for row in rows]

    async def load(self, thread_id: str) -> Optional[Checkpoint]:
        records = await self._run(self._fetch, thread_id, 1)
        return Checkpoint.from_record(records[0]) if records else None

    async def load_history(
        self, thread_id: str, limit: Optional[int] = None
    ) -> List[Checkpoint]:
        records = await self._run(self._fetch, thread_id, limit)
        return [Checkpoint.from_record(r) for r in records]

    def _close(self) -> None:
        with self._connections_lock:
            for conn in self._connections:
                conn.close()
            self._connections.clear()
        self._local = threading.local()

    async def close(self) -> None:
        await asyncio.to_thread(self._close)
        logger.info("SQLite checkpoint store closed")
