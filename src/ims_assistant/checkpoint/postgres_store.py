"""
PostgreSQL checkpoint store.

Networked relational backend for multi-process deployments:
- JSONB columns for messages and metadata
- Connection pooling for concurrent access
- Per-thread advisory locks serialize writers across processes
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

import psycopg2
import psycopg2.extras
import psycopg2.pool

from .base import CheckpointStore
from ..errors import StoreError, StoreUnavailableError
from ..models.checkpoint_models import Checkpoint

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCHEMA = """
CREATE TABLE IF NOT EXISTS checkpoints (
    seq BIGSERIAL PRIMARY KEY,
    thread_id TEXT NOT NULL,
    checkpoint_id TEXT NOT NULL,
    parent_checkpoint_id TEXT,
    messages JSONB NOT NULL,
    next TEXT,
    metadata JSONB NOT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    UNIQUE (thread_id, checkpoint_id)
);
CREATE INDEX IF NOT EXISTS idx_checkpoints_thread_seq ON checkpoints (thread_id, seq);
"""

COLUMNS = "thread_id, checkpoint_id, parent_checkpoint_id, messages, next, metadata, created_at"


class PostgresCheckpointStore(CheckpointStore):
    """
    Checkpoint store over PostgreSQL.

    PATTERN: ThreadedConnectionPool, blocking calls moved off the event loop
    CRITICAL: save() holds pg_advisory_xact_lock(hashtext(thread_id)) so the
    head check and the insert are atomic across processes
    """

    backend_name = "postgres"

    def __init__(
        self,
        connection_string: str,
        min_connections: int = 1,
        max_connections: int = 10,
        sslmode: Optional[str] = None,
    ):
        """
        Initialize PostgreSQL store.

        Args:
            connection_string: PostgreSQL connection URL
            min_connections: Minimum pool size
            max_connections: Maximum pool size
            sslmode: libpq sslmode (e.g. "require" for hosted databases)
        """
        self.connection_string = connection_string
        self.min_connections = min_connections
        self.max_connections = max_connections
        self.sslmode = sslmode
        self._pool: Optional[psycopg2.pool.ThreadedConnectionPool] = None

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(func, *args)
        except (psycopg2.OperationalError, psycopg2.InterfaceError, psycopg2.pool.PoolError) as e:
            raise StoreUnavailableError(f"PostgreSQL checkpoint store unavailable: {e}") from e
        except psycopg2.Error as e:
            raise StoreError(f"PostgreSQL checkpoint store error: {e}") from e

    def _get_connection(self) -> Any:
        """Get a connection from the pool."""
        if self._pool is None:
            raise StoreUnavailableError("PostgreSQL checkpoint store is not set up")
        return self._pool.getconn()

    def _put_connection(self, conn: Any) -> None:
        """Return a connection to the pool."""
        if self._pool is not None:
            self._pool.putconn(conn, close=bool(conn.closed))

    def _setup(self) -> None:
        if self._pool is None:
            kwargs = {"sslmode": self.sslmode} if self.sslmode else {}
            self._pool = psycopg2.pool.ThreadedConnectionPool(
                self.min_connections,
                self.max_connections,
                self.connection_string,
                **kwargs,
            )

        conn = self._get_connection()
        try:
            with conn:
                with conn.cursor() as cursor:
                    cursor.execute(SCHEMA)
        finally:
            self._put_connection(conn)

    async def setup(self) -> None:
        await self._run(self._setup)
        logger.info("PostgreSQL checkpoint store ready")

    def _save(self, thread_id: str, checkpoint: Checkpoint) -> bool:
        conn = self._get_connection()
        try:
            # The connection context commits on success and rolls back on error,
            # releasing the transaction-scoped advisory lock either way
            with conn:
                with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                    cursor.execute("SELECT pg_advisory_xact_lock(hashtext(%s))", (thread_id,))

                    cursor.execute(
                        "SELECT 1 FROM checkpoints WHERE thread_id = %s AND checkpoint_id = %s",
                        (thread_id, checkpoint.checkpoint_id),
                    )
                    if cursor.fetchone():
                        return False

                    cursor.execute(
                        "SELECT checkpoint_id FROM checkpoints WHERE thread_id = %s "
                        "ORDER BY seq DESC LIMIT 1",
                        (thread_id,),
                    )
                    head = cursor.fetchone()
                    self.check_parent(checkpoint, head["checkpoint_id"] if head else None)

                    record = checkpoint.to_record()
                    cursor.execute(
                        f"INSERT INTO checkpoints ({COLUMNS}) "
                        "VALUES (%s, %s, %s, %s, %s, %s, %s)",
                        (
                            thread_id,
                            checkpoint.checkpoint_id,
                            checkpoint.parent_checkpoint_id,
                            psycopg2.extras.Json(record["messages"]),
                            checkpoint.next,
                            psycopg2.extras.Json(record["metadata"]),
                            checkpoint.created_at,
                        ),
                    )
            return True
        finally:
            self._put_connection(conn)

    async def save(self, thread_id: str, checkpoint: Checkpoint) -> None:
        self.check_thread(thread_id, checkpoint)
        inserted = await self._run(self._save, thread_id, checkpoint)
        if inserted:
            logger.debug(f"Saved checkpoint {checkpoint.checkpoint_id} for thread {thread_id}")
        else:
            logger.debug(f"Checkpoint {checkpoint.checkpoint_id} already saved")

    def _fetch(self, thread_id: str, limit: Optional[int]) -> List[Dict[str, Any]]:
        query = f"SELECT {COLUMNS} FROM checkpoints WHERE thread_id = %s ORDER BY seq DESC"
        params: tuple = (thread_id,)
        if limit is not None:
            query += " LIMIT %s"
            params = (thread_id, limit)

        conn = self._get_connection()
        try:
            with conn:
                with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                    cursor.execute(query, params)
                    return [dict(row) for row in cursor.fetchall()]
        finally:
            self._put_connection(conn)

    async def load(self, thread_id: str) -> Optional[Checkpoint]:
        rows = await self._run(self._fetch, thread_id, 1)
        return Checkpoint.from_record(rows[0]) if rows else None

    async def load_history(
        self, thread_id: str, limit: Optional[int] = None
    ) -> List[Checkpoint]:
        rows = await self._run(self._fetch, thread_id, limit)
        return [Checkpoint.from_record(row) for row in rows]

    def _close(self) -> None:
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None

    async def close(self) -> None:
        await asyncio.to_thread(self._close)
        logger.info("PostgreSQL checkpoint store closed")
