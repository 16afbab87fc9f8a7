"""Checkpoint store configuration with environment variable loading."""

import os
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class CheckpointBackend(str, Enum):
    """Supported checkpoint backends."""

    MEMORY = "memory"
    SQLITE = "sqlite"
    POSTGRES = "postgres"


class CheckpointConfig(BaseModel):
    """
    Configuration for the checkpoint store.

    The backend is chosen once when the store is first requested and never
    re-evaluated per call.
    """

    backend: str = Field(
        default_factory=lambda: os.getenv("DATABASE_TYPE", CheckpointBackend.SQLITE.value),
        description="Checkpoint backend: memory, sqlite or postgres",
    )

    # SQLite Configuration
    sqlite_path: str = Field(
        default_factory=lambda: os.getenv("CHECKPOINT_DB_PATH", "data/checkpoints.db"),
        description="SQLite database file for checkpoints",
    )

    # PostgreSQL Configuration
    database_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("DATABASE_URL"),
        description="PostgreSQL connection URL",
    )
    postgres_sslmode: str = Field(
        default_factory=lambda: os.getenv("PGSSLMODE", "prefer"),
        description="libpq sslmode for the PostgreSQL connection",
    )
    pool_min_connections: int = Field(
        default_factory=lambda: int(os.getenv("CHECKPOINT_POOL_MIN", "1")),
        ge=1,
        description="Minimum PostgreSQL pool size",
    )
    pool_max_connections: int = Field(
        default_factory=lambda: int(os.getenv("CHECKPOINT_POOL_MAX", "10")),
        ge=1,
        description="Maximum PostgreSQL pool size",
    )

    class Config:
        """Pydantic config."""

        env_file = ".env"
        env_file_encoding = "utf-8"
