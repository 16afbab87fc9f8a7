"""Agent configuration with environment variable loading."""

import os
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    return float(value) if value else None


class AgentConfig(BaseModel):
    """Configuration for the model client and the orchestration loop."""

    # Model provider
    llm_api_key: Optional[str] = Field(
        default_factory=lambda: os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY"),
        description="API key for the chat-completions provider",
    )
    llm_model: str = Field(
        default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o-mini"),
        description="Model identifier",
    )
    llm_base_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL"),
        description="OpenAI-compatible endpoint (None = provider default)",
    )
    temperature: float = Field(
        default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.7")),
        ge=0,
        le=2,
        description="Sampling temperature",
    )
    llm_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("LLM_TIMEOUT", "60")),
        description="Per-request timeout for the model provider",
    )

    # Model retry policy
    llm_max_retries: int = Field(
        default_factory=lambda: int(os.getenv("LLM_MAX_RETRIES", "3")),
        ge=1,
        description="Maximum attempts per model call",
    )
    llm_backoff_factor: float = Field(
        default_factory=lambda: float(os.getenv("LLM_BACKOFF_FACTOR", "2.0")),
        description="Exponential backoff multiplier",
    )
    llm_max_delay: float = Field(
        default_factory=lambda: float(os.getenv("LLM_MAX_DELAY", "30.0")),
        description="Maximum delay between model retries (seconds)",
    )

    # Orchestration loop
    max_round_trips: int = Field(
        default_factory=lambda: int(os.getenv("AGENT_MAX_ROUND_TRIPS", "5")),
        ge=1,
        description="Maximum agent/tools round trips per chat turn",
    )
    max_history_messages: int = Field(
        default_factory=lambda: int(os.getenv("AGENT_MAX_HISTORY_MESSAGES", "40")),
        ge=1,
        description="Most recent messages sent to the model",
    )
    max_message_chars: int = Field(
        default_factory=lambda: int(os.getenv("AGENT_MAX_MESSAGE_CHARS", "4000")),
        ge=1,
        description="Maximum length of an inbound user message",
    )
    chat_timeout_seconds: Optional[float] = Field(
        default_factory=lambda: _optional_float("AGENT_CHAT_TIMEOUT"),
        description="Default timeout for a chat turn (None = unbounded)",
    )

    # Tools and store
    tool_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("TOOL_TIMEOUT", "30")),
        description="Timeout for a single tool execution",
    )
    store_max_retries: int = Field(
        default_factory=lambda: int(os.getenv("STORE_MAX_RETRIES", "2")),
        ge=1,
        description="Maximum attempts for checkpoint load/save",
    )
    store_backoff_factor: float = Field(
        default=2.0,
        description="Exponential backoff multiplier for store retries",
    )
    store_max_delay: float = Field(
        default=5.0,
        description="Maximum delay between store retries (seconds)",
    )

    class Config:
        """Pydantic config."""

        env_file = ".env"
        env_file_encoding = "utf-8"
