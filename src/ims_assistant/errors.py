"""Exception hierarchy for the inventory assistant.

Only failures that cannot be narrated back to the model abort a turn
(``ServiceUnavailableError`` subclasses). Tool failures are absorbed by the
tool executor and turned into tool-result messages.
"""

from typing import Any, Dict, List, Optional


class IMSAssistantError(Exception):
    """Base class for all assistant errors."""

    pass


class ConfigurationError(IMSAssistantError):
    """Raised on missing credentials or an unusable backend configuration."""

    pass


class ValidationError(IMSAssistantError):
    """Raised when a thread id, message or checkpoint is malformed."""

    pass


class ToolExecutionError(IMSAssistantError):
    """Raised inside tool execution; never escapes the tool executor."""

    pass


class ToolArgumentsError(ToolExecutionError):
    """
    Raised when tool arguments fail schema validation.

    Attributes:
        details: One entry per failing argument
    """

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.details = details or []


class ServiceUnavailableError(IMSAssistantError):
    """A collaborator needed to finish the turn is unreachable."""

    pass


class ModelInvocationError(ServiceUnavailableError):
    """Raised when the language model provider fails after all retries."""

    pass


class StoreError(ServiceUnavailableError):
    """Raised when the checkpoint backend fails."""

    pass


class StoreUnavailableError(StoreError):
    """Raised when the checkpoint backend cannot be reached."""

    pass


class CheckpointConflictError(StoreError):
    """Raised when a checkpoint's parent is no longer the thread head."""

    pass


class TurnTimeoutError(ServiceUnavailableError):
    """Raised when a chat turn exceeds the caller-supplied timeout."""

    pass
