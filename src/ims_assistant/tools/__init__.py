"""Tool registry and execution framework."""

from .base import BaseTool, build_arguments_model
from .registry import ToolRegistry
from .executor import ToolExecutor
from .retry import RetryManager
from .catalog import build_tool_registry

__all__ = [
    "BaseTool",
    "build_arguments_model",
    "ToolRegistry",
    "ToolExecutor",
    "RetryManager",
    "build_tool_registry",
]
