"""Tool executor with validation, timeout and error capture."""

import asyncio
import logging
from datetime import datetime

from .registry import ToolRegistry
from ..errors import ToolArgumentsError
from ..models.tool_models import (
    ToolRequest,
    ToolResult,
    ToolStatus,
)

logger = logging.getLogger(__name__)

UNKNOWN_TOOL_ERROR = "unknown tool"
INVALID_ARGUMENTS_ERROR = "invalid arguments"


def _elapsed_ms(start_time: datetime) -> int:
    return int((datetime.now() - start_time).total_seconds() * 1000)


class ToolExecutor:
    """
    Tool executor that never raises for tool-level failures.

    PATTERN: Lookup -> validate -> execute with timeout
    CRITICAL: Arguments are validated before the executor is invoked
    CRITICAL: Exceptions from a tool become FAILED results; the turn continues
    GOTCHA: Timeout must be handled with asyncio.wait_for
    """

    def __init__(
        self,
        registry: ToolRegistry,
        default_timeout: float = 30.0,
    ):
        """
        Initialize tool executor.

        Args:
            registry: Tool registry
            default_timeout: Timeout (seconds) for tools without their own
        """
        self.registry = registry
        self.default_timeout = default_timeout

    async def execute_tool(self, request: ToolRequest) -> ToolResult:
        """
        Execute a tool request.

        Args:
            request: Tool execution request

        Returns:
            ToolResult; status tells success, not_found, invalid_arguments,
            failed or timeout apart
        """
        start_time = datetime.now()

        tool = self.registry.get_tool(request.tool_name)
        if not tool:
            logger.warning(f"Model requested unknown tool '{request.tool_name}'")
            return ToolResult(
                tool_name=request.tool_name,
                status=ToolStatus.NOT_FOUND,
                error=UNKNOWN_TOOL_ERROR,
            )

        try:
            arguments = tool.validate_parameters(request.parameters)
        except ToolArgumentsError as e:
            logger.warning(f"Rejected arguments for '{tool.name}': {e.details}")
            return ToolResult(
                tool_name=tool.name,
                status=ToolStatus.INVALID_ARGUMENTS,
                error=INVALID_ARGUMENTS_ERROR,
                details=e.details,
            )

        timeout = tool.schema.timeout_seconds or self.default_timeout

        try:
            result = await asyncio.wait_for(tool.execute(**arguments), timeout=float(timeout))

        except asyncio.TimeoutError:
            logger.warning(f"Tool '{tool.name}' timed out after {timeout}s")
            return ToolResult(
                tool_name=tool.name,
                status=ToolStatus.TIMEOUT,
                error=f"tool timed out after {timeout}s",
                execution_time_ms=_elapsed_ms(start_time),
            )

        except Exception as e:
            logger.warning(f"Tool '{tool.name}' execution failed: {e}")
            return ToolResult(
                tool_name=tool.name,
                status=ToolStatus.FAILED,
                error=str(e) or e.__class__.__name__,
                execution_time_ms=_elapsed_ms(start_time),
            )

        execution_time_ms = _elapsed_ms(start_time)
        logger.info(
            f"Tool '{tool.name}' executed: "
            f"status={ToolStatus.SUCCESS.value}, "
            f"time={execution_time_ms}ms"
        )

        return ToolResult(
            tool_name=tool.name,
            status=ToolStatus.SUCCESS,
            result=result,
            execution_time_ms=execution_time_ms,
        )
