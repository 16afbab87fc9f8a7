"""Retry logic with exponential backoff for model and store calls."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryManager:
    """
    Retry manager with exponential backoff.

    PATTERN: Manager class for retry handling
    CRITICAL: max_retries counts attempts, including the first one
    GOTCHA: Backoff delay is capped at max_delay
    """

    def __init__(
        self,
        max_retries: int = 3,
        backoff_factor: float = 2.0,
        max_delay: float = 30.0,
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    ):
        """
        Initialize retry manager.

        Args:
            max_retries: Maximum number of attempts
            backoff_factor: Exponential backoff multiplier
            max_delay: Maximum delay between attempts (seconds)
            retry_on: Exception types that trigger another attempt
        """
        self.max_retries = max(1, max_retries)
        self.backoff_factor = backoff_factor
        self.max_delay = max_delay
        self.retry_on = retry_on

    async def execute_with_retry(
        self,
        func: Callable[..., Awaitable[T]],
        *args,
        operation: Optional[str] = None,
        **kwargs,
    ) -> T:
        """
        Execute an async function with retry logic.

        Args:
            func: Async function to execute
            *args: Positional arguments
            operation: Name used in log messages
            **kwargs: Keyword arguments

        Returns:
            Function result

        Raises:
            The last exception if every attempt fails; exceptions outside
            retry_on are raised immediately
        """
        name = operation or getattr(func, "__name__", "operation")

        for attempt in range(self.max_retries):
            try:
                return await func(*args, **kwargs)

            except self.retry_on as e:
                if attempt >= self.max_retries - 1:
                    logger.error(f"All {self.max_retries} attempts failed for {name}: {e}")
                    raise

                delay = self.calculate_delay(attempt)
                logger.warning(
                    f"Attempt {attempt + 1}/{self.max_retries} failed for {name}: {e}. "
                    f"Retrying in {delay:.2f}s..."
                )
                await asyncio.sleep(delay)

        raise RuntimeError(f"Unexpected error in retry logic for {name}")

    def calculate_delay(self, attempt: int) -> float:
        """
        Calculate retry delay for given attempt.

        Args:
            attempt: Attempt number (0-indexed)

        Returns:
            Delay in seconds
        """
        return min(self.backoff_factor**attempt, self.max_delay)
