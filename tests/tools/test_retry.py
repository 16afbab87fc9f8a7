"""Tests for retry logic."""

import pytest

from ims_assistant.errors import StoreError, StoreUnavailableError
from ims_assistant.tools.retry import RetryManager


@pytest.mark.asyncio
async def test_retry_succeeds_after_failures():
    """Test retryable errors are retried until success."""
    attempts = []

    async def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise StoreUnavailableError("down")
        return "ok"

    manager = RetryManager(max_retries=3, backoff_factor=0, max_delay=0, retry_on=(StoreUnavailableError,))

    assert await manager.execute_with_retry(flaky) == "ok"
    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_retry_gives_up():
    """Test the last error is raised after all attempts."""
    attempts = []

    async def always_down():
        attempts.append(1)
        raise StoreUnavailableError("down")

    manager = RetryManager(max_retries=2, backoff_factor=0, max_delay=0, retry_on=(StoreUnavailableError,))

    with pytest.raises(StoreUnavailableError):
        await manager.execute_with_retry(always_down)
    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_non_retryable_error_raised_immediately():
    """Test errors outside retry_on are not retried."""
    attempts = []

    async def broken():
        attempts.append(1)
        raise StoreError("corrupt")

    manager = RetryManager(max_retries=3, backoff_factor=0, max_delay=0, retry_on=(StoreUnavailableError,))

    with pytest.raises(StoreError):
        await manager.execute_with_retry(broken)
    assert len(attempts) == 1


def test_calculate_delay_is_capped():
    """Test exponential backoff with a cap."""
    manager = RetryManager(backoff_factor=2.0, max_delay=30.0)

    assert manager.calculate_delay(0) == 1.0
    assert manager.calculate_delay(1) == 2.0
    assert manager.calculate_delay(3) == 8.0
    assert manager.calculate_delay(10) == 30.0
