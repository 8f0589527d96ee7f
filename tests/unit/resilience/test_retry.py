"""Unit tests for retry logic"""
import pytest
import psycopg
from unittest.mock import AsyncMock, patch

from sprintdesk.exceptions import ConcurrentUpdateError, ConnectionError, QueryError
from sprintdesk.resilience.retry import (
    retry_with_backoff,
    is_retryable_error,
    calculate_backoff,
    BASE_DELAY,
    MAX_DELAY,
)


@pytest.fixture(autouse=True)
def no_sleep():
    with patch('sprintdesk.resilience.retry.asyncio.sleep', AsyncMock()) as mock_sleep:
        yield mock_sleep


def test_is_retryable_error_version_conflict():
    """Test that lost optimistic-concurrency races are retryable"""
    assert is_retryable_error(ConcurrentUpdateError(message="stale", expected_version=1)) == True


def test_is_retryable_error_connection():
    """Test that dropped connections are retryable"""
    assert is_retryable_error(ConnectionError()) == True
    assert is_retryable_error(psycopg.OperationalError("server closed the connection")) == True
    assert is_retryable_error(psycopg.errors.UniqueViolation("duplicate key")) == True
    assert is_retryable_error(psycopg.errors.SerializationFailure("could not serialize")) == True


def test_is_retryable_error_non_retryable():
    """Test that non-retryable errors are identified correctly"""
    assert is_retryable_error(ValueError("Bad value")) == False
    assert is_retryable_error(KeyError("Missing key")) == False
    assert is_retryable_error(QueryError(message="syntax error")) == False
    assert is_retryable_error(psycopg.errors.UndefinedTable("no such table")) == False


def test_calculate_backoff():
    """Test exponential backoff calculation"""
    delay_0 = calculate_backoff(0)
    assert BASE_DELAY * 0.9 <= delay_0 <= BASE_DELAY * 1.1

    delay_1 = calculate_backoff(1)
    assert BASE_DELAY * 1.8 <= delay_1 <= BASE_DELAY * 2.2

    delay_2 = calculate_backoff(2)
    assert BASE_DELAY * 3.6 <= delay_2 <= BASE_DELAY * 4.4

    assert delay_1 > delay_0
    assert delay_2 > delay_1


def test_calculate_backoff_max_delay():
    """Test that backoff respects max delay"""
    delay = calculate_backoff(20)
    assert delay <= MAX_DELAY * 1.1


@pytest.mark.asyncio
async def test_retry_with_backoff_success_first_try(no_sleep):
    """Test that function succeeds on first try"""
    call_count = 0

    async def successful_function():
        nonlocal call_count
        call_count += 1
        return "success"

    result = await retry_with_backoff(successful_function, max_retries=3)

    assert result == "success"
    assert call_count == 1
    no_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_retry_with_backoff_success_after_retries(no_sleep):
    """Test that function succeeds after some version conflicts"""
    attempt = 0

    async def flaky_function():
        nonlocal attempt
        attempt += 1
        if attempt < 3:
            raise ConcurrentUpdateError(message="stale", expected_version=attempt)
        return "success"

    result = await retry_with_backoff(flaky_function, max_retries=3)

    assert result == "success"
    assert attempt == 3
    assert no_sleep.await_count == 2


@pytest.mark.asyncio
async def test_retry_with_backoff_passes_arguments():
    """Test positional and keyword arguments reach the function"""
    async def add(a, b, scale=1):
        return (a + b) * scale

    assert await retry_with_backoff(add, 2, 3, scale=10) == 50


@pytest.mark.asyncio
async def test_retry_with_backoff_exhausted():
    """Test that retries are exhausted for persistent failures"""
    attempt = 0

    async def always_fails():
        nonlocal attempt
        attempt += 1
        raise ConcurrentUpdateError(message="Always fails")

    with pytest.raises(ConcurrentUpdateError, match="Always fails"):
        await retry_with_backoff(always_fails, max_retries=3)

    # Initial attempt + 3 retries
    assert attempt == 4


@pytest.mark.asyncio
async def test_retry_with_backoff_non_retryable_error():
    """Test that non-retryable errors are not retried"""
    attempt = 0

    async def non_retryable_function():
        nonlocal attempt
        attempt += 1
        raise ValueError("Non-retryable error")

    with pytest.raises(ValueError, match="Non-retryable error"):
        await retry_with_backoff(non_retryable_function, max_retries=3)

    assert attempt == 1

