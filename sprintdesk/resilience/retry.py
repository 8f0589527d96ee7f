"""Retry logic with exponential backoff and jitter

Achievement records are updated with optimistic concurrency, so a handler
whose save lost a race re-runs its whole read-modify-write:
1. Only retries transient errors (version conflicts, dropped connections)
2. Uses exponential backoff with jitter so racing writers spread out
3. Gives up after max retries to avoid infinite loops
"""

import asyncio
import random
import logging
from typing import Callable, Any, TypeVar
import psycopg

from sprintdesk.exceptions import ConcurrentUpdateError, ConnectionError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Retry configuration
MAX_RETRIES = 3
BASE_DELAY = 0.05  # seconds
MAX_DELAY = 1.0  # seconds
JITTER = 0.1  # 10% random jitter


def is_retryable_error(exc: Exception) -> bool:
    """
    Determine if error is transient and should be retried.

    Retryable errors:
    - ConcurrentUpdateError (another writer saved the record first)
    - psycopg.OperationalError / ConnectionError (connection dropped)
    - psycopg.errors.UniqueViolation / SerializationFailure

    Args:
        exc: The exception to check

    Returns:
        True if error should be retried, False otherwise
    """
    if isinstance(exc, (ConcurrentUpdateError, ConnectionError)):
        return True

    if isinstance(exc, (psycopg.errors.UniqueViolation, psycopg.errors.SerializationFailure)):
        return True

    if isinstance(exc, psycopg.OperationalError):
        return True

    return False


def calculate_backoff(attempt: int) -> float:
    """
    Calculate exponential backoff delay with jitter.

    Formula: delay = min(BASE_DELAY * (2 ** attempt), MAX_DELAY) + jitter

    Args:
        attempt: The retry attempt number (0-indexed)

    Returns:
        Delay in seconds
    """
    delay = min(BASE_DELAY * (2 ** attempt), MAX_DELAY)

    jitter_amount = random.uniform(-JITTER * delay, JITTER * delay)
    final_delay = delay + jitter_amount

    return max(final_delay, 0.0)


async def retry_with_backoff(
    func: Callable[..., T],
    *args: Any,
    max_retries: int = MAX_RETRIES,
    **kwargs: Any
) -> T:
    """
    Retry async function with exponential backoff.

    Only retries transient errors. Gives up after max_retries attempts.

    Args:
        func: Async function to retry
        max_retries: Maximum number of retry attempts (default: 3)
        *args, **kwargs: Arguments to pass to func

    Returns:
        Result from func

    Raises:
        Last exception if all retries exhausted or non-retryable error

    Example:
        badges = await retry_with_backoff(_apply_event, user_id, mutate, max_retries=3)
    """
    for attempt in range(max_retries + 1):
        try:
            return await func(*args, **kwargs)

        except Exception as e:
            if attempt == max_retries:
                logger.error(
                    f"[RETRY] All {max_retries} retries exhausted for {func.__name__}"
                )
                raise

            if not is_retryable_error(e):
                logger.warning(
                    f"[RETRY] Non-retryable error for {func.__name__}: "
                    f"{type(e).__name__}: {e}"
                )
                raise

            backoff = calculate_backoff(attempt)

            logger.info(
                f"[RETRY] Attempt {attempt + 1}/{max_retries} for {func.__name__} "
                f"after {backoff:.2f}s (error: {type(e).__name__})"
            )

            await asyncio.sleep(backoff)

    raise RuntimeError("Retry logic failed unexpectedly")
