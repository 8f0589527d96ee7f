"""Resilience helpers for storage writes"""

from sprintdesk.resilience.retry import retry_with_backoff, is_retryable_error

__all__ = [
    "retry_with_backoff",
    "is_retryable_error",
]
