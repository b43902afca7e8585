"""
Retry logic with exponential backoff for transient database failures.

Only reads are wrapped; a write that failed mid-flight is not replayed.
"""

import time
import functools
from typing import Callable, Type, Tuple, Optional

from sqlalchemy.exc import DBAPIError, OperationalError


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""
    pass


def exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (OperationalError,),
    on_retry: Optional[Callable] = None,
):
    """
    Decorator for retrying functions with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (0 = no retries)
        base_delay: Initial delay in seconds
        max_delay: Maximum delay between retries in seconds
        exponential_base: Base for exponential calculation (delay *= base)
        exceptions: Tuple of exceptions to catch and retry
        on_retry: Optional callback function(attempt, exception, delay)

    Example:
        @exponential_backoff(max_retries=2)
        def find_all(self, criteria=None):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delay = base_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if not is_transient_error(e):
                        raise
                    if attempt >= max_retries:
                        raise RetryError(
                            f"Failed after {max_retries + 1} attempts: {e}"
                        ) from e

                    current_delay = min(delay, max_delay)
                    if on_retry:
                        on_retry(attempt + 1, e, current_delay)
                    time.sleep(current_delay)
                    delay *= exponential_base

        return wrapper
    return decorator


def is_transient_error(exception: Exception) -> bool:
    """
    Determine if an exception is likely transient and should be retried.

    Args:
        exception: Exception to check

    Returns:
        True for dropped connections, timeouts, and lock contention
    """
    if isinstance(exception, DBAPIError) and exception.connection_invalidated:
        return True

    error_str = str(exception).lower()
    transient_keywords = [
        'timeout',
        'timed out',
        'connection',
        'could not connect',
        'server closed the connection',
        'database is locked',
        'too many clients',
    ]

    return any(keyword in error_str for keyword in transient_keywords)
