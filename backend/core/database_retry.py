# backend/core/database_retry.py

import logging
import random
import time
from typing import TypeVar, Callable, Optional, Set
from functools import wraps
from sqlalchemy.exc import OperationalError, DBAPIError

from .config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Database error codes that indicate retry-able conditions
RETRY_ERROR_CODES: Set[str] = {
    # PostgreSQL
    "40001",  # serialization_failure
    "40P01",  # deadlock_detected
    "55P03",  # lock_not_available
    # SQLite (for testing)
    "database is locked",
    "database table is locked",
}


def is_retryable_error(error: Exception) -> bool:
    """
    Check if a database error is retryable

    Args:
        error: The exception to check

    Returns:
        True if the error indicates a transient condition that may succeed on retry
    """
    if isinstance(error, (OperationalError, DBAPIError)):
        error_str = str(error).lower()
        if any(code in error_str for code in ["deadlock", "serialization", "lock"]):
            return True

        if hasattr(error, "orig") and hasattr(error.orig, "pgcode"):
            return error.orig.pgcode in RETRY_ERROR_CODES
        elif hasattr(error, "orig") and hasattr(error.orig, "args"):
            error_code = str(error.orig.args[0]) if error.orig.args else ""
            return any(code in error_code for code in RETRY_ERROR_CODES)

    return False


def retry_on_deadlock(
    func: Callable[..., T],
    *args,
    max_retries: Optional[int] = None,
    initial_delay: Optional[float] = None,
    max_delay: float = 2.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    **kwargs,
) -> T:
    """
    Retry a transactional unit on deadlock or serialization errors.

    The unit is expected to roll back its own session before the error
    propagates, so each attempt starts from a clean transaction.

    Raises:
        The last exception if all retries fail
    """
    if max_retries is None:
        max_retries = settings.db_retry_max_attempts
    delay = settings.db_retry_initial_delay if initial_delay is None else initial_delay

    for attempt in range(max_retries + 1):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if not is_retryable_error(e) or attempt == max_retries:
                raise

            actual_delay = min(delay, max_delay)
            if jitter:
                # Add random jitter (0-25% of delay)
                actual_delay *= 1 + random.random() * 0.25

            logger.warning(
                f"Database deadlock/lock error on attempt {attempt + 1}/{max_retries + 1}. "
                f"Retrying in {actual_delay:.2f}s. Error: {str(e)}"
            )

            time.sleep(actual_delay)
            delay *= backoff_factor


def with_deadlock_retry(
    max_retries: Optional[int] = None,
    initial_delay: Optional[float] = None,
    max_delay: float = 2.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
):
    """
    Decorator to automatically retry functions on deadlock/serialization errors

    Example:
        @with_deadlock_retry(max_retries=5)
        def redeem_reward(self, ...):
            ...
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            return retry_on_deadlock(
                func,
                *args,
                max_retries=max_retries,
                initial_delay=initial_delay,
                max_delay=max_delay,
                backoff_factor=backoff_factor,
                jitter=jitter,
                **kwargs,
            )

        return wrapper

    return decorator
