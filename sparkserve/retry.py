"""
Bounded retry with exponential backoff.

The submitter wraps each spark-submit run in run_with_retry on a background
thread, so the sleeps here never hold an HTTP request open.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from sparkserve.errors import RetriesExceeded

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry settings for submissions.

    Attributes:
        max_attempts: Total number of attempts, including the first
        initial_delay: Seconds to wait after the first failure
        backoff_multiplier: Factor applied to the delay after each failure
        max_delay: Upper bound for a single wait, in seconds
    """
    max_attempts: int = 10
    initial_delay: float = 1.0
    backoff_multiplier: float = 2.0
    max_delay: float = 300.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.initial_delay < 0:
            raise ValueError(f"initial_delay must not be negative, got {self.initial_delay}")
        if self.backoff_multiplier < 1:
            raise ValueError(
                f"backoff_multiplier must be at least 1, got {self.backoff_multiplier}"
            )
        if self.max_delay < 0:
            raise ValueError(f"max_delay must not be negative, got {self.max_delay}")


def run_with_retry(
    func: Callable[[], Any],
    max_attempts: int = 10,
    initial_delay: float = 1.0,
    backoff_multiplier: float = 2.0,
    max_delay: float = 300.0,
    on_attempt: Optional[Callable[[int, Optional[BaseException]], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
    logger: Optional[logging.Logger] = None,
) -> Any:
    """
    Call func until it succeeds or max_attempts is reached.

    Args:
        func: Function to retry; an exception marks the attempt as failed
        max_attempts: Maximum number of attempts
        initial_delay: Wait after the first failure, in seconds
        backoff_multiplier: Multiplier applied to the wait after each failure
        max_delay: Cap for a single wait, in seconds
        on_attempt: Called after every attempt with (attempt_number, error),
            error being None on success
        sleep: Sleep function, replaceable in tests
        logger: Logger for retry messages

    Returns:
        Result of the successful call

    Raises:
        RetriesExceeded: If all attempts failed; the last error is chained
    """
    # Validates the numbers
    RetryPolicy(max_attempts, initial_delay, backoff_multiplier, max_delay)
    log = logger or LOGGER

    delay = min(initial_delay, max_delay)
    last_error: Optional[Exception] = None

    for attempt in range(1, max_attempts + 1):
        try:
            result = func()
        except Exception as e:
            last_error = e
            if on_attempt is not None:
                on_attempt(attempt, e)
        else:
            if on_attempt is not None:
                on_attempt(attempt, None)
            return result

        if attempt == max_attempts:
            break

        log.warning(
            f"Attempt {attempt}/{max_attempts} failed: {last_error}. Retrying in {delay}s...",
            extra={"event": "retry_failed", "metadata": {"attempt": attempt, "wait_seconds": delay}},
        )
        sleep(delay)
        delay = min(delay * backoff_multiplier, max_delay)

    log.error(
        f"All {max_attempts} attempts failed: {last_error}",
        extra={"event": "retries_exceeded", "metadata": {"attempts": max_attempts}},
    )
    raise RetriesExceeded(max_attempts, last_error) from last_error


def run_with_policy(
    func: Callable[[], Any],
    policy: RetryPolicy,
    on_attempt: Optional[Callable[[int, Optional[BaseException]], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
    logger: Optional[logging.Logger] = None,
) -> Any:
    """run_with_retry with the numbers taken from a RetryPolicy."""
    return run_with_retry(
        func,
        max_attempts=policy.max_attempts,
        initial_delay=policy.initial_delay,
        backoff_multiplier=policy.backoff_multiplier,
        max_delay=policy.max_delay,
        on_attempt=on_attempt,
        sleep=sleep,
        logger=logger,
    )
