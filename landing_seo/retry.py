"""Retry upstream calls with exponential backoff.

Text generation providers and the Google APIs all fail transiently under
load (429 rate limits, 529 overload, 5xx, dropped connections). One policy
object covers all of them so runs succeed without manual re-runs.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from landing_seo.config import RETRY_ATTEMPTS, RETRY_BASE_DELAY, RETRY_MAX_DELAY

logger = logging.getLogger(__name__)


def is_transient(error: BaseException) -> bool:
    """Default predicate: trust the error's own ``retryable`` flag."""
    return bool(getattr(error, "retryable", False))


class RetryError(Exception):
    """Raised when the policy gives up; carries the last error and attempt count."""

    def __init__(self, last_error: BaseException, attempts: int):
        super().__init__(f"gave up after {attempts} attempt(s): {last_error}")
        self.last_error = last_error
        self.attempts = attempts


@dataclass
class RetryPolicy:
    """Call a function up to ``max_attempts`` times.

    The wait before attempt n+1 is ``base_delay * 2**(n-1)`` seconds, capped
    at ``max_delay``. Errors for which ``retry_if`` returns False are not
    retried.
    """

    max_attempts: int = RETRY_ATTEMPTS
    base_delay: float = RETRY_BASE_DELAY
    max_delay: Optional[float] = RETRY_MAX_DELAY
    retry_if: Callable[[BaseException], bool] = is_transient
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-indexed)."""
        delay = self.base_delay * (2 ** (attempt - 1))
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay

    def call(self, fn: Callable, *args, description: str = "call", **kwargs):
        for attempt in range(1, self.max_attempts + 1):
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                if attempt == self.max_attempts or not self.retry_if(e):
                    raise RetryError(e, attempt) from e
                delay = self.delay_for(attempt)
                logger.warning(
                    "%s failed with %s, retrying in %.2fs (attempt %d/%d)",
                    description, type(e).__name__, delay, attempt, self.max_attempts,
                )
                self.sleep(delay)
        raise RuntimeError("retry loop exited without return or raise")
