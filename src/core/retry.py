"""Caller-side retry with exponential backoff.

The matching service never retries on its own. A caller that is willing to
wait for a driver to free up wraps its request in ``with_retry``.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass, field
from typing import TypeVar

from .exceptions import TransientError

T = TypeVar("T")
logger = logging.getLogger(__name__)


@dataclass
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 0.5
    multiplier: float = 2.0
    max_delay: float = 30.0
    retry_on: tuple[type[Exception], ...] = field(default_factory=lambda: (TransientError,))

    def delays(self) -> Iterator[float]:
        """Backoff before each retry; yields ``max_attempts - 1`` values."""
        for attempt in range(self.max_attempts - 1):
            yield min(self.base_delay * (self.multiplier**attempt), self.max_delay)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    operation_name: str = "operation",
) -> T:
    """Await ``operation`` until it succeeds or the policy is exhausted.

    Errors outside ``policy.retry_on`` propagate on the first attempt. The last
    retryable error is re-raised once attempts run out.
    """
    policy = policy or RetryPolicy()
    delays = policy.delays()
    attempt = 1

    while True:
        try:
            return await operation()
        except policy.retry_on as e:
            delay = next(delays, None)
            if delay is None:
                logger.error(f"{operation_name} gave up after {attempt} attempts: {e}")
                raise
            logger.warning(
                f"{operation_name} failed (attempt {attempt}/{policy.max_attempts}), "
                f"retrying in {delay:.1f}s: {e}"
            )
            attempt += 1
            await asyncio.sleep(delay)
