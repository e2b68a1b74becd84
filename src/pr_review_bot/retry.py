"""Bounded retry for calls to external services."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import httpx

from pr_review_bot.errors import RateLimitError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_rate_limited(error: BaseException) -> bool:
    """Check whether an exception signals a rate limit (HTTP 429).

    Args:
        error: Exception raised by the wrapped call

    Returns:
        True for RateLimitError, httpx 429 responses, and any exception
        carrying a ``status``/``status_code`` of 429
    """
    if isinstance(error, RateLimitError):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code == 429
    status = getattr(error, "status", None) or getattr(error, "status_code", None)
    return status == 429


@dataclass(frozen=True)
class RetryPolicy:
    """Retry policy shared by every connector."""

    max_attempts: int = 3
    base_delay_ms: int = 1000
    multiplier: float = 2.0
    jitter_ms: int = 0
    is_rate_limited: Callable[[BaseException], bool] = field(
        default=is_rate_limited, compare=False
    )

    def __post_init__(self) -> None:
        """Validate policy values."""
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay_ms < 0:
            raise ValueError(f"base_delay_ms must be >= 0, got {self.base_delay_ms}")

    def delay_seconds(self, attempt: int, rate_limited: bool) -> float:
        """Delay before the next attempt.

        Args:
            attempt: 1-based number of the attempt that just failed
            rate_limited: Whether the failure was a rate limit

        Returns:
            Delay in seconds
        """
        if rate_limited:
            delay_ms = self.base_delay_ms * attempt
        else:
            delay_ms = self.base_delay_ms * self.multiplier**attempt
        if self.jitter_ms:
            delay_ms += random.uniform(0, self.jitter_ms)
        return delay_ms / 1000


class RetryableCall:
    """Runs an async callable with bounded, strictly sequential retries."""

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the wrapper.

        Args:
            policy: Retry policy (defaults to 3 attempts, 1s base delay)
            sleep: Awaitable used between attempts
        """
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    async def run(self, fn: Callable[[], Awaitable[T]], description: str = "call") -> T:
        """Execute ``fn`` until it succeeds or attempts are exhausted.

        Args:
            fn: Zero-argument callable returning an awaitable
            description: Label used in log messages

        Returns:
            The result of the first successful attempt

        Raises:
            Exception: The last error, unchanged, once attempts are exhausted
        """
        max_attempts = self.policy.max_attempts

        for attempt in range(1, max_attempts + 1):
            try:
                return await fn()
            except Exception as e:
                if attempt >= max_attempts:
                    logger.error(f"{description} failed after {attempt} attempts: {e}")
                    raise

                rate_limited = self.policy.is_rate_limited(e)
                delay = self.policy.delay_seconds(attempt, rate_limited)
                if rate_limited:
                    logger.warning(
                        f"Rate limit on {description}, retrying in {delay:.1f}s "
                        f"(attempt {attempt}/{max_attempts})"
                    )
                else:
                    logger.warning(
                        f"{description} failed, retrying in {delay:.1f}s "
                        f"(attempt {attempt}/{max_attempts}): {e}"
                    )
                await self._sleep(delay)

        # Unreachable: the loop either returns or re-raises
        raise RuntimeError(f"{description} exhausted retries")
