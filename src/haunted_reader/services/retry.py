"""Bounded exponential-backoff retry around fallible async calls."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

from ..errors import (
    HauntedReaderError,
    ProviderFatalError,
    ProviderRetryableError,
    RetryExhaustedError,
)

T = TypeVar("T")

RETRYABLE_ERROR_NAMES = frozenset({
    "ThrottlingException",
    "ServiceUnavailableException",
    "TooManyRequestsException",
    "InternalServerException",
    "ModelTimeoutException",
    "RateLimitError",
    "APITimeoutError",
    "APIConnectionError",
    "InternalServerError",
    "TimeoutError",
})

_RETRYABLE_MESSAGE_MARKERS = ("throttl", "timeout", "timed out")


def _status_of(error: BaseException) -> int | None:
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


def is_retryable(error: BaseException) -> bool:
    """Decide whether an error is worth another attempt.

    Classified errors answer for themselves. Anything else is retryable when
    its name or code is a known transient error, its message mentions
    throttling or a timeout, or it carries a 429/5xx status.
    """
    if isinstance(error, ProviderRetryableError):
        return True
    if isinstance(error, (ProviderFatalError, HauntedReaderError)):
        return False

    names = {type(error).__name__, str(getattr(error, "code", "") or "")}
    if names & RETRYABLE_ERROR_NAMES:
        return True

    message = str(error).lower()
    if any(marker in message for marker in _RETRYABLE_MESSAGE_MARKERS):
        return True

    status = _status_of(error)
    return status is not None and (status == 429 or status >= 500)


class RetryableBackoffExecutor:
    """Runs an async operation, retrying retryable failures with backoff.

    The delay before retry ``n`` (0-based attempt index) is
    ``2 ** n * base_delay`` seconds. Nothing sleeps after the final attempt.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ):
        """Initialize the executor.

        Args:
            max_attempts: Default number of attempts per call
            base_delay: Backoff base in seconds
            sleep: Awaitable sleep, injectable for tests
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after a failed attempt (0-based index)"""
        return (2 ** attempt) * self.base_delay

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        max_attempts: int | None = None,
    ) -> T:
        """Run ``operation`` until it succeeds or attempts run out.

        Args:
            operation: Zero-argument callable returning an awaitable
            max_attempts: Override the executor default

        Returns:
            The operation's result

        Raises:
            RetryExhaustedError: If every attempt failed with a retryable error
            Exception: The first non-retryable error, unchanged
        """
        attempts = max_attempts if max_attempts is not None else self.max_attempts
        if attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        last_error: Exception | None = None
        for attempt in range(attempts):
            try:
                return await operation()
            except Exception as e:
                if not is_retryable(e):
                    raise
                last_error = e

                if attempt < attempts - 1:
                    delay = self.backoff_delay(attempt)
                    logger.warning(
                        f"Attempt {attempt + 1}/{attempts} failed, retrying in {delay:.1f}s: {e}"
                    )
                    await self._sleep(delay)

        logger.error(f"Giving up after {attempts} attempts: {last_error}")
        raise RetryExhaustedError(attempts, last_error)
