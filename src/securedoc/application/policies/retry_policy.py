"""Retry policy with exponential backoff."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

T = TypeVar("T")

logger = structlog.get_logger(__name__)


@dataclass
class RetryPolicy:
    """Exponential backoff: ``base_delay * factor ** (n - 1)``, capped at ``max_delay``.

    Delays are in seconds. Only exceptions in ``retry_on`` trigger another
    attempt; anything else (including cancellation) propagates at once.
    After ``max_attempts`` the last exception is re-raised.
    """

    base_delay: float = 1.0
    factor: float = 2.0
    max_delay: float = 5.0
    max_attempts: int = 3
    retry_on: tuple[type[BaseException], ...] = (Exception,)
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must not be negative")
        if self.factor < 1:
            raise ValueError("factor must be >= 1")

    def delay_for(self, attempt: int) -> float:
        """Delay after failed attempt number ``attempt`` (1-based)."""
        return min(self.base_delay * self.factor ** (attempt - 1), self.max_delay)

    async def execute(self, fn: Callable[[], Awaitable[T]]) -> T:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=self.base_delay, exp_base=self.factor, max=self.max_delay
            ),
            retry=retry_if_exception_type(self.retry_on),
            before_sleep=_log_retry,
            sleep=self.sleep,
            reraise=True,
        )
        return await retrying(fn)


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "retry_scheduled",
        attempt=retry_state.attempt_number,
        delay=retry_state.next_action.sleep if retry_state.next_action else None,
        error=str(exc),
        error_type=type(exc).__name__,
    )
