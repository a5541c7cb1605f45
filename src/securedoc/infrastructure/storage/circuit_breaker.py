"""Three-state circuit breaker for async calls."""

import asyncio
import time
from collections import deque
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any, TypeVar

import structlog

from securedoc.telemetry import PipelineMetrics

T = TypeVar("T")

logger = structlog.get_logger(__name__)


class CircuitState(StrEnum):
    CLOSED = "closed"  # calls pass through
    OPEN = "open"  # calls fail fast
    HALF_OPEN = "half_open"  # one trial call allowed


class CircuitOpenError(Exception):
    """Call rejected without reaching the protected resource."""

    def __init__(self, name: str, retry_after: float) -> None:
        self.name = name
        self.retry_after = retry_after
        super().__init__(f"Circuit breaker for {name} is OPEN. Retry in {retry_after:.1f}s.")


class CircuitBreaker:
    """Guards a shared resource by failure rate over a rolling time window.

    CLOSED trips to OPEN when at least ``minimum_calls`` outcomes fall in the
    last ``window_seconds`` and the failure rate exceeds
    ``failure_rate_threshold``. After ``reset_timeout`` an OPEN breaker admits
    a single trial (HALF_OPEN): success closes it and clears the window,
    failure reopens it and restarts the timer. Every call runs under
    ``call_timeout``; a timeout counts as a failure, a cancelled caller does
    not count at all.

    One instance is shared by all concurrent callers of the resource.
    """

    def __init__(
        self,
        name: str,
        *,
        failure_rate_threshold: float = 0.5,
        window_seconds: float = 10.0,
        minimum_calls: int = 1,
        reset_timeout: float = 30.0,
        call_timeout: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        metrics: PipelineMetrics | None = None,
    ) -> None:
        if not 0.0 <= failure_rate_threshold < 1.0:
            raise ValueError("failure_rate_threshold must be in [0.0, 1.0)")
        if minimum_calls < 1:
            raise ValueError("minimum_calls must be at least 1")
        self.name = name
        self.failure_rate_threshold = failure_rate_threshold
        self.window_seconds = window_seconds
        self.minimum_calls = minimum_calls
        self.reset_timeout = reset_timeout
        self.call_timeout = call_timeout
        self._clock = clock
        self._metrics = metrics or PipelineMetrics()

        self._state = CircuitState.CLOSED
        self._outcomes: deque[tuple[float, bool]] = deque()
        self._opened_at = 0.0
        self._trial_in_flight = False
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def call_count(self) -> int:
        """Outcomes currently in the rolling window."""
        self._prune(self._clock())
        return len(self._outcomes)

    @property
    def failure_count(self) -> int:
        """Failures currently in the rolling window."""
        self._prune(self._clock())
        return sum(1 for _, ok in self._outcomes if not ok)

    async def call(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Run ``func`` through the breaker. Raises CircuitOpenError when rejected."""
        trial = await self._admit()
        try:
            async with asyncio.timeout(self.call_timeout):
                result = await func(*args, **kwargs)
        except asyncio.CancelledError:
            if trial:
                async with self._lock:
                    self._trial_in_flight = False
            raise
        except Exception:
            await self._record(success=False, trial=trial)
            raise
        await self._record(success=True, trial=trial)
        return result

    async def _admit(self) -> bool:
        async with self._lock:
            now = self._clock()
            if self._state is CircuitState.OPEN:
                elapsed = now - self._opened_at
                if elapsed < self.reset_timeout:
                    raise CircuitOpenError(self.name, self.reset_timeout - elapsed)
                self._transition_to(CircuitState.HALF_OPEN)
            if self._state is CircuitState.HALF_OPEN:
                if self._trial_in_flight:
                    raise CircuitOpenError(self.name, 0.0)
                self._trial_in_flight = True
                return True
            return False

    async def _record(self, *, success: bool, trial: bool) -> None:
        async with self._lock:
            now = self._clock()
            if trial:
                self._trial_in_flight = False
                if success:
                    self._outcomes.clear()
                    self._transition_to(CircuitState.CLOSED)
                else:
                    self._open(now)
                return
            if self._state is not CircuitState.CLOSED:
                # admitted before the circuit opened
                return
            self._outcomes.append((now, success))
            self._prune(now)
            if not success and self._failure_rate_exceeded():
                self._open(now)

    def _failure_rate_exceeded(self) -> bool:
        total = len(self._outcomes)
        if total < self.minimum_calls:
            return False
        failures = sum(1 for _, ok in self._outcomes if not ok)
        return failures / total > self.failure_rate_threshold

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._outcomes and self._outcomes[0][0] <= cutoff:
            self._outcomes.popleft()

    def _open(self, now: float) -> None:
        self._opened_at = now
        self._transition_to(CircuitState.OPEN)

    def _transition_to(self, new_state: CircuitState) -> None:
        if new_state is self._state and new_state is not CircuitState.OPEN:
            return
        logger.warning(
            "circuit_breaker_state_change",
            service=self.name,
            previous=self._state.value,
            state=new_state.value,
            failures=sum(1 for _, ok in self._outcomes if not ok),
        )
        self._metrics.record_transition(self.name, self._state.value, new_state.value)
        self._state = new_state
