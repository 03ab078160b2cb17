from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, List, Optional, Tuple, Type, TypeVar

T = TypeVar("T")

_logger = logging.getLogger(__name__)


class CircuitOpenError(RuntimeError):
    """Raised instead of calling through while the breaker is open."""

    def __init__(self) -> None:
        super().__init__("circuit_open")


@dataclass
class CircuitBreakerConfig:
    failure_threshold: int = 3
    reset_timeout_seconds: float = 30.0


class CircuitState:
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Tracks consecutive failures of a remote dependency.

    Only exceptions listed in ``trip_on`` count as failures; anything else
    propagates without touching the breaker (a bad command is not an outage).
    """

    def __init__(
        self,
        config: Optional[CircuitBreakerConfig] = None,
        *,
        trip_on: Tuple[Type[BaseException], ...] = (Exception,),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or CircuitBreakerConfig()
        self._trip_on = trip_on
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at = 0.0

    @property
    def state(self) -> str:
        if self._state == CircuitState.OPEN and self._cooled_down():
            return CircuitState.HALF_OPEN
        return self._state

    def _cooled_down(self) -> bool:
        return (self._clock() - self._opened_at) >= self._config.reset_timeout_seconds

    def allows_requests(self) -> bool:
        return self.state != CircuitState.OPEN

    def _can_attempt(self) -> bool:
        if self._state == CircuitState.OPEN:
            if self._cooled_down():
                self._state = CircuitState.HALF_OPEN
                return True
            return False
        return True

    def record_success(self) -> None:
        if self._state != CircuitState.CLOSED:
            _logger.info("Circuit closed after successful probe")
        self._state = CircuitState.CLOSED
        self._failures = 0

    def record_failure(self) -> None:
        self._failures += 1
        if self._state == CircuitState.HALF_OPEN or self._failures >= self._config.failure_threshold:
            if self._state != CircuitState.OPEN:
                _logger.warning("Circuit opened after %d consecutive failures", self._failures)
            self._state = CircuitState.OPEN
            self._opened_at = self._clock()

    def trip(self) -> None:
        """Force the breaker open, e.g. when the connection is known to be down."""
        self._failures = max(self._failures, self._config.failure_threshold)
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()

    async def run(self, fn: Callable[[], Awaitable[T]]) -> T:
        if not self._can_attempt():
            raise CircuitOpenError()
        try:
            result = await fn()
        except self._trip_on:
            self.record_failure()
            raise
        else:
            self.record_success()
            return result


async def with_retries(
    coro_factory: Callable[[], Awaitable[T]],
    attempts: int = 3,
    backoff_ms: Optional[Iterable[int]] = None,
    *,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> T:
    backoff_seq: List[int] = list(backoff_ms or [100, 500, 2000])
    last_exc: BaseException | None = None
    for attempt in range(attempts):
        try:
            return await coro_factory()
        except retry_on as exc:
            last_exc = exc
            if attempt == attempts - 1:
                break
            delay_ms = backoff_seq[min(attempt, len(backoff_seq) - 1)]
            _logger.debug("Attempt %d/%d failed (%s); retrying in %dms", attempt + 1, attempts, exc, delay_ms)
            await asyncio.sleep(delay_ms / 1000.0)
    assert last_exc is not None
    raise last_exc
