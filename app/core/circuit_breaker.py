"""
Circuit breaker guarding the generative ranking service.
After repeated infrastructure failures, searches on the AI branch fail fast
instead of waiting on a service that is known to be down.
"""
import logging
import time
from enum import Enum
from threading import Lock
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type, TypeVar

from app.core.exceptions import CircuitBreakerOpenError
from app.core.telemetry import CIRCUIT_STATE

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"      # Calls pass through
    OPEN = "open"          # Calls rejected until the recovery timeout elapses
    HALF_OPEN = "half_open"  # One trial call decides


# Gauge values exported per state
_STATE_GAUGE = {CircuitState.CLOSED: 0, CircuitState.HALF_OPEN: 1, CircuitState.OPEN: 2}


class CircuitBreaker:
    """
    Async circuit breaker.

    Only exceptions listed in ``tracked_exceptions`` count as failures; a
    programming error in the wrapped call propagates without tripping it.

    Usage:
        breaker = CircuitBreaker("ranking_service", tracked_exceptions=(RankingUnavailableError,))
        text = await breaker.call(lambda: client.generate(prompt))
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout_sec: float = 30,
        tracked_exceptions: Tuple[Type[BaseException], ...] = (Exception,),
        clock: Clock = time.monotonic,
    ) -> None:
        self._name = name
        self._failure_threshold = failure_threshold
        self._recovery_timeout_sec = recovery_timeout_sec
        self._tracked_exceptions = tracked_exceptions
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: Optional[float] = None
        self._trial_in_flight = False
        self._lock = Lock()
        CIRCUIT_STATE.labels(name=name).set(_STATE_GAUGE[self._state])

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def name(self) -> str:
        return self._name

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def retry_in(self) -> float:
        """Seconds until an open circuit lets a trial call through (0 otherwise)."""
        if self._state != CircuitState.OPEN or self._opened_at is None:
            return 0.0
        return max(0.0, self._opened_at + self._recovery_timeout_sec - self._clock())

    def snapshot(self) -> Dict[str, Any]:
        """State summary for the readiness endpoint."""
        return {
            "name": self._name,
            "state": self._state.value,
            "failures": self._failure_count,
            "retry_in_sec": round(self.retry_in(), 1),
        }

    async def call(self, func: Callable[[], Awaitable[T]]) -> T:
        """
        Await ``func()`` unless the circuit is open.

        While half-open only the first caller runs the trial; concurrent
        callers are rejected until it settles.

        Raises:
            CircuitBreakerOpenError: Circuit open and recovery timeout not yet
                elapsed, or a half-open trial is already in flight
        """
        with self._lock:
            if self._state == CircuitState.OPEN:
                if self.retry_in() > 0:
                    raise CircuitBreakerOpenError(self._name)
                self._transition(CircuitState.HALF_OPEN)
            is_trial = self._state == CircuitState.HALF_OPEN
            if is_trial:
                if self._trial_in_flight:
                    raise CircuitBreakerOpenError(self._name)
                self._trial_in_flight = True

        try:
            result = await func()
        except self._tracked_exceptions:
            self._record_failure()
            raise
        finally:
            if is_trial:
                with self._lock:
                    self._trial_in_flight = False

        self._record_success()
        return result

    def reset(self) -> None:
        """Force the circuit closed."""
        with self._lock:
            self._failure_count = 0
            self._opened_at = None
            self._trial_in_flight = False
            self._transition(CircuitState.CLOSED)

    def _record_success(self) -> None:
        with self._lock:
            self._failure_count = 0
            if self._state == CircuitState.HALF_OPEN:
                self._opened_at = None
                self._transition(CircuitState.CLOSED)

    def _record_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            trial_failed = self._state == CircuitState.HALF_OPEN
            if trial_failed or self._failure_count >= self._failure_threshold:
                self._opened_at = self._clock()
                self._transition(CircuitState.OPEN)

    def _transition(self, new_state: CircuitState) -> None:
        # Caller holds the lock
        if new_state == self._state:
            return
        logger.warning(
            f"Circuit breaker '{self._name}': {self._state.value} -> {new_state.value} "
            f"(failures={self._failure_count})"
        )
        self._state = new_state
        CIRCUIT_STATE.labels(name=self._name).set(_STATE_GAUGE[new_state])
