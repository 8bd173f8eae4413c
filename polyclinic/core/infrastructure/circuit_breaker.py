"""
Circuit Breaker Pattern Implementation

Gates every remote call (local store or peer service) so that a degraded
dependency is short-circuited instead of stalling each request that needs it.
"""

import asyncio
import inspect
import logging
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation, requests pass through
    OPEN = "open"  # Threshold crossed, requests fast-failed
    HALF_OPEN = "half_open"  # Probing recovery with a few trial calls


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker."""

    sliding_window_size: int = 10  # Outcomes kept in the rolling window
    minimum_calls: int = 10  # Outcomes needed before rates are evaluated
    failure_rate_threshold: float = 50.0  # Percent
    slow_call_rate_threshold: float = 70.0  # Percent
    slow_call_duration: float | None = 2.0  # Seconds, None disables slow-call tracking
    wait_duration_open: float = 60.0  # Seconds before probing recovery
    permitted_calls_half_open: int = 3
    excluded_exceptions: tuple[type[BaseException], ...] = ()  # Count as a healthy answer


@dataclass
class CircuitBreakerStats:
    """Statistics for circuit breaker."""

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    rejected_requests: int = 0
    slow_requests: int = 0
    state_changes: int = 0
    last_failure_time: datetime | None = None
    last_success_time: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "rejected_requests": self.rejected_requests,
            "slow_requests": self.slow_requests,
            "state_changes": self.state_changes,
            "last_failure_time": self.last_failure_time.isoformat() if self.last_failure_time else None,
            "last_success_time": self.last_success_time.isoformat() if self.last_success_time else None,
        }


@dataclass(frozen=True)
class CallOutcome:
    """One entry of the rolling window."""

    failed: bool
    slow: bool


class CircuitOpenError(Exception):
    """Fast-fail signal: the breaker rejected the call without attempting it."""

    def __init__(self, name: str, retry_after: float | None = None):
        message = f"Circuit breaker '{name}' is open"
        if retry_after is not None:
            message += f". Retry after {retry_after:.1f}s"
        super().__init__(message)
        self.name = name
        self.retry_after = retry_after


class CircuitBreaker:
    """
    Count-based circuit breaker shared by every caller of one dependency.

    States:
    - CLOSED: calls pass through, outcomes recorded in a rolling window
    - OPEN: calls rejected with CircuitOpenError until the wait elapses
    - HALF_OPEN: a limited number of trial calls probe recovery

    Example:
        ```python
        breaker = CircuitBreaker("registrations.employee-service")
        doctor = await breaker.execute(lambda: client.fetch("doctors", 7))
        ```
    """

    def __init__(
        self,
        name: str,
        config: CircuitBreakerConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize circuit breaker.

        Args:
            name: Identifier for this breaker, usually "<service>.<dependency>"
            config: Configuration options
            clock: Monotonic time source, replaceable in tests
        """
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._stats = CircuitBreakerStats()
        self._window: deque[CallOutcome] = deque(maxlen=self.config.sliding_window_size)
        self._opened_at: float | None = None
        self._half_open_in_flight = 0
        self._half_open_successes = 0
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        """Get current state."""
        return self._state

    @property
    def stats(self) -> CircuitBreakerStats:
        """Get statistics."""
        return self._stats

    @property
    def failure_rate(self) -> float:
        """Failure rate of the rolling window in percent, -1 when not enough calls yet."""
        return self._rate(lambda outcome: outcome.failed)

    @property
    def slow_call_rate(self) -> float:
        """Slow call rate of the rolling window in percent, -1 when not enough calls yet."""
        return self._rate(lambda outcome: outcome.slow)

    def _rate(self, predicate: Callable[[CallOutcome], bool]) -> float:
        if len(self._window) < self.config.minimum_calls or not self._window:
            return -1.0
        matching = sum(1 for outcome in self._window if predicate(outcome))
        return matching * 100.0 / len(self._window)

    def _remaining_wait(self) -> float:
        if self._opened_at is None:
            return 0.0
        return max(0.0, self.config.wait_duration_open - (self._clock() - self._opened_at))

    def _transition_to(self, new_state: CircuitState) -> None:
        """Transition to a new state. Caller holds the lock."""
        if self._state == new_state:
            return
        old_state = self._state
        self._state = new_state
        self._stats.state_changes += 1

        logger.info(
            f"Circuit breaker '{self.name}' state change: {old_state.value} -> {new_state.value}",
            extra={
                "circuit_breaker": self.name,
                "old_state": old_state.value,
                "new_state": new_state.value,
                "stats": self._stats.to_dict(),
            },
        )

        self._half_open_in_flight = 0
        self._half_open_successes = 0
        if new_state == CircuitState.OPEN:
            self._opened_at = self._clock()
        elif new_state == CircuitState.CLOSED:
            self._opened_at = None
            self._window.clear()

    async def _acquire_permission(self) -> None:
        """Decide whether the next call may be attempted."""
        async with self._lock:
            self._stats.total_requests += 1

            if self._state == CircuitState.OPEN:
                if self._remaining_wait() > 0:
                    self._stats.rejected_requests += 1
                    raise CircuitOpenError(self.name, retry_after=self._remaining_wait())
                self._transition_to(CircuitState.HALF_OPEN)

            if self._state == CircuitState.HALF_OPEN:
                if self._half_open_in_flight >= self.config.permitted_calls_half_open:
                    self._stats.rejected_requests += 1
                    raise CircuitOpenError(self.name)
                self._half_open_in_flight += 1

    def _is_slow(self, duration: float) -> bool:
        return self.config.slow_call_duration is not None and duration > self.config.slow_call_duration

    async def _record(self, failed: bool, duration: float) -> None:
        async with self._lock:
            slow = self._is_slow(duration)
            if slow:
                self._stats.slow_requests += 1
            if failed:
                self._stats.failed_requests += 1
                self._stats.last_failure_time = datetime.now()
            else:
                self._stats.successful_requests += 1
                self._stats.last_success_time = datetime.now()

            if self._state == CircuitState.HALF_OPEN:
                self._half_open_in_flight = max(0, self._half_open_in_flight - 1)
                if failed or slow:
                    self._transition_to(CircuitState.OPEN)
                    return
                self._half_open_successes += 1
                if self._half_open_successes >= self.config.permitted_calls_half_open:
                    self._transition_to(CircuitState.CLOSED)
                return

            if self._state == CircuitState.OPEN:
                # A call admitted before the breaker opened finished late.
                return

            self._window.append(CallOutcome(failed=failed, slow=slow))
            failure_rate = self.failure_rate
            slow_rate = self.slow_call_rate
            if failure_rate >= self.config.failure_rate_threshold or (
                slow_rate >= 0 and slow_rate >= self.config.slow_call_rate_threshold
            ):
                logger.warning(
                    f"Circuit breaker '{self.name}' threshold crossed "
                    f"(failure rate {failure_rate:.0f}%, slow call rate {slow_rate:.0f}%)"
                )
                self._transition_to(CircuitState.OPEN)

    async def execute(self, operation: Callable[[], Awaitable[T]] | Callable[[], T]) -> T:
        """
        Run a zero-argument operation through the breaker.

        The breaker never retries; it only decides whether to attempt.

        Args:
            operation: Sync or async callable without arguments

        Returns:
            Result of the operation

        Raises:
            CircuitOpenError: If the call was fast-failed
            Exception: Original exception from the operation
        """
        await self._acquire_permission()

        started = self._clock()
        try:
            result = operation()
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            failed = not isinstance(e, self.config.excluded_exceptions)
            await self._record(failed=failed, duration=self._clock() - started)
            raise
        except BaseException:
            # Cancelled calls do not say anything about the dependency.
            async with self._lock:
                if self._state == CircuitState.HALF_OPEN:
                    self._half_open_in_flight = max(0, self._half_open_in_flight - 1)
            raise

        await self._record(failed=False, duration=self._clock() - started)
        return result  # type: ignore[return-value]

    def reset(self) -> None:
        """Reset circuit breaker to initial state."""
        self._state = CircuitState.CLOSED
        self._opened_at = None
        self._window.clear()
        self._half_open_in_flight = 0
        self._half_open_successes = 0
        self._stats = CircuitBreakerStats()
        logger.info(f"Circuit breaker '{self.name}' reset")

    def get_status(self) -> dict[str, Any]:
        """Get current status."""
        return {
            "name": self.name,
            "state": self._state.value,
            "failure_rate": self.failure_rate,
            "slow_call_rate": self.slow_call_rate,
            "buffered_calls": len(self._window),
            "stats": self._stats.to_dict(),
            "config": {
                "sliding_window_size": self.config.sliding_window_size,
                "minimum_calls": self.config.minimum_calls,
                "failure_rate_threshold": self.config.failure_rate_threshold,
                "slow_call_rate_threshold": self.config.slow_call_rate_threshold,
                "wait_duration_open": self.config.wait_duration_open,
                "permitted_calls_half_open": self.config.permitted_calls_half_open,
            },
        }


class CircuitBreakerRegistry:
    """
    Registry owning one breaker per (service, dependency) pair.

    Example:
        ```python
        registry = CircuitBreakerRegistry(default_config)
        breaker = registry.get_or_create("registrations.client-service")
        ```
    """

    def __init__(self, default_config: CircuitBreakerConfig | None = None) -> None:
        self._default_config = default_config or CircuitBreakerConfig()
        self._breakers: dict[str, CircuitBreaker] = {}

    def get_or_create(
        self,
        name: str,
        config: CircuitBreakerConfig | None = None,
    ) -> CircuitBreaker:
        """
        Get or create a circuit breaker by name.

        Args:
            name: Circuit breaker name
            config: Configuration (only used on creation)

        Returns:
            Circuit breaker instance
        """
        if name not in self._breakers:
            self._breakers[name] = CircuitBreaker(name, config or self._default_config)
        return self._breakers[name]

    def get(self, name: str) -> CircuitBreaker | None:
        """Get a circuit breaker by name."""
        return self._breakers.get(name)

    def get_all_status(self) -> dict[str, dict[str, Any]]:
        """Get status of all circuit breakers."""
        return {name: breaker.get_status() for name, breaker in self._breakers.items()}

    def reset_all(self) -> None:
        """Reset all circuit breakers."""
        for breaker in self._breakers.values():
            breaker.reset()
