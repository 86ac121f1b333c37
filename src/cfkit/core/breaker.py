from __future__ import annotations

"""
Circuit breaker guarding the API from repeated failing calls
"""

import enum
import threading
import time
import typing as t

from ..errors import CircuitOpenError
from ..utils.logs import logger

__all__ = ["CircuitBreaker", "CircuitState"]


class CircuitState(str, enum.Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """
    Counts calls that failed after exhausting their retries. Once
    ``failure_threshold`` such failures happen in a row the circuit
    opens and calls fail fast with `CircuitOpenError`. After
    ``cooldown`` seconds a single probe call is let through: success
    closes the circuit, failure reopens it.

    A threshold of 0 disables the breaker.
    """

    def __init__(
        self,
        failure_threshold: int,
        cooldown: float,
        *,
        clock: t.Callable[[], float] = time.monotonic,
    ):
        self.failure_threshold = failure_threshold
        self.cooldown = cooldown
        self.clock = clock
        self._lock = threading.Lock()
        self._state = CircuitState.CLOSED
        self._failures: int = 0
        self._opened_at: float = 0.0
        self._probing: bool = False

    @property
    def enabled(self) -> bool:
        return self.failure_threshold > 0

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failures(self) -> int:
        return self._failures

    def acquire(self) -> bool:
        """
        Admits a call or raises `CircuitOpenError`. Returns True when the
        call is the half-open probe.
        """
        if not self.enabled:
            return False
        with self._lock:
            if self._state == CircuitState.CLOSED:
                return False
            now = self.clock()
            if self._state == CircuitState.OPEN:
                remaining = self._opened_at + self.cooldown - now
                if remaining > 0:
                    raise CircuitOpenError(remaining)
                self._state = CircuitState.HALF_OPEN
                logger.info('Circuit half-open; allowing a probe call')
            if self._probing:
                raise CircuitOpenError(0.0)
            self._probing = True
            return True

    def record_success(self) -> None:
        if not self.enabled:
            return
        with self._lock:
            if self._state != CircuitState.CLOSED:
                logger.info('Circuit closed')
            self._state = CircuitState.CLOSED
            self._failures = 0
            self._probing = False

    def record_failure(self) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._probing = False
            if self._state == CircuitState.HALF_OPEN:
                self._open('probe call failed')
                return
            self._failures += 1
            if self._state == CircuitState.CLOSED and self._failures >= self.failure_threshold:
                self._open(f'{self._failures} consecutive failures')

    def release(self) -> None:
        """Gives up a probe slot without a verdict, e.g. on cancellation"""
        if not self.enabled:
            return
        with self._lock:
            self._probing = False

    def _open(self, reason: str) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = self.clock()
        logger.warning(f'Circuit opened ({reason}); failing fast for {self.cooldown}s')

    def reset(self) -> None:
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failures = 0
            self._probing = False
