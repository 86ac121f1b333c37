from __future__ import annotations

"""
Retry classification and backoff schedule
"""

import dataclasses
import random
import typing as t

import backoff

from ..errors import RateLimitedError, is_retryable_error
from .executor import ApiRequest

__all__ = ["RetryPolicy", "RetryState"]


@dataclasses.dataclass
class RetryState:
    """Per-call retry bookkeeping; never shared between calls"""
    attempt: int = 0
    last_error: t.Optional[BaseException] = None
    next_delay: float = 0.0
    schedule: t.Optional[t.Generator[float, t.Any, None]] = None


class RetryPolicy:
    """
    Decides whether a failed attempt is retried and how long to wait.

    Delays follow ``base * 2**attempt`` (capped at ``backoff_max``) plus
    a uniform jitter in ``[0, jitter]``. A 429 carrying ``Retry-After``
    waits exactly that long instead.
    """

    def __init__(
        self,
        max_retries: int = 3,
        backoff_base: float = 1.0,
        backoff_max: float = 60.0,
        jitter: float = 1.0,
        retry_rate_limited: bool = True,
        idempotent_only: bool = False,
        rng: t.Optional[random.Random] = None,
    ):
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.jitter = jitter
        self.retry_rate_limited = retry_rate_limited
        self.idempotent_only = idempotent_only
        self.rng = rng or random.Random()

    def new_state(self) -> RetryState:
        schedule = backoff.expo(base = 2, factor = self.backoff_base, max_value = self.backoff_max)
        # backoff's generators are primed with an initial send
        next(schedule)
        return RetryState(schedule = schedule)

    def is_retryable(self, request: ApiRequest, exc: BaseException) -> bool:
        if not is_retryable_error(exc):
            return False
        if isinstance(exc, RateLimitedError) and not self.retry_rate_limited:
            return False
        return not (self.idempotent_only and not request.is_idempotent)

    def should_retry(self, request: ApiRequest, exc: BaseException, state: RetryState) -> bool:
        return state.attempt < self.max_retries and self.is_retryable(request, exc)

    def next_delay(self, exc: BaseException, state: RetryState) -> float:
        """Computes the wait before the next attempt and advances ``state``"""
        exp_delay = next(state.schedule)
        if isinstance(exc, RateLimitedError) and exc.retry_after is not None:
            delay = exc.retry_after
        else:
            delay = exp_delay + (self.rng.uniform(0, self.jitter) if self.jitter else 0.0)
        state.attempt += 1
        state.last_error = exc
        state.next_delay = delay
        return delay
