from __future__ import annotations

"""
The resilience pipeline wrapped around every request:
throttle -> circuit breaker -> send -> retry with backoff
"""

import typing as t

from ..errors import CloudflareError, RateLimitedError, RequestCancelledError, TransportError, is_retryable_error
from ..utils.logs import logger
from . import cancel as _cancel
from .breaker import CircuitBreaker
from .executor import ApiRequest, ApiResponse, RequestExecutor
from .ratelimit import RateLimiter
from .retry import RetryPolicy, RetryState

if t.TYPE_CHECKING:
    from ..configs import ResilienceSettings

__all__ = ["ResilienceController"]


class ResilienceController:
    """
    Runs a request through the proactive rate limiter and the circuit
    breaker, then retries transient failures.

    One controller, and so one limiter and one breaker, is shared by
    every call made through a client. Retry bookkeeping is per call.

    The breaker only sees the final outcome of a call: a retryable
    failure that survived every retry counts against it, anything the
    server answered deliberately (including 4xx) resets it.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        limiter: RateLimiter,
        breaker: CircuitBreaker,
        policy: RetryPolicy,
        *,
        sleep: t.Optional[t.Callable[..., None]] = None,
        asleep: t.Optional[t.Callable[..., t.Awaitable[None]]] = None,
    ):
        self.executor = executor
        self.limiter = limiter
        self.breaker = breaker
        self.policy = policy
        self._sleep = sleep or _cancel.sleep
        self._asleep = asleep or _cancel.asleep

    @classmethod
    def from_settings(
        cls,
        executor: RequestExecutor,
        settings: 'ResilienceSettings',
        **kwargs: t.Any,
    ) -> 'ResilienceController':
        """
        Builds the controller and its collaborators from settings. ``clock``,
        ``sleep`` and ``asleep`` may be passed to control time.
        """
        clock = kwargs.pop('clock', None)
        clock_kw = {'clock': clock} if clock is not None else {}
        limiter = RateLimiter(
            settings.permit_limit,
            settings.permit_window,
            settings.queue_limit,
            sleep = kwargs.get('sleep'),
            asleep = kwargs.get('asleep'),
            **clock_kw,
        )
        breaker = CircuitBreaker(settings.circuit_failure_threshold, settings.circuit_cooldown, **clock_kw)
        policy = RetryPolicy(
            max_retries = settings.max_retries,
            backoff_base = settings.backoff_base,
            backoff_max = settings.backoff_max,
            jitter = settings.jitter,
            retry_rate_limited = settings.retry_rate_limited,
            idempotent_only = settings.idempotent_only,
            rng = kwargs.pop('rng', None),
        )
        return cls(executor, limiter, breaker, policy, **kwargs)

    def _observe_error(self, exc: CloudflareError) -> None:
        if isinstance(exc, TransportError) and exc.headers:
            self.limiter.observe(exc.headers)
        if isinstance(exc, RateLimitedError) and exc.retry_after:
            self.limiter.block_for(exc.retry_after)

    def _handle_failure(self, request: ApiRequest, exc: CloudflareError, state: RetryState, is_probe: bool) -> t.Optional[float]:
        """Returns the delay before the next attempt, or None to give up"""
        self._observe_error(exc)
        if is_probe or not self.policy.should_retry(request, exc, state):
            if state.attempt and is_retryable_error(exc):
                logger.error(f'Giving up on {request.method} {request.endpoint} after {state.attempt + 1} attempts: {exc}')
            return None
        delay = self.policy.next_delay(exc, state)
        logger.warning(
            f'Transient failure for {request.method} {request.endpoint}. '
            f'Attempt {state.attempt}/{self.policy.max_retries}. Next delay {delay:.2f}s: {exc}'
        )
        return delay

    def _record(self, verdict: t.Optional[bool], is_probe: bool) -> None:
        if verdict is True:
            self.breaker.record_success()
        elif verdict is False:
            self.breaker.record_failure()
        elif is_probe:
            self.breaker.release()

    def execute(self, request: ApiRequest, cancel_token: t.Optional[_cancel.CancelToken] = None) -> ApiResponse:
        """Sends ``request`` with throttling, retries and the circuit breaker"""
        if cancel_token is not None: cancel_token.raise_if_cancelled()
        is_probe = self.breaker.acquire()
        state = self.policy.new_state()
        verdict: t.Optional[bool] = None
        try:
            while True:
                if cancel_token is not None: cancel_token.raise_if_cancelled()
                self.limiter.acquire(cancel_token)
                try:
                    response = self.executor.execute(request)
                except RequestCancelledError:
                    raise
                except CloudflareError as exc:
                    delay = self._handle_failure(request, exc, state, is_probe)
                    if delay is None:
                        verdict = not is_retryable_error(exc)
                        raise
                    self._sleep(delay, cancel_token)
                    continue
                self.limiter.observe(response.headers)
                verdict = True
                return response
        finally:
            self._record(verdict, is_probe)

    async def aexecute(self, request: ApiRequest, cancel_token: t.Optional[_cancel.CancelToken] = None) -> ApiResponse:
        """Async version of execute()"""
        if cancel_token is not None: cancel_token.raise_if_cancelled()
        is_probe = self.breaker.acquire()
        state = self.policy.new_state()
        verdict: t.Optional[bool] = None
        try:
            while True:
                if cancel_token is not None: cancel_token.raise_if_cancelled()
                await self.limiter.aacquire(cancel_token)
                try:
                    response = await self.executor.aexecute(request, cancel_token)
                except RequestCancelledError:
                    raise
                except CloudflareError as exc:
                    delay = self._handle_failure(request, exc, state, is_probe)
                    if delay is None:
                        verdict = not is_retryable_error(exc)
                        raise
                    await self._asleep(delay, cancel_token)
                    continue
                self.limiter.observe(response.headers)
                verdict = True
                return response
        finally:
            self._record(verdict, is_probe)
