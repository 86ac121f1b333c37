from __future__ import annotations

"""
Proactive client-side throttling
"""

import collections
import re
import threading
import time
import typing as t

from ..errors import OverloadedError
from ..utils.logs import logger
from . import cancel as _cancel

__all__ = ["RateLimiter", "parse_ratelimit_headers"]

_STRUCTURED_RE = re.compile(r'(?:^|;)\s*(r|t)\s*=\s*(\d+)')


def parse_ratelimit_headers(headers: t.Mapping[str, str]) -> t.Tuple[t.Optional[int], t.Optional[float]]:
    """
    Returns ``(remaining, reset_seconds)`` from either the split
    ``ratelimit-remaining`` / ``ratelimit-reset`` headers or the
    structured ``ratelimit: "default";r=0;t=30`` form
    """
    remaining = reset = None
    if 'ratelimit-remaining' in headers:
        try:
            remaining = int(headers['ratelimit-remaining'])
            reset = float(headers.get('ratelimit-reset') or 0)
        except ValueError:
            return None, None
    elif 'ratelimit' in headers:
        values = dict(_STRUCTURED_RE.findall(headers['ratelimit']))
        if 'r' in values:
            remaining = int(values['r'])
            reset = float(values.get('t', 0))
    return remaining, reset


class RateLimiter:
    """
    A sliding-window limiter: at most ``permit_limit`` sends start in any
    ``window`` seconds. Callers over the limit wait for the oldest permit
    to age out, up to ``queue_limit`` of them at once; beyond that,
    `OverloadedError` is raised immediately.

    The server can also pause all sends with `block_for`, e.g. after a
    429 or when its rate limit headers report an exhausted budget.
    """

    def __init__(
        self,
        permit_limit: int,
        window: float,
        queue_limit: int,
        *,
        clock: t.Callable[[], float] = time.monotonic,
        sleep: t.Optional[t.Callable[..., None]] = None,
        asleep: t.Optional[t.Callable[..., t.Awaitable[None]]] = None,
    ):
        self.permit_limit = permit_limit
        self.window = window
        self.queue_limit = queue_limit
        self.clock = clock
        self._sleep = sleep or _cancel.sleep
        self._asleep = asleep or _cancel.asleep
        self._lock = threading.Lock()
        self._permits: t.Deque[float] = collections.deque()
        self._waiters: int = 0
        self._blocked_until: float = 0.0

    @property
    def waiting(self) -> int:
        """The number of callers queued for a permit"""
        return self._waiters

    @property
    def available(self) -> int:
        with self._lock:
            self._evict(self.clock())
            return self.permit_limit - len(self._permits)

    def _evict(self, now: float) -> None:
        horizon = now - self.window
        while self._permits and self._permits[0] <= horizon:
            self._permits.popleft()

    def _try_acquire(self) -> float:
        """
        Takes a permit and returns 0, or returns how long to wait.
        Must be called with the lock held.
        """
        now = self.clock()
        if now < self._blocked_until:
            return self._blocked_until - now
        self._evict(now)
        if len(self._permits) < self.permit_limit:
            self._permits.append(now)
            return 0.0
        return max(self._permits[0] + self.window - now, 0.0) or 1e-3

    def _enqueue(self) -> float:
        with self._lock:
            delay = self._try_acquire()
            if not delay:
                return 0.0
            if self._waiters >= self.queue_limit:
                logger.warning(f'Rate limiter queue is full ({self._waiters}/{self.queue_limit}); rejecting')
                raise OverloadedError(self.queue_limit)
            self._waiters += 1
        logger.debug(f'Rate limit reached; waiting {delay:.2f}s for a permit')
        return delay

    def _dequeue(self) -> None:
        with self._lock:
            self._waiters -= 1

    def acquire(self, cancel_token: t.Optional[_cancel.CancelToken] = None) -> None:
        """Takes a permit, waiting if allowed"""
        if cancel_token is not None: cancel_token.raise_if_cancelled()
        delay = self._enqueue()
        if not delay:
            return
        try:
            while delay:
                self._sleep(delay, cancel_token)
                with self._lock:
                    delay = self._try_acquire()
        finally:
            self._dequeue()

    async def aacquire(self, cancel_token: t.Optional[_cancel.CancelToken] = None) -> None:
        """Async version of acquire()"""
        if cancel_token is not None: cancel_token.raise_if_cancelled()
        delay = self._enqueue()
        if not delay:
            return
        try:
            while delay:
                await self._asleep(delay, cancel_token)
                with self._lock:
                    delay = self._try_acquire()
        finally:
            self._dequeue()

    def block_for(self, seconds: float) -> None:
        """Holds back every send for ``seconds``"""
        if seconds <= 0:
            return
        with self._lock:
            until = self.clock() + seconds
            if until > self._blocked_until:
                self._blocked_until = until
                logger.debug(f'Pausing sends for {seconds:.2f}s')

    def observe(self, headers: t.Mapping[str, str]) -> None:
        """Applies the server's rate limit headers"""
        remaining, reset = parse_ratelimit_headers(headers)
        if remaining is not None and remaining <= 0 and reset:
            self.block_for(reset)
