from __future__ import annotations

"""
Cooperative cancellation shared by sync and async callers
"""

import asyncio
import threading
import time
import typing as t

from ..errors import RequestCancelledError

__all__ = ["CancelToken", "sleep", "asleep"]

RT = t.TypeVar('RT')


class CancelToken:
    """
    A one-shot cancellation signal.

    The token can be fired from any thread. Sync waiters block on a
    ``threading.Event``; async waiters are woken on their own loop.

    >>> token = CancelToken()
    >>> for zone in client.zones.list_all(cancel_token = token):
    ...     if done(zone): token.cancel()
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._waiters: t.Set[t.Tuple[asyncio.AbstractEventLoop, asyncio.Event]] = set()
        self._timer: t.Optional[threading.Timer] = None
        self.reason: t.Optional[str] = None

    @classmethod
    def with_timeout(cls, delay: float) -> 'CancelToken':
        """Returns a token that fires itself after ``delay`` seconds"""
        token = cls()
        token.cancel_after(delay)
        return token

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: t.Optional[str] = None) -> None:
        """Fires the token; later calls are no-ops"""
        with self._lock:
            if self._event.is_set():
                return
            self.reason = reason
            self._event.set()
            waiters = list(self._waiters)
        for loop, event in waiters:
            if not loop.is_closed():
                loop.call_soon_threadsafe(event.set)

    def cancel_after(self, delay: float) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = threading.Timer(delay, self.cancel, kwargs = {'reason': f'timed out after {delay}s'})
        self._timer.daemon = True
        self._timer.start()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelledError(f'The request was cancelled: {self.reason}' if self.reason else 'The request was cancelled')

    def wait(self, timeout: t.Optional[float] = None) -> bool:
        """Blocks until fired or ``timeout`` elapses; returns whether it fired"""
        return self._event.wait(timeout)

    async def _wait_fired(self) -> None:
        loop = asyncio.get_running_loop()
        entry = (loop, asyncio.Event())
        with self._lock:
            if self._event.is_set():
                return
            self._waiters.add(entry)
        try:
            await entry[1].wait()
        finally:
            with self._lock:
                self._waiters.discard(entry)

    async def async_wait(self, timeout: t.Optional[float] = None) -> bool:
        """Async version of wait()"""
        try:
            await asyncio.wait_for(self._wait_fired(), timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def arun(self, awaitable: t.Awaitable[RT]) -> RT:
        """
        Awaits ``awaitable`` unless the token fires first, in which case
        the awaitable is cancelled and `RequestCancelledError` is raised
        """
        if self._event.is_set():
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            self.raise_if_cancelled()
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._wait_fired())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when = asyncio.FIRST_COMPLETED)
        except BaseException:
            task.cancel()
            waiter.cancel()
            raise
        if task in done:
            waiter.cancel()
            return task.result()
        task.cancel()
        await asyncio.gather(task, return_exceptions = True)
        self.raise_if_cancelled()
        raise RequestCancelledError()


def sleep(delay: float, cancel_token: t.Optional[CancelToken] = None) -> None:
    """Sleeps for ``delay`` seconds, waking early if the token fires"""
    if cancel_token is None:
        if delay > 0: time.sleep(delay)
        return
    cancel_token.raise_if_cancelled()
    if delay > 0 and cancel_token.wait(delay):
        cancel_token.raise_if_cancelled()


async def asleep(delay: float, cancel_token: t.Optional[CancelToken] = None) -> None:
    """Async version of sleep()"""
    if cancel_token is None:
        await asyncio.sleep(max(delay, 0))
        return
    cancel_token.raise_if_cancelled()
    if delay > 0 and await cancel_token.async_wait(delay):
        cancel_token.raise_if_cancelled()
