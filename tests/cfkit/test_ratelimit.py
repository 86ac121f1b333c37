import asyncio
import threading
import time

import httpx
import pytest

from cfkit import CancelToken, OverloadedError, RateLimiter, RequestCancelledError
from cfkit.core.ratelimit import parse_ratelimit_headers


def _limiter(fake_time, permit_limit = 2, window = 10.0, queue_limit = 5) -> RateLimiter:
    return RateLimiter(permit_limit, window, queue_limit, clock = fake_time.clock, sleep = fake_time.sleep, asleep = fake_time.asleep)


def test_permits_within_window_are_immediate(fake_time):
    limiter = _limiter(fake_time)

    limiter.acquire()
    limiter.acquire()

    assert fake_time.sleeps == []
    assert limiter.available == 0


def test_caller_over_limit_waits_for_oldest_permit(fake_time):
    limiter = _limiter(fake_time, window = 10.0)
    limiter.acquire()
    fake_time.now += 4.0
    limiter.acquire()

    limiter.acquire()

    assert fake_time.sleeps == [6.0]
    assert limiter.waiting == 0


def test_window_rolls_forward(fake_time):
    limiter = _limiter(fake_time, permit_limit = 1, window = 5.0)
    limiter.acquire()
    fake_time.now += 5.0

    limiter.acquire()
    assert fake_time.sleeps == []


def test_zero_queue_rejects_immediately(fake_time):
    limiter = _limiter(fake_time, permit_limit = 1, queue_limit = 0)
    limiter.acquire()

    with pytest.raises(OverloadedError):
        limiter.acquire()
    assert fake_time.sleeps == []


def test_full_queue_rejects_extra_waiters():
    release = threading.Event()

    def blocking_sleep(delay, cancel_token = None):
        release.wait(5)

    limiter = RateLimiter(1, 60.0, 1, sleep = blocking_sleep)
    limiter.acquire()

    errors = []

    def waiter():
        try:
            limiter.acquire()
        except OverloadedError as e:
            errors.append(e)

    thread = threading.Thread(target = waiter)
    thread.start()
    deadline = time.monotonic() + 5
    while limiter.waiting < 1 and time.monotonic() < deadline:
        time.sleep(0.01)
    assert limiter.waiting == 1

    with pytest.raises(OverloadedError):
        limiter.acquire()

    limiter.window = 0.0
    release.set()
    thread.join(5)
    assert not thread.is_alive()
    assert errors == []


def test_waiting_caller_honours_cancellation():
    limiter = RateLimiter(1, 60.0, 1)
    limiter.acquire()
    token = CancelToken()
    token.cancel_after(0.05)

    with pytest.raises(RequestCancelledError):
        limiter.acquire(token)
    assert limiter.waiting == 0


def test_async_acquire_waits(fake_time):
    limiter = _limiter(fake_time, permit_limit = 1, window = 3.0)

    async def runner():
        await limiter.aacquire()
        await limiter.aacquire()

    asyncio.run(runner())
    assert fake_time.sleeps == [3.0]


def test_block_for_pauses_all_sends(fake_time):
    limiter = _limiter(fake_time, permit_limit = 100)
    limiter.block_for(4.0)

    limiter.acquire()
    assert fake_time.sleeps == [4.0]


def test_exhausted_server_budget_blocks_sends(fake_time):
    limiter = _limiter(fake_time, permit_limit = 100)
    limiter.observe({"ratelimit-remaining": "0", "ratelimit-reset": "7"})

    limiter.acquire()
    assert fake_time.sleeps == [7.0]


def test_parse_ratelimit_headers():
    assert parse_ratelimit_headers({"ratelimit": '"default";r=0;t=30'}) == (0, 30.0)
    assert parse_ratelimit_headers({"ratelimit-remaining": "12", "ratelimit-reset": "5"}) == (12, 5.0)
    assert parse_ratelimit_headers({}) == (None, None)


def test_client_throttles_proactively(make_client, fake_time, envelope):
    client, recorder = make_client(lambda request: httpx.Response(200, json = envelope([])), permit_limit = 2, permit_window = 60.0, queue_limit = 0)

    client.api.get("zones")
    client.api.get("zones")
    with pytest.raises(OverloadedError):
        client.api.get("zones")

    assert recorder.count == 2
