import asyncio
import threading
import random

import httpx
import pytest

from cfkit import (
    CancelToken,
    CircuitOpenError,
    CircuitState,
    RateLimitedError,
    RequestCancelledError,
    RequestTimeoutError,
    ServerError,
    TransportError,
)


def _sequence(*responses):
    """Handler replaying ``responses`` in order, repeating the last one"""
    queue = list(responses)

    def handler(request: httpx.Request):
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item

    return handler


def test_always_failing_call_sends_max_retries_plus_one(make_client):
    client, recorder = make_client(lambda request: httpx.Response(503, text = "unavailable"), max_retries = 3)

    with pytest.raises(ServerError) as exc_info:
        client.api.get("zones")

    assert recorder.count == 4
    assert exc_info.value.status_code == 503
    assert exc_info.value.raw_body == "unavailable"


def test_backoff_doubles_from_the_base_delay(make_client, fake_time):
    client, _ = make_client(lambda request: httpx.Response(500), max_retries = 3, backoff_base = 1.0)

    with pytest.raises(ServerError):
        client.api.get("zones")

    assert fake_time.sleeps == [1.0, 2.0, 4.0]


def test_jitter_stays_within_its_ceiling(make_client, fake_time):
    client, _ = make_client(lambda request: httpx.Response(502), max_retries = 3, backoff_base = 0.5, jitter = 0.25)
    client.controller.policy.rng = random.Random(7)

    with pytest.raises(ServerError):
        client.api.get("zones")

    for attempt, delay in enumerate(fake_time.sleeps):
        floor = 0.5 * 2 ** attempt
        assert floor <= delay <= floor + 0.25


def test_backoff_is_capped(make_client, fake_time):
    client, _ = make_client(lambda request: httpx.Response(500), max_retries = 4, backoff_base = 10.0, backoff_max = 15.0)

    with pytest.raises(ServerError):
        client.api.get("zones")

    assert fake_time.sleeps == [10.0, 15.0, 15.0, 15.0]


def test_retry_after_is_honoured(make_client, fake_time, envelope):
    handler = _sequence(
        httpx.Response(429, headers = {"Retry-After": "2"}, json = envelope(success = False, errors = [{"code": 971, "message": "throttled"}])),
        httpx.Response(200, json = envelope({"ok": True})),
    )
    client, recorder = make_client(handler, backoff_base = 0.1)

    assert client.api.get("zones/z1") == {"ok": True}
    assert recorder.count == 2
    assert fake_time.sleeps[0] >= 2.0


def test_rate_limited_is_not_retried_when_disabled(make_client):
    client, recorder = make_client(lambda request: httpx.Response(429, headers = {"Retry-After": "1"}), retry_rate_limited = False)

    with pytest.raises(RateLimitedError) as exc_info:
        client.api.get("zones")

    assert recorder.count == 1
    assert exc_info.value.retry_after == 1.0


def test_connection_errors_are_retried(make_client, envelope):
    handler = _sequence(httpx.ConnectError("refused"), httpx.Response(200, json = envelope([1, 2])))
    client, recorder = make_client(handler)

    assert client.api.get("things") == [1, 2]
    assert recorder.count == 2


def test_timeouts_are_retried_then_surface(make_client):
    client, recorder = make_client(_sequence(httpx.ReadTimeout("slow")), max_retries = 2)

    with pytest.raises(RequestTimeoutError) as exc_info:
        client.api.get("zones")

    assert isinstance(exc_info.value, TransportError)
    assert exc_info.value.status_code is None
    assert recorder.count == 3


def test_idempotent_only_skips_post_retries(make_client):
    client, recorder = make_client(lambda request: httpx.Response(503), idempotent_only = True)

    with pytest.raises(ServerError):
        client.api.post("zones", body = {"name": "a.com"})
    assert recorder.count == 1

    with pytest.raises(ServerError):
        client.api.put("zones/z1", body = {"name": "a.com"})
    assert recorder.count == 1 + 4


def test_breaker_opens_after_threshold_and_fails_fast(make_client):
    client, recorder = make_client(lambda request: httpx.Response(503), max_retries = 0, circuit_failure_threshold = 2, circuit_cooldown = 30.0)

    for _ in range(2):
        with pytest.raises(ServerError):
            client.api.get("zones")
    assert client.controller.breaker.state is CircuitState.OPEN

    with pytest.raises(CircuitOpenError) as exc_info:
        client.api.get("zones")
    assert recorder.count == 2
    assert exc_info.value.retry_in == pytest.approx(30.0)


def test_breaker_probe_success_closes_circuit(make_client, fake_time, envelope):
    handler = _sequence(httpx.Response(503), httpx.Response(503), httpx.Response(200, json = envelope([])))
    client, recorder = make_client(handler, max_retries = 0, circuit_failure_threshold = 2, circuit_cooldown = 30.0)

    for _ in range(2):
        with pytest.raises(ServerError):
            client.api.get("zones")

    fake_time.now += 31.0
    assert client.api.get("zones") == []
    assert recorder.count == 3
    assert client.controller.breaker.state is CircuitState.CLOSED


def test_breaker_probe_failure_reopens_circuit(make_client, fake_time):
    client, recorder = make_client(lambda request: httpx.Response(500), max_retries = 3, circuit_failure_threshold = 1, circuit_cooldown = 10.0)

    with pytest.raises(ServerError):
        client.api.get("zones")
    sent = recorder.count

    fake_time.now += 11.0
    with pytest.raises(ServerError):
        client.api.get("zones")
    # the probe is a single attempt
    assert recorder.count == sent + 1
    assert client.controller.breaker.state is CircuitState.OPEN

    with pytest.raises(CircuitOpenError):
        client.api.get("zones")
    assert recorder.count == sent + 1


def test_half_open_admits_a_single_call(make_client, fake_time, envelope):
    entered, release = threading.Event(), threading.Event()
    sends = []

    def handler(request):
        sends.append(request)
        if len(sends) == 1:
            return httpx.Response(503)
        entered.set()
        release.wait(5)
        return httpx.Response(200, json = envelope([]))

    client, recorder = make_client(handler, max_retries = 0, circuit_failure_threshold = 1, circuit_cooldown = 30.0)
    with pytest.raises(ServerError):
        client.api.get("zones")

    fake_time.now += 31.0
    results = []
    first = threading.Thread(target = lambda: results.append(client.api.get("zones")))
    first.start()
    try:
        assert entered.wait(5)
        assert client.controller.breaker.state is CircuitState.HALF_OPEN
        with pytest.raises(CircuitOpenError):
            client.api.get("zones")
    finally:
        release.set()
        first.join(5)

    assert results == [[]]
    assert len(sends) == 2
    assert client.controller.breaker.state is CircuitState.CLOSED


def test_client_errors_do_not_trip_the_breaker(make_client):
    client, _ = make_client(lambda request: httpx.Response(404), circuit_failure_threshold = 1)

    for _ in range(3):
        with pytest.raises(TransportError):
            client.api.get("zones/missing")

    assert client.controller.breaker.state is CircuitState.CLOSED


def test_cancelled_token_stops_before_sending(make_client):
    client, recorder = make_client(lambda request: httpx.Response(200))
    token = CancelToken()
    token.cancel()

    with pytest.raises(RequestCancelledError):
        client.api.get("zones", cancel_token = token)
    assert recorder.count == 0


def test_cancellation_during_backoff_stops_retrying(make_client):
    client, recorder = make_client(lambda request: httpx.Response(503))
    token = CancelToken()

    def cancelling_sleep(delay, cancel_token = None):
        token.cancel()
        cancel_token.raise_if_cancelled()

    client.controller._sleep = cancelling_sleep

    with pytest.raises(RequestCancelledError):
        client.api.get("zones", cancel_token = token)
    assert recorder.count == 1
    assert client.controller.breaker.failures == 0


def test_async_retry_ceiling(make_client):
    client, recorder = make_client(lambda request: httpx.Response(503), max_retries = 2)

    async def runner():
        with pytest.raises(ServerError):
            await client.api.aget("zones")

    asyncio.run(runner())
    assert recorder.count == 3


def test_async_token_interrupts_inflight_request(make_client):
    async def slow(request: httpx.Request):
        await asyncio.sleep(10)
        return httpx.Response(200)

    client, recorder = make_client(slow)

    async def runner():
        token = CancelToken()
        asyncio.get_running_loop().call_later(0.05, token.cancel)
        with pytest.raises(RequestCancelledError):
            await client.api.aget("zones", cancel_token = token)

    asyncio.run(asyncio.wait_for(runner(), 5))
    assert recorder.count == 1


def test_task_cancellation_propagates_untouched(make_client):
    async def slow(request: httpx.Request):
        await asyncio.sleep(10)
        return httpx.Response(200)

    client, recorder = make_client(slow)

    async def runner():
        task = asyncio.ensure_future(client.api.aget("zones"))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(runner())
    assert recorder.count == 1
    assert client.controller.breaker.failures == 0
