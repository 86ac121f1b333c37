import typing as t

import httpx
import pytest

from cfkit import CloudflareClient, CloudflareSettings, ResilienceSettings


class FakeTime:
    """A clock that only moves when something sleeps on it"""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: t.List[float] = []

    def clock(self) -> float:
        return self.now

    def sleep(self, delay: float, cancel_token=None) -> None:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        self.sleeps.append(delay)
        self.now += delay

    async def asleep(self, delay: float, cancel_token=None) -> None:
        self.sleep(delay, cancel_token)


class Recorder:
    """Wraps a MockTransport handler and keeps every request it saw"""

    def __init__(self, handler: t.Callable[[httpx.Request], t.Any]):
        self.handler = handler
        self.requests: t.List[httpx.Request] = []

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        return self.handler(request)

    @property
    def count(self) -> int:
        return len(self.requests)


def build_envelope(
    result: t.Any = None,
    success: bool = True,
    errors: t.Optional[t.List[t.Dict[str, t.Any]]] = None,
    result_info: t.Optional[t.Dict[str, t.Any]] = None,
) -> t.Dict[str, t.Any]:
    data = {"success": success, "errors": errors or [], "messages": [], "result": result}
    if result_info is not None:
        data["result_info"] = result_info
    return data


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def envelope():
    return build_envelope


@pytest.fixture
def make_client(fake_time):
    """
    Returns a factory building a client around a request handler, with
    jitter off and time controlled by ``fake_time``
    """
    def factory(handler, **resilience: t.Any) -> t.Tuple[CloudflareClient, Recorder]:
        recorder = Recorder(handler)
        options = {"jitter": 0.0, **resilience}
        client = CloudflareClient(
            settings = CloudflareSettings(api_token = "test-token", account_id = "acc-1", zone_id = "zone-1"),
            resilience = ResilienceSettings(**options),
            transport = httpx.MockTransport(recorder),
            async_transport = httpx.MockTransport(recorder),
            clock = fake_time.clock,
            sleep = fake_time.sleep,
            asleep = fake_time.asleep,
        )
        return client, recorder

    return factory
