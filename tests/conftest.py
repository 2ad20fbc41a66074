import httpx
import pytest

import recache
from recache._utils import BaseClock

# Mon, 25 Aug 2015 12:00:00 GMT
INITIAL_TIME = 1440504000


class MockedClock(BaseClock):
    def __init__(self, now: float = INITIAL_TIME) -> None:
        self._now = now

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds


@pytest.fixture()
def clock() -> MockedClock:
    return MockedClock()


@pytest.fixture()
def transport() -> recache.MockTransport:
    return recache.MockTransport()


@pytest.fixture()
def storage(clock: MockedClock) -> recache.InMemoryStorage:
    return recache.InMemoryStorage(clock=clock)


@pytest.fixture()
def cache_client(transport, storage, clock):
    with recache.CacheClient(
        client=httpx.Client(transport=transport),
        storage=storage,
        controller=recache.Controller(clock=clock),
    ) as client:
        yield client
