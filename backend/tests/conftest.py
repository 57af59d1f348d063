"""Shared fixtures for the relay tests: a recording channel and a pinned clock."""

import pytest

from relay.broadcaster import Broadcaster
from relay.router import MessageRouter
from store import SessionStore

T0 = 1_700_000_000_000


class FakeChannel:
    """Stands in for a WebSocket; remembers everything sent through it."""

    def __init__(self, fail: bool = False):
        self.sent: list[dict] = []
        self.fail = fail
        self.close_code = None

    async def send_json(self, data: dict) -> None:
        if self.fail:
            raise RuntimeError("connection reset")
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.close_code = code

    @property
    def last(self) -> dict:
        return self.sent[-1]

    def of_type(self, msg_type: str) -> list[dict]:
        return [m for m in self.sent if m.get("type") == msg_type]


class FakeClock:
    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return SessionStore(clock=clock)


@pytest.fixture
def broadcaster(store, clock):
    return Broadcaster(store, clock=clock)


@pytest.fixture
def router(store, broadcaster, clock):
    return MessageRouter(store, broadcaster, clock=clock)


@pytest.fixture
def connect(store):
    """Open a fake connection; returns (session_id, channel)."""
    def _connect(fail: bool = False, active: bool = False):
        channel = FakeChannel(fail=fail)
        session_id = store.create(channel)
        if active:
            store.update(session_id, lambda s: setattr(s, "is_active", True))
        return session_id, channel
    return _connect
