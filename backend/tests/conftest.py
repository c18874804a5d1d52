import pytest
from fastapi.testclient import TestClient

from tictactoe.config import get_config
from tictactoe.registry import SessionRegistry


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def registry(clock):
    return SessionRegistry(clock=clock)


@pytest.fixture()
def app_config(monkeypatch):
    monkeypatch.setenv("DISCONNECT_GRACE_SEC", "0.1")
    monkeypatch.setenv("SWEEP_INTERVAL_SEC", "60")
    get_config.cache_clear()
    yield get_config()
    get_config.cache_clear()


@pytest.fixture()
def client(app_config):
    from tictactoe.main import app

    with TestClient(app) as test_client:
        yield test_client
