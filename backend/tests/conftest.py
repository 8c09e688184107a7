from __future__ import annotations

import random

import pytest

from hintword.config import Config
from hintword.game.registry import LobbyRegistry
from hintword.game.words import RandomWordProvider, WordEntry
from hintword.realtime.timers import RoundTimerCoordinator
from hintword.server import create_app

ELEPHANT = WordEntry("ELEPHANT", ("It's a large mammal", "It has a trunk", "It's found in Africa and Asia"))
VOLCANO = WordEntry("volcano", ("It can erupt", "It spews lava"))


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    TRUST_PROXY_HEADERS = False
    SOCKETIO_ASYNC_MODE = "threading"
    ROUND_TIMERS_ENABLED = False


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingGateway:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, object]] = []
        self.fail = False

    def to_lobby(self, lobby_id, event, payload):
        if self.fail:
            raise RuntimeError("gateway down")
        self.sent.append((lobby_id, event, payload))

    def to_player(self, player_id, event, payload=None):
        self.sent.append((player_id, event, payload))

    def payloads(self, event, lobby_id=None):
        return [p for (target, e, p) in self.sent if e == event and (lobby_id is None or target == lobby_id)]


class ManualTasks:
    """Stands in for socketio.start_background_task / socketio.sleep."""

    def __init__(self) -> None:
        self.tasks: list[tuple] = []
        self.slept: list[float] = []

    def start(self, fn, *args):
        self.tasks.append((fn, args))

    def sleep(self, seconds):
        self.slept.append(seconds)

    def run(self, name: str) -> None:
        pending = [t for t in self.tasks if t[0].__name__ == name]
        self.tasks = [t for t in self.tasks if t[0].__name__ != name]
        for fn, args in pending:
            fn(*args)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def words():
    return RandomWordProvider([ELEPHANT, VOLCANO], rng=random.Random(7))


@pytest.fixture()
def registry(clock, words):
    return LobbyRegistry(words=words, clock=clock, rng=random.Random(42))


@pytest.fixture()
def gateway():
    return RecordingGateway()


@pytest.fixture()
def tasks():
    return ManualTasks()


@pytest.fixture()
def coordinator(registry, gateway, tasks):
    return RoundTimerCoordinator(registry, gateway, start_task=tasks.start, sleep=tasks.sleep)


@pytest.fixture()
def two_player_lobby(registry):
    lobby = registry.create_lobby("host", "Hank")
    registry.join_lobby(lobby.id, "guest", "Pia")
    return registry.get_session(lobby.id)


@pytest.fixture()
def server():
    return create_app(TestConfig, word_provider=RandomWordProvider([ELEPHANT]))


@pytest.fixture()
def make_server():
    def _make(**overrides):
        config_class = type("OverriddenConfig", (TestConfig,), overrides)
        return create_app(config_class, word_provider=RandomWordProvider([ELEPHANT]))

    return _make


@pytest.fixture()
def flask_app(server):
    return server[0]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(server):
    app, socketio = server
    clients = []

    def _make():
        test_client = socketio.test_client(app, flask_test_client=app.test_client())
        clients.append(test_client)
        return test_client

    yield _make

    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass
