import json

import pytest
import pytest_asyncio

from source_query.config import Config
from source_query.constants import EDF_GAME_ID, EDF_KEYWORDS, EDF_PORT, EDF_SOURCE_TV, EDF_STEAM_ID
from source_query.query_client import query_client as query_client_module
from source_query.query_server import QueryServer
from source_query.types import ServerInfo


def _make_info(edf=0, **overrides):
    extra = {}
    if edf & EDF_PORT:
        extra['port'] = 27015
    if edf & EDF_STEAM_ID:
        extra['steam_id'] = 90263762545778710
    if edf & EDF_SOURCE_TV:
        extra['stv_port'] = 27020
        extra['stv_name'] = "SourceTV"
    if edf & EDF_KEYWORDS:
        extra['keywords'] = "secure,empty,tickrate128"
    if edf & EDF_GAME_ID:
        extra['game_id'] = 730
    fields = dict(
        protocol=17,
        name="[RU] Тестовый сервер",
        map="de_dust2",
        folder="csgo",
        game="Counter-Strike: Global Offensive",
        app_id=730,
        players=12,
        max_players=24,
        bots=2,
        server_type='d',
        environment='l',
        password_protected=False,
        vac_enabled=True,
        version="1.38.7.9",
        edf=edf,
        **extra,
    )
    fields.update(overrides)
    return ServerInfo(**fields)


@pytest.fixture
def make_info():
    return _make_info


@pytest.fixture
def full_info():
    return _make_info(edf=EDF_PORT | EDF_STEAM_ID | EDF_SOURCE_TV | EDF_KEYWORDS | EDF_GAME_ID)


@pytest_asyncio.fixture
async def start_server():
    """
    Запускает симулятор сервера на эфемерном порту; все запущенные серверы
    останавливаются после теста.
    """
    servers = []

    async def _start(info, **kwargs):
        server = QueryServer(info, **kwargs)
        await server.start()
        servers.append(server)
        return server

    yield _start
    for server in servers:
        await server.stop()


class ScriptedSession:
    """Подменяет TransportSession: отдаёт заранее заданные датаграммы и запоминает отправленные."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.sent = []
        self.closed = False
        self.target = None
        self.connect_timeout = None

    def __call__(self, target, connect_timeout=None):
        self.target = target
        self.connect_timeout = connect_timeout
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True

    async def send(self, data):
        self.sent.append(data)

    async def recv(self, timeout):
        return self.replies.pop(0)


@pytest.fixture
def scripted_session(monkeypatch):
    def _install(*replies):
        session = ScriptedSession(replies)
        monkeypatch.setattr(query_client_module, "TransportSession", session)
        return session
    return _install


@pytest.fixture
def recorded_sessions(monkeypatch):
    """Оставляет настоящий TransportSession, но сохраняет созданные экземпляры."""
    sessions = []
    original = query_client_module.TransportSession

    class RecordingSession(original):
        def __init__(self, target, **kwargs):
            super().__init__(target, **kwargs)
            sessions.append(self)

    monkeypatch.setattr(query_client_module, "TransportSession", RecordingSession)
    return sessions


@pytest.fixture
def write_config(tmp_path):
    def _write(data):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return Config(str(path))
    return _write
