# source_query/types.py
from dataclasses import dataclass
from typing import List, Optional, Tuple

from source_query.constants import (EDF_GAME_ID, EDF_KEYWORDS, EDF_PORT, EDF_SOURCE_TV,
                                    EDF_STEAM_ID)


@dataclass(frozen=True)
class QueryTarget:
    host: str
    port: int

    @classmethod
    def parse(cls, host_and_port: str) -> "QueryTarget":
        """
        Разбирает строку "host:port" (IPv6 — в виде "[addr]:port").
        Имя хоста не резолвится, это делает цикл событий при подключении.
        """
        host, sep, port = host_and_port.strip().rpartition(':')
        if not sep or not host:
            raise ValueError(f"Ожидался адрес вида host:port, получено: {host_and_port!r}")
        if host.startswith('[') and host.endswith(']'):
            host = host[1:-1]
        elif ':' in host:
            raise ValueError(f"IPv6-адрес нужно указывать в квадратных скобках: {host_and_port!r}")
        try:
            port = int(port)
        except ValueError:
            raise ValueError(f"Некорректный порт в адресе: {host_and_port!r}")
        if not 0 < port < 65536:
            raise ValueError(f"Порт вне диапазона 1..65535: {port}")
        return cls(host=host, port=port)

    @property
    def addr(self) -> Tuple[str, int]:
        return self.host, self.port

    def __str__(self):
        if ':' in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class ServerInfo:
    """Ответ A2S_INFO. Необязательные поля заполнены тогда и только тогда, когда выставлен их бит EDF."""
    protocol: int
    name: str
    map: str
    folder: str
    game: str
    app_id: int
    players: int
    max_players: int
    bots: int
    server_type: str  # d - dedicated, l - listen, p - SourceTV relay
    environment: str  # l - Linux, w - Windows, m/o - Mac
    password_protected: bool
    vac_enabled: bool
    version: str
    edf: int = 0
    port: Optional[int] = None  # EDF 0x80
    steam_id: Optional[int] = None  # EDF 0x10
    stv_port: Optional[int] = None  # EDF 0x40
    stv_name: Optional[str] = None  # EDF 0x40
    keywords: Optional[str] = None  # EDF 0x20
    game_id: Optional[int] = None  # EDF 0x01

    def has_extra_data(self, flag: int) -> bool:
        return bool(self.edf & flag)

    @property
    def tags(self) -> List[str]:
        """Ключевые слова сервера, разделённые запятыми"""
        if not self.keywords:
            return []
        return [tag for tag in self.keywords.split(',') if tag]

    def __post_init__(self):
        expected = {
            EDF_PORT: self.port is not None,
            EDF_STEAM_ID: self.steam_id is not None,
            EDF_SOURCE_TV: self.stv_port is not None and self.stv_name is not None,
            EDF_KEYWORDS: self.keywords is not None,
            EDF_GAME_ID: self.game_id is not None,
        }
        for flag, present in expected.items():
            if self.has_extra_data(flag) != present:
                raise ValueError(f"Поля EDF не соответствуют флагу 0x{self.edf:02X} (бит 0x{flag:02X})")


# --- Результат классификации входящей датаграммы ---

@dataclass(frozen=True)
class InfoResponse:
    payload: bytes


@dataclass(frozen=True)
class ChallengeResponse:
    challenge: int


@dataclass(frozen=True)
class SplitResponse:
    header: bytes


@dataclass(frozen=True)
class MalformedResponse:
    field: str
    offset: int
    reason: str
