# source_query/__init__.py
"""
Асинхронный клиент запроса A2S_INFO (Source Engine Query).
Протокол: https://developer.valvesoftware.com/wiki/Server_queries#A2S_INFO

Пример:
    info = await query("127.0.0.1:27015", timeout=3)
"""
from source_query.constants import DEFAULT_TIMEOUT
from source_query.errors import (DecodeError, ProtocolError, QueryTimeoutError, SourceQueryError,
                                 TransportError, UnsupportedResponseError)
from source_query.query_client.query_client import QueryClient, query
from source_query.types import QueryTarget, ServerInfo

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_TIMEOUT",
    "DecodeError",
    "ProtocolError",
    "QueryClient",
    "QueryTarget",
    "QueryTimeoutError",
    "ServerInfo",
    "SourceQueryError",
    "TransportError",
    "UnsupportedResponseError",
    "query",
]
