# source_query/query_client/query_client.py
import asyncio
from dataclasses import dataclass
from enum import Enum

from source_query.constants import DEFAULT_TIMEOUT
from source_query.errors import DecodeError, ProtocolError, SourceQueryError, UnsupportedResponseError
from source_query.logger import LoggerMixin
from source_query.query_client.query_request.info_request import build_info_request
from source_query.query_client.query_response.classify import classify
from source_query.query_client.query_response.info_response import parse_info
from source_query.query_client.transport import TransportSession
from source_query.types import ChallengeResponse, MalformedResponse, QueryTarget, SplitResponse


class QueryState(str, Enum):
    AWAITING_INFO = "AWAITING_INFO"
    AWAITING_CHALLENGE_REPLY = "AWAITING_CHALLENGE_REPLY"


@dataclass
class Exchange:
    """Состояние одного запроса A2S_INFO"""
    state: QueryState = QueryState.AWAITING_INFO
    round_trips: int = 0


class QueryClient(LoggerMixin):
    """
    Выполняет один запрос A2S_INFO к серверу, включая рукопожатие с challenge.

    Таймаут — общий бюджет на весь обмен: дедлайн считается один раз,
    второй recv (после challenge) получает только оставшееся время.
    """

    def __init__(self, host_and_port, timeout=None):
        """
        :param host_and_port: Адрес сервера "host:port" или готовый QueryTarget.
        :param timeout: Секунды на весь обмен, по умолчанию DEFAULT_TIMEOUT.
        """
        if isinstance(host_and_port, QueryTarget):
            self.target = host_and_port
        else:
            self.target = QueryTarget.parse(host_and_port)
        self.timeout = DEFAULT_TIMEOUT if timeout is None else float(timeout)
        if self.timeout <= 0:
            raise ValueError(f"timeout должен быть положительным, получено {timeout}")
        # Число обменов в последнем завершившемся запросе
        self.round_trips = 0

    async def query_info(self):
        """
        Каждый вызов ведёт свой счётчик обменов, поэтому один клиент можно
        опрашивать из нескольких задач одновременно.
        :return: ServerInfo
        :raises QueryTimeoutError, TransportError, UnsupportedResponseError, ProtocolError, DecodeError
        """
        exchange = Exchange()
        try:
            info = await self._exchange(exchange)
        except SourceQueryError as e:
            self.logger.warning(f"{self.target}: запрос не удался: {e}")
            raise
        finally:
            self.round_trips = exchange.round_trips

        self.logger.info(f"{self.target}: '{info.name}' {info.map} {info.players}/{info.max_players} "
                         f"(round-trips: {exchange.round_trips})")
        return info

    async def _exchange(self, exchange):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout

        async with TransportSession(self.target, connect_timeout=deadline - loop.time()) as session:
            self.logger.debug(f"{self.target}: {exchange.state.value}")
            response = await self._round_trip(session, build_info_request(), deadline, exchange)

            if isinstance(response, ChallengeResponse):
                exchange.state = QueryState.AWAITING_CHALLENGE_REPLY
                self.logger.debug(
                    f"{self.target}: получен challenge 0x{response.challenge:08X}, {exchange.state.value}")
                response = await self._round_trip(session, build_info_request(response.challenge), deadline,
                                                  exchange)
                if isinstance(response, (ChallengeResponse, SplitResponse)):
                    raise ProtocolError(
                        f"{self.target}: после ответа на challenge пришёл {type(response).__name__}")
            elif isinstance(response, SplitResponse):
                raise UnsupportedResponseError(
                    f"{self.target}: разделённый ответ (заголовок {response.header.hex()}) не поддерживается")

            if isinstance(response, MalformedResponse):
                raise DecodeError(response.field, response.offset, response.reason)

            return parse_info(response.payload)

    @staticmethod
    async def _round_trip(session, packet, deadline, exchange):
        await session.send(packet)
        remaining = deadline - asyncio.get_running_loop().time()
        data = await session.recv(remaining)
        exchange.round_trips += 1
        return classify(data)


async def query(host_and_port, timeout=None):
    """
    Запрашивает A2S_INFO у сервера.
    :param host_and_port: "host:port".
    :param timeout: Секунды на весь обмен (по умолчанию 5).
    :return: ServerInfo
    """
    return await QueryClient(host_and_port, timeout).query_info()
