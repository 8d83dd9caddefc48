# source_query/query_server/query_server.py
import asyncio
import struct
from enum import Enum

import asyncio_dgram
from source_query.constants import A2S_INFO_REQUEST, PACKET_SIZE, SINGLE_PACKET_HEADER, SPLIT_PACKET_HEADER
from source_query.logger import LoggerMixin
from source_query.query_server.query_request.challenge_query import challenge_query
from source_query.query_server.query_request.info_query import info_query


class ServerMode(str, Enum):
    RESPOND = "RESPOND"  # отвечает как обычный сервер
    SILENT = "SILENT"  # принимает запросы, но не отвечает
    SPLIT = "SPLIT"  # отвечает первой частью разделённого ответа
    MALFORMED = "MALFORMED"  # отвечает пакетом неизвестного типа
    CHALLENGE_LOOP = "CHALLENGE_LOOP"  # на любой запрос выдаёт новый challenge


class QueryServer(LoggerMixin):
    """
    Симулятор Source-сервера, отвечающий на A2S_INFO по UDP.
    Используется в тестах и для локальной отладки клиента.
    """

    def __init__(self, info, host="127.0.0.1", port=0, challenge=False, challenge_number=None,
                 mode=ServerMode.RESPOND, reply_delay=0.0):
        """
        :param info: ServerInfo, который сервер отдаёт клиентам.
        :param host: Адрес для bind.
        :param port: Порт для bind (0 - эфемерный).
        :param challenge: Требовать ли challenge перед ответом A2S_INFO.
        :param challenge_number: Фиксированный challenge number, иначе случайный.
        :param mode: ServerMode.
        :param reply_delay: Задержка перед каждым ответом, секунды.
        """
        self.info = info
        self.host = host
        self.port = port
        self.challenge = challenge
        self.challenge_number = challenge_number
        self.mode = ServerMode(mode)
        self.reply_delay = reply_delay

        self.requests = []  # все принятые A2S_INFO запросы (сырые байты)
        self.accepted_challenges = []
        self.rejected_challenges = []
        self.challenge_numbers = {}

        self._stream = None
        self._task = None

    @property
    def address(self):
        """Адрес "host:port", на котором слушает сервер"""
        host, port = self._stream.sockname[:2]
        return f"{host}:{port}"

    async def start(self):
        self._stream = await asyncio_dgram.bind((self.host, self.port))
        self.logger.info(f"QueryServer: Слушаю на {self.address} (mode={self.mode.value})")
        self._task = asyncio.create_task(self.main())
        return self

    async def stop(self):
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except (OSError, asyncio_dgram.TransportClosed) as e:
                self.logger.error(f"QueryServer: Основной цикл завершился с ошибкой: {e}")
            self._task = None

    async def main(self):
        """
        Основной цикл работы Query-сервера.
        """
        try:
            while True:
                try:
                    data, addr = await self._stream.recv()
                    self.logger.debug(f"QueryServer: Получен запрос от {addr}: {data}")
                    response = self.route_request(data, addr)
                    if response:
                        if self.reply_delay:
                            await asyncio.sleep(self.reply_delay)
                        await self._stream.send(response, addr)
                        self.logger.debug(f"QueryServer: Отправлен ответ клиенту {addr[0]}:{addr[1]} - {response}")
                except asyncio_dgram.TransportClosed:
                    self.logger.warning("QueryServer: Транспорт закрыт, завершаю цикл.")
                    break
                except OSError as e:
                    self.logger.error(f"QueryServer: Ошибка при обработке запроса: {e}")
        except asyncio.CancelledError:
            self.logger.info("QueryServer: Задача отменена, завершаю работу.")
            raise
        finally:
            self._stream.close()
            self.logger.info("QueryServer: Соединение asyncio_dgram закрыто.")

    def route_request(self, data, addr):
        """
        Определяет тип запроса и формирует ответ (None - не отвечать).
        """
        match = A2S_INFO_REQUEST.match(data)
        if not match:
            self.logger.warning(f"QueryServer: Неизвестный запрос от {addr[0]}:{addr[1]}: {data!r}")
            return None
        self.requests.append(data)

        if self.mode == ServerMode.SILENT:
            return None
        if self.mode == ServerMode.MALFORMED:
            return SINGLE_PACKET_HEADER + b'X'
        if self.mode == ServerMode.SPLIT:
            return self.split_response(info_query(self.info))

        raw_challenge = match.group(1)
        if self.mode == ServerMode.CHALLENGE_LOOP or (self.challenge and raw_challenge is None):
            return challenge_query(addr, self.challenge_numbers, self.challenge_number)

        if self.challenge:
            received = struct.unpack('<I', raw_challenge)[0]
            if self.challenge_numbers.get(addr) != received:
                self.logger.warning(f"QueryServer: Некорректный challenge number от {addr}: ожидался "
                                    f"{self.challenge_numbers.get(addr)}, получен {received}")
                self.rejected_challenges.append(received)
                return challenge_query(addr, self.challenge_numbers, self.challenge_number)
            # Удаляем challenge number из памяти после использования
            del self.challenge_numbers[addr]
            self.accepted_challenges.append(received)

        response = info_query(self.info)
        if len(response) > PACKET_SIZE:
            return self.split_response(response)
        return response

    @staticmethod
    def split_response(response, packet_id=1):
        """Первая часть разделённого ответа (формат Source, без сжатия)"""
        payload = response[:PACKET_SIZE]
        total = (len(response) + PACKET_SIZE - 1) // PACKET_SIZE
        return SPLIT_PACKET_HEADER + struct.pack('<lBBH', packet_id, total, 0, PACKET_SIZE) + payload

    async def __aenter__(self):
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()
