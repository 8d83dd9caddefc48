# source_query/query_client/transport.py
import asyncio

import asyncio_dgram
from source_query.constants import ERROR_POLL_INTERVAL
from source_query.errors import QueryTimeoutError, TransportError
from source_query.logger import LoggerMixin


class TransportSession(LoggerMixin):
    """
    Одна UDP-ассоциация с сервером: эфемерный локальный порт, connect к цели.
    Использование:
      async with TransportSession(target) as session:
          await session.send(packet)
          data = await session.recv(timeout)
    Сокет закрывается при выходе из блока, в том числе при отмене задачи.
    Повторов нет, ими управляет вызывающий код.
    """

    def __init__(self, target, connect_timeout=None):
        """
        :param target: QueryTarget (host + port).
        :param connect_timeout: Секунды на открытие сокета (включая резолв имени), None - без ограничения.
        """
        self.target = target
        self.connect_timeout = connect_timeout
        self._stream = None
        self._closed = False

    @property
    def closed(self):
        return self._closed

    async def open(self):
        if self._stream is not None:
            return self
        if self._closed:
            raise TransportError(f"Сессия с {self.target} уже закрыта")
        try:
            if self.connect_timeout is None:
                self._stream = await asyncio_dgram.connect(self.target.addr)
            elif self.connect_timeout <= 0:
                raise QueryTimeoutError(f"{self.target}: время на подключение истекло")
            else:
                self._stream = await asyncio.wait_for(asyncio_dgram.connect(self.target.addr),
                                                      self.connect_timeout)
        except QueryTimeoutError:
            self._closed = True
            raise
        except asyncio.TimeoutError:
            self._closed = True
            raise QueryTimeoutError(
                f"{self.target}: не удалось подключиться за {self.connect_timeout:.2f} с") from None
        except OSError as e:
            self._closed = True
            raise TransportError(f"Не удалось открыть UDP-сокет к {self.target}: {e}") from e
        self.logger.debug(f"Сокет {self._stream.sockname} -> {self.target} открыт")
        return self

    async def send(self, data):
        stream = self._require_stream()
        try:
            await stream.send(data)
        except (OSError, asyncio_dgram.TransportClosed) as e:
            raise TransportError(f"Не удалось отправить пакет на {self.target}: {e}") from e
        self.logger.debug(f"Отправлено {len(data)} байт на {self.target}: {data!r}")

    async def recv(self, timeout):
        """
        Ждёт ровно одну датаграмму.
        asyncio_dgram складывает ошибки сокета в отдельную очередь и отдаёт их только
        через свойство exception, поэтому пока ждём, периодически его проверяем.
        :param timeout: Секунды ожидания.
        :return: bytes
        :raises QueryTimeoutError: Ответ не пришёл за timeout.
        :raises TransportError: Ошибка сокета (например, ICMP port unreachable).
        """
        stream = self._require_stream()
        if timeout <= 0:
            raise QueryTimeoutError(f"{self.target}: время ожидания ответа истекло")
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        recv_task = asyncio.ensure_future(stream.recv())
        try:
            while not recv_task.done():
                _ = stream.exception
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                await asyncio.wait({recv_task}, timeout=min(ERROR_POLL_INTERVAL, remaining))
            if not recv_task.done():
                raise QueryTimeoutError(f"{self.target}: нет ответа за {timeout:.2f} с")
            data, addr = recv_task.result()
        except QueryTimeoutError:
            raise
        except (OSError, asyncio_dgram.TransportClosed) as e:
            raise TransportError(f"Ошибка при получении ответа от {self.target}: {e}") from e
        finally:
            if not recv_task.done():
                recv_task.cancel()
        self.logger.debug(f"Получено {len(data)} байт от {addr}: {data!r}")
        return data

    def close(self):
        if self._stream is not None:
            self._stream.close()
            self._stream = None
            self.logger.debug(f"Сокет к {self.target} закрыт")
        self._closed = True

    def _require_stream(self):
        if self._stream is None:
            raise TransportError(f"Сессия с {self.target} не открыта")
        return self._stream

    async def __aenter__(self):
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb):
        self.close()
