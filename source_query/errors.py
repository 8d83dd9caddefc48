# source_query/errors.py


class SourceQueryError(Exception):
    """Базовое исключение клиента A2S_INFO"""


class TransportError(SourceQueryError):
    """Ошибка сокета или сети (хост недоступен, отказ записи/чтения)"""


class QueryTimeoutError(SourceQueryError, TimeoutError):
    """Сервер не ответил в отведённое время"""


class UnsupportedResponseError(SourceQueryError):
    """Получен разделённый (split) ответ, сборка таких ответов не поддерживается"""


class ProtocolError(SourceQueryError):
    """Сервер нарушил рукопожатие: после challenge пришло не A2S_INFO"""


class DecodeError(SourceQueryError):
    """
    Пакет повреждён или обрезан.
    :param field: Имя поля, на котором остановилось чтение.
    :param offset: Смещение в байтах от начала полезной нагрузки.
    :param reason: Описание проблемы.
    """

    def __init__(self, field, offset, reason):
        self.field = field
        self.offset = offset
        self.reason = reason
        super().__init__(f"Не удалось прочитать поле '{field}' (смещение {offset}): {reason}")
