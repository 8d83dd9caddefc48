# source_query/query_client/query_response/info_response.py
"""
Разбор полезной нагрузки ответа A2S_INFO (всё, что идёт после байта типа 'I').
Формат: https://developer.valvesoftware.com/wiki/Server_queries#A2S_INFO
"""

import io
import struct

from source_query.constants import (EDF_GAME_ID, EDF_KEYWORDS, EDF_PORT, EDF_SOURCE_TV, EDF_STEAM_ID,
                                    TEXT_ENCODING)
from source_query.errors import DecodeError
from source_query.types import ServerInfo


class Buffer(io.BytesIO):
    """Последовательное чтение полей с контролем границ; каждая ошибка — DecodeError с именем поля."""

    def _read_exact(self, size, field):
        offset = self.tell()
        chunk = self.read(size)
        if len(chunk) != size:
            raise DecodeError(field, offset, f"нужно {size} байт, доступно {len(chunk)}")
        return chunk

    def read_byte(self, field):
        return self._read_exact(1, field)[0]

    def read_char(self, field):
        return chr(self.read_byte(field))

    def read_short(self, field):
        return struct.unpack('<H', self._read_exact(2, field))[0]

    def read_long_long(self, field):
        return struct.unpack('<Q', self._read_exact(8, field))[0]

    def read_string(self, field):
        val = self.getvalue()
        start = self.tell()
        end = val.find(b'\0', start)
        if end < 0:
            raise DecodeError(field, start, "не найден завершающий NUL")
        self.seek(end + 1)
        try:
            return val[start:end].decode(TEXT_ENCODING)
        except UnicodeDecodeError as e:
            raise DecodeError(field, start + e.start, f"некорректная строка {TEXT_ENCODING}")


def parse_info(payload):
    """
    Разбирает ответ A2S_INFO в ServerInfo.
    :param payload: Байты после заголовка FF FF FF FF 'I'.
    :return: ServerInfo
    :raises DecodeError: Поле обрезано, отсутствует NUL или строка не в UTF-8.
    """
    response = Buffer(bytes(payload))
    result = {
        'protocol': response.read_byte('protocol'),
        'name': response.read_string('name'),
        'map': response.read_string('map'),
        'folder': response.read_string('folder'),
        'game': response.read_string('game'),
        'app_id': response.read_short('app_id'),
        'players': response.read_byte('players'),
        'max_players': response.read_byte('max_players'),
        'bots': response.read_byte('bots'),
        'server_type': response.read_char('server_type'),
        'environment': response.read_char('environment'),
        'password_protected': bool(response.read_byte('visibility')),
        'vac_enabled': bool(response.read_byte('vac')),
        'version': response.read_string('version'),
    }

    edf = response.read_byte('edf')
    result['edf'] = edf
    if edf & EDF_PORT:
        result['port'] = response.read_short('port')
    if edf & EDF_STEAM_ID:
        result['steam_id'] = response.read_long_long('steam_id')
    if edf & EDF_SOURCE_TV:
        result['stv_port'] = response.read_short('stv_port')
        result['stv_name'] = response.read_string('stv_name')
    if edf & EDF_KEYWORDS:
        result['keywords'] = response.read_string('keywords')
    if edf & EDF_GAME_ID:
        result['game_id'] = response.read_long_long('game_id')
    return ServerInfo(**result)
