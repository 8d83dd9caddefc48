# source_query/query_server/query_request/info_query.py
import struct

from source_query.constants import (EDF_GAME_ID, EDF_KEYWORDS, EDF_PORT, EDF_SOURCE_TV, EDF_STEAM_ID,
                                    S2A_INFO, SINGLE_PACKET_HEADER, TEXT_ENCODING)


def _string(value):
    return value.encode(TEXT_ENCODING) + b'\x00'


def info_query(info):
    """
    Формирует ответ A2S_INFO из ServerInfo.
    Дополнительные поля пишутся в порядке, заданном протоколом, по битам info.edf.
    :param info: ServerInfo
    :return: bytes
    """
    response = (
            SINGLE_PACKET_HEADER +  # Префикс ответа
            struct.pack('B', S2A_INFO) +  # Тип ответа ('I')
            struct.pack('B', info.protocol) +  # Версия протокола
            _string(info.name) +  # Название сервера
            _string(info.map) +  # Карта
            _string(info.folder) +  # Папка игры
            _string(info.game) +  # Игра
            struct.pack('<H', info.app_id) +  # ID приложения Steam
            struct.pack('B', info.players) +  # Игроки (текущее количество)
            struct.pack('B', info.max_players) +  # Максимум игроков
            struct.pack('B', info.bots) +  # Боты
            info.server_type.encode('ascii') +  # Тип сервера ('d' для dedicated)
            info.environment.encode('ascii') +  # Платформа ('w' для Windows)
            struct.pack('B', int(info.password_protected)) +  # Пароль
            struct.pack('B', int(info.vac_enabled)) +  # VAC (1 - включен, 0 - выключен)
            _string(info.version) +  # Версия игры
            struct.pack('B', info.edf)  # Extra Data Flags
    )
    if info.edf & EDF_PORT:
        response += struct.pack('<H', info.port)
    if info.edf & EDF_STEAM_ID:
        response += struct.pack('<Q', info.steam_id)
    if info.edf & EDF_SOURCE_TV:
        response += struct.pack('<H', info.stv_port) + _string(info.stv_name)
    if info.edf & EDF_KEYWORDS:
        response += _string(info.keywords)
    if info.edf & EDF_GAME_ID:
        response += struct.pack('<Q', info.game_id)
    return response
