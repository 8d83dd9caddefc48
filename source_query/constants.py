# source_query/constants.py
import re

# Таймаут по умолчанию на весь обмен A2S_INFO (секунды)
DEFAULT_TIMEOUT = 5.0

# Как часто проверять ошибки сокета (ICMP unreachable и т.п.), пока ждём ответ
ERROR_POLL_INTERVAL = 0.05

# Максимальный размер одного ответа Source (без заголовков IP/UDP)
PACKET_SIZE = 1400
MAX_PENDING_CHALLENGES = 1024  # сколько выданных challenge number держит симулятор

# Заголовок одиночного пакета (-1 как int32 little-endian)
SINGLE_PACKET_HEADER = b'\xFF\xFF\xFF\xFF'
# Заголовок части разделённого ответа (-2), сборка не поддерживается
SPLIT_PACKET_HEADER = b'\xFE\xFF\xFF\xFF'
RESPONSE_HEADER_SIZE = len(SINGLE_PACKET_HEADER) + 1  # заголовок + байт типа
CHALLENGE_SIZE = 4

# Запрос
A2S_INFO = b'T'
A2S_INFO_QUERY_STRING = b'Source Engine Query'

# Типы ответов
S2A_INFO = 0x49  # 'I'
S2C_CHALLENGE = 0x41  # 'A'

# Строки в ответе
TEXT_ENCODING = 'utf-8'

# Extra Data Flag, порядок чтения полей фиксирован протоколом
EDF_PORT = 0x80
EDF_STEAM_ID = 0x10
EDF_SOURCE_TV = 0x40
EDF_KEYWORDS = 0x20
EDF_GAME_ID = 0x01
EDF_READ_ORDER = (EDF_PORT, EDF_STEAM_ID, EDF_SOURCE_TV, EDF_KEYWORDS, EDF_GAME_ID)

# Входящий A2S_INFO (с challenge или без) для симулятора сервера
A2S_INFO_REQUEST = re.compile(rb'^\xFF\xFF\xFF\xFFTSource Engine Query\x00(.{4})?\Z', re.DOTALL)
