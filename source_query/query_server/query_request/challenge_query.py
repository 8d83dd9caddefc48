# source_query/query_server/query_request/challenge_query.py
import random
import struct

from source_query.constants import MAX_PENDING_CHALLENGES, S2C_CHALLENGE, SINGLE_PACKET_HEADER


def challenge_query(addr, challenge_numbers, challenge_number=None, limit=MAX_PENDING_CHALLENGES):
    """
    Формирует ответ S2C_CHALLENGE и запоминает выданный номер для адреса клиента.
    :param addr: Адрес клиента (ip, port).
    :param challenge_numbers: Словарь addr -> выданный challenge number.
    :param challenge_number: Фиксированный номер (для тестов); иначе случайный.
    :param limit: Максимум хранимых номеров; самые старые вытесняются.
    """
    if challenge_number is None:
        challenge_number = random.randint(1, 2 ** 32 - 1)
    packed_challenge_number = struct.pack('<I', challenge_number)  # Little-endian

    # Повторный запрос переносит адрес в конец очереди
    challenge_numbers.pop(addr, None)
    while len(challenge_numbers) >= limit:
        del challenge_numbers[next(iter(challenge_numbers))]
    challenge_numbers[addr] = challenge_number
    return SINGLE_PACKET_HEADER + struct.pack('B', S2C_CHALLENGE) + packed_challenge_number
