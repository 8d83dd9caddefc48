# source_query/query_client/query_response/classify.py
import struct

from source_query.constants import (CHALLENGE_SIZE, RESPONSE_HEADER_SIZE, S2A_INFO, S2C_CHALLENGE,
                                    SINGLE_PACKET_HEADER)
from source_query.types import ChallengeResponse, InfoResponse, MalformedResponse, SplitResponse


def classify(data):
    """
    Определяет тип входящей датаграммы по заголовку и байту типа.
    Чистая функция: любая последовательность байт даёт ровно один из вариантов
    InfoResponse / ChallengeResponse / SplitResponse / MalformedResponse.
    """
    data = bytes(data)
    if len(data) < RESPONSE_HEADER_SIZE:
        return MalformedResponse("header", 0, f"пакет короче {RESPONSE_HEADER_SIZE} байт ({len(data)})")

    header = data[:len(SINGLE_PACKET_HEADER)]
    if header != SINGLE_PACKET_HEADER:
        return SplitResponse(header)

    packet_type = data[len(SINGLE_PACKET_HEADER)]
    body = data[RESPONSE_HEADER_SIZE:]
    if packet_type == S2A_INFO:
        return InfoResponse(body)
    if packet_type == S2C_CHALLENGE:
        if len(body) < CHALLENGE_SIZE:
            return MalformedResponse("challenge", RESPONSE_HEADER_SIZE,
                                     f"ожидалось {CHALLENGE_SIZE} байта, получено {len(body)}")
        return ChallengeResponse(struct.unpack('<I', body[:CHALLENGE_SIZE])[0])
    return MalformedResponse("type", len(SINGLE_PACKET_HEADER), f"неизвестный тип ответа 0x{packet_type:02X}")
