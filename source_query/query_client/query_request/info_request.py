# source_query/query_client/query_request/info_request.py
import struct

from source_query.constants import A2S_INFO, A2S_INFO_QUERY_STRING, CHALLENGE_SIZE, SINGLE_PACKET_HEADER


def build_info_request(challenge=None):
    """
    Формирует датаграмму A2S_INFO.
    :param challenge: None для первого запроса; число (uint32) или 4 байта из ответа S2C_CHALLENGE.
    :return: bytes
    """
    packet = SINGLE_PACKET_HEADER + A2S_INFO + A2S_INFO_QUERY_STRING + b'\x00'
    if challenge is None:
        return packet
    if isinstance(challenge, int):
        return packet + struct.pack('<I', challenge & 0xFFFFFFFF)
    challenge = bytes(challenge)
    if len(challenge) != CHALLENGE_SIZE:
        raise ValueError(f"Challenge должен занимать {CHALLENGE_SIZE} байта, получено {len(challenge)}")
    return packet + challenge
