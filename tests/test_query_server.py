import asyncio
import struct
from unittest.mock import AsyncMock, MagicMock

import asyncio_dgram
from source_query.constants import PACKET_SIZE, SPLIT_PACKET_HEADER
from source_query.query_client.query_request.info_request import build_info_request
from source_query.query_server import QueryServer, ServerMode
from source_query.query_server.query_request.challenge_query import challenge_query
from source_query.query_server.query_request.info_query import info_query

ADDR = ("127.0.0.1", 50000)


def test_unknown_request_ignored(make_info):
    server = QueryServer(make_info())
    assert server.route_request(b'\xFF\xFF\xFF\xFFU\xFF\xFF\xFF\xFF', ADDR) is None
    assert server.requests == []


def test_plain_server_answers_info(make_info):
    server = QueryServer(make_info())
    assert server.route_request(build_info_request(), ADDR) == info_query(make_info())


def test_challenge_issued_and_consumed(make_info):
    server = QueryServer(make_info(), challenge=True, challenge_number=42)
    assert server.route_request(build_info_request(), ADDR) == b'\xFF\xFF\xFF\xFFA' + struct.pack('<I', 42)
    assert server.challenge_numbers == {ADDR: 42}

    assert server.route_request(build_info_request(42), ADDR) == info_query(make_info())
    assert server.challenge_numbers == {}
    assert server.accepted_challenges == [42]


def test_challenge_is_per_client_address(make_info):
    server = QueryServer(make_info(), challenge=True, challenge_number=42)
    server.route_request(build_info_request(), ADDR)
    other = ("127.0.0.1", 50001)
    assert server.route_request(build_info_request(42), other)[4:5] == b'A'
    assert server.rejected_challenges == [42]


def test_silent_mode_records_but_does_not_answer(make_info):
    server = QueryServer(make_info(), mode="SILENT")
    assert server.route_request(build_info_request(), ADDR) is None
    assert server.requests == [build_info_request()]


def test_split_response_layout(full_info):
    packet = QueryServer(full_info, mode=ServerMode.SPLIT).route_request(build_info_request(), ADDR)
    assert packet.startswith(SPLIT_PACKET_HEADER)
    packet_id, total, number, size = struct.unpack('<lBBH', packet[4:12])
    assert (packet_id, total, number, size) == (1, 1, 0, PACKET_SIZE)


def test_random_challenge_in_uint32_range():
    numbers = {}
    packet = challenge_query(ADDR, numbers)
    assert 1 <= numbers[ADDR] <= 0xFFFFFFFF
    assert packet[5:] == struct.pack('<I', numbers[ADDR])


def test_pending_challenges_are_capped():
    numbers = {}
    for port in range(5):
        challenge_query(("127.0.0.1", port), numbers, 7, limit=3)
    assert list(numbers) == [("127.0.0.1", 2), ("127.0.0.1", 3), ("127.0.0.1", 4)]

    # повторный запрос от старого клиента не вытесняет его самого
    challenge_query(("127.0.0.1", 2), numbers, 8, limit=3)
    assert list(numbers) == [("127.0.0.1", 3), ("127.0.0.1", 4), ("127.0.0.1", 2)]
    assert numbers[("127.0.0.1", 2)] == 8


async def test_socket_error_does_not_stop_the_loop(make_info):
    server = QueryServer(make_info())
    stream = MagicMock()
    stream.recv = AsyncMock(side_effect=[
        ConnectionRefusedError("port unreachable"),
        (build_info_request(), ADDR),
        asyncio_dgram.TransportClosed(),
    ])
    stream.send = AsyncMock()
    server._stream = stream

    await server.main()

    stream.send.assert_awaited_once_with(info_query(make_info()), ADDR)
    stream.close.assert_called_once()


async def test_stop_after_loop_died(make_info):
    async def broken_loop():
        raise OSError("socket closed")

    server = QueryServer(make_info())
    server._task = asyncio.create_task(broken_loop())
    await asyncio.sleep(0)

    await server.stop()
    assert server._task is None
