import itertools

import pytest

from source_query.constants import EDF_PORT, EDF_READ_ORDER
from source_query.errors import DecodeError
from source_query.query_client.query_response.info_response import parse_info
from source_query.query_server.query_request.info_query import info_query

EDF_COMBINATIONS = sorted(
    sum(flags) for n in range(len(EDF_READ_ORDER) + 1) for flags in itertools.combinations(EDF_READ_ORDER, n)
)


def payload_of(info):
    # FF FF FF FF 'I'
    return info_query(info)[5:]


@pytest.mark.parametrize("edf", EDF_COMBINATIONS)
def test_round_trip_for_every_edf_combination(make_info, edf):
    info = make_info(edf=edf)
    assert parse_info(payload_of(info)) == info


def test_fields_decoded_in_wire_order(full_info):
    info = parse_info(payload_of(full_info))
    assert info.protocol == 17
    assert info.name == "[RU] Тестовый сервер"
    assert info.app_id == 730
    assert (info.players, info.max_players, info.bots) == (12, 24, 2)
    assert (info.server_type, info.environment) == ('d', 'l')
    assert info.vac_enabled is True
    assert info.password_protected is False
    assert info.port == 27015
    assert info.steam_id == 90263762545778710
    assert (info.stv_port, info.stv_name) == (27020, "SourceTV")
    assert info.tags == ["secure", "empty", "tickrate128"]
    assert info.game_id == 730


def test_every_truncation_raises_decode_error(full_info):
    payload = payload_of(full_info)
    for cut in range(len(payload)):
        with pytest.raises(DecodeError):
            parse_info(payload[:cut])


def test_missing_nul_reports_field_and_offset():
    with pytest.raises(DecodeError) as exc_info:
        parse_info(b'\x11server without terminator')
    assert exc_info.value.field == "name"
    assert exc_info.value.offset == 1


def test_invalid_utf8_is_rejected():
    with pytest.raises(DecodeError) as exc_info:
        parse_info(b'\x11srv\x00\xff\xfe\x00folder\x00game\x00')
    assert exc_info.value.field == "map"
    assert exc_info.value.offset == 5


def test_edf_bit_without_data_is_decode_error(make_info):
    # выставляем бит порта, но сам порт не дописываем
    payload = payload_of(make_info(edf=0))[:-1] + bytes([EDF_PORT])
    with pytest.raises(DecodeError) as exc_info:
        parse_info(payload)
    assert exc_info.value.field == "port"
    assert exc_info.value.offset == len(payload)


def test_missing_edf_byte_is_decode_error(make_info):
    payload = payload_of(make_info(edf=0))[:-1]
    with pytest.raises(DecodeError) as exc_info:
        parse_info(payload)
    assert exc_info.value.field == "edf"


def test_trailing_bytes_are_ignored(make_info):
    info = make_info(edf=EDF_PORT)
    assert parse_info(payload_of(info) + b'\x00\x00junk') == info
