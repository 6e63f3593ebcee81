import pytest

from ipkcpc.errors import ProtocolError
from ipkcpc.protocol import (
    MAX_PAYLOAD,
    STATUS_ERR,
    DatagramCodec,
    TextCodec,
    decode_request,
    encode_response,
)


def test_text_codec_appends_newline():
    assert TextCodec().encode("SOLVE (+ 1 2)") == b"SOLVE (+ 1 2)\n"


def test_text_codec_keeps_response_as_received():
    assert TextCodec().decode(b"RESULT 3\n") == "RESULT 3\n"


def test_text_codec_replaces_bad_utf8():
    assert TextCodec().decode(b"ok \xff\n") == "ok �\n"


def test_datagram_request_frame():
    assert DatagramCodec().encode("(+ 1 2)") == b"\x00\x07(+ 1 2)"


def test_datagram_request_too_long():
    with pytest.raises(ProtocolError):
        DatagramCodec().encode("x" * (MAX_PAYLOAD + 1))


def test_datagram_request_at_limit():
    frame = DatagramCodec().encode("x" * MAX_PAYLOAD)
    assert frame[1] == MAX_PAYLOAD
    assert len(frame) == MAX_PAYLOAD + 2


def test_datagram_ok_response():
    assert DatagramCodec().decode(b"\x01\x00\x013") == "OK:3\n"


def test_datagram_error_response():
    assert DatagramCodec().decode(b"\x01\x01\x03bad") == "ERR:bad\n"


def test_datagram_response_ignores_trailing_bytes():
    assert DatagramCodec().decode(b"\x01\x00\x02ab-junk") == "OK:ab\n"


@pytest.mark.parametrize("data", [
    b"\x01\x00",            # header cut short
    b"\x00\x00\x01a",       # request opcode
    b"\x01\x07\x01a",       # unknown status
    b"\x01\x00\x05abc",     # length larger than payload
])
def test_datagram_malformed_response(data):
    with pytest.raises(ProtocolError):
        DatagramCodec().decode(data)


def test_server_side_helpers():
    assert decode_request(b"\x00\x02hi") == "hi"
    assert encode_response("nope", STATUS_ERR) == b"\x01\x01\x04nope"
    with pytest.raises(ProtocolError):
        decode_request(b"\x01\x02hi")
