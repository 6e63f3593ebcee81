"""
IPKCP wire codecs.

TCP carries plain text lines, UDP carries small binary frames:

    request:  | opcode 0x00 | length | payload ... |
    response: | opcode 0x01 | status | length | payload ... |
"""

from .errors import ProtocolError

OP_REQUEST = 0x00
OP_RESPONSE = 0x01

STATUS_OK = 0x00
STATUS_ERR = 0x01

MAX_PAYLOAD = 255

_STATUS_NAMES = {STATUS_OK: "OK", STATUS_ERR: "ERR"}


class TextCodec:
    """Newline framed UTF-8 text used on stream sockets."""

    def encode(self, text: str) -> bytes:
        return (text + "\n").encode("utf-8")

    def decode(self, data: bytes) -> str:
        # keep the terminator, responses are printed as received
        return data.decode("utf-8", errors="replace")


class DatagramCodec:
    """Binary request/response frames used on datagram sockets."""

    def encode(self, text: str) -> bytes:
        payload = text.encode("utf-8")
        if len(payload) > MAX_PAYLOAD:
            raise ProtocolError(f"Request too long ({len(payload)} > {MAX_PAYLOAD} bytes)")
        return bytes([OP_REQUEST, len(payload)]) + payload

    def decode(self, data: bytes) -> str:
        if len(data) < 3:
            raise ProtocolError("Malformed response: header too short")
        opcode, status, length = data[0], data[1], data[2]
        if opcode != OP_RESPONSE:
            raise ProtocolError(f"Malformed response: unexpected opcode {opcode:#04x}")
        if status not in _STATUS_NAMES:
            raise ProtocolError(f"Malformed response: unknown status {status:#04x}")
        payload = data[3:3 + length]
        if len(payload) != length:
            raise ProtocolError("Malformed response: payload shorter than its length field")
        text = payload.decode("utf-8", errors="replace")
        return f"{_STATUS_NAMES[status]}:{text}\n"


def encode_response(text: str, status: int = STATUS_OK) -> bytes:
    """Build a datagram response frame (server side)."""
    payload = text.encode("utf-8")[:MAX_PAYLOAD]
    return bytes([OP_RESPONSE, status, len(payload)]) + payload


def decode_request(data: bytes) -> str:
    """Parse a datagram request frame (server side)."""
    if len(data) < 2 or data[0] != OP_REQUEST:
        raise ProtocolError("Malformed request")
    length = data[1]
    payload = data[2:2 + length]
    if len(payload) != length:
        raise ProtocolError("Malformed request: payload shorter than its length field")
    return payload.decode("utf-8", errors="replace")
