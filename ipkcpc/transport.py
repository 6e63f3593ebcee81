"""
Transport endpoints - one socket per session, stream (TCP) or datagram (UDP).

Both variants share the same contract: connect / send / receive / disconnect /
close. Failures are raised as OSError (or ProtocolError from the codec) and
turned into session state by the caller.

Note: a datagram "connect" only fixes the peer address on the local socket.
No packet is exchanged, so a successful connect says nothing about whether
the server is reachable; that shows up on the first receive.
"""

import enum
import logging
import socket

from .protocol import DatagramCodec, TextCodec

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
MAX_DATAGRAM = 65535
DISCONNECTED = "Disconnected\n"


class TransportKind(enum.Enum):
    STREAM = "tcp"
    DATAGRAM = "udp"


class Endpoint:
    # reported when receive() comes back empty
    empty_message = ""

    def __init__(self):
        self._sock = None

    def connect(self, host: str, port: int):
        raise NotImplementedError

    def send(self, data: bytes) -> int:
        raise NotImplementedError

    def receive(self) -> bytes:
        raise NotImplementedError

    def disconnect(self) -> str:
        """Say goodbye if the protocol has a way to, then close. Returns a status line."""
        self.close()
        return DISCONNECTED

    def close(self):
        if self._sock is not None:
            self._sock.close()
            self._sock = None


class StreamEndpoint(Endpoint):
    empty_message = "Connection closed by server"

    def __init__(self):
        super().__init__()
        self.codec = TextCodec()
        self._reader = None

    def connect(self, host, port):
        self._sock = socket.create_connection((host, port))
        self._reader = self._sock.makefile("rb")
        logger.debug("[CONNECTED] tcp %s:%s", host, port)

    def send(self, data):
        self._sock.sendall(data)
        return len(data)

    def receive(self):
        # one response per line
        return self._reader.readline()

    def disconnect(self):
        reply = ""
        try:
            self.send(self.codec.encode("BYE"))
            reply = self.codec.decode(self.receive())
        except OSError as e:
            logger.debug("BYE exchange failed: %s", e)
        finally:
            self.close()
        return reply or DISCONNECTED

    def close(self):
        if self._reader is not None:
            self._reader.close()
            self._reader = None
        super().close()


class DatagramEndpoint(Endpoint):
    empty_message = "Received an empty datagram"

    def __init__(self, timeout=DEFAULT_TIMEOUT):
        super().__init__()
        self.codec = DatagramCodec()
        self.timeout = timeout

    def connect(self, host, port):
        family, type_, proto, _, address = socket.getaddrinfo(host, port, 0, socket.SOCK_DGRAM)[0]
        sock = socket.socket(family, type_, proto)
        try:
            sock.settimeout(self.timeout)
            sock.connect(address)
        except Exception:
            sock.close()
            raise
        self._sock = sock
        logger.debug("[CONNECTED] udp %s:%s (no handshake)", host, port)

    def send(self, data):
        return self._sock.send(data)

    def receive(self):
        try:
            return self._sock.recv(MAX_DATAGRAM)
        except socket.timeout:
            raise TimeoutError("Timed out waiting for a response") from None


def create_endpoint(kind: TransportKind, timeout=DEFAULT_TIMEOUT) -> Endpoint:
    if kind is TransportKind.STREAM:
        return StreamEndpoint()
    return DatagramEndpoint(timeout=timeout)
