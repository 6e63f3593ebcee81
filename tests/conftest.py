import socket

import pytest

from ipkcpc.protocol import TextCodec
from ipkcpc.server import EchoServer


class FakeEndpoint:
    """In-memory endpoint. ``responses`` holds bytes to return or exceptions to raise."""

    empty_message = "Connection closed by server"

    def __init__(self, responses=(), connect_error=None, send_error=None, codec=None):
        self.codec = codec or TextCodec()
        self.responses = list(responses)
        self.connect_error = connect_error
        self.send_error = send_error
        self.sent = []
        self.connects = 0
        self.disconnects = 0
        self.closes = 0

    def connect(self, host, port):
        self.connects += 1
        if self.connect_error is not None:
            raise self.connect_error

    def send(self, data):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(data)
        return len(data)

    def receive(self):
        if not self.responses:
            return b""
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def disconnect(self):
        self.disconnects += 1
        self.close()
        return "BYE\n"

    def close(self):
        self.closes += 1


@pytest.fixture
def fake_endpoint():
    return FakeEndpoint()


@pytest.fixture
def endpoint_factory():
    return FakeEndpoint


@pytest.fixture
def make_server():
    servers = []

    def _make(mode="tcp", **kwargs):
        server = EchoServer(mode=mode, **kwargs).start()
        servers.append(server)
        return server

    yield _make
    for server in servers:
        server.stop()


@pytest.fixture
def tcp_server(make_server):
    return make_server("tcp")


@pytest.fixture
def udp_server(make_server):
    return make_server("udp")


def _unused_port(kind):
    with socket.socket(socket.AF_INET, kind) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def closed_tcp_port():
    return _unused_port(socket.SOCK_STREAM)


@pytest.fixture
def closed_udp_port():
    return _unused_port(socket.SOCK_DGRAM)
