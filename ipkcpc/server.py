"""
Small IPKCP test server - answers every request with its upper-cased text.

TCP: one thread per client, newline framed, BYE ends the conversation.
UDP: binary frames, one response datagram per request.

Usage:
  python -m ipkcpc.server --host 127.0.0.1 --port 2023 --mode tcp
"""

import argparse
import logging
import socket
import threading

from .errors import ProtocolError
from .protocol import STATUS_ERR, decode_request, encode_response
from .transport import MAX_DATAGRAM

logger = logging.getLogger(__name__)


class EchoServer:
    def __init__(self, host="127.0.0.1", port=0, mode="tcp", max_replies=None):
        self.host = host
        self.port = port
        self.mode = mode
        # after this many replies the next request is swallowed and the client dropped
        self.max_replies = max_replies
        self.requests = []
        self._sock = None
        self._thread = None
        self._stopping = threading.Event()

    @property
    def address(self):
        return self._sock.getsockname()[:2]

    def bind(self):
        kind = socket.SOCK_STREAM if self.mode == "tcp" else socket.SOCK_DGRAM
        self._sock = socket.socket(socket.AF_INET, kind)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind((self.host, self.port))
        if self.mode == "tcp":
            self._sock.listen()
        logger.info("[LISTEN] %s %s:%s", self.mode, *self.address)

    def start(self):
        """Bind and serve from a background thread."""
        self.bind()
        self._thread = threading.Thread(target=self.serve_forever, daemon=True)
        self._thread.start()
        return self

    def stop(self):
        self._stopping.set()
        if self._sock is not None:
            try:
                self._sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            self._sock.close()
        if self._thread is not None:
            self._thread.join(timeout=2)

    def serve_forever(self):
        if self.mode == "tcp":
            self._serve_tcp()
        else:
            self._serve_udp()

    def _serve_tcp(self):
        while not self._stopping.is_set():
            try:
                conn, addr = self._sock.accept()
            except OSError:
                break
            threading.Thread(target=self._handle, args=(conn, addr), daemon=True).start()

    def _handle(self, conn, addr):
        with conn, conn.makefile("rb") as reader:
            logger.info("[JOIN] %s", addr)
            replies = 0
            while True:
                data = reader.readline()
                if not data:
                    break
                msg = data.decode(errors="replace").rstrip("\r\n")
                self.requests.append(msg)
                if self.max_replies is not None and replies >= self.max_replies:
                    break
                if msg == "BYE":
                    conn.sendall(b"BYE\n")
                    break
                conn.sendall((msg.upper() + "\n").encode())
                replies += 1
        logger.info("[LEAVE] %s", addr)

    def _serve_udp(self):
        while not self._stopping.is_set():
            try:
                data, addr = self._sock.recvfrom(MAX_DATAGRAM)
            except OSError:
                break
            if self._stopping.is_set():
                break
            try:
                msg = decode_request(data)
            except ProtocolError as e:
                self._sock.sendto(encode_response(str(e), STATUS_ERR), addr)
                continue
            self.requests.append(msg)
            if not msg:
                self._sock.sendto(encode_response("Empty request", STATUS_ERR), addr)
            else:
                self._sock.sendto(encode_response(msg.upper()), addr)


def main(argv=None):
    p = argparse.ArgumentParser(description="Upper-casing IPKCP server for testing ipkcpc.")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=2023)
    p.add_argument("--mode", choices=("tcp", "udp"), default="tcp")
    args = p.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    server = EchoServer(args.host, args.port, args.mode)
    server.bind()
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Server shutting down.")
    finally:
        server.stop()


if __name__ == "__main__":
    main()
