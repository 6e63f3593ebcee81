"""
ipkcpc - IPKCP command line client.

Reads requests from stdin, one per line, sends each to the server and prints
the response. EOF or Ctrl+C ends the session with a proper disconnect.

Usage:
  ipkcpc -h 127.0.0.1 -p 2023 -m tcp
"""

import argparse
import io
import logging
import math
import sys

from .errors import UsageError
from .session import Session, SessionState
from .signals import CancellationToken, install_interrupt_handler, restore_interrupt_handler
from .transport import DEFAULT_TIMEOUT, TransportKind

logger = logging.getLogger(__name__)

USAGE = "  Usage: ipkcpc -h <host> -p <port> -m <mode>"
LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    # -h is the host, so the automatic help option is moved to --help
    p = _ArgumentParser(
        prog="ipkcpc",
        add_help=False,
        usage="ipkcpc -h <host> -p <port> -m <mode> [-t <seconds>] [-v]",
        description="Send stdin lines to an IPKCP server and print the responses.",
    )
    p.add_argument("-h", dest="host", metavar="<host>", help="server address or hostname")
    p.add_argument("-p", dest="port", metavar="<port>", help="server port")
    p.add_argument("-m", dest="mode", metavar="<mode>", help="tcp or udp")
    p.add_argument("-t", dest="timeout", metavar="<seconds>", type=float, default=DEFAULT_TIMEOUT,
                   help=f"udp response timeout (default {DEFAULT_TIMEOUT:g})")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging on stderr")
    p.add_argument("--help", action="help", help="show this help and exit")
    return p


def parse_args(argv=None) -> argparse.Namespace:
    args = build_parser().parse_args(argv)
    if not args.host:
        raise UsageError("Host not specified!")
    if not args.port:
        raise UsageError("Port not specified!")
    if not args.mode:
        raise UsageError("Mode not specified!")
    try:
        args.port = int(args.port)
    except ValueError:
        raise UsageError("Invalid port!") from None
    if args.port == 0:
        raise UsageError("Port not specified!")
    if not 0 < args.port < 65536:
        raise UsageError("Invalid port!")
    if args.mode not in ("tcp", "udp"):
        raise UsageError("Invalid mode, expected tcp or udp!")
    if not math.isfinite(args.timeout) or args.timeout <= 0:
        raise UsageError("Invalid timeout!")
    args.kind = TransportKind(args.mode)
    return args


def run_loop(session: Session, token: CancellationToken, stdin, stdout) -> SessionState:
    """Relay requests until cancel, EOF, a failure or the server going away."""
    while session.state is SessionState.UP:
        try:
            with token.interruptible():
                line = stdin.readline()
        except KeyboardInterrupt:
            # Ctrl+C while waiting for input, a partial line is dropped
            line = None
        if line == "":
            # EOF counts as a cancel request
            token.cancel()

        # checked before any I/O, nothing is sent once this is set
        if token.cancelled:
            stdout.write(session.disconnect())
            stdout.flush()
            break

        line = line.rstrip("\r\n")
        if not line:
            continue

        if session.send(line) < 0:
            break

        response = session.receive()
        if not response:
            break

        stdout.write(response)
        stdout.flush()

    return session.state


def main(argv=None) -> int:
    try:
        args = parse_args(argv)
    except UsageError as e:
        print(f"!ERR! {e}", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    if isinstance(sys.stdin, io.TextIOWrapper):
        sys.stdin.reconfigure(encoding="utf-8", errors="replace")

    token = CancellationToken()
    previous = install_interrupt_handler(token)
    try:
        with Session(args.host, args.port, args.kind, timeout=args.timeout) as session:
            if not session.connect():
                print(f"!ERR! {session.error_msg}", file=sys.stderr)
                return 1
            state = run_loop(session, token, sys.stdin, sys.stdout)
            if state is not SessionState.DOWN:
                print(f"!ERR! {session.error_msg}", file=sys.stderr)
                return 1
    finally:
        restore_interrupt_handler(previous)
    logger.debug("session closed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
