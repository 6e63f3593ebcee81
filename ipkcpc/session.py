"""
Client session - drives one endpoint through INIT -> UP -> DOWN / ERRORED.

Nothing raised by the endpoint escapes a Session method: failures become
the ERRORED state plus a message in ``error_msg``, and the call returns
-1 / "" / False so the caller can stop right away.
"""

import enum
import logging

from .errors import ProtocolError
from .transport import DEFAULT_TIMEOUT, create_endpoint

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    INIT = "init"
    CONNECTING = "connecting"
    UP = "up"
    DOWN = "down"
    ERRORED = "errored"


def _describe(exc: Exception) -> str:
    if isinstance(exc, OSError) and exc.strerror:
        return exc.strerror
    return str(exc) or exc.__class__.__name__


class Session:
    def __init__(self, host: str, port: int, kind, timeout=DEFAULT_TIMEOUT, endpoint=None):
        self.host = host
        self.port = port
        self.kind = kind
        self._endpoint = endpoint if endpoint is not None else create_endpoint(kind, timeout=timeout)
        self._state = SessionState.INIT
        self._error_msg = ""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        # release the socket, the state is left as it is
        self._endpoint.close()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def error_msg(self) -> str:
        return self._error_msg

    def _set_state(self, state):
        logger.debug("state %s -> %s", self._state.name, state.name)
        self._state = state

    def _fail(self, message):
        logger.debug("error: %s", message)
        self._error_msg = message
        self._set_state(SessionState.ERRORED)
        self._endpoint.close()

    def _misuse(self, operation):
        self._error_msg = f"Cannot {operation} while session is {self._state.name}"
        logger.debug(self._error_msg)

    def connect(self) -> bool:
        if self._state is not SessionState.INIT:
            self._misuse("connect")
            return False
        self._set_state(SessionState.CONNECTING)
        try:
            self._endpoint.connect(self.host, self.port)
        except (OSError, ValueError, OverflowError) as e:
            self._fail(f"Cannot connect to {self.host}:{self.port}: {_describe(e)}")
            return False
        self._set_state(SessionState.UP)
        return True

    def send(self, text: str) -> int:
        """Send one request. Returns the number of bytes written or -1."""
        if self._state is not SessionState.UP:
            self._misuse("send")
            return -1
        try:
            data = self._endpoint.codec.encode(text)
            sent = self._endpoint.send(data)
        except (OSError, ProtocolError) as e:
            self._fail(f"Send failed: {_describe(e)}")
            return -1
        logger.debug("sent %d bytes", sent)
        return sent

    def receive(self) -> str:
        """Wait for one response. An empty string means nothing more will come."""
        if self._state is not SessionState.UP:
            self._misuse("receive")
            return ""
        try:
            data = self._endpoint.receive()
            if not data:
                # peer is gone but this is not an error: state stays UP
                self._error_msg = self._endpoint.empty_message
                logger.debug("receive: %s", self._error_msg)
                return ""
            text = self._endpoint.codec.decode(data)
        except (OSError, ProtocolError) as e:
            self._fail(f"Receive failed: {_describe(e)}")
            return ""
        logger.debug("received %d bytes", len(data))
        return text

    def disconnect(self) -> str:
        """Close the session cleanly. Returns a status line, or "" if not UP."""
        if self._state is not SessionState.UP:
            logger.debug("disconnect ignored in state %s", self._state.name)
            return ""
        status = self._endpoint.disconnect()
        self._set_state(SessionState.DOWN)
        return status
