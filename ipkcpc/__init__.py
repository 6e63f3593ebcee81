"""
IPKCP client - relays stdin lines to a calculator server over TCP or UDP.
"""

from .errors import IpkcpError, ProtocolError, UsageError
from .session import Session, SessionState
from .transport import TransportKind

__version__ = "0.1.0"

__all__ = [
    "IpkcpError",
    "ProtocolError",
    "Session",
    "SessionState",
    "TransportKind",
    "UsageError",
]
