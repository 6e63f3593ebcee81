class IpkcpError(Exception):
    """Base class for errors raised by ipkcpc."""


class ProtocolError(IpkcpError):
    """Raised when a request cannot be encoded or a response is malformed."""


class UsageError(IpkcpError):
    """Raised for missing or invalid command line arguments."""
