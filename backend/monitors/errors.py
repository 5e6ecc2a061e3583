"""Exceptions raised while probing a service"""
from typing import Optional


class ProbeError(Exception):
    """Base class for every failure inside a single probe attempt"""


class ProbeTimeout(ProbeError):
    """Connect, read or write did not finish within the deadline"""


class ConnectionRefused(ProbeError):
    """Target actively refused the connection"""


class HostUnreachable(ProbeError):
    """No route to the target. Retrying will not help."""


class ProbeIOError(ProbeError):
    """Any other socket level failure"""


class ProtocolError(ProbeError):
    """Malformed or unexpected reply from the service"""


class EndOfStream(ProtocolError):
    """Peer closed the connection before a complete reply arrived"""


class HandshakeRejected(ProtocolError):
    """The service answered with a code that is not acceptable, or none at all"""

    def __init__(self, state: str, code: Optional[int], text: str):
        super().__init__(f"{state}: unexpected reply {text!r}")
        self.state = state
        self.code = code
        self.text = text


class AuthenticationFailed(ProbeError):
    """Login was refused. Not fatal, the probe still sends the quit command."""


class RecorderWriteFailed(ProbeError):
    """Latency sample could not be persisted"""
