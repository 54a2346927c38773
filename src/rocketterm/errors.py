"""
Error Types

Exceptions raised by the realtime session client. Socket establishment
failures use the builtin ConnectionError; everything below is specific to
the RocketChat session.
"""

from typing import Any, Optional


class RocketChatError(Exception):
    """Base class for all rocketterm errors."""


class AuthenticationError(RocketChatError):
    """
    The connect/login handshake failed.

    Attributes:
        payload: The raw frame that could not be used, if any
    """

    def __init__(self, message: str, payload: Optional[Any] = None):
        super().__init__(message)
        self.payload = payload


class TransportError(RocketChatError, ConnectionError):
    """The socket failed or was closed by the peer mid-session."""


class ProtocolDecodeError(RocketChatError, ValueError):
    """
    A frame could not be parsed into the shape it claims to be.

    Non-fatal: the dispatcher drops the frame and keeps reading.
    """

    def __init__(self, message: str, payload: Optional[Any] = None):
        super().__init__(message)
        self.payload = payload


class ChannelOperationError(RocketChatError):
    """
    A remote operation was rejected by the server.

    Attributes:
        method: Name of the remote method or endpoint
        reason: Server supplied reason
    """

    def __init__(self, method: str, reason: str):
        super().__init__(f"{method} failed: {reason}")
        self.method = method
        self.reason = reason


class ChannelClosed(RocketChatError):
    """Raised on put/get against a closed ClosableQueue."""


class ConfigError(RocketChatError):
    """Required configuration is missing or invalid."""
