"""
rocketterm Package

This package provides a terminal client for RocketChat servers, built on
the server's realtime (DDP over WebSocket) API:

    - transport: WebSocket session with reader and writer loops
    - auth: connect/login handshake
    - service: RealtimeClient issuing remote operations
    - dispatcher: classification and routing of inbound frames
    - session: ChatSession tying the loops together
    - rest: one-shot lookups over the HTTP API
    - ui: the Textual application

Schemas are organized in the `schemas` subpackage by category:
    - auth: connect, login and keepalive frames
    - room: room list, direct chats, members and subscriptions
    - message: sending, history and message events
"""

from .channels import ClosableQueue
from .config import ChatConfig, load_config
from .core import (
    Channel,
    Group,
    Private,
    User,
    Message,
    ChatEvent,
    SendMessage,
    Init,
    UIEvent,
    MessagesReplaced,
    ChannelsUpdated,
    RoomMembersUpdated,
    MessageAppended,
    ChannelSelected,
    FatalError,
    ErrorNotice,
)
from .errors import (
    RocketChatError,
    AuthenticationError,
    TransportError,
    ProtocolDecodeError,
    ChannelOperationError,
    ChannelClosed,
    ConfigError,
)
from .auth import Authenticator, password_digest
from .transport import TransportSession, resolve_ws_url
from .service import RealtimeClient
from .dispatcher import EventDispatcher
from .session import ChatSession, connect_session
from .rest import RestClient

__all__ = [
    # Session classes
    "ClosableQueue",
    "TransportSession",
    "resolve_ws_url",
    "Authenticator",
    "password_digest",
    "RealtimeClient",
    "EventDispatcher",
    "ChatSession",
    "connect_session",
    "RestClient",
    # Configuration
    "ChatConfig",
    "load_config",
    # Core types
    "Channel",
    "Group",
    "Private",
    "User",
    "Message",
    "ChatEvent",
    "SendMessage",
    "Init",
    "UIEvent",
    "MessagesReplaced",
    "ChannelsUpdated",
    "RoomMembersUpdated",
    "MessageAppended",
    "ChannelSelected",
    "FatalError",
    "ErrorNotice",
    # Errors
    "RocketChatError",
    "AuthenticationError",
    "TransportError",
    "ProtocolDecodeError",
    "ChannelOperationError",
    "ChannelClosed",
    "ConfigError",
]
