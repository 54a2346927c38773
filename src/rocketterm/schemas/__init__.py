"""
Schemas Package

This package contains the RocketChat realtime (DDP) frame schemas.
Schemas are organized by category: auth, room and message operations,
plus the classifier for inbound frames.

The package provides base classes (BaseRequest, MethodRequest,
SubscriptionRequest, BaseResponse) that eliminate code duplication for
serialization and deserialization methods.
"""

from .base import (
    BaseRequest,
    BaseResponse,
    MethodRequest,
    SubscriptionRequest,
    decode_frame,
)
from .auth import (
    ConnectRequest,
    LoginRequest,
    PongRequest,
    SessionIdResponse,
)
from .message import (
    SendMessageRequest,
    LoadHistoryRequest,
    MessagePayload,
    NewMessageEvent,
    HistoryResult,
)
from .room import (
    LoadRoomsRequest,
    CreateDirectMessageRequest,
    UsersOfRoomRequest,
    SubscribeUserRequest,
    SubscribeMessagesRequest,
    DirectRoom,
    NamedRoom,
    RoomsResult,
    JoinedRoomResult,
    RoomMember,
    UsersInRoomResult,
)
from .frames import Ping, MethodError, classify, classify_frame

__all__ = [
    # Base classes
    "BaseRequest",
    "BaseResponse",
    "MethodRequest",
    "SubscriptionRequest",
    "decode_frame",
    # Auth schemas
    "ConnectRequest",
    "LoginRequest",
    "PongRequest",
    "SessionIdResponse",
    # Message schemas
    "SendMessageRequest",
    "LoadHistoryRequest",
    "MessagePayload",
    "NewMessageEvent",
    "HistoryResult",
    # Room schemas
    "LoadRoomsRequest",
    "CreateDirectMessageRequest",
    "UsersOfRoomRequest",
    "SubscribeUserRequest",
    "SubscribeMessagesRequest",
    "DirectRoom",
    "NamedRoom",
    "RoomsResult",
    "JoinedRoomResult",
    "RoomMember",
    "UsersInRoomResult",
    # Inbound classification
    "Ping",
    "MethodError",
    "classify",
    "classify_frame",
]
