"""
Inbound Frame Classification

The realtime stream carries many kinds of frames and no single field says
which typed shape a frame has. Classification goes by the DDP "msg" field
first and then by payload shape:

    1. "changed" with fields.args == [event, {lastMessage, t}]
       -> NewMessageEvent. The frame id is never looked at: it is the
          subscription's id and can collide with a method id.
    2. "result" whose id is a well-known request id
       -> MethodError if the frame carries "error", otherwise the result
          shape registered for that id.
    3. "ping" -> Ping.

Everything else (connected, ready, added, updated, nosub, results of calls
we do not act on, ...) classifies as None and is ignored. A frame that
enters one of the categories above but does not parse raises
ProtocolDecodeError; callers drop it rather than guessing.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Type, Union

from .base import (
    CREATE_DIRECT_ID,
    LOAD_HISTORY_ID,
    LOAD_ROOMS_ID,
    LOGIN_ID,
    SEND_MESSAGE_ID,
    USERS_OF_ROOM_ID,
    BaseResponse,
    decode_frame,
)
from .message import HistoryResult, NewMessageEvent
from .room import JoinedRoomResult, RoomsResult, UsersInRoomResult

# Result shape expected for each correlated request id. Ids mapped to None
# are known calls whose successful result needs no handling.
RESULT_SHAPES: Dict[str, Optional[Type[BaseResponse]]] = {
    LOGIN_ID: None,
    SEND_MESSAGE_ID: None,
    LOAD_HISTORY_ID: HistoryResult,
    LOAD_ROOMS_ID: RoomsResult,
    CREATE_DIRECT_ID: JoinedRoomResult,
    USERS_OF_ROOM_ID: UsersInRoomResult,
}

REQUEST_METHODS: Dict[str, str] = {
    LOGIN_ID: "login",
    SEND_MESSAGE_ID: "sendMessage",
    LOAD_HISTORY_ID: "loadHistory",
    LOAD_ROOMS_ID: "rooms/get",
    CREATE_DIRECT_ID: "createDirectMessage",
    USERS_OF_ROOM_ID: "getUsersOfRoom",
}


@dataclass
class Ping(BaseResponse):
    """
    Server keepalive probe.

    Attributes:
        ping_id: Optional id to echo in the pong
    """

    ping_id: Optional[str] = None

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "Ping":
        ping_id = data.get("id")
        return cls(ping_id=ping_id if isinstance(ping_id, str) else None)


@dataclass
class MethodError(BaseResponse):
    """
    A correlated call was rejected by the server.

    Attributes:
        request_id: Id of the failed call
        method: Method name of the failed call
        reason: Server supplied reason
    """

    request_id: str
    method: str
    reason: str

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "MethodError":
        request_id = data["id"]
        error = data["error"]
        if isinstance(error, dict):
            reason = (
                error.get("reason")
                or error.get("message")
                or str(error.get("error", "unknown error"))
            )
        else:
            reason = str(error)
        return cls(
            request_id=request_id,
            method=REQUEST_METHODS.get(request_id, "unknown"),
            reason=str(reason),
        )


InboundFrame = Union[
    NewMessageEvent,
    HistoryResult,
    RoomsResult,
    JoinedRoomResult,
    UsersInRoomResult,
    Ping,
    MethodError,
]


def _is_message_event(data: Dict[str, Any]) -> bool:
    fields = data.get("fields")
    if not isinstance(fields, dict):
        return False
    args = fields.get("args")
    return (
        isinstance(args, list)
        and len(args) == 2
        and isinstance(args[1], dict)
        and "lastMessage" in args[1]
    )


def classify(data: Dict[str, Any]) -> Optional[InboundFrame]:
    """
    Classify a decoded frame.

    Returns:
        The typed frame, or None for frames the client does not act on

    Raises:
        ProtocolDecodeError: If the frame looks like a known kind but
                             does not parse
    """
    kind = data.get("msg")

    if kind == "changed":
        if _is_message_event(data):
            return NewMessageEvent.from_dict(data)
        return None

    if kind == "result":
        request_id = data.get("id")
        if not isinstance(request_id, str) or request_id not in RESULT_SHAPES:
            return None
        if "error" in data:
            return MethodError.from_dict(data)
        shape = RESULT_SHAPES[request_id]
        if shape is None:
            return None
        return shape.from_dict(data)

    if kind == "ping":
        return Ping.from_dict(data)

    return None


def classify_frame(raw: Any) -> Optional[InboundFrame]:
    """
    Decode and classify a raw text frame.

    Raises:
        ProtocolDecodeError: If the frame is not JSON or does not parse
    """
    return classify(decode_frame(raw))
