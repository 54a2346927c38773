"""
Message Schema Definitions

This module defines the frames for chat message operations: sending a
message, loading room history and the unsolicited new-message event.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List

from ..core import Channel, Message
from .base import (
    LOAD_HISTORY_ID,
    SEND_MESSAGE_ID,
    BaseResponse,
    MethodRequest,
    parse_date,
    require_list,
    require_str,
)


@dataclass
class SendMessageRequest(MethodRequest):
    """
    Request to send a message to a room.

    Attributes:
        room_id: ID of the room to send the message to
        content: The message content
    """

    room_id: str
    content: str

    method = "sendMessage"
    request_id = SEND_MESSAGE_ID

    def params(self) -> List[Any]:
        return [{"rid": self.room_id, "msg": self.content}]


@dataclass
class LoadHistoryRequest(MethodRequest):
    """
    Request the latest messages of a room.

    Attributes:
        room_id: ID of the room
        count: Maximum number of messages to return
    """

    room_id: str
    count: int

    method = "loadHistory"
    request_id = LOAD_HISTORY_ID

    def params(self) -> List[Any]:
        return [self.room_id, None, self.count, None]


@dataclass
class MessagePayload(BaseResponse):
    """
    A message as the server sends it.

    Attributes:
        author_id: User id of the sender
        author: Username of the sender
        room_id: ID of the room the message belongs to
        content: The message content
        sent_at: Timezone aware time the message was sent
    """

    author_id: str
    author: str
    room_id: str
    content: str
    sent_at: datetime

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "MessagePayload":
        """Create from a message dictionary."""
        user = data["u"]
        return cls(
            author_id=require_str(user.get("_id", ""), "u._id"),
            author=require_str(user["username"], "u.username"),
            room_id=require_str(data["rid"], "rid"),
            content=require_str(data["msg"], "msg"),
            sent_at=parse_date(data["ts"]),
        )

    def to_message(self) -> Message:
        """Convert to the core Message type."""
        return Message(self.author, self.content, self.sent_at)


@dataclass
class NewMessageEvent(BaseResponse):
    """
    Unsolicited notification that a room received a message.

    Pushed on the user's rooms-changed stream as

        {"msg": "changed", "fields": {"args": [<event>, {"lastMessage": ...,
         "t": <room type>}]}}

    Attributes:
        event: Stream event name (e.g. "updated")
        room_type: Room type tag ("c", "p" or "d")
        last_message: The message that changed the room
    """

    event: str
    room_type: str
    last_message: MessagePayload

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "NewMessageEvent":
        """Create from frame dictionary."""
        args = require_list(data["fields"]["args"], "fields.args")
        if len(args) != 2:
            raise ValueError("fields.args must have two items")
        event, room = args
        return cls(
            event=require_str(event, "args[0]"),
            room_type=require_str(room["t"], "t"),
            last_message=MessagePayload._from_data(room["lastMessage"]),
        )

    @property
    def channel(self) -> Channel:
        """Channel the message was posted to."""
        return Channel.from_room_type(
            self.room_type, self.last_message.room_id
        )


@dataclass
class HistoryResult(BaseResponse):
    """
    Result of loadHistory.

    Attributes:
        messages: Messages newest first, as the server returns them
    """

    messages: List[MessagePayload]

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "HistoryResult":
        """Create from frame dictionary."""
        raw_messages = require_list(
            data["result"]["messages"], "result.messages"
        )
        return cls(
            messages=[MessagePayload._from_data(m) for m in raw_messages]
        )

    def render(self) -> str:
        """Render oldest first, one "[time][author]: text" line each."""
        return "\n".join(
            str(payload.to_message()) for payload in reversed(self.messages)
        )
