"""
Room Schema Definitions

This module defines the frames for room operations: listing the rooms the
user belongs to, creating a direct chat, listing the members of a room and
subscribing to the user's event streams.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from ..core import Channel, Group, Private, User
from .base import (
    CREATE_DIRECT_ID,
    LOAD_ROOMS_ID,
    SUBSCRIBE_MESSAGES_ID,
    SUBSCRIBE_USER_ID,
    USERS_OF_ROOM_ID,
    BaseResponse,
    MethodRequest,
    SubscriptionRequest,
    require_list,
    require_str,
)

logger = logging.getLogger(__name__)

MEMBERS_PAGE_SIZE = 100


@dataclass
class LoadRoomsRequest(MethodRequest):
    """Request every room the user belongs to (changed since epoch)."""

    method = "rooms/get"
    request_id = LOAD_ROOMS_ID

    def params(self) -> List[Any]:
        return [{"$date": 0}]


@dataclass
class CreateDirectMessageRequest(MethodRequest):
    """
    Request to open (or reopen) a direct chat.

    Attributes:
        username: User to chat with
    """

    username: str

    method = "createDirectMessage"
    request_id = CREATE_DIRECT_ID

    def params(self) -> List[Any]:
        return [self.username]


@dataclass
class UsersOfRoomRequest(MethodRequest):
    """
    Request the members of a room.

    Attributes:
        room_id: ID of the room
        limit: Page size
    """

    room_id: str
    limit: int = MEMBERS_PAGE_SIZE

    method = "getUsersOfRoom"
    request_id = USERS_OF_ROOM_ID

    def params(self) -> List[Any]:
        return [self.room_id, True, {"limit": self.limit, "skip": 0}, ""]


@dataclass
class SubscribeUserRequest(SubscriptionRequest):
    """
    Subscribe to the user's rooms-changed stream.

    New messages in any of the user's rooms arrive on this stream.

    Attributes:
        user_id: Session user id
    """

    user_id: str

    stream = "stream-notify-user"
    request_id = SUBSCRIBE_USER_ID

    def params(self) -> List[Any]:
        return [f"{self.user_id}/rooms-changed", False]


@dataclass
class SubscribeMessagesRequest(SubscriptionRequest):
    """Subscribe to messages in every room the user is in."""

    stream = "stream-room-messages"
    request_id = SUBSCRIBE_MESSAGES_ID

    def params(self) -> List[Any]:
        return ["__my_messages__", False]


@dataclass
class DirectRoom:
    """
    A direct chat entry of the room list.

    Attributes:
        room_id: ID of the room
        usernames: Every participant, the session user included
    """

    room_id: str
    usernames: List[str]

    def label(self, own_username: str) -> str:
        """
        Display label: the other participants joined with commas.

        A chat with oneself keeps the own username.
        """
        names = [
            name
            for name in self.usernames
            if name != own_username or len(self.usernames) == 1
        ]
        return ",".join(names)

    def channel(self) -> Channel:
        return User(self.room_id)


@dataclass
class NamedRoom:
    """
    A group or private entry of the room list.

    Attributes:
        room_id: ID of the room
        name: Display name
        private: Whether the room is a private group
    """

    room_id: str
    name: str
    private: bool = False

    def label(self, own_username: str) -> str:  # pylint: disable=unused-argument
        return self.name

    def channel(self) -> Channel:
        return Private(self.room_id) if self.private else Group(self.room_id)


@dataclass
class RoomsResult(BaseResponse):
    """
    Result of rooms/get.

    Entries with a room type other than c, p or d are skipped.

    Attributes:
        rooms: Direct and named rooms in server order
    """

    rooms: List[Any] = field(default_factory=list)

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "RoomsResult":
        """Create from frame dictionary."""
        rooms: List[Any] = []
        for entry in require_list(data["result"]["update"], "result.update"):
            room_type = entry.get("t")
            room_id = require_str(entry["_id"], "_id")
            if room_type == "d":
                usernames = require_list(entry["usernames"], "usernames")
                rooms.append(
                    DirectRoom(
                        room_id=room_id,
                        usernames=[require_str(u, "username") for u in usernames],
                    )
                )
            elif room_type in ("c", "p"):
                rooms.append(
                    NamedRoom(
                        room_id=room_id,
                        name=require_str(entry["name"], "name"),
                        private=room_type == "p",
                    )
                )
            else:
                logger.debug("Skipping room %s of type %r", room_id, room_type)
        return cls(rooms=rooms)

    def labelled_channels(self, own_username: str) -> List[Tuple[str, Channel]]:
        """(label, channel) pairs for the channel list."""
        return [(room.label(own_username), room.channel()) for room in self.rooms]


@dataclass
class JoinedRoomResult(BaseResponse):
    """
    Result of createDirectMessage: the room that was joined.

    Attributes:
        room_id: ID of the room
        room_type: Room type tag
    """

    room_id: str
    room_type: str

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "JoinedRoomResult":
        """Create from frame dictionary."""
        result = data["result"]
        return cls(
            room_id=require_str(result["rid"], "result.rid"),
            room_type=require_str(result["t"], "result.t"),
        )

    @property
    def channel(self) -> Channel:
        return Channel.from_room_type(self.room_type, self.room_id)


@dataclass
class RoomMember:
    """
    A member of a room.

    Attributes:
        user_id: User id
        username: Username
    """

    user_id: str
    username: str


@dataclass
class UsersInRoomResult(BaseResponse):
    """
    Result of getUsersOfRoom.

    Attributes:
        total: Total number of members on the server
        records: Members in this page
    """

    total: int
    records: List[RoomMember]

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "UsersInRoomResult":
        """Create from frame dictionary."""
        result = data["result"]
        records = [
            RoomMember(
                user_id=require_str(r["_id"], "_id"),
                username=require_str(r["username"], "username"),
            )
            for r in require_list(result["records"], "result.records")
        ]
        return cls(total=int(result.get("total", len(records))), records=records)

    def members(self) -> List[Tuple[str, str]]:
        """(username, user id) pairs."""
        return [(r.username, r.user_id) for r in self.records]
