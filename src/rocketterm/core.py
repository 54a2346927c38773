"""
Core Types

Value types shared by the realtime client and the presentation layer:
channels, messages, the command events the UI sends to the session and
the UI events the session sends back.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from functools import total_ordering
from typing import ClassVar, List, Optional, Tuple

SAME_DAY_FORMAT = "%H:%M:%S"
FULL_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@total_ordering
@dataclass(frozen=True, eq=True)
class Channel:
    """
    A destination for messages.

    Channel itself is abstract; use Group, User or Private. Two channels
    are equal only when both the variant and the id match. Ordering puts
    Group above Private above User, then compares ids, which gives a
    stable order for the channel list.

    Attributes:
        id: Server room id
    """

    id: str
    rank: ClassVar[int] = -1

    def __str__(self) -> str:
        return self.id

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Channel):
            return NotImplemented
        return (self.rank, self.id) < (other.rank, other.id)

    @staticmethod
    def from_room_type(room_type: Optional[str], room_id: str) -> "Channel":
        """
        Build a channel from a RocketChat room type tag.

        'd' is a direct chat, 'p' a private group, anything else a
        public group.
        """
        if room_type == "d":
            return User(room_id)
        if room_type == "p":
            return Private(room_id)
        return Group(room_id)


@dataclass(frozen=True, eq=True)
class Group(Channel):
    """A public group channel."""

    rank: ClassVar[int] = 2


@dataclass(frozen=True, eq=True)
class Private(Channel):
    """A private group channel."""

    rank: ClassVar[int] = 1


@dataclass(frozen=True, eq=True)
class User(Channel):
    """A direct chat with one or more users."""

    rank: ClassVar[int] = 0


@dataclass(frozen=True)
class Message:
    """
    A chat message.

    Attributes:
        author: Username of the sender
        content: Message text
        sent_at: Timezone aware time the message was sent
    """

    author: str
    content: str
    sent_at: datetime

    def render(self, today: Optional[date] = None) -> str:
        """
        Render as "[time][author]: content" in local time.

        Messages from today show only the time of day, older ones show
        the full date.
        """
        local_time = self.sent_at.astimezone()
        today = today or date.today()
        if local_time.date() < today:
            stamp = local_time.strftime(FULL_DATE_FORMAT)
        else:
            stamp = local_time.strftime(SAME_DAY_FORMAT)
        return f"[{stamp}][{self.author}]: {self.content}"

    def __str__(self) -> str:
        return self.render()


# Commands sent from the UI to the session


class ChatEvent:
    """Base class for commands the presentation layer sends."""


@dataclass(frozen=True)
class SendMessage(ChatEvent):
    """The user submitted text in the input box."""

    text: str
    channel: Channel


@dataclass(frozen=True)
class Init(ChatEvent):
    """The user selected a channel (or the session is starting)."""

    channel: Channel


# Events sent from the session to the UI


class UIEvent:
    """Base class for events the presentation layer receives."""


@dataclass(frozen=True)
class MessagesReplaced(UIEvent):
    """Replace the whole message buffer with rendered history."""

    text: str


@dataclass(frozen=True)
class ChannelsUpdated(UIEvent):
    """New channel list as (label, channel) pairs."""

    channels: List[Tuple[str, Channel]] = field(default_factory=list)


@dataclass(frozen=True)
class RoomMembersUpdated(UIEvent):
    """Members of the current room as (username, user id) pairs."""

    members: List[Tuple[str, str]] = field(default_factory=list)


@dataclass(frozen=True)
class MessageAppended(UIEvent):
    """A new message arrived in the current channel."""

    message: Message


@dataclass(frozen=True)
class ChannelSelected(UIEvent):
    """The session switched to a channel."""

    channel: Channel


@dataclass(frozen=True)
class FatalError(UIEvent):
    """Unrecoverable error; the UI shows a blocking dialog."""

    text: str


@dataclass(frozen=True)
class ErrorNotice(UIEvent):
    """A remote operation failed; the UI shows a transient notice."""

    text: str
