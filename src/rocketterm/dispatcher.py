"""
Event Dispatcher

This module consumes the inbound frame stream of a realtime session,
classifies every frame and routes it to one of three places:

    - correlated results (history, room list, members, joined room)
      become typed UI events or chained requests
    - unsolicited message events go through message routing, which only
      lets messages for the current channel reach the view
    - keepalive pings are answered immediately

Frames the client does not act on, and frames that fail to parse, are
dropped and the loop keeps going. The loop only ends when the inbound
queue is closed, which means the connection is gone.

Usage:
    dispatcher = EventDispatcher(inbound, client, ui_events, username,
                                 current_channel, on_joined=session.init_view)
    await dispatcher.run()
"""

import logging
from typing import Awaitable, Callable, Optional

from .channels import ClosableQueue
from .core import (
    Channel,
    ChannelsUpdated,
    ErrorNotice,
    Message,
    MessageAppended,
    MessagesReplaced,
    RoomMembersUpdated,
    UIEvent,
)
from .errors import ChannelClosed, ProtocolDecodeError, TransportError
from .schemas import (
    HistoryResult,
    JoinedRoomResult,
    MethodError,
    NewMessageEvent,
    Ping,
    RoomsResult,
    UsersInRoomResult,
    classify_frame,
)
from .service import RealtimeClient
from .state import CurrentChannel

logger = logging.getLogger(__name__)


class EventDispatcher:
    """
    Turns inbound frames into UI events and follow-up requests.

    Attributes:
        username: Session username, used to label direct chats
        current_channel: Channel the user is viewing
    """

    def __init__(
        self,
        inbound: ClosableQueue,
        client: RealtimeClient,
        ui_events: ClosableQueue,
        username: str,
        current_channel: CurrentChannel,
        on_joined: Optional[Callable[[Channel], Awaitable[None]]] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            inbound: Transport inbound queue
            client: Client used for pongs
            ui_events: Queue towards the presentation layer
            username: Session username
            current_channel: Current channel cell shared with the session
            on_joined: Called with the channel confirmed by a joined-room
                       result (the session's init_view)
        """
        self._inbound = inbound
        self._client = client
        self._ui_events = ui_events
        self.username = username
        self.current_channel = current_channel
        self._on_joined = on_joined

    async def run(self) -> None:
        """
        Process inbound frames until the connection closes.

        Raises:
            TransportError: When the inbound queue is closed
        """
        logger.info("Starting message receive loop")
        while True:
            try:
                frame = await self._inbound.get()
            except ChannelClosed as e:
                logger.warning("Inbound stream closed")
                raise TransportError("Connection closed by server") from e
            await self.process_frame(frame)

    async def process_frame(self, frame: str) -> None:
        """
        Process a single inbound frame.

        Args:
            frame: Raw JSON text from the websocket
        """
        try:
            response = classify_frame(frame)
        except ProtocolDecodeError as e:
            logger.debug("Dropping undecodable frame: %s", e)
            return

        if response is None:
            logger.debug("Ignoring frame: %s", frame)
        elif isinstance(response, NewMessageEvent):
            await self._handle_new_message(response)
        elif isinstance(response, HistoryResult):
            await self._emit(MessagesReplaced(response.render()))
        elif isinstance(response, RoomsResult):
            channels = response.labelled_channels(self.username)
            await self._emit(ChannelsUpdated(channels))
        elif isinstance(response, JoinedRoomResult):
            await self._handle_joined_room(response)
        elif isinstance(response, UsersInRoomResult):
            await self._emit(RoomMembersUpdated(response.members()))
        elif isinstance(response, Ping):
            await self._client.pong(response.ping_id)
        elif isinstance(response, MethodError):
            await self._handle_method_error(response)

    async def _emit(self, event: UIEvent) -> None:
        await self._ui_events.put(event)

    async def _handle_new_message(self, event: NewMessageEvent) -> None:
        message = event.last_message.to_message()
        await self.route_message(message, event.channel)

    async def route_message(self, message: Message, channel: Channel) -> None:
        """
        Forward a message to the view if it belongs to the current channel.

        Args:
            message: The received message
            channel: Channel the message was posted to
        """
        if not self.current_channel.matches(channel):
            logger.debug(
                "Ignoring message for channel %r (current: %r)",
                channel,
                self.current_channel.get(),
            )
            return
        await self._emit(MessageAppended(message))

    async def _handle_joined_room(self, result: JoinedRoomResult) -> None:
        channel = result.channel
        logger.info("Joined room %s", channel)
        if self._on_joined is not None:
            await self._on_joined(channel)

    async def _handle_method_error(self, error: MethodError) -> None:
        logger.error("%s failed: %s", error.method, error.reason)
        await self._emit(ErrorNotice(f"{error.method} failed: {error.reason}"))
