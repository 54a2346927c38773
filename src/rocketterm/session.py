"""
Chat Session

This module ties the realtime pieces together for one logged-in session.
ChatSession runs two loops side by side for as long as the session lives:

    - the EventDispatcher loop over inbound frames
    - the command loop over events sent by the presentation layer

When either loop ends the other is cancelled and the session is over. A
dead connection surfaces as TransportError from run(); the UI closing
the command channel is a normal end.

Usage:
    session = await connect_session(config, ui_events, commands)
    await session.init_view(Group("GENERAL"))
    try:
        await session.run()
    finally:
        await session.close()
"""

import asyncio
import logging
from typing import Callable, Optional

from .auth import Authenticator
from .channels import ClosableQueue
from .config import ChatConfig
from .core import Channel, ChannelSelected, ChatEvent, Init, SendMessage
from .dispatcher import EventDispatcher
from .errors import ChannelClosed
from .service import DEFAULT_HISTORY_COUNT, RealtimeClient
from .state import CurrentChannel
from .transport import TransportSession, resolve_ws_url

logger = logging.getLogger(__name__)

DIRECT_COMMAND = "/direct"


class ChatSession:
    """
    Session orchestrator.

    Attributes:
        client: Realtime client issuing remote operations
        dispatcher: Inbound event dispatcher
        current_channel: Channel the user is viewing
        username: Session username
    """

    def __init__(
        self,
        client: RealtimeClient,
        inbound: ClosableQueue,
        ui_events: ClosableQueue,
        commands: ClosableQueue,
        username: str,
        transport: Optional[TransportSession] = None,
    ):
        """
        Initialize the session.

        Args:
            client: Realtime client bound to the transport's outbound queue
            inbound: Transport inbound queue
            ui_events: Queue towards the presentation layer
            commands: Queue of commands from the presentation layer
            username: Session username
            transport: Transport to close with the session, if owned
        """
        self.client = client
        self.username = username
        self.current_channel = CurrentChannel()
        self._ui_events = ui_events
        self._commands = commands
        self._transport = transport
        self.dispatcher = EventDispatcher(
            inbound,
            client,
            ui_events,
            username,
            self.current_channel,
            on_joined=self.init_view,
        )

    async def init_view(self, channel: Channel) -> None:
        """
        Switch the view to a channel.

        Requests history, the room list, the user's event stream and the
        room members, tells the UI to select the channel, then makes it
        the current channel.
        """
        logger.info("Initializing view for channel %r", channel)
        room_id = str(channel)
        await self.client.load_history(room_id, DEFAULT_HISTORY_COUNT)
        await self.client.load_rooms()
        await self.client.subscribe_user()
        await self.client.get_users_room(room_id)
        await self._ui_events.put(ChannelSelected(channel))
        self.current_channel.set(channel)

    async def send_message(self, text: str, channel: Channel) -> None:
        """
        Send what the user typed.

        "/direct <username>" opens a direct chat instead of sending text.
        """
        words = text.split(" ")
        if text.startswith(DIRECT_COMMAND) and len(words) > 1:
            await self.client.create_direct_chat(words[1])
        else:
            await self.client.send_message(str(channel), text)

    async def handle_command(self, command: ChatEvent) -> None:
        """Execute one command from the presentation layer."""
        if isinstance(command, SendMessage):
            await self.send_message(command.text, command.channel)
        elif isinstance(command, Init):
            await self.init_view(command.channel)
        else:
            logger.warning("Unknown command: %r", command)

    async def command_loop(self) -> None:
        """Process commands until the presentation layer closes its queue."""
        logger.info("Starting command loop")
        while True:
            try:
                command = await self._commands.get()
            except ChannelClosed:
                logger.info("Command channel closed")
                return
            await self.handle_command(command)

    async def run(self) -> None:
        """
        Run the dispatcher and command loops until one of them ends.

        Raises:
            TransportError: If the connection was lost
            Exception: Whatever made either loop fail
        """
        dispatch_task = asyncio.create_task(
            self.dispatcher.run(), name="dispatcher"
        )
        command_task = asyncio.create_task(
            self.command_loop(), name="commands"
        )
        tasks = {dispatch_task, command_task}

        try:
            done, pending = await asyncio.wait(
                tasks, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            done, pending = set(), tasks
            raise
        finally:
            for task in pending:
                task.cancel()
            for task in pending:
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        failed = [task for task in done if task.exception() is not None]
        finished = failed[0] if failed else done.pop()
        logger.info("Session ended (%s finished)", finished.get_name())
        # Re-raises the loop's error, if any
        finished.result()

    async def close(self) -> None:
        """Tear down the transport."""
        if self._transport is not None:
            await self._transport.close()


async def connect_session(
    config: ChatConfig,
    ui_events: ClosableQueue,
    commands: ClosableQueue,
    websocket_factory: Optional[Callable] = None,
) -> ChatSession:
    """
    Open the realtime connection, log in and build a session.

    Args:
        config: Server and credentials
        ui_events: Queue towards the presentation layer
        commands: Queue of commands from the presentation layer
        websocket_factory: Optional factory for creating WebSocket
                         connections (for dependency injection/testing)

    Returns:
        A ready ChatSession

    Raises:
        ConnectionError: If the socket cannot be established
        AuthenticationError: If the handshake fails
    """
    url, ssl_context = resolve_ws_url(config.hostname, config.ssl_verify)
    transport = TransportSession(url, ssl_context, websocket_factory)
    outbound, inbound = await transport.open()

    authenticator = Authenticator(config.username, config.password)
    try:
        user_id = await authenticator.authenticate(outbound, inbound)
    except BaseException:
        await transport.close()
        raise

    client = RealtimeClient(
        outbound, config.username, authenticator.password_digest, user_id
    )
    return ChatSession(
        client, inbound, ui_events, commands, config.username, transport
    )
