"""
Chat Application UI

Main application class for the RocketChat terminal client.
Built using the Textual framework.

The app talks to the session only through two queues: it puts command
events (SendMessage, Init) on one and renders the UI events it reads from
the other.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Tuple

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.css.query import NoMatches
from textual.widgets import (
    Button,
    Footer,
    Header,
    Input,
    Label,
    ListItem,
    ListView,
    Log,
    Static,
)

from ..channels import ClosableQueue
from ..config import ChatConfig
from ..core import (
    Channel,
    ChannelSelected,
    ChannelsUpdated,
    ChatEvent,
    ErrorNotice,
    FatalError,
    Group,
    Init,
    MessageAppended,
    MessagesReplaced,
    Private,
    RoomMembersUpdated,
    SendMessage,
    UIEvent,
)
from ..errors import AuthenticationError, ChannelClosed, TransportError
from ..session import connect_session

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = Group("GENERAL")

CHANNEL_PREFIXES = {Group: "#", Private: "🔒"}
DIRECT_PREFIX = "@"


def format_channels(
    channels: List[Tuple[str, Channel]]
) -> List[Tuple[str, Channel]]:
    """
    Prefix labels by channel kind and sort for display.

    Groups come first, then private groups, then direct chats.
    """
    formatted = [
        (CHANNEL_PREFIXES.get(type(channel), DIRECT_PREFIX) + label, channel)
        for label, channel in channels
    ]
    formatted.sort(key=lambda item: item[1], reverse=True)
    return formatted


class ChannelItem(ListItem):
    """List entry for a channel."""

    def __init__(self, label: str, channel: Channel) -> None:
        super().__init__(Label(label))
        self.label = label
        self.channel = channel


class MemberItem(ListItem):
    """List entry for a room member."""

    def __init__(self, username: str, user_id: str) -> None:
        super().__init__(Label(username))
        self.username = username
        self.user_id = user_id


class ChatScreen(Container):
    """Screen for chatting: channels, messages and members."""

    def compose(self) -> ComposeResult:
        """Compose the chat screen."""
        with Horizontal(id="chat-container"):
            yield ListView(id="channel-list")
            with Vertical(id="chat-main"):
                yield Static("", id="room-header", classes="room-header")
                yield Log(id="messages")
                yield Input(placeholder="Type a message...", id="message-input")
            yield ListView(id="member-list")


class ErrorDialog(Container):
    """Blocking dialog for unrecoverable errors."""

    message = ""

    def compose(self) -> ComposeResult:
        """Compose the error dialog."""
        yield Static("[bold red]Error[/]", classes="screen-title")
        with Vertical(id="error-form"):
            yield Static("", id="error-message", classes="dialog-message")
            yield Button("Quit", id="quit-btn", variant="error")

    def set_message(self, message: str) -> None:
        self.message = message
        try:
            self.query_one("#error-message", Static).update(message)
        except NoMatches:
            pass


class ChatApp(App):
    """Main chat application."""

    CSS = """
    Screen {
        layout: vertical;
    }

    .screen-title {
        text-align: center;
        padding: 1 0;
        text-style: bold;
    }

    #chat-container {
        height: 1fr;
    }

    #channel-list {
        width: 1fr;
        border-right: solid $primary;
    }

    #chat-main {
        width: 3fr;
    }

    .room-header {
        padding: 0 1;
        background: $surface;
        text-align: center;
    }

    #messages {
        height: 1fr;
        padding: 0 1;
    }

    #message-input {
        height: 3;
    }

    #member-list {
        width: 1fr;
        border-left: solid $primary;
    }

    ChatScreen {
        height: 1fr;
    }

    ErrorDialog {
        align: center middle;
        padding: 2;
    }

    #error-form {
        width: 60;
        height: auto;
        padding: 1;
        border: solid red;
    }

    .dialog-message {
        padding: 1 0;
        text-align: center;
    }

    #quit-btn {
        width: 100%;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=True),
        Binding("escape", "focus_input", "Input", show=True),
    ]

    def __init__(
        self,
        config: Optional[ChatConfig] = None,
        session_factory: Optional[Callable] = None,
    ) -> None:
        """
        Initialize the chat application.

        Args:
            config: Server and credentials; without it no session starts
            session_factory: Coroutine building a ChatSession (defaults to
                             connect_session, injectable for tests)
        """
        super().__init__()
        self.config = config
        self._session_factory = session_factory or connect_session
        self.commands: ClosableQueue[ChatEvent] = ClosableQueue("commands")
        self.ui_events: ClosableQueue[UIEvent] = ClosableQueue("ui-events")
        self.current_channel: Optional[Channel] = None
        self.channels: List[Tuple[str, Channel]] = []
        self.members: List[Tuple[str, str]] = []
        self._current_screen = "chat"
        self._session_task: Optional[asyncio.Task] = None
        self._events_task: Optional[asyncio.Task] = None

    def compose(self) -> ComposeResult:
        """Compose the main application layout."""
        yield Header()
        yield ChatScreen(id="chat-screen")
        yield ErrorDialog(id="error-dialog")
        yield Footer()

    def on_mount(self) -> None:
        """Handle application mount."""
        self.title = "rocketterm"
        self._show_screen("chat")
        self._events_task = asyncio.create_task(self._consume_ui_events())
        if self.config is not None:
            self.sub_title = f"{self.config.username}@{self.config.hostname}"
            self._session_task = asyncio.create_task(self._run_session())

    async def on_unmount(self) -> None:
        """Stop the background tasks."""
        self.commands.close()
        for task in (self._session_task, self._events_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._session_task = None
        self._events_task = None

    def _show_screen(self, screen_name: str) -> None:
        """Show a specific screen and hide others."""
        screens = {
            "chat": "chat-screen",
            "error": "error-dialog",
        }

        for name, screen_id in screens.items():
            try:
                screen = self.query_one(f"#{screen_id}")
                screen.display = name == screen_name
            except NoMatches:
                pass

        self._current_screen = screen_name

    async def _run_session(self) -> None:
        """Connect, show the default channel and run until the session ends."""
        try:
            session = await self._session_factory(
                self.config, self.ui_events, self.commands
            )
        except (ConnectionError, AuthenticationError) as e:
            logger.error("Could not start session: %s", e)
            await self.ui_events.put(FatalError(str(e)))
            return

        try:
            await session.init_view(DEFAULT_CHANNEL)
            await session.run()
        except TransportError as e:
            logger.error("The websocket loop crashed: %s", e)
            await self.ui_events.put(FatalError(f"Connection lost: {e}"))
        except Exception as e:
            logger.exception("Session ended unexpectedly")
            await self.ui_events.put(FatalError(f"Session ended: {e}"))
        finally:
            await session.close()

    async def _consume_ui_events(self) -> None:
        while True:
            try:
                event = await self.ui_events.get()
            except ChannelClosed:
                return
            await self.handle_ui_event(event)

    async def handle_ui_event(self, event: UIEvent) -> None:
        """Apply one event from the session to the widgets."""
        if isinstance(event, MessagesReplaced):
            self._replace_messages(event.text)
        elif isinstance(event, MessageAppended):
            self._append_message(str(event.message))
        elif isinstance(event, ChannelsUpdated):
            await self._update_channels(event.channels)
        elif isinstance(event, RoomMembersUpdated):
            await self._update_members(event.members)
        elif isinstance(event, ChannelSelected):
            self._select_channel(event.channel)
        elif isinstance(event, ErrorNotice):
            self.notify(event.text, severity="error")
        elif isinstance(event, FatalError):
            self._show_error(event.text)

    def _show_error(self, text: str) -> None:
        try:
            self.query_one(ErrorDialog).set_message(text)
        except NoMatches:
            return
        self._show_screen("error")
        self.query_one("#quit-btn", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button press events."""
        if event.button.id == "quit-btn":
            self.exit()

    def _replace_messages(self, text: str) -> None:
        try:
            log = self.query_one("#messages", Log)
        except NoMatches:
            return
        log.clear()
        if text:
            log.write_lines(text.split("\n"))

    def _append_message(self, line: str) -> None:
        try:
            self.query_one("#messages", Log).write_line(line)
        except NoMatches:
            pass

    async def _update_channels(self, channels: List[Tuple[str, Channel]]) -> None:
        self.channels = format_channels(channels)
        try:
            view = self.query_one("#channel-list", ListView)
        except NoMatches:
            return
        await view.clear()
        for label, channel in self.channels:
            await view.append(ChannelItem(label, channel))
        self._highlight_current_channel(view)

    async def _update_members(self, members: List[Tuple[str, str]]) -> None:
        self.members = list(members)
        try:
            view = self.query_one("#member-list", ListView)
        except NoMatches:
            return
        await view.clear()
        for username, user_id in self.members:
            await view.append(MemberItem(username, user_id))

    def _select_channel(self, channel: Channel) -> None:
        self.current_channel = channel
        label = next(
            (text for text, known in self.channels if known == channel),
            str(channel),
        )
        try:
            self.query_one("#room-header", Static).update(f"[bold]{label}[/]")
            self._highlight_current_channel(
                self.query_one("#channel-list", ListView)
            )
        except NoMatches:
            pass

    def _highlight_current_channel(self, view: ListView) -> None:
        for index, (_, channel) in enumerate(self.channels):
            if channel == self.current_channel:
                view.index = index
                return

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        """
        Switch channel when one is picked from the channel list.

        Picking a member asks the server for a direct chat with them.
        """
        if isinstance(event.item, ChannelItem):
            self.send_command(Init(event.item.channel))
            self.action_focus_input()
        elif isinstance(event.item, MemberItem) and self.current_channel is not None:
            self.send_command(
                SendMessage(f"/direct {event.item.username}", self.current_channel)
            )
            self.action_focus_input()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Send the typed text to the current channel (Enter key)."""
        text = event.value.strip()
        if not text or self.current_channel is None:
            return
        self.send_command(SendMessage(text, self.current_channel))
        event.input.value = ""

    def send_command(self, command: ChatEvent) -> None:
        """Queue a command for the session."""
        try:
            self.commands.put_nowait(command)
        except ChannelClosed:
            logger.warning("Session is gone, dropping %r", command)

    def action_focus_input(self) -> None:
        try:
            self.query_one("#message-input", Input).focus()
        except NoMatches:
            pass

