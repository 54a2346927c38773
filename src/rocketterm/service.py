"""
Realtime Client Service

This module provides the client service that issues RocketChat remote
operations over the realtime connection. Every operation builds one
request frame and enqueues it on the transport's outbound queue.

Architecture:
    - Fire-and-forget: no operation waits for its result. Results come
      back on the inbound stream and are handled by the EventDispatcher.
    - Requests carry a fixed id per operation kind (see schemas.base), so
      the dispatcher can tell which kind of call a result belongs to.
    - The outbound queue is unbounded, so enqueueing never suspends.
"""

import logging
from typing import Optional

from .channels import ClosableQueue
from .errors import ChannelClosed, TransportError
from .schemas import (
    BaseRequest,
    CreateDirectMessageRequest,
    LoadHistoryRequest,
    LoadRoomsRequest,
    LoginRequest,
    PongRequest,
    SendMessageRequest,
    SubscribeMessagesRequest,
    SubscribeUserRequest,
    UsersOfRoomRequest,
)

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_COUNT = 100


class RealtimeClient:
    """
    Issues remote operations on an authenticated realtime session.

    Attributes:
        username: Session username
        password_digest: Hex SHA-256 of the password, reused by login()
        user_id: Session user id returned by the handshake
    """

    def __init__(
        self,
        outbound: ClosableQueue,
        username: str,
        password_digest: str,
        user_id: str,
    ):
        """
        Initialize the client.

        Args:
            outbound: Transport outbound queue
            username: Session username
            password_digest: Hex SHA-256 of the password
            user_id: Session user id
        """
        self._outbound = outbound
        self.username = username
        self.password_digest = password_digest
        self.user_id = user_id

        logger.info("RealtimeClient initialized for user: %s", username)

    @property
    def is_connected(self) -> bool:
        """Check if the outbound queue still accepts frames."""
        return not self._outbound.closed

    def _send(self, request: BaseRequest) -> None:
        """
        Enqueue a request frame.

        Raises:
            TransportError: If the transport is gone
        """
        try:
            self._outbound.put_nowait(request.to_json())
        except ChannelClosed as e:
            raise TransportError("Not connected to the server") from e

    async def login(self) -> None:
        """Send the login frame again with the stored digest."""
        logger.info("Sending login for %s", self.username)
        self._send(LoginRequest(self.username, self.password_digest))

    async def pong(self, ping_id: Optional[str] = None) -> None:
        """Answer a server keepalive ping."""
        self._send(PongRequest(ping_id))

    async def send_message(self, room_id: str, content: str) -> None:
        """
        Send a message to a room.

        Args:
            room_id: ID of the room to send the message to
            content: The message content
        """
        logger.info("Sending message to room '%s'", room_id)
        self._send(SendMessageRequest(room_id, content))

    async def load_history(
        self, room_id: str, count: int = DEFAULT_HISTORY_COUNT
    ) -> None:
        """
        Request the latest messages of a room.

        Args:
            room_id: ID of the room
            count: Maximum number of messages
        """
        logger.info("Loading %d messages of room '%s'", count, room_id)
        self._send(LoadHistoryRequest(room_id, count))

    async def load_rooms(self) -> None:
        """Request the rooms the user belongs to."""
        logger.info("Loading rooms")
        self._send(LoadRoomsRequest())

    async def create_direct_chat(self, username: str) -> None:
        """
        Open a direct chat with a user.

        The server answers with the joined room, which the dispatcher
        turns into a channel switch.
        """
        logger.info("Creating direct chat with '%s'", username)
        self._send(CreateDirectMessageRequest(username))

    async def subscribe_user(self) -> None:
        """Subscribe to the user's rooms-changed stream."""
        logger.info("Subscribing to rooms of user %s", self.user_id)
        self._send(SubscribeUserRequest(self.user_id))

    async def subscribe_messages(self) -> None:
        """Subscribe to messages of every room the user is in."""
        logger.info("Subscribing to room messages")
        self._send(SubscribeMessagesRequest())

    async def get_users_room(self, room_id: str) -> None:
        """
        Request the members of a room.

        Args:
            room_id: ID of the room
        """
        logger.info("Loading members of room '%s'", room_id)
        self._send(UsersOfRoomRequest(room_id))
