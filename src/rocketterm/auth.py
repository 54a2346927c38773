"""
Authenticator

Drives the connect -> login handshake over a freshly opened transport and
returns the session user id. The password is never sent in clear: the
login frame carries its SHA-256 digest, computed once per Authenticator.

    DISCONNECTED --hello, send connect--> CONNECTED
    CONNECTED    --ack, send login------> LOGIN_SENT
    LOGIN_SENT   --user id frame--------> AUTHENTICATED

There is no retry. Any unusable frame fails the handshake with
AuthenticationError and the caller decides whether to start over.
"""

import enum
import hashlib
import logging

from .channels import ClosableQueue
from .errors import AuthenticationError, ChannelClosed, ProtocolDecodeError
from .schemas import ConnectRequest, LoginRequest, SessionIdResponse, decode_frame

logger = logging.getLogger(__name__)


def password_digest(password: str) -> str:
    """Lowercase hex SHA-256 of the password."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class AuthState(enum.Enum):
    """Handshake progress."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    LOGIN_SENT = "login_sent"
    AUTHENTICATED = "authenticated"


class Authenticator:
    """
    Performs the realtime login handshake.

    Attributes:
        username: Account username
        password_digest: Hex SHA-256 of the password
        state: Current handshake state
        user_id: Session user id once authenticated
    """

    def __init__(self, username: str, password: str):
        self.username = username
        self.password_digest = password_digest(password)
        self.state = AuthState.DISCONNECTED
        self.user_id = None

    def login_request(self) -> LoginRequest:
        """The login frame for these credentials."""
        return LoginRequest(self.username, self.password_digest)

    async def _next_frame(self, inbound: ClosableQueue) -> str:
        try:
            return await inbound.get()
        except ChannelClosed as e:
            raise AuthenticationError(
                f"Connection closed during handshake ({self.state.value})"
            ) from e

    async def authenticate(
        self, outbound: ClosableQueue, inbound: ClosableQueue
    ) -> str:
        """
        Run the handshake.

        Args:
            outbound: Transport outbound queue
            inbound: Transport inbound queue

        Returns:
            The session user id

        Raises:
            AuthenticationError: If the handshake fails at any step
        """
        # The server greets every new socket before it accepts a connect
        await self._next_frame(inbound)
        outbound.put_nowait(ConnectRequest().to_json())
        await self._next_frame(inbound)
        self.state = AuthState.CONNECTED
        logger.debug("Realtime session connected")

        outbound.put_nowait(self.login_request().to_json())
        self.state = AuthState.LOGIN_SENT
        logger.debug("Login sent for %s", self.username)

        frame = await self._next_frame(inbound)
        try:
            data = decode_frame(frame)
            if data.get("msg") == "result" and "error" in data:
                raise AuthenticationError(
                    f"Login rejected: {data['error']}", payload=frame
                )
            response = SessionIdResponse.from_dict(data)
        except ProtocolDecodeError as e:
            raise AuthenticationError(
                f"Unexpected frame while logging in: {e}", payload=frame
            ) from e

        self.user_id = response.user_id
        self.state = AuthState.AUTHENTICATED
        logger.info("Authenticated as %s (%s)", self.username, self.user_id)
        return self.user_id
