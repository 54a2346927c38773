"""
Transport Session

Owns the websocket and nothing else. Two background tasks run for the
lifetime of the session:

    - writer: outbound queue -> socket, strictly in enqueue order
    - reader: socket -> inbound queue

Any read error, write error or close by the peer closes both queues. The
layers above never see the socket; they see the inbound queue raise
ChannelClosed, which is how a dead connection unwinds the session.

Architecture:
    - Uses the websockets library for the connection
    - Supports dependency injection for the connect call (for testability)
"""

import asyncio
import logging
import ssl
from typing import Any, Callable, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from .channels import ClosableQueue
from .errors import ChannelClosed

logger = logging.getLogger(__name__)

REALTIME_PATH = "/websocket"
CONNECT_TIMEOUT = 10.0


def resolve_ws_url(
    host: str, ssl_verify: bool = True
) -> Tuple[str, Optional[ssl.SSLContext]]:
    """
    Derive the realtime endpoint from the configured server address.

    https becomes wss with a TLS context, anything else becomes plain ws.
    The path is always the realtime endpoint.

    Args:
        host: Server address, e.g. https://chat.example.com
        ssl_verify: Verify certificates and hostnames. Disable only for
                    self-signed test deployments.

    Returns:
        (websocket URL, SSL context or None)

    Raises:
        ConnectionError: If host is not a usable URL
    """
    parts = urlsplit(host)
    if not parts.scheme or not parts.netloc:
        raise ConnectionError(f"Bad url: {host!r}")

    if parts.scheme == "https":
        scheme = "wss"
        ssl_context = ssl.create_default_context()
        if not ssl_verify:
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_NONE
    else:
        scheme = "ws"
        ssl_context = None

    url = urlunsplit((scheme, parts.netloc, REALTIME_PATH, "", ""))
    return url, ssl_context


class TransportSession:
    """
    A websocket connection pumped through two queues.

    Attributes:
        url: Websocket URL
        outbound: Frames waiting to be written (None until opened)
        inbound: Frames read from the socket (None until opened)
    """

    def __init__(
        self,
        url: str,
        ssl_context: Optional[ssl.SSLContext] = None,
        websocket_factory: Optional[Callable] = None,
    ):
        """
        Initialize the transport.

        Args:
            url: Websocket URL
            ssl_context: TLS context for wss URLs
            websocket_factory: Optional factory for creating WebSocket
                             connections (for dependency injection/testing)
        """
        self.url = url
        self._ssl_context = ssl_context
        self._websocket_factory = websocket_factory or websockets.connect
        self.websocket: Any = None
        self.outbound: Optional[ClosableQueue[str]] = None
        self.inbound: Optional[ClosableQueue[str]] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._writer_task: Optional[asyncio.Task] = None

    async def open(self) -> Tuple[ClosableQueue, ClosableQueue]:
        """
        Connect and start the reader and writer tasks.

        Returns:
            (outbound queue, inbound queue)

        Raises:
            ConnectionError: If the connection cannot be established
        """
        kwargs = {}
        if self._ssl_context is not None:
            kwargs["ssl"] = self._ssl_context

        try:
            logger.info("Connecting to %s...", self.url)
            self.websocket = await asyncio.wait_for(
                self._websocket_factory(self.url, **kwargs), CONNECT_TIMEOUT
            )
        except (
            OSError,
            asyncio.TimeoutError,
            WebSocketException,
            ValueError,
        ) as e:
            logger.error("Failed to connect to %s: %s", self.url, e)
            raise ConnectionError(f"Could not connect to {self.url}: {e}") from e

        logger.info("Connected to %s", self.url)
        self.outbound = ClosableQueue("outbound")
        self.inbound = ClosableQueue("inbound")
        self._writer_task = asyncio.create_task(self._write_loop())
        self._reader_task = asyncio.create_task(self._read_loop())
        return self.outbound, self.inbound

    @property
    def is_open(self) -> bool:
        """Whether both queues are still usable."""
        return (
            self.inbound is not None
            and not self.inbound.closed
            and not self.outbound.closed
        )

    def _shutdown_queues(self) -> None:
        if self.outbound is not None:
            self.outbound.close()
        if self.inbound is not None:
            self.inbound.close()

    async def _write_loop(self) -> None:
        """Move frames from the outbound queue onto the socket, in order."""
        try:
            while True:
                frame = await self.outbound.get()
                logger.debug("Sending frame: %s", frame)
                await self.websocket.send(frame)
        except ChannelClosed:
            logger.debug("Outbound queue closed, writer stopping")
        except ConnectionClosed as e:
            logger.warning("Connection closed while writing: %s", e)
        except (OSError, WebSocketException) as e:
            logger.error("Error when writing to websocket: %s", e)
        finally:
            self._shutdown_queues()

    async def _read_loop(self) -> None:
        """Move frames from the socket into the inbound queue."""
        try:
            async for message in self.websocket:
                logger.debug("Received frame: %s", message)
                self.inbound.put_nowait(message)
            logger.warning("Connection closed by server")
        except ConnectionClosed as e:
            logger.warning("Connection closed by server: %s", e)
        except ChannelClosed:
            logger.debug("Inbound queue closed, reader stopping")
        except (OSError, WebSocketException) as e:
            logger.error("Error when reading websocket: %s", e)
        finally:
            self._shutdown_queues()

    async def close(self) -> None:
        """Stop both tasks and close the socket."""
        self._shutdown_queues()
        for task in (self._writer_task, self._reader_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._writer_task = None
        self._reader_task = None

        if self.websocket is not None:
            if hasattr(self.websocket, "close"):
                await self.websocket.close()
            self.websocket = None
            logger.info("Disconnected from %s", self.url)
