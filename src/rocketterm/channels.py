"""
Closable FIFO Channels

asyncio.Queue has no notion of "the other end went away". The session
needs one for every pipe it owns: raw frames in both directions, commands
from the UI and events towards the UI. ClosableQueue wraps an unbounded
asyncio.Queue with a sentinel so consumers wake up when the producer side
is closed.

Usage:
    queue = ClosableQueue()
    queue.put_nowait("frame")
    item = await queue.get()
    queue.close()
    await queue.get()  # raises ChannelClosed once drained
"""

import asyncio
import logging
from typing import Generic, TypeVar

from .errors import ChannelClosed

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CLOSED = object()


class ClosableQueue(Generic[T]):
    """
    Unbounded FIFO queue that can be closed.

    Items put before close() are still delivered; after they are drained
    every get() raises ChannelClosed.

    Attributes:
        name: Label used in log messages
    """

    def __init__(self, name: str = "queue"):
        self.name = name
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether close() has been called."""
        return self._closed

    def put_nowait(self, item: T) -> None:
        """
        Enqueue an item without waiting.

        Raises:
            ChannelClosed: If the queue has been closed
        """
        if self._closed:
            raise ChannelClosed(f"{self.name} is closed")
        self._queue.put_nowait(item)

    async def put(self, item: T) -> None:
        """Enqueue an item. Never blocks, the queue is unbounded."""
        self.put_nowait(item)

    async def get(self) -> T:
        """
        Wait for the next item.

        Raises:
            ChannelClosed: If the queue is closed and drained
        """
        item = await self._queue.get()
        if item is _CLOSED:
            # Leave the sentinel for any other waiting consumer
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosed(f"{self.name} is closed")
        return item

    def get_nowait(self) -> T:
        """
        Return the next item if one is ready.

        Raises:
            asyncio.QueueEmpty: If no item is available
            ChannelClosed: If the queue is closed and drained
        """
        item = self._queue.get_nowait()
        if item is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosed(f"{self.name} is closed")
        return item

    def qsize(self) -> int:
        """Number of pending items, not counting the close marker."""
        size = self._queue.qsize()
        return size - 1 if self._closed and size else size

    def empty(self) -> bool:
        return self.qsize() == 0

    def close(self) -> None:
        """Close the queue. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
        logger.debug("%s closed", self.name)
