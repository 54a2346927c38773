import threading
from typing import Optional

from .core import Channel


class CurrentChannel:
    """
    Holds the channel the user is currently viewing.

    Responsibilities:
    - Written by the command path when the user switches channel
    - Read by message routing to decide what reaches the view

    The lock is only taken inside get/set, never across an await.
    """

    def __init__(self, channel: Optional[Channel] = None):
        self._lock = threading.Lock()
        self._channel = channel

    def get(self) -> Optional[Channel]:
        """
        Returns the current channel or None before the first switch.
        """
        with self._lock:
            return self._channel

    def set(self, channel: Channel) -> None:
        """
        Replaces the current channel.
        """
        with self._lock:
            self._channel = channel

    def matches(self, channel: Channel) -> bool:
        """
        Returns True if channel equals the current one.
        """
        with self._lock:
            return self._channel is not None and self._channel == channel
