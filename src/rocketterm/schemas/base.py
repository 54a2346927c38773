"""
Base Schema Classes

This module provides base classes for request and response schemas with
common serialization and deserialization methods to avoid code duplication.

RocketChat speaks DDP over the websocket: every frame is a JSON object with
a "msg" field ("method", "sub", "result", "changed", "ping", ...). Remote
method calls share one envelope:

    {"msg": "method", "method": <name>, "id": <request id>, "params": [...]}

and subscriptions another:

    {"msg": "sub", "id": <request id>, "name": <stream>, "params": [...]}
"""

import json
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, TypeVar

from ..errors import ProtocolDecodeError

T = TypeVar("T", bound="BaseResponse")

# Fixed request ids, one per operation kind. Results come back with the
# same id, which is how they are correlated.
LOGIN_ID = "1"
SEND_MESSAGE_ID = "2"
LOAD_HISTORY_ID = "3"
LOAD_ROOMS_ID = "4"
CREATE_DIRECT_ID = "5"
SUBSCRIBE_USER_ID = "6"
SUBSCRIBE_MESSAGES_ID = "7"
USERS_OF_ROOM_ID = "8"


class BaseRequest:
    """
    Base class for request schemas.

    Provides common serialization methods for converting request objects
    to dictionary and JSON formats.
    """

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Should be overridden by subclasses.
        """
        raise NotImplementedError("Subclasses must define to_dict")

    def to_json(self) -> str:
        """
        Convert to JSON string.

        Returns:
            JSON string representation of the request.
        """
        return json.dumps(self.to_dict())


class MethodRequest(BaseRequest):
    """
    Base class for remote method calls.

    Subclasses define the method name, the fixed request id used to
    correlate the result, and the positional params.
    """

    method: str = ""
    request_id: str = ""

    def params(self) -> List[Any]:
        """Positional params of the call."""
        return []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "msg": "method",
            "method": self.method,
            "id": self.request_id,
            "params": self.params(),
        }


class SubscriptionRequest(BaseRequest):
    """Base class for stream subscriptions."""

    stream: str = ""
    request_id: str = ""

    def params(self) -> List[Any]:
        return []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "msg": "sub",
            "id": self.request_id,
            "name": self.stream,
            "params": self.params(),
        }


class BaseResponse:
    """
    Base class for response schemas.

    Provides common deserialization methods for creating response objects
    from dictionary and JSON formats. Any missing key or wrong type while
    building the object is reported as ProtocolDecodeError.
    """

    @classmethod
    def from_dict(cls: type[T], data: Dict[str, Any]) -> T:
        """
        Create instance from a decoded frame.

        Args:
            data: Dictionary containing the whole frame.

        Returns:
            Instance of the response class.

        Raises:
            ProtocolDecodeError: If the frame does not have this shape
        """
        try:
            return cls._from_data(data)
        except (
            AttributeError,
            IndexError,
            KeyError,
            OSError,
            OverflowError,
            TypeError,
            ValueError,
        ) as e:
            if isinstance(e, ProtocolDecodeError):
                raise
            raise ProtocolDecodeError(
                f"Frame does not match {cls.__name__}: {e!r}", payload=data
            ) from e

    @classmethod
    def from_json(cls: type[T], json_str: str) -> T:
        """
        Create instance from JSON string.

        Args:
            json_str: JSON string containing the frame.

        Returns:
            Instance of the response class.
        """
        return cls.from_dict(decode_frame(json_str))

    @classmethod
    def _from_data(cls: type[T], data: Dict[str, Any]) -> T:
        """
        Create instance from the frame dictionary.

        Should be overridden by subclasses for custom deserialization.
        """
        return cls(**data)


def decode_frame(raw: Any) -> Dict[str, Any]:
    """
    Decode a raw text frame into a JSON object.

    Raises:
        ProtocolDecodeError: If the frame is not a JSON object
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    try:
        data = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise ProtocolDecodeError(f"Frame is not JSON: {e}", payload=raw) from e
    if not isinstance(data, dict):
        raise ProtocolDecodeError("Frame is not a JSON object", payload=raw)
    return data


def require_str(value: Any, name: str) -> str:
    """Return value if it is a string, else raise TypeError."""
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string, got {type(value).__name__}")
    return value


def require_list(value: Any, name: str) -> List[Any]:
    """Return value if it is a list, else raise TypeError."""
    if not isinstance(value, list):
        raise TypeError(f"{name} must be a list, got {type(value).__name__}")
    return value


def parse_date(value: Any) -> datetime:
    """
    Parse a DDP EJSON date ({"$date": <epoch millis>}).

    Returns:
        Timezone aware UTC datetime

    Raises:
        TypeError: If $date is not a number
        ValueError, OverflowError, OSError: If it is not a representable time
    """
    millis = value["$date"]
    if isinstance(millis, bool) or not isinstance(millis, (int, float)):
        raise TypeError("$date must be a number")
    if not math.isfinite(millis):
        raise ValueError("$date must be finite")
    sent_at = datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    # Rendering converts to local time, which must not overflow either
    sent_at.astimezone()
    return sent_at
