"""
Authentication Schema Definitions

Frames used by the connect/login handshake and the keepalive.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .base import (
    LOGIN_ID,
    BaseRequest,
    BaseResponse,
    MethodRequest,
    require_str,
)

PROTOCOL_VERSION = "1"
DIGEST_ALGORITHM = "sha-256"


@dataclass
class ConnectRequest(BaseRequest):
    """
    Opening frame of a DDP session.

    Attributes:
        version: Protocol version to speak
    """

    version: str = PROTOCOL_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "msg": "connect",
            "version": self.version,
            "support": [self.version],
        }


@dataclass
class LoginRequest(MethodRequest):
    """
    Login with a pre-hashed password.

    Attributes:
        username: Account username
        password_digest: Lowercase hex SHA-256 of the password
    """

    username: str
    password_digest: str

    method = "login"
    request_id = LOGIN_ID

    def params(self) -> List[Any]:
        return [
            {
                "user": {"username": self.username},
                "password": {
                    "digest": self.password_digest,
                    "algorithm": DIGEST_ALGORITHM,
                },
            }
        ]


@dataclass
class PongRequest(BaseRequest):
    """
    Keepalive answer.

    Attributes:
        ping_id: Id of the ping being answered, echoed when present
    """

    ping_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.ping_id is None:
            return {"msg": "pong"}
        return {"msg": "pong", "id": self.ping_id}


@dataclass
class SessionIdResponse(BaseResponse):
    """
    Frame carrying the logged-in user's id.

    The server announces the user with an "added" frame whose top-level id
    is the user id; a login result carries it as result.id instead.

    Attributes:
        user_id: Session user id
    """

    user_id: str

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "SessionIdResponse":
        """Create from frame dictionary."""
        if data.get("msg") == "result":
            return cls(user_id=require_str(data["result"]["id"], "result.id"))
        return cls(user_id=require_str(data["id"], "id"))
