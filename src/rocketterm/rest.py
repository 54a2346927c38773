"""HTTP API client for one-shot lookups against the RocketChat REST API."""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from .core import Message
from .errors import ChannelOperationError

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
TIMEOUT = 10

# Tried in order: a room id alone does not say which kind of room it is
HISTORY_ENDPOINTS = ("channels.history", "im.history", "groups.history")


@dataclass
class AuthToken:
    auth_token: str
    user_id: str


class RestClient:
    def __init__(
        self,
        base_url: str,
        ssl_verify: bool = True,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.ssl_verify = ssl_verify
        self.session = session or requests.Session()
        self.token: Optional[AuthToken] = None

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}{API_PREFIX}/{endpoint}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["X-Auth-Token"] = self.token.auth_token
            headers["X-User-Id"] = self.token.user_id
        return headers

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            resp = self.session.request(
                method,
                self._url(endpoint),
                headers=self._headers(),
                timeout=TIMEOUT,
                verify=self.ssl_verify,
                **kwargs,
            )
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, endpoint, e)
            raise ChannelOperationError(endpoint, str(e)) from e
        except ValueError as e:
            raise ChannelOperationError(endpoint, f"invalid JSON response: {e}") from e

    def login(self, username: str, password: str) -> AuthToken:
        data = self._request(
            "POST", "login", json={"user": username, "password": password}
        )
        try:
            token = AuthToken(
                auth_token=data["data"]["authToken"],
                user_id=data["data"]["userId"],
            )
        except (KeyError, TypeError) as e:
            raise ChannelOperationError("login", f"unexpected response: {data!r}") from e
        self.token = token
        logger.info("REST login succeeded for %s", username)
        return token

    def channels(self) -> List[Dict[str, str]]:
        data = self._request("GET", "channels.list")
        return [{"id": c["_id"], "name": c["name"]} for c in data.get("channels", [])]

    def users(self) -> List[str]:
        data = self._request("GET", "users.list")
        return [u.get("username") or u.get("name", "") for u in data.get("users", [])]

    def channel_history(self, room_id: str, count: int = 100) -> List[Message]:
        """Messages of a room, oldest first, trying each room kind's endpoint."""
        last_error: Optional[ChannelOperationError] = None
        for endpoint in HISTORY_ENDPOINTS:
            try:
                data = self._request(
                    "GET", endpoint, params={"roomId": room_id, "count": count}
                )
            except ChannelOperationError as e:
                logger.debug("History via %s failed, trying next: %s", endpoint, e)
                last_error = e
                continue
            messages = [_parse_message(m) for m in data.get("messages", [])]
            messages.reverse()
            return messages
        raise last_error

    def post_message(self, room_id: str, text: str) -> Dict[str, Any]:
        return self._request(
            "POST", "chat.postMessage", json={"roomId": room_id, "text": text}
        )


def _parse_message(data: Dict[str, Any]) -> Message:
    return Message(
        author=data["u"]["username"],
        content=data.get("msg", ""),
        sent_at=datetime.fromisoformat(data["ts"]),
    )
