"""
Tests for Realtime Frame Schemas

Tests for the DDP frames the client sends and the classification of the
frames it receives.
"""

import json
from datetime import datetime, timezone

import pytest

from rocketterm import Group, Private, User
from rocketterm.errors import ProtocolDecodeError
from rocketterm.schemas import (
    ConnectRequest,
    CreateDirectMessageRequest,
    HistoryResult,
    JoinedRoomResult,
    LoadHistoryRequest,
    LoadRoomsRequest,
    LoginRequest,
    MethodError,
    NewMessageEvent,
    Ping,
    PongRequest,
    RoomsResult,
    SendMessageRequest,
    SessionIdResponse,
    SubscribeMessagesRequest,
    SubscribeUserRequest,
    UsersInRoomResult,
    UsersOfRoomRequest,
    classify,
    classify_frame,
)
from rocketterm.schemas.base import parse_date


def message_event(room_id="GENERAL", room_type="c", frame_id="abc"):
    return {
        "msg": "changed",
        "collection": "stream-notify-user",
        "id": frame_id,
        "fields": {
            "eventName": "uid/rooms-changed",
            "args": [
                "updated",
                {
                    "_id": room_id,
                    "t": room_type,
                    "lastMessage": {
                        "_id": "m1",
                        "rid": room_id,
                        "msg": "hello",
                        "ts": {"$date": 1700000000000},
                        "u": {"_id": "u1", "username": "alice"},
                    },
                },
            ],
        },
    }


# Outbound frames


def test_login_request_frame():
    """Test the login frame carries the digest, never the password."""
    request = LoginRequest("test", "abc123")
    assert request.to_dict() == {
        "msg": "method",
        "method": "login",
        "id": "1",
        "params": [
            {
                "user": {"username": "test"},
                "password": {"digest": "abc123", "algorithm": "sha-256"},
            }
        ],
    }


def test_connect_request_frame():
    assert ConnectRequest().to_dict() == {
        "msg": "connect",
        "version": "1",
        "support": ["1"],
    }


def test_pong_request_frame():
    """Test pong without and with an echoed id."""
    assert PongRequest().to_dict() == {"msg": "pong"}
    assert PongRequest("p1").to_dict() == {"msg": "pong", "id": "p1"}


def test_send_message_request_frame():
    request = SendMessageRequest(room_id="GENERAL", content="Hello everyone!")
    assert request.to_dict() == {
        "msg": "method",
        "method": "sendMessage",
        "id": "2",
        "params": [{"rid": "GENERAL", "msg": "Hello everyone!"}],
    }


def test_send_message_request_escapes_content():
    """Test quotes and newlines survive JSON serialization."""
    content = 'say "hi"\nand\\bye'
    decoded = json.loads(SendMessageRequest("r1", content).to_json())
    assert decoded["params"][0]["msg"] == content


def test_load_history_request_frame():
    request = LoadHistoryRequest(room_id="GENERAL", count=100)
    assert request.to_dict() == {
        "msg": "method",
        "method": "loadHistory",
        "id": "3",
        "params": ["GENERAL", None, 100, None],
    }
    assert '"params": ["GENERAL", null, 100, null]' in request.to_json()


def test_load_rooms_request_frame():
    assert LoadRoomsRequest().to_dict() == {
        "msg": "method",
        "method": "rooms/get",
        "id": "4",
        "params": [{"$date": 0}],
    }


def test_create_direct_message_request_frame():
    assert CreateDirectMessageRequest("bob").to_dict() == {
        "msg": "method",
        "method": "createDirectMessage",
        "id": "5",
        "params": ["bob"],
    }


def test_subscription_frames():
    assert SubscribeUserRequest("uid").to_dict() == {
        "msg": "sub",
        "id": "6",
        "name": "stream-notify-user",
        "params": ["uid/rooms-changed", False],
    }
    assert SubscribeMessagesRequest().to_dict() == {
        "msg": "sub",
        "id": "7",
        "name": "stream-room-messages",
        "params": ["__my_messages__", False],
    }


def test_users_of_room_request_frame():
    assert UsersOfRoomRequest("GENERAL").to_dict() == {
        "msg": "method",
        "method": "getUsersOfRoom",
        "id": "8",
        "params": ["GENERAL", True, {"limit": 100, "skip": 0}, ""],
    }


# Inbound frames


def test_session_id_from_added_frame():
    data = {"msg": "added", "collection": "users", "id": "uid123", "fields": {}}
    assert SessionIdResponse.from_dict(data).user_id == "uid123"


def test_session_id_from_login_result():
    data = {"msg": "result", "id": "1", "result": {"id": "uid9", "token": "t"}}
    assert SessionIdResponse.from_dict(data).user_id == "uid9"


def test_session_id_missing_raises_decode_error():
    with pytest.raises(ProtocolDecodeError):
        SessionIdResponse.from_dict({"msg": "connected"})


def test_classify_message_event():
    """Test a changed frame with a message payload becomes a NewMessageEvent."""
    event = classify(message_event())
    assert isinstance(event, NewMessageEvent)
    assert event.event == "updated"
    assert event.channel == Group("GENERAL")
    message = event.last_message.to_message()
    assert message.author == "alice"
    assert message.content == "hello"


def test_classify_message_event_room_types():
    assert classify(message_event("d1", "d")).channel == User("d1")
    assert classify(message_event("p1", "p")).channel == Private("p1")


def test_classify_message_event_ignores_colliding_id():
    """Test a message event whose id equals a method id is still a message."""
    event = classify(message_event(frame_id="3"))
    assert isinstance(event, NewMessageEvent)


def test_classify_history_result():
    data = {
        "msg": "result",
        "id": "3",
        "result": {
            "messages": [
                {
                    "_id": "m2",
                    "rid": "GENERAL",
                    "msg": "second",
                    "ts": {"$date": 1700000001000},
                    "u": {"_id": "u2", "username": "bob"},
                },
                {
                    "_id": "m1",
                    "rid": "GENERAL",
                    "msg": "first",
                    "ts": {"$date": 1700000000000},
                    "u": {"_id": "u1", "username": "alice"},
                },
            ]
        },
    }
    result = classify(data)
    assert isinstance(result, HistoryResult)
    lines = result.render().split("\n")
    assert lines[0].endswith("[alice]: first")
    assert lines[1].endswith("[bob]: second")


def test_classify_empty_history():
    result = classify({"msg": "result", "id": "3", "result": {"messages": []}})
    assert result.render() == ""


def test_classify_rooms_result_skips_unknown_types():
    data = {
        "msg": "result",
        "id": "4",
        "result": {
            "update": [
                {"_id": "GENERAL", "t": "c", "name": "general"},
                {"_id": "live1", "t": "l", "name": "livechat"},
                {"_id": "p1", "t": "p", "name": "secret"},
            ]
        },
    }
    result = classify(data)
    assert isinstance(result, RoomsResult)
    assert result.labelled_channels("me") == [
        ("general", Group("GENERAL")),
        ("secret", Private("p1")),
    ]


def test_classify_joined_room_result():
    data = {"msg": "result", "id": "5", "result": {"rid": "r1", "t": "d"}}
    result = classify(data)
    assert isinstance(result, JoinedRoomResult)
    assert result.channel == User("r1")


def test_classify_users_in_room_result():
    data = {
        "msg": "result",
        "id": "8",
        "result": {
            "total": 2,
            "records": [
                {"_id": "u1", "username": "alice"},
                {"_id": "u2", "username": "bob"},
            ],
        },
    }
    result = classify(data)
    assert isinstance(result, UsersInRoomResult)
    assert result.total == 2
    assert result.members() == [("alice", "u1"), ("bob", "u2")]


def test_classify_ping():
    assert classify({"msg": "ping"}) == Ping(None)
    assert classify({"msg": "ping", "id": "p7"}) == Ping("p7")


def test_classify_method_error():
    data = {
        "msg": "result",
        "id": "2",
        "error": {"error": 500, "reason": "Not allowed", "message": "x"},
    }
    error = classify(data)
    assert isinstance(error, MethodError)
    assert error.method == "sendMessage"
    assert error.reason == "Not allowed"


def test_classify_ignored_frames():
    """Test frames the client does not act on classify as None."""
    assert classify({"msg": "connected", "session": "s"}) is None
    assert classify({"msg": "ready", "subs": ["6"]}) is None
    assert classify({"msg": "result", "id": "99", "result": {}}) is None
    assert classify({"msg": "result", "id": "2", "result": {}}) is None
    assert classify({"msg": "changed", "fields": {"args": ["x"]}}) is None
    assert classify({"server_id": "0"}) is None


def test_classify_frame_rejects_invalid_json():
    with pytest.raises(ProtocolDecodeError):
        classify_frame("not json")
    with pytest.raises(ProtocolDecodeError):
        classify_frame("[1, 2]")


def test_classify_malformed_known_shape_raises():
    """Test a history result without messages does not parse."""
    with pytest.raises(ProtocolDecodeError) as exc_info:
        classify({"msg": "result", "id": "3", "result": {}})
    assert exc_info.value.payload == {"msg": "result", "id": "3", "result": {}}


def test_classify_message_event_bad_timestamp():
    data = message_event()
    data["fields"]["args"][1]["lastMessage"]["ts"] = {"$date": "yesterday"}
    with pytest.raises(ProtocolDecodeError):
        classify(data)


def test_parse_date():
    assert parse_date({"$date": 1700000000000}) == datetime(
        2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc
    )


@pytest.mark.parametrize("millis", [float("inf"), float("nan"), 1e20, -1e20])
def test_classify_message_event_unrepresentable_timestamp(millis):
    """Test dates no datetime can hold are decode errors, not crashes."""
    data = message_event()
    data["fields"]["args"][1]["lastMessage"]["ts"] = {"$date": millis}
    with pytest.raises(ProtocolDecodeError):
        classify(data)
