"""
Tests for the Command Line Entry Point
"""

from datetime import datetime, timezone

import pytest

from rocketterm import Message
from rocketterm import main as main_module
from rocketterm import rest


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    for name in ("USERNAME", "PASSWORD", "HOSTNAME", "SSL_VERIFY", "LOG_LEVEL"):
        monkeypatch.delenv(f"ROCKETTERM_{name}", raising=False)


class FakeRestClient:
    """Stand-in for RestClient."""

    instances = []

    def __init__(self, base_url, ssl_verify=True):
        self.base_url = base_url
        self.ssl_verify = ssl_verify
        self.logged_in = None
        FakeRestClient.instances.append(self)

    def login(self, username, password):
        self.logged_in = username

    def channels(self):
        return [{"id": "GENERAL", "name": "general"}]

    def channel_history(self, room_id, count=100):
        sent_at = datetime.now(timezone.utc)
        return [Message("alice", f"hello {room_id}", sent_at)]


def test_parse_args():
    args = main_module.parse_args(
        ["-u", "alice", "-H", "https://chat.example.com", "--no-ssl-verify"]
    )
    assert args.username == "alice"
    assert args.hostname == "https://chat.example.com"
    assert args.no_ssl_verify is True
    assert args.log_level == "WARNING"
    assert args.history is None


def test_parse_args_log_level_is_case_insensitive():
    assert main_module.parse_args(["--log-level", "debug"]).log_level == "DEBUG"


def test_lookups_are_exclusive():
    with pytest.raises(SystemExit):
        main_module.parse_args(["--list-channels", "--history", "GENERAL"])


def test_missing_config_exits(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main_module.main(["-u", "alice"])
    assert exc_info.value.code == 1
    assert "Error no password provided" in capsys.readouterr().out


def test_list_channels(monkeypatch, capsys):
    monkeypatch.setattr(rest, "RestClient", FakeRestClient)
    main_module.main(
        ["-u", "alice", "-p", "pw", "-H", "https://chat.example.com",
         "--list-channels"]
    )
    assert "GENERAL\t#general" in capsys.readouterr().out
    assert FakeRestClient.instances[-1].logged_in == "alice"


def test_history(monkeypatch, capsys):
    monkeypatch.setattr(rest, "RestClient", FakeRestClient)
    main_module.main(
        ["-u", "alice", "-p", "pw", "-H", "https://chat.example.com",
         "--no-ssl-verify", "--history", "GENERAL"]
    )
    assert "[alice]: hello GENERAL" in capsys.readouterr().out
    assert FakeRestClient.instances[-1].ssl_verify is False
