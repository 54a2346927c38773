"""
Tests for Configuration Loading

Tests for precedence between command line values, environment variables
and the TOML configuration file.
"""

import pytest

from rocketterm import ChatConfig, load_config
from rocketterm.config import default_config_path
from rocketterm.errors import ConfigError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "rocketterm.toml"
    path.write_text(
        'username = "file-user"\n'
        'password = "file-pass"\n'
        'hostname = "https://file.example.com"\n'
    )
    return path


def test_file_values(config_file):
    config = load_config(config_path=config_file, environ={})
    assert config == ChatConfig(
        "file-user", "file-pass", "https://file.example.com", True
    )


def test_environment_overrides_file(config_file):
    environ = {
        "ROCKETTERM_USERNAME": "env-user",
        "ROCKETTERM_SSL_VERIFY": "false",
    }
    config = load_config(config_path=config_file, environ=environ)
    assert config.username == "env-user"
    assert config.password == "file-pass"
    assert config.ssl_verify is False


def test_arguments_override_environment(config_file):
    environ = {"ROCKETTERM_USERNAME": "env-user"}
    config = load_config(
        username="cli-user",
        no_ssl_verify=True,
        config_path=config_file,
        environ=environ,
    )
    assert config.username == "cli-user"
    assert config.ssl_verify is False


def test_missing_value_raises(tmp_path):
    with pytest.raises(ConfigError, match="Error no username provided"):
        load_config(
            password="pw",
            hostname="https://chat.example.com",
            config_path=tmp_path / "missing.toml",
            environ={},
        )


def test_corrupted_file_raises(tmp_path):
    path = tmp_path / "rocketterm.toml"
    path.write_text("username = ")
    with pytest.raises(ConfigError):
        load_config(config_path=path, environ={})


def test_invalid_ssl_verify_raises(config_file):
    with pytest.raises(ConfigError):
        load_config(
            config_path=config_file, environ={"ROCKETTERM_SSL_VERIFY": "maybe"}
        )


def test_default_config_path_uses_xdg(tmp_path):
    path = default_config_path({"XDG_CONFIG_HOME": str(tmp_path)})
    assert path == tmp_path / "rocketterm" / "rocketterm.toml"


def test_repr_hides_password():
    config = ChatConfig("alice", "secret", "https://chat.example.com")
    assert "secret" not in repr(config)
