"""
Configuration

Resolves the settings a session needs from, in order of precedence:

    1. values given on the command line
    2. environment variables (ROCKETTERM_USERNAME, ROCKETTERM_PASSWORD,
       ROCKETTERM_HOSTNAME, ROCKETTERM_SSL_VERIFY)
    3. the TOML file $XDG_CONFIG_HOME/rocketterm/rocketterm.toml

Example rocketterm.toml:

    username = "alice"
    password = "secret"
    hostname = "https://chat.example.com"
    ssl_verify = true
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)

APP_NAME = "rocketterm"
ENV_PREFIX = "ROCKETTERM_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class ChatConfig:
    """
    Everything a chat session needs to operate.

    Attributes:
        username: The user's username
        password: The user's password
        hostname: Server address, e.g. https://chat.example.com
        ssl_verify: Whether TLS certificates are verified
    """

    username: str
    password: str
    hostname: str
    ssl_verify: bool = True

    def __repr__(self) -> str:
        return (
            f"ChatConfig(username={self.username!r}, password='***', "
            f"hostname={self.hostname!r}, ssl_verify={self.ssl_verify})"
        )


def default_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Path of the configuration file."""
    environ = os.environ if environ is None else environ
    base = environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_NAME / f"{APP_NAME}.toml"


def read_config_file(path: Path) -> Dict[str, Any]:
    """
    Read the TOML configuration file.

    A missing file is an empty configuration.

    Raises:
        ConfigError: If the file exists but is not valid TOML
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        logger.debug("No configuration file at %s", path)
        return {}
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Corrupted config file {path}: {e}") from e


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean for {name}: {value!r}")


def load_config(
    username: Optional[str] = None,
    password: Optional[str] = None,
    hostname: Optional[str] = None,
    no_ssl_verify: bool = False,
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ChatConfig:
    """
    Resolve configuration between runtime parameters, the environment and
    the configuration file.

    Args:
        username: Username given on the command line
        password: Password given on the command line
        hostname: Server address given on the command line
        no_ssl_verify: Disable certificate verification
        config_path: Configuration file (defaults to the XDG location)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        The resolved ChatConfig

    Raises:
        ConfigError: If a required value is missing or the file is corrupted
    """
    environ = os.environ if environ is None else environ
    path = config_path or default_config_path(environ)
    file_config = read_config_file(path)

    def resolve(name: str, given: Optional[str]) -> str:
        value = given or environ.get(ENV_PREFIX + name.upper())
        if not value:
            value = file_config.get(name)
        if not value:
            raise ConfigError(f"Error no {name} provided")
        return str(value)

    if no_ssl_verify:
        ssl_verify = False
    elif environ.get(ENV_PREFIX + "SSL_VERIFY"):
        ssl_verify = _parse_bool(environ[ENV_PREFIX + "SSL_VERIFY"], "ssl_verify")
    else:
        ssl_verify = _parse_bool(file_config.get("ssl_verify", True), "ssl_verify")

    config = ChatConfig(
        username=resolve("username", username),
        password=resolve("password", password),
        hostname=resolve("hostname", hostname),
        ssl_verify=ssl_verify,
    )
    logger.info("Loaded configuration: %r", config)
    return config
