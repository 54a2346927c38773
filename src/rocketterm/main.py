#!/usr/bin/env python3
"""
rocketterm Application

Terminal client for RocketChat servers. Without lookup flags it starts the
Textual user interface; --list-channels and --history print the result of
a single HTTP API call and exit.

Usage:
    rocketterm -u alice -H https://chat.example.com
    rocketterm --list-channels
    rocketterm --history GENERAL
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from .config import ChatConfig, load_config
from .errors import ChannelOperationError, ConfigError

LOG_FILE = "rocketterm.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="rocketterm", description="Terminal client for RocketChat"
    )
    parser.add_argument("-u", "--username", help="Account username")
    parser.add_argument("-p", "--password", help="Account password")
    parser.add_argument(
        "-H", "--hostname", help="Server address, e.g. https://chat.example.com"
    )
    parser.add_argument(
        "--no-ssl-verify",
        action="store_true",
        help="Do not verify the server's TLS certificate",
    )
    parser.add_argument(
        "--config", type=Path, help="Configuration file (TOML)"
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("ROCKETTERM_LOG_LEVEL", "WARNING"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging level (default: WARNING)",
    )
    lookup = parser.add_mutually_exclusive_group()
    lookup.add_argument(
        "--list-channels",
        action="store_true",
        help="Print the public channels and exit",
    )
    lookup.add_argument(
        "--history",
        metavar="ROOM_ID",
        help="Print the latest messages of a room and exit",
    )
    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    # Log to a file to avoid interfering with the UI
    logging.basicConfig(
        level=getattr(logging, level),
        format=LOG_FORMAT,
        handlers=[logging.FileHandler(LOG_FILE, mode="a")],
    )


def run_lookup(config: ChatConfig, args: argparse.Namespace) -> None:
    """Run a one-shot HTTP API lookup and print the result."""
    from .rest import RestClient

    client = RestClient(config.hostname, ssl_verify=config.ssl_verify)
    client.login(config.username, config.password)
    if args.list_channels:
        for channel in client.channels():
            print(f"{channel['id']}\t#{channel['name']}")
    else:
        for message in client.channel_history(args.history):
            print(message)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for rocketterm."""
    args = parse_args(argv)
    setup_logging(args.log_level)
    logger.info("Starting rocketterm...")

    try:
        config = load_config(
            username=args.username,
            password=args.password,
            hostname=args.hostname,
            no_ssl_verify=args.no_ssl_verify,
            config_path=args.config,
        )
    except ConfigError as e:
        print(e)
        sys.exit(1)

    if args.list_channels or args.history:
        try:
            run_lookup(config, args)
        except ChannelOperationError as e:
            print(f"Error: {e}")
            sys.exit(1)
        return

    try:
        from .ui import ChatApp

        app = ChatApp(config)
        app.run()
    except ImportError as e:
        print(f"Error: Could not import UI components: {e}")
        print("Make sure textual is installed: pip install textual")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nExiting...")
        sys.exit(0)


if __name__ == "__main__":
    main()
