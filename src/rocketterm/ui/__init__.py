"""
UI Package for rocketterm

This package provides the terminal user interface for the RocketChat
client using the Textual framework.
"""

from .app import ChatApp, format_channels

__all__ = ["ChatApp", "format_channels"]
