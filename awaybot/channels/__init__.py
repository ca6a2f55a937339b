"""Chat channels module."""

from awaybot.channels.base import BaseChannel
from awaybot.channels.manager import ChannelManager

__all__ = ["BaseChannel", "ChannelManager"]
