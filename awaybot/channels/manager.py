"""Channel manager for coordinating chat channels."""

from __future__ import annotations

import asyncio

from loguru import logger

from awaybot.bus.events import OutboundMessage
from awaybot.bus.queue import MessageBus
from awaybot.channels.base import BaseChannel
from awaybot.config.schema import Settings
from awaybot.errors import LoggedOutError


class ChannelManager:
    """
    Manages chat channels and routes outbound messages.

    Responsibilities:
    - Initialize enabled channels
    - Start/stop channels
    - Deliver replies to the channel they belong to
    """

    def __init__(self, settings: Settings, bus: MessageBus):
        self.settings = settings
        self.bus = bus
        self.channels: dict[str, BaseChannel] = {}

        self._init_channels()

    def _init_channels(self) -> None:
        """Initialize channels based on settings."""
        if self.settings.bridge.enabled:
            from awaybot.channels.whatsapp import WhatsAppChannel

            self.channels["whatsapp"] = WhatsAppChannel(self.settings.bridge, self.bus)
            logger.info("WhatsApp channel enabled")

    async def start_all(self) -> None:
        """
        Start all channels and wait for them.

        A channel that fails is logged and left stopped; a logout is
        re-raised because the process cannot do anything useful after it.
        """
        if not self.channels:
            logger.warning("No channels enabled")
            return

        tasks = []
        for name, channel in self.channels.items():
            logger.info(f"Starting {name} channel...")
            tasks.append(asyncio.create_task(channel.start(), name=f"channel:{name}"))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for name, result in zip(self.channels, results):
            if isinstance(result, LoggedOutError):
                raise result
            if isinstance(result, Exception):
                logger.error(f"Channel {name} stopped: {result}")

    async def stop_all(self) -> None:
        """Stop all channels."""
        logger.info("Stopping all channels...")

        for name, channel in self.channels.items():
            try:
                await channel.stop()
                logger.info(f"Stopped {name} channel")
            except Exception as e:
                logger.error(f"Error stopping {name}: {e}")

    async def send(self, msg: OutboundMessage) -> bool:
        """Send one message through its channel. Returns False if it was not accepted."""
        channel = self.channels.get(msg.channel)
        if channel is None:
            logger.warning(f"Unknown channel: {msg.channel}")
            return False
        return await channel.send(msg)

    @property
    def is_connected(self) -> bool:
        """True if any channel has an open transport session."""
        return any(channel.is_connected for channel in self.channels.values())
