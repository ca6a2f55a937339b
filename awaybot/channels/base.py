"""Base channel interface for chat platforms."""

from abc import ABC, abstractmethod
from typing import Any

from loguru import logger

from awaybot.bus.events import BusEvent, OutboundMessage
from awaybot.bus.queue import MessageBus


class BaseChannel(ABC):
    """
    Abstract base class for chat channel implementations.

    A channel turns transport traffic into bus events and delivers
    outbound messages. It never makes reply decisions itself.
    """

    name: str = "base"

    def __init__(self, config: Any, bus: MessageBus):
        self.config = config
        self.bus = bus
        self._running = False
        self._connected = False

    @abstractmethod
    async def start(self) -> None:
        """Connect and keep listening until ``stop`` is called."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop the channel and release resources."""

    @abstractmethod
    async def send(self, msg: OutboundMessage) -> bool:
        """Send a message. Returns True if the transport accepted it."""

    async def _publish(self, event: BusEvent) -> None:
        """Forward a normalized event to the bus."""
        logger.trace(f"{self.name}: {type(event).__name__}")
        await self.bus.publish(event)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_connected(self) -> bool:
        """True while the underlying transport session is open."""
        return self._connected
