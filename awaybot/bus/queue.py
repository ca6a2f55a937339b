"""Async message queue decoupling channels from the reply loop."""

import asyncio

from awaybot.bus.events import BusEvent


class MessageBus:
    """
    Single ordered queue of transport events.

    Channels publish every event kind here and one consumer drains it, so
    state changes caused by different events never interleave.
    """

    def __init__(self):
        self.inbound: asyncio.Queue[BusEvent] = asyncio.Queue()

    async def publish(self, event: BusEvent) -> None:
        """Publish an event from a channel."""
        await self.inbound.put(event)

    async def consume(self) -> BusEvent:
        """Consume the next event (blocks until available)."""
        return await self.inbound.get()

    @property
    def size(self) -> int:
        """Number of pending events."""
        return self.inbound.qsize()
