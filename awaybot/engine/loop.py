"""Reply loop: drains the bus and routes each event."""

import asyncio

from loguru import logger

from awaybot.bus.events import (
    BusEvent,
    ConnectionUpdate,
    InboundMessage,
    PresenceUpdate,
    ReceiptUpdate,
)
from awaybot.bus.queue import MessageBus
from awaybot.config.schema import DEFAULT_OWNER_NAME
from awaybot.engine.context import EngineContext
from awaybot.engine.pipeline import Decision, DecisionPipeline, SendFunc
from awaybot.errors import ConfigPersistError


class ReplyLoop:
    """
    The reply loop is the core processing engine.

    It:
    1. Receives events from the bus, one at a time, in arrival order
    2. Feeds presence, receipt and outgoing-message signals to the presence tracker
    3. Records the owner's identity when the transport connects
    4. Runs inbound messages through the decision pipeline
    """

    def __init__(
        self,
        bus: MessageBus,
        ctx: EngineContext,
        send: SendFunc,
        command_prefix: str = "!",
    ):
        self.bus = bus
        self.ctx = ctx
        self.pipeline = DecisionPipeline(ctx, send, command_prefix=command_prefix)
        self._running = False

    async def run(self) -> None:
        """Run the loop until stopped."""
        self._running = True
        logger.info("Reply loop started")

        while self._running:
            try:
                event = await asyncio.wait_for(self.bus.consume(), timeout=1.0)
            except asyncio.TimeoutError:
                continue
            await self.process_event(event)

    def stop(self) -> None:
        """Stop the reply loop."""
        self._running = False
        logger.info("Reply loop stopping")

    async def process_event(self, event: BusEvent) -> Decision | None:
        """Handle one event. Errors are logged, never raised."""
        try:
            return await self._route(event)
        except Exception as e:
            logger.exception(f"Error handling {type(event).__name__}: {e}")
            return None

    async def _route(self, event: BusEvent) -> Decision | None:
        now = self.ctx.now()
        presence = self.ctx.presence

        if isinstance(event, InboundMessage):
            if event.is_from_self:
                presence.on_outgoing(event, now)
            return await self.pipeline.handle(event)
        if isinstance(event, PresenceUpdate):
            presence.on_presence(event, now)
            return None
        if isinstance(event, ReceiptUpdate):
            presence.on_receipt(event, now)
            return None
        if isinstance(event, ConnectionUpdate):
            self._on_connection(event)
            return None

        logger.warning(f"Unknown event type: {type(event).__name__}")
        return None

    def _on_connection(self, event: ConnectionUpdate) -> None:
        if event.state != "open":
            logger.info(f"Transport {event.channel} closed ({event.reason or 'unknown reason'})")
            return

        if event.owner_id:
            self.ctx.presence.owner_id = event.owner_id
            logger.info(f"Owner id: {event.owner_id}")

        config = self.ctx.config
        name = (event.owner_name or "").strip()
        current = config.policy.owner_display_name
        if name and (not current or current == DEFAULT_OWNER_NAME):
            try:
                config.update(owner_display_name=name)
            except ConfigPersistError:
                logger.warning("Owner name not saved; will retry on next connect")
