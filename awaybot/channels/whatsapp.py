"""WhatsApp channel implementation using a Node.js Baileys bridge.

The bridge owns the WhatsApp Web session (pairing QR, credentials, protocol)
and talks to us over a websocket with JSON frames:

bridge -> bot
    {"type": "message", "id", "chat", "fromMe", "participant"?, "timestamp"?, "message": {...}}
    {"type": "presence", "id", "presences": {jid: {"lastKnownPresence"}}}
    {"type": "receipt", "id", "status", "fromMe"}
    {"type": "connection", "state": "open"|"close", "reason"?, "me"?: {"id", "name"}}
    {"type": "qr", "qr"}
    {"type": "error", "error"}

bot -> bridge
    {"type": "auth", "token"}
    {"type": "send", "to", "text", "footer"?, "buttons"?: [{"id", "label"}]}
"""

import asyncio
import json
from typing import Any

import websockets
from loguru import logger

from awaybot.bus.events import (
    ConnectionUpdate,
    InboundMessage,
    OutboundMessage,
    PresenceUpdate,
    ReceiptUpdate,
)
from awaybot.bus.payloads import parse_payload
from awaybot.bus.queue import MessageBus
from awaybot.channels.base import BaseChannel
from awaybot.config.schema import BridgeConfig
from awaybot.errors import LoggedOutError, TransportError
from awaybot.utils.helpers import jid_to_number

LOGGED_OUT_REASONS = {"loggedout", "logged_out", "401"}

# Baileys WAMessageStatus values.
_RECEIPT_STATUS = {0: "error", 1: "pending", 2: "sent", 3: "delivered", 4: "read", 5: "played"}


def _is_available(entry: Any) -> tuple[bool, bool]:
    """Return (available, composing) for one presence entry."""
    if not isinstance(entry, dict):
        return False, False
    available = (
        entry.get("presence") == "available"
        or entry.get("lastKnownPresence") == "available"
    )
    composing = entry.get("chatState") == "composing" or entry.get("lastKnownPresence") == "composing"
    return available, composing


def parse_presence(data: dict[str, Any], channel: str = "whatsapp") -> list[PresenceUpdate]:
    """
    Normalize a bridge presence frame into one update per participant.

    Each participant keeps its own availability, so one member of a group
    coming online says nothing about the others. The top-level ``id`` only
    counts as a participant when the frame has no ``presences`` map.
    """
    entries: dict[str, Any] = {}
    presences = data.get("presences")
    if isinstance(presences, dict):
        for jid, entry in presences.items():
            if number := jid_to_number(jid):
                entries.setdefault(number, entry)
    elif number := jid_to_number(data.get("id")):
        entries[number] = data

    updates = []
    for number, entry in entries.items():
        available, composing = _is_available(entry)
        updates.append(PresenceUpdate(
            channel=channel,
            subject_ids=(number,),
            available=available,
            composing=composing,
        ))
    return updates


def parse_receipt_status(status: Any) -> str:
    if isinstance(status, int):
        return _RECEIPT_STATUS.get(status, str(status))
    return str(status or "").strip().lower()


def is_logged_out(reason: Any) -> bool:
    return str(reason or "").strip().lower() in LOGGED_OUT_REASONS


class WhatsAppChannel(BaseChannel):
    """
    WhatsApp channel that connects to a Node.js bridge.

    Reconnects with a fixed delay when the websocket drops. An explicit
    logout reported by the bridge is terminal: ``start`` raises
    LoggedOutError.
    """

    name = "whatsapp"

    def __init__(self, config: BridgeConfig, bus: MessageBus):
        super().__init__(config, bus)
        self.config: BridgeConfig = config
        self._ws = None
        self.owner_id: str | None = None

    async def start(self) -> None:
        """Connect to the bridge and keep the connection alive."""
        self._running = True
        attempts = 0
        logger.info(f"Connecting to WhatsApp bridge at {self.config.url}...")

        while self._running:
            try:
                async with websockets.connect(self.config.url) as ws:
                    self._ws = ws
                    attempts = 0
                    if self.config.token:
                        await ws.send(json.dumps({"type": "auth", "token": self.config.token}))
                    logger.info("Connected to WhatsApp bridge")

                    async for raw in ws:
                        try:
                            await self._handle_bridge_message(raw)
                        except LoggedOutError:
                            raise
                        except Exception as e:
                            logger.error(f"Error handling bridge message: {e}")
            except asyncio.CancelledError:
                raise
            except LoggedOutError:
                self._running = False
                raise
            except Exception as e:
                logger.warning(f"WhatsApp bridge connection error: {e}")
            finally:
                self._ws = None
                self._connected = False

            if not self._running:
                break
            attempts += 1
            limit = self.config.max_reconnect_attempts
            if limit and attempts > limit:
                self._running = False
                raise TransportError(f"WhatsApp bridge unreachable after {limit} attempts")
            delay = self.config.reconnect_delay_seconds
            logger.info(f"Reconnecting in {delay:g} seconds...")
            await asyncio.sleep(delay)

    async def stop(self) -> None:
        """Stop the WhatsApp channel."""
        self._running = False
        self._connected = False
        if self._ws:
            await self._ws.close()
            self._ws = None

    async def send(self, msg: OutboundMessage) -> bool:
        """Send a message through the bridge."""
        if not self._ws:
            logger.warning("WhatsApp bridge not connected")
            return False

        payload: dict[str, Any] = {"type": "send", "to": msg.chat_id, "text": msg.content}
        if msg.prompt:
            payload["footer"] = msg.prompt.footer
            payload["buttons"] = [{"id": o.id, "label": o.label} for o in msg.prompt.options]

        try:
            await self._ws.send(json.dumps(payload, ensure_ascii=False))
        except Exception as e:
            logger.error(f"Error sending WhatsApp message: {e}")
            return False
        return True

    async def _handle_bridge_message(self, raw: str | bytes) -> None:
        """Handle a frame from the bridge."""
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON from bridge: {str(raw)[:100]}")
            return
        if not isinstance(data, dict):
            return

        msg_type = data.get("type")

        if msg_type == "message":
            if event := self._parse_message(data):
                await self._publish(event)

        elif msg_type == "presence":
            for update in parse_presence(data, self.name):
                await self._publish(update)

        elif msg_type == "receipt":
            await self._publish(ReceiptUpdate(
                channel=self.name,
                message_id=str(data.get("id") or ""),
                status=parse_receipt_status(data.get("status")),
                from_self=bool(data.get("fromMe")),
            ))

        elif msg_type == "connection":
            await self._on_connection(data)

        elif msg_type == "qr":
            logger.info("Scan the QR code shown by the bridge to pair WhatsApp")

        elif msg_type == "error":
            logger.error(f"WhatsApp bridge error: {data.get('error')}")

        else:
            logger.debug(f"Ignoring bridge frame type: {msg_type}")

    def _parse_message(self, data: dict[str, Any]) -> InboundMessage | None:
        chat = data.get("chat") or data.get("remoteJid")
        message_id = data.get("id")
        if not isinstance(chat, str) or not message_id:
            logger.debug("Bridge message without chat or id")
            return None

        is_group = chat.endswith("@g.us") or chat.endswith("@broadcast")
        sender_jid = data.get("participant") if is_group else chat
        sender_id = jid_to_number(sender_jid) or ""

        timestamp = data.get("timestamp")
        return InboundMessage(
            channel=self.name,
            sender_id=sender_id,
            chat_id=chat,
            message_id=str(message_id),
            payload=parse_payload(data.get("message")),
            is_group=is_group,
            is_from_self=bool(data.get("fromMe")),
            timestamp=float(timestamp) if isinstance(timestamp, (int, float)) else None,
            metadata={"push_name": data.get("pushName")} if data.get("pushName") else {},
        )

    async def _on_connection(self, data: dict[str, Any]) -> None:
        state = str(data.get("state") or "")
        reason = data.get("reason")
        me = data.get("me") if isinstance(data.get("me"), dict) else {}

        if state == "open":
            self._connected = True
            self.owner_id = jid_to_number(me.get("id")) or self.owner_id
            logger.info("✅ Connected to WhatsApp")
        elif state == "close":
            self._connected = False
            logger.info(f"WhatsApp connection closed, reason: {reason}")

        await self._publish(ConnectionUpdate(
            channel=self.name,
            state=state,
            reason=str(reason) if reason is not None else None,
            owner_id=self.owner_id,
            owner_name=me.get("name"),
        ))

        if state == "close" and is_logged_out(reason):
            raise LoggedOutError(str(reason))
