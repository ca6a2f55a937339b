"""Message bus module for decoupled channel-engine communication."""

from awaybot.bus.events import (
    AssistPrompt,
    BusEvent,
    ConnectionUpdate,
    InboundMessage,
    OutboundMessage,
    PresenceUpdate,
    PromptOption,
    ReceiptUpdate,
)
from awaybot.bus.queue import MessageBus

__all__ = [
    "AssistPrompt",
    "BusEvent",
    "ConnectionUpdate",
    "InboundMessage",
    "MessageBus",
    "OutboundMessage",
    "PresenceUpdate",
    "PromptOption",
    "ReceiptUpdate",
]
