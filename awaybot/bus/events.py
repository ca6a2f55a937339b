"""Event types for the message bus."""

from dataclasses import dataclass, field
from typing import Any

from awaybot.bus.payloads import ButtonReply, MessagePayload, Unsupported


@dataclass
class InboundMessage:
    """Message received from a chat channel (including the owner's own outgoing messages)."""

    channel: str  # whatsapp
    sender_id: str  # Phone number of the remote party
    chat_id: str  # Chat JID used for replies
    message_id: str
    payload: MessagePayload = field(default_factory=Unsupported)
    is_group: bool = False
    is_from_self: bool = False
    timestamp: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        """Trimmed text content, or an empty string."""
        return (self.payload.text or "").strip()

    @property
    def selected_option(self) -> str | None:
        """Button / list selection id, if the payload is one."""
        if isinstance(self.payload, ButtonReply):
            return self.payload.selected_id
        return None

    @property
    def has_content(self) -> bool:
        return bool(self.text or self.selected_option)


@dataclass
class PresenceUpdate:
    """Availability signal for the participants named, who all share it."""

    channel: str
    subject_ids: tuple[str, ...]  # Phone numbers named by the update
    available: bool = False
    composing: bool = False


@dataclass
class ReceiptUpdate:
    """Delivery / read status change for a message."""

    channel: str
    message_id: str
    status: str  # e.g. "delivered", "read"
    from_self: bool = False


@dataclass
class ConnectionUpdate:
    """Transport connection lifecycle change."""

    channel: str
    state: str  # "open" | "close"
    reason: str | None = None
    owner_id: str | None = None
    owner_name: str | None = None


BusEvent = InboundMessage | PresenceUpdate | ReceiptUpdate | ConnectionUpdate


@dataclass(frozen=True)
class PromptOption:
    id: str
    label: str


@dataclass(frozen=True)
class AssistPrompt:
    """Binary yes/no control attached to a reply."""

    footer: str
    options: tuple[PromptOption, ...]


@dataclass
class OutboundMessage:
    """Message to send to a chat channel."""

    channel: str
    chat_id: str
    content: str
    prompt: AssistPrompt | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
