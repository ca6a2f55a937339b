"""Extraction of text from raw WhatsApp message payloads.

The bridge forwards the Baileys ``message`` object untouched. Only a handful
of shapes carry something the bot can answer; everything else is
``Unsupported``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PlainText:
    body: str

    @property
    def text(self) -> str | None:
        return self.body


@dataclass(frozen=True)
class QuotedText:
    """Extended text message (reply/quote, link preview)."""

    body: str

    @property
    def text(self) -> str | None:
        return self.body


@dataclass(frozen=True)
class ImageCaption:
    caption: str

    @property
    def text(self) -> str | None:
        return self.caption


@dataclass(frozen=True)
class VideoCaption:
    caption: str

    @property
    def text(self) -> str | None:
        return self.caption


@dataclass(frozen=True)
class ButtonReply:
    """Selection made on a button or list prompt."""

    selected_id: str
    display_text: str | None = None

    @property
    def text(self) -> str | None:
        return self.display_text


@dataclass(frozen=True)
class Unsupported:
    kind: str | None = None

    @property
    def text(self) -> str | None:
        return None


MessagePayload = PlainText | QuotedText | ImageCaption | VideoCaption | ButtonReply | Unsupported


def _str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _button_reply(message: dict[str, Any]) -> ButtonReply | None:
    btn = message.get("buttonsResponseMessage") or message.get("templateButtonReplyMessage")
    if isinstance(btn, dict):
        selected = _str(btn.get("selectedButtonId")) or _str(btn.get("selectedId"))
        if selected:
            display = _str(btn.get("selectedDisplayText"))
            return ButtonReply(selected_id=selected, display_text=display)

    listed = message.get("listResponseMessage") or message.get("listResponse")
    if isinstance(listed, dict):
        single = listed.get("singleSelectReply")
        if isinstance(single, dict):
            selected = _str(single.get("selectedRowId"))
            if selected:
                return ButtonReply(selected_id=selected, display_text=_str(listed.get("title")))
    return None


def parse_payload(message: dict[str, Any] | None) -> MessagePayload:
    """Classify a raw message object into one of the known payload shapes."""
    if not isinstance(message, dict) or not message:
        return Unsupported()

    if body := _str(message.get("conversation")):
        return PlainText(body)

    extended = message.get("extendedTextMessage")
    if isinstance(extended, dict) and (body := _str(extended.get("text"))):
        return QuotedText(body)

    image = message.get("imageMessage")
    if isinstance(image, dict) and (caption := _str(image.get("caption"))):
        return ImageCaption(caption)

    video = message.get("videoMessage")
    if isinstance(video, dict) and (caption := _str(video.get("caption"))):
        return VideoCaption(caption)

    if reply := _button_reply(message):
        return reply

    return Unsupported(kind=next(iter(message), None))
