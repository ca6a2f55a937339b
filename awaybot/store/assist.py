"""Per-sender preferences for the assist prompt."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from awaybot.utils.helpers import read_json, write_json_atomic

# Timestamps above this are milliseconds written by the first version of the bot.
_MILLIS_THRESHOLD = 1e11


@dataclass
class AssistRecord:
    """Opt-in state for one sender. ``assist_enabled=None`` means never asked."""

    assist_enabled: bool | None = None
    last_denied_at: float = 0.0
    last_replied_message_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AssistRecord":
        enabled = data.get("assistEnabled")
        denied = data.get("lastDeniedAt") or 0
        try:
            denied = float(denied)
        except (TypeError, ValueError):
            denied = 0.0
        if denied > _MILLIS_THRESHOLD:
            denied /= 1000.0
        replied = data.get("lastRepliedMessageId")
        return cls(
            assist_enabled=enabled if isinstance(enabled, bool) else None,
            last_denied_at=denied,
            last_replied_message_id=str(replied) if replied is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "assistEnabled": self.assist_enabled,
            "lastDeniedAt": self.last_denied_at,
            "lastRepliedMessageId": self.last_replied_message_id,
        }


class AssistStore:
    """Durable map of sender id -> AssistRecord, stored as ``{"bySender": {...}}``."""

    def __init__(self, path: Path):
        self.path = path
        self._records: dict[str, AssistRecord] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            data = read_json(self.path)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning(f"Failed to load assist state {self.path}: {e}; starting empty")
            return
        by_sender = data.get("bySender") if isinstance(data, dict) else None
        if not isinstance(by_sender, dict):
            logger.warning(f"Assist state {self.path} has no bySender map; starting empty")
            return
        for sender_id, raw in by_sender.items():
            if isinstance(raw, dict):
                self._records[str(sender_id)] = AssistRecord.from_dict(raw)

    def get(self, sender_id: str) -> AssistRecord | None:
        return self._records.get(sender_id)

    def get_or_create(self, sender_id: str) -> AssistRecord:
        record = self._records.get(sender_id)
        if record is None:
            record = AssistRecord()
            self._records[sender_id] = record
        return record

    def opt_in(self, sender_id: str) -> AssistRecord:
        record = self.get_or_create(sender_id)
        record.assist_enabled = True
        record.last_denied_at = 0.0
        return record

    def opt_out(self, sender_id: str, now: float) -> AssistRecord:
        record = self.get_or_create(sender_id)
        record.assist_enabled = False
        record.last_denied_at = now
        return record

    def mark_replied(self, sender_id: str, message_id: str) -> AssistRecord:
        record = self.get_or_create(sender_id)
        record.last_replied_message_id = message_id
        return record

    def save(self) -> None:
        """Persist atomically. Raises OSError on failure."""
        payload = {"bySender": {sid: rec.to_dict() for sid, rec in self._records.items()}}
        write_json_atomic(self.path, payload)

    def __len__(self) -> int:
        return len(self._records)
