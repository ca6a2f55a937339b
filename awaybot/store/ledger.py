"""Durable record of inbound messages that already got a reply."""

import json
from pathlib import Path

from loguru import logger

from awaybot.utils.helpers import read_json, write_json_atomic


class ReplyLedger:
    """
    Append-only set of ``"{sender}_{message_id}"`` keys.

    Stored as a JSON list. Entries are never removed.
    """

    def __init__(self, path: Path):
        self.path = path
        self._keys: set[str] = set()
        self._order: list[str] = []
        self._load()

    @staticmethod
    def make_key(sender_id: str, message_id: str) -> str:
        return f"{sender_id}_{message_id}"

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            data = read_json(self.path)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning(f"Failed to load reply ledger {self.path}: {e}; starting empty")
            return
        if not isinstance(data, list):
            logger.warning(f"Reply ledger {self.path} is not a list; starting empty")
            return
        for item in data:
            if isinstance(item, str) and item not in self._keys:
                self._keys.add(item)
                self._order.append(item)
        logger.debug(f"Loaded {len(self._keys)} ledger entries")

    def contains(self, sender_id: str, message_id: str) -> bool:
        return self.make_key(sender_id, message_id) in self._keys

    def add(self, sender_id: str, message_id: str) -> bool:
        """Record a key. Returns False if it was already present."""
        key = self.make_key(sender_id, message_id)
        if key in self._keys:
            return False
        self._keys.add(key)
        self._order.append(key)
        return True

    def save(self) -> None:
        """Persist atomically. Raises OSError on failure."""
        write_json_atomic(self.path, self._order)

    def __len__(self) -> int:
        return len(self._keys)
