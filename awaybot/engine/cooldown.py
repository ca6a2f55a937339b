"""Per-sender reply rate limiting (process-local)."""


class CooldownTracker:
    """Remembers when each sender last got an automated reply."""

    def __init__(self):
        self._last_reply_at: dict[str, float] = {}

    def remaining(self, sender_id: str, cooldown_seconds: int, now: float) -> float:
        """Seconds left before ``sender_id`` may get another reply (0 if none)."""
        last = self._last_reply_at.get(sender_id)
        if last is None:
            return 0.0
        return max(0.0, cooldown_seconds - (now - last))

    def mark(self, sender_id: str, now: float) -> None:
        self._last_reply_at[sender_id] = now
