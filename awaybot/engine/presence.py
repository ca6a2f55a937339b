"""Owner presence tracking (process-local, not persisted)."""

from loguru import logger

from awaybot.bus.events import InboundMessage, PresenceUpdate, ReceiptUpdate


class PresenceTracker:
    """
    Tracks whether the owner is online and when they were last active.

    ``last_owner_active_at`` only ever moves forward. ``owner_online``
    mirrors the most recent presence signal for the owner.
    """

    def __init__(self, owner_id: str | None = None):
        self.owner_id = owner_id
        self.owner_online = False
        self.last_owner_active_at = 0.0

    def touch(self, at: float) -> None:
        """Record owner activity at ``at`` (ignored if older than what we have)."""
        if at > self.last_owner_active_at:
            self.last_owner_active_at = at

    def is_owner(self, sender_id: str | None) -> bool:
        return bool(self.owner_id) and sender_id == self.owner_id

    def on_presence(self, update: PresenceUpdate, now: float) -> None:
        if not self.owner_id or self.owner_id not in update.subject_ids:
            return
        self.owner_online = update.available or update.composing
        self.touch(now)
        logger.debug(f"Owner presence: online={self.owner_online}")

    def on_receipt(self, update: ReceiptUpdate, now: float) -> None:
        if update.status == "read" or update.from_self:
            self.touch(now)

    def on_outgoing(self, msg: InboundMessage, now: float) -> None:
        if msg.is_from_self:
            self.touch(now)

    def seconds_since_active(self, now: float) -> float:
        return now - self.last_owner_active_at

    def is_idle(self, now: float, idle_seconds: int) -> bool:
        """Owner has shown no activity for longer than ``idle_seconds``."""
        return self.seconds_since_active(now) > idle_seconds
