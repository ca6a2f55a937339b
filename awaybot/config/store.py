"""Mutable policy configuration with write-then-swap persistence."""

from pathlib import Path
from typing import Any

from loguru import logger

from awaybot.config.loader import load_policy, save_policy
from awaybot.config.schema import PolicyConfig
from awaybot.errors import ConfigPersistError


class ConfigStore:
    """
    Holds the current policy and persists every change.

    ``update`` validates a modified copy, writes it to disk and only then
    makes it current, so callers may acknowledge a change as soon as
    ``update`` returns.
    """

    def __init__(self, path: Path, policy: PolicyConfig | None = None):
        self.path = path
        self._policy = policy if policy is not None else load_policy(path)

    @property
    def policy(self) -> PolicyConfig:
        return self._policy

    def update(self, **changes: Any) -> PolicyConfig:
        """Apply field changes, persist, then swap in the new policy."""
        candidate = PolicyConfig.model_validate(
            {**self._policy.model_dump(), **changes}
        )
        try:
            save_policy(candidate, self.path)
        except OSError as e:
            logger.error(f"Failed to save policy to {self.path}: {e}")
            raise ConfigPersistError(str(e)) from e
        self._policy = candidate
        logger.info(f"Policy updated: {', '.join(sorted(changes))}")
        return candidate

    def add_identifier(self, field: str, sender_id: str) -> PolicyConfig:
        """Add a sender id to one of the identifier lists."""
        current = list(getattr(self._policy, field))
        if sender_id not in current:
            current.append(sender_id)
        return self.update(**{field: current})

    def remove_identifier(self, field: str, sender_id: str) -> PolicyConfig:
        """Remove a sender id from one of the identifier lists."""
        current = [s for s in getattr(self._policy, field) if s != sender_id]
        return self.update(**{field: current})
