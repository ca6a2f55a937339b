"""Shared state handed to the pipeline and the admin interpreter."""

import time
from dataclasses import dataclass, field
from datetime import tzinfo
from pathlib import Path
from typing import Callable

from awaybot.config.loader import POLICY_FILE
from awaybot.config.store import ConfigStore
from awaybot.engine.cooldown import CooldownTracker
from awaybot.engine.presence import PresenceTracker
from awaybot.store.assist import AssistStore
from awaybot.store.ledger import ReplyLedger

LEDGER_FILE = "replied.json"
ASSIST_FILE = "assist_state.json"


@dataclass
class EngineContext:
    """Everything the reply decision reads or writes."""

    config: ConfigStore
    ledger: ReplyLedger
    assist: AssistStore
    presence: PresenceTracker = field(default_factory=PresenceTracker)
    cooldown: CooldownTracker = field(default_factory=CooldownTracker)
    clock: Callable[[], float] = time.time
    tz: tzinfo | None = None

    @classmethod
    def from_data_dir(cls, data_dir: Path, tz: tzinfo | None = None) -> "EngineContext":
        """Open (or initialize) all durable stores under ``data_dir``."""
        return cls(
            config=ConfigStore(data_dir / POLICY_FILE),
            ledger=ReplyLedger(data_dir / LEDGER_FILE),
            assist=AssistStore(data_dir / ASSIST_FILE),
            tz=tz,
        )

    def now(self) -> float:
        return self.clock()
