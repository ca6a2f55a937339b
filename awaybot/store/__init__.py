"""Durable stores backing the reply pipeline."""

from awaybot.store.assist import AssistRecord, AssistStore
from awaybot.store.ledger import ReplyLedger

__all__ = ["AssistRecord", "AssistStore", "ReplyLedger"]
