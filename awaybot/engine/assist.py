"""Assist opt-in state machine."""

from enum import Enum

from awaybot.bus.events import AssistPrompt, PromptOption
from awaybot.store.assist import AssistRecord

ASSIST_YES_ID = "assist_yes"
ASSIST_NO_ID = "assist_no"

AFFIRMATIVE_KEYWORDS = frozenset({ASSIST_YES_ID, "iya", "yes"})
NEGATIVE_KEYWORDS = frozenset({ASSIST_NO_ID, "tidak", "no"})

ASSIST_PROMPT = AssistPrompt(
    footer="Apakah Terbantu?",
    options=(
        PromptOption(id=ASSIST_YES_ID, label="Iya"),
        PromptOption(id=ASSIST_NO_ID, label="Tidak"),
    ),
)


class AssistState(str, Enum):
    NEVER_ASKED = "never_asked"
    OPTED_IN = "opted_in"
    OPTED_OUT_COOLING_DOWN = "opted_out_cooling_down"
    OPTED_OUT_EXPIRED = "opted_out_expired"


class AssistAction(str, Enum):
    PLAIN = "plain"  # reply without a prompt
    OFFER = "offer"  # reply with the yes/no prompt
    SUPPRESS = "suppress"  # say nothing


class AssistAnswer(str, Enum):
    YES = "yes"
    NO = "no"


def classify_answer(normalized: str) -> AssistAnswer | None:
    """Map a selected button id or lowercased text to a yes/no answer."""
    if normalized in AFFIRMATIVE_KEYWORDS:
        return AssistAnswer.YES
    if normalized in NEGATIVE_KEYWORDS:
        return AssistAnswer.NO
    return None


def derive_state(record: AssistRecord | None, now: float, cooldown_seconds: int) -> AssistState:
    """Derive the sender's assist state from the stored record and the clock."""
    if record is None or record.assist_enabled is None:
        return AssistState.NEVER_ASKED
    if record.assist_enabled:
        return AssistState.OPTED_IN
    if record.last_denied_at and (now - record.last_denied_at) < cooldown_seconds:
        return AssistState.OPTED_OUT_COOLING_DOWN
    return AssistState.OPTED_OUT_EXPIRED


_ACTIONS = {
    AssistState.NEVER_ASKED: AssistAction.OFFER,
    AssistState.OPTED_IN: AssistAction.PLAIN,
    AssistState.OPTED_OUT_COOLING_DOWN: AssistAction.SUPPRESS,
    AssistState.OPTED_OUT_EXPIRED: AssistAction.OFFER,
}


def action_for(state: AssistState) -> AssistAction:
    return _ACTIONS[state]


def opt_in_ack() -> str:
    return "Terima kasih, saya akan terus membalas saat admin belum melihat chat."


def opt_out_ack(cooldown_seconds: int) -> str:
    minutes = round(cooldown_seconds / 60)
    return f"Baik. Saya tidak akan membalas selama {minutes} menit."
