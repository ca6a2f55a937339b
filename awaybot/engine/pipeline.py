"""Decision pipeline: one inbound message in, at most one reply out."""

from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable

from loguru import logger

from awaybot.bus.events import InboundMessage, OutboundMessage
from awaybot.engine.admin import AdminCommandInterpreter
from awaybot.engine.assist import (
    ASSIST_PROMPT,
    AssistAction,
    AssistAnswer,
    action_for,
    classify_answer,
    derive_state,
    opt_in_ack,
    opt_out_ack,
)
from awaybot.engine.context import EngineContext
from awaybot.engine.templates import local_hour, select_reply

SendFunc = Callable[[OutboundMessage], Awaitable[bool]]


class Outcome(str, Enum):
    DROPPED = "dropped"
    REPLIED = "replied"
    OFFERED = "offered"
    ASSIST_ANSWERED = "assist_answered"
    ADMIN = "admin"
    SEND_FAILED = "send_failed"


@dataclass
class Decision:
    outcome: Outcome
    reason: str = ""
    reply: OutboundMessage | None = None

    @property
    def sent(self) -> bool:
        return self.outcome not in (Outcome.DROPPED, Outcome.SEND_FAILED)


class DecisionPipeline:
    """
    Applies the reply policy to a single inbound message.

    Gate order:
    1. structural filters (no text, group, from self, owner's own chat)
    2. already answered (ledger)
    3. assist yes/no answers
    4. admin commands
    5. blacklist, 6. whitelist
    7. owner recently active
    8. auto-reply switch
    9. assist offer / opt-out
    10. per-sender cooldown
    11. template + send, 12. commit on success
    """

    def __init__(self, ctx: EngineContext, send: SendFunc, command_prefix: str = "!"):
        self.ctx = ctx
        self.send = send
        self.command_prefix = command_prefix
        self.admin = AdminCommandInterpreter(ctx.config, prefix=command_prefix)

    async def handle(self, msg: InboundMessage) -> Decision:
        ctx = self.ctx
        now = ctx.now()
        sender = msg.sender_id

        # 1. structural filters
        if not msg.has_content:
            return self._drop(msg, "no text content")
        if msg.is_group:
            return self._drop(msg, "group chat")
        if msg.is_from_self:
            return self._drop(msg, "own message")
        if not sender or ctx.presence.is_owner(sender):
            return self._drop(msg, "self chat")

        # 2. idempotency
        if ctx.ledger.contains(sender, msg.message_id):
            return self._drop(msg, "already replied")

        preview = msg.text[:80] + "..." if len(msg.text) > 80 else msg.text
        logger.info(f"Incoming message from {sender}: {preview}")

        # 3. assist answers preempt everything else
        normalized = (msg.selected_option or msg.text).strip().lower()
        answer = classify_answer(normalized)
        if answer is not None:
            return await self._handle_assist_answer(msg, answer, now)

        policy = ctx.config.policy

        # 4. admin commands bypass list filtering
        if sender in policy.admin_identifiers and msg.text.startswith(self.command_prefix):
            return await self._handle_admin(msg)

        # 5-6. lists
        if sender in policy.blacklist:
            return self._drop(msg, "blacklisted")
        if policy.whitelist and sender not in policy.whitelist:
            return self._drop(msg, "not whitelisted")

        # 7. owner active
        presence = ctx.presence
        if policy.suppress_when_owner_active and presence.last_owner_active_at:
            since = presence.seconds_since_active(now)
            if since <= policy.suppress_timeout_seconds:
                return self._drop(msg, f"owner active {round(since)}s ago")

        # 8. kill switch
        if not policy.auto_reply_enabled:
            return self._drop(msg, "auto-reply disabled")

        # 9. assist
        action = AssistAction.PLAIN
        assist_mode = False
        if presence.owner_online and presence.is_idle(now, policy.owner_idle_seconds):
            record = ctx.assist.get(sender)
            if record and record.last_replied_message_id == msg.message_id:
                return self._drop(msg, "assist already handled this message")
            action = action_for(derive_state(record, now, policy.assist_cooldown_seconds))
            if action is AssistAction.SUPPRESS:
                return self._drop(msg, "assist declined, still cooling down")
            assist_mode = True

        # 10. cooldown
        remaining = ctx.cooldown.remaining(sender, policy.reply_cooldown_seconds, now)
        if remaining > 0:
            return self._drop(msg, f"cooldown, wait {int(remaining) + 1}s")

        # 11. template + send
        hour = local_hour(now, ctx.tz)
        content = select_reply(policy.mode, hour, msg.text, policy.owner_display_name)
        reply = OutboundMessage(
            channel=msg.channel,
            chat_id=msg.chat_id,
            content=content,
            prompt=ASSIST_PROMPT if action is AssistAction.OFFER else None,
        )
        if not await self._dispatch(reply):
            return Decision(Outcome.SEND_FAILED, "send failed", reply)

        # 12. commit
        ctx.cooldown.mark(sender, now)
        ctx.ledger.add(sender, msg.message_id)
        if assist_mode:
            ctx.assist.mark_replied(sender, msg.message_id)
        self._persist(ledger=True, assist=assist_mode)

        outcome = Outcome.OFFERED if reply.prompt else Outcome.REPLIED
        logger.info(f"Replied to {sender} (mode={policy.mode}, {outcome.value})")
        return Decision(outcome, reply=reply)

    async def _handle_assist_answer(
        self, msg: InboundMessage, answer: AssistAnswer, now: float
    ) -> Decision:
        ctx = self.ctx
        if answer is AssistAnswer.YES:
            ctx.assist.opt_in(msg.sender_id)
            text = opt_in_ack()
        else:
            ctx.assist.opt_out(msg.sender_id, now)
            text = opt_out_ack(ctx.config.policy.assist_cooldown_seconds)
        self._persist(assist=True)
        logger.info(f"Assist preference for {msg.sender_id}: {answer.value}")

        reply = OutboundMessage(channel=msg.channel, chat_id=msg.chat_id, content=text)
        if not await self._dispatch(reply):
            return Decision(Outcome.SEND_FAILED, "assist ack failed", reply)
        ctx.ledger.add(msg.sender_id, msg.message_id)
        self._persist(ledger=True)
        return Decision(Outcome.ASSIST_ANSWERED, answer.value, reply)

    async def _handle_admin(self, msg: InboundMessage) -> Decision:
        command = msg.text[len(self.command_prefix):]
        logger.info(f"Admin command from {msg.sender_id}: {command.strip()[:80]}")
        text = self.admin.execute(command)

        reply = OutboundMessage(channel=msg.channel, chat_id=msg.chat_id, content=text)
        if not await self._dispatch(reply):
            return Decision(Outcome.SEND_FAILED, "admin reply failed", reply)
        self.ctx.ledger.add(msg.sender_id, msg.message_id)
        self._persist(ledger=True)
        return Decision(Outcome.ADMIN, reply=reply)

    async def _dispatch(self, reply: OutboundMessage) -> bool:
        try:
            ok = await self.send(reply)
        except Exception as e:
            logger.error(f"Failed to send reply to {reply.chat_id}: {e}")
            return False
        if not ok:
            logger.error(f"Failed to send reply to {reply.chat_id}")
        return bool(ok)

    def _persist(self, ledger: bool = False, assist: bool = False) -> None:
        if ledger:
            try:
                self.ctx.ledger.save()
            except OSError as e:
                logger.error(f"Failed to save reply ledger: {e}")
        if assist:
            try:
                self.ctx.assist.save()
            except OSError as e:
                logger.error(f"Failed to save assist state: {e}")

    @staticmethod
    def _drop(msg: InboundMessage, reason: str) -> Decision:
        logger.debug(f"Skipping message {msg.message_id} from {msg.sender_id}: {reason}")
        return Decision(Outcome.DROPPED, reason)
