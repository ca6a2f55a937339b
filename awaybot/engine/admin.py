"""Admin chat commands that change the policy configuration."""

import re
from typing import Callable

from loguru import logger

from awaybot.config.schema import PolicyConfig
from awaybot.config.store import ConfigStore
from awaybot.errors import ConfigPersistError

_NON_NEGATIVE_INT = re.compile(r"^\d+$")

_LIST_FIELDS = {
    "whitelist": "whitelist",
    "blacklist": "blacklist",
    "admin": "admin_identifiers",
}

_LIST_ACKS = {
    ("whitelist", "add"): "➕ Nomor {num} berhasil ditambahkan ke whitelist.",
    ("whitelist", "remove"): "➖ Nomor {num} dihapus dari whitelist.",
    ("blacklist", "add"): "⛔ Nomor {num} berhasil ditambahkan ke blacklist.",
    ("blacklist", "remove"): "✔️ Nomor {num} telah dihapus dari blacklist.",
    ("admin", "add"): "🔐 Nomor {num} berhasil ditambahkan sebagai admin.",
    ("admin", "remove"): "🔓 Nomor {num} telah dihapus dari admin.",
}


def _parse_seconds(raw: str | None) -> int | None:
    if raw is None or not _NON_NEGATIVE_INT.match(raw):
        return None
    return int(raw)


def _normalize_number(raw: str) -> str:
    return raw.strip().lstrip("+")


def render_policy(policy: PolicyConfig) -> str:
    """Human-readable dump of the policy for ``show``."""

    def _join(items: list[str]) -> str:
        return ", ".join(items) or "-"

    return (
        "📋 Config saat ini:\n"
        f"• mode: {policy.mode}\n"
        f"• ownerName: {policy.owner_display_name}\n"
        f"• whitelist: {_join(policy.whitelist)}\n"
        f"• blacklist: {_join(policy.blacklist)}\n"
        f"• adminNumbers: {_join(policy.admin_identifiers)}\n"
        f"• suppressWhenOwnerActive: {policy.suppress_when_owner_active}\n"
        f"• suppressTimeoutSeconds: {policy.suppress_timeout_seconds}\n"
        f"• autoReply: {policy.auto_reply_enabled}\n"
        f"• replyCooldownSeconds: {policy.reply_cooldown_seconds}\n"
        f"• assistCooldownSeconds: {policy.assist_cooldown_seconds}\n"
        f"• ownerIdleSeconds: {policy.owner_idle_seconds}"
    )


class AdminCommandInterpreter:
    """
    Parses ``command [subcommand] [argument]`` and applies it to the policy.

    Every call returns exactly one reply text. Changes are persisted by the
    ConfigStore before the reply is built; malformed input leaves the policy
    untouched and yields a usage hint.
    """

    def __init__(self, config: ConfigStore, prefix: str = "!"):
        self.config = config
        self.prefix = prefix
        self._handlers: dict[str, Callable[[list[str]], str]] = {
            "status": self._status,
            "whitelist": lambda args: self._list("whitelist", args),
            "blacklist": lambda args: self._list("blacklist", args),
            "admin": lambda args: self._list("admin", args),
            "suppress": self._suppress,
            "autoreply": self._autoreply,
            "cooldown": self._cooldown,
            "show": self._show,
        }

    def execute(self, command_text: str) -> str:
        """Run one command (prefix already stripped) and return the reply."""
        parts = command_text.strip().split()
        if not parts:
            return self._unknown()
        cmd = parts[0].lower()
        handler = self._handlers.get(cmd)
        if handler is None:
            logger.info(f"Unknown admin command: {cmd}")
            return self._unknown()
        try:
            return handler(parts[1:])
        except ConfigPersistError as e:
            return f"⚠️ Gagal menyimpan konfigurasi, perubahan dibatalkan: {e}"

    def _usage(self, text: str) -> str:
        return f"Gunakan: {self.prefix}{text}"

    def _unknown(self) -> str:
        p = self.prefix
        return (
            f"Perintah admin tidak dikenali. Ketik {p}show untuk melihat konfigurasi saat ini.\n"
            f"Perintah: {p}status, {p}whitelist, {p}blacklist, {p}admin, "
            f"{p}suppress, {p}autoreply, {p}cooldown, {p}show"
        )

    def _status(self, args: list[str]) -> str:
        value = args[0].lower() if args else ""
        if value not in ("online", "offline", "busy"):
            return self._usage("status online|offline|busy")
        self.config.update(mode=value)
        return f"✅ Mode berhasil diubah menjadi: {value}"

    def _list(self, name: str, args: list[str]) -> str:
        sub = args[0].lower() if args else ""
        num = _normalize_number(args[1]) if len(args) > 1 else ""
        if sub not in ("add", "remove") or not num:
            return self._usage(f"{name} add|remove <nomor>")
        field = _LIST_FIELDS[name]
        if sub == "add":
            self.config.add_identifier(field, num)
        else:
            self.config.remove_identifier(field, num)
        return _LIST_ACKS[(name, sub)].format(num=num)

    def _suppress(self, args: list[str]) -> str:
        sub = args[0].lower() if args else ""
        if sub in ("on", "off"):
            policy = self.config.update(suppress_when_owner_active=(sub == "on"))
            state = "ON" if policy.suppress_when_owner_active else "OFF"
            return f"🔕 suppressWhenOwnerActive sudah {state}"
        if sub == "timeout":
            seconds = _parse_seconds(args[1] if len(args) > 1 else None)
            if seconds is None:
                return self._usage(f"suppress timeout <seconds> (contoh: {self.prefix}suppress timeout 120)")
            self.config.update(suppress_timeout_seconds=seconds)
            return f"⏱️ suppressTimeoutSeconds diset ke {seconds} detik"
        return self._usage(f"suppress on|off ATAU {self.prefix}suppress timeout <seconds>")

    def _autoreply(self, args: list[str]) -> str:
        value = args[0].lower() if args else ""
        if value not in ("on", "off"):
            return self._usage("autoreply on|off")
        policy = self.config.update(auto_reply_enabled=(value == "on"))
        return f"🔁 Auto-reply sekarang: {'ON' if policy.auto_reply_enabled else 'OFF'}"

    def _cooldown(self, args: list[str]) -> str:
        seconds = _parse_seconds(args[0] if args else None)
        if seconds is None:
            return self._usage(f"cooldown <seconds> (contoh: {self.prefix}cooldown 60)")
        self.config.update(reply_cooldown_seconds=seconds)
        return f"⏱️ cooldown reply diset ke {seconds} detik"

    def _show(self, args: list[str]) -> str:
        return render_policy(self.config.policy)
