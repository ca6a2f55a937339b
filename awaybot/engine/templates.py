"""Reply text selection.

Keyword templates (greeting, thanks) take priority over the mode templates;
the mode only replaces the generic fallback.
"""

from datetime import datetime

GREETING_KEYWORDS = ("halo", "hi", "hello", "selamat")
THANKS_KEYWORDS = ("terima kasih", "thanks")
MAX_OWNER_NAME_CHARS = 40


def time_greeting(hour: int) -> str:
    """Greeting for the owner's local hour of day."""
    if 4 <= hour < 10:
        return "Selamat pagi"
    if 10 <= hour < 15:
        return "Selamat siang"
    if 15 <= hour < 18:
        return "Selamat sore"
    return "Selamat malam"


def _greeting_reply(greet: str, owner: str) -> str:
    return f"{greet} 👋! Terima kasih sudah menyapa. Pesan Anda sudah diterima oleh {owner}."


def _thanks_reply() -> str:
    return "Sama-sama 😊 Senang bisa membantu."


def _generic_reply(greet: str, owner: str) -> str:
    return (
        f"{greet} 👋\n"
        f"Terima kasih sudah menghubungi {owner}. Saya adalah asisten virtual {owner}."
    )


def _busy_reply(greet: str, owner: str) -> str:
    return (
        f"Hai, {greet} 👋\n"
        f"Saya adalah asisten virtual milik {owner}.\n"
        f"Saat ini {owner} sedang sibuk, mohon ditunggu beberapa saat hingga beliau "
        "dapat membalas pesan Anda.\n"
        "Terima kasih atas perhatian dan pengertiannya 🙏"
    )


def _offline_reply(greet: str, owner: str) -> str:
    return (
        f"{greet} 👋\n"
        f"Mohon maaf, *{owner}* saat ini sedang tidak aktif.\n"
        f"Silakan tinggalkan pesan, dan *{owner}* akan membalasnya setelah kembali online.\n"
        "Terima kasih atas pengertian dan kesabarannya 🙏"
    )


def select_reply(mode: str, hour: int, text: str, owner_name: str) -> str:
    """Pick the auto-reply for ``text`` given the current mode and local hour."""
    owner = (owner_name.strip() or "Pemilik")[:MAX_OWNER_NAME_CHARS]
    greet = time_greeting(hour)
    lower = text.lower()

    if any(k in lower for k in GREETING_KEYWORDS):
        return _greeting_reply(greet, owner)
    if any(k in lower for k in THANKS_KEYWORDS):
        return _thanks_reply()
    if mode in ("online", "busy"):
        return _busy_reply(greet, owner)
    if mode == "offline":
        return _offline_reply(greet, owner)
    return _generic_reply(greet, owner)


def local_hour(now: float, tz=None) -> int:
    """Hour of day for a unix timestamp in ``tz`` (server local time when None)."""
    return datetime.fromtimestamp(now, tz).hour
