"""Utility functions for awaybot."""

import json
import os
from pathlib import Path
from typing import Any

DATA_DIR_ENV = "AWAYBOT_DATA_DIR"


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path(data_dir: str | Path | None = None) -> Path:
    """Resolve the data directory (explicit arg, then env, then ~/.awaybot)."""
    raw = data_dir or os.environ.get(DATA_DIR_ENV) or "~/.awaybot"
    return Path(raw).expanduser()


def jid_to_number(jid: str | None) -> str | None:
    """Strip the server part (and device suffix) from a WhatsApp JID."""
    if not jid:
        return None
    user = jid.split("@", 1)[0]
    return user.split(":", 1)[0] or None


def read_json(path: Path) -> Any:
    """Read a JSON file. Missing file raises FileNotFoundError."""
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def write_json_atomic(path: Path, data: Any) -> None:
    """Write JSON through a temp file and os.replace so readers never see a partial file."""
    ensure_dir(path.parent)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as handle:
        json.dump(data, handle, ensure_ascii=False, indent=2)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp_path, path)
