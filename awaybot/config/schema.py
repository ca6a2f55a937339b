"""Configuration schema using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_OWNER_NAME = "Nama"


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PolicyConfig(Base):
    """Operational policy, mutated at runtime through admin commands."""

    mode: Literal["online", "offline", "busy"] = "online"
    owner_display_name: str = DEFAULT_OWNER_NAME
    whitelist: list[str] = Field(default_factory=list)
    blacklist: list[str] = Field(default_factory=list)
    admin_identifiers: list[str] = Field(default_factory=list)
    suppress_when_owner_active: bool = False
    suppress_timeout_seconds: int = Field(default=120, ge=0)
    auto_reply_enabled: bool = True
    reply_cooldown_seconds: int = Field(default=60, ge=0)
    assist_cooldown_seconds: int = Field(default=3600, gt=0)
    owner_idle_seconds: int = Field(default=30, gt=0)

    @field_validator("whitelist", "blacklist", "admin_identifiers", mode="before")
    @classmethod
    def _dedupe_identifiers(cls, value: object) -> object:
        """Keep first-seen order, drop blanks and duplicates."""
        if not isinstance(value, (list, tuple, set)):
            return value
        seen: list[str] = []
        for item in value:
            sid = str(item).strip()
            if sid and sid not in seen:
                seen.append(sid)
        return seen

    @field_validator("mode", mode="before")
    @classmethod
    def _lower_mode(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value


class BridgeConfig(Base):
    """WhatsApp bridge connection settings."""

    enabled: bool = True
    url: str = "ws://localhost:3001"
    token: str = ""
    reconnect_delay_seconds: float = Field(default=5.0, gt=0)
    max_reconnect_attempts: int = Field(default=0, ge=0)  # 0 = unlimited


class HealthConfig(Base):
    """Read-only HTTP health endpoint."""

    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = Field(default=8080, gt=0, lt=65536)


class Settings(Base):
    """Process-level settings (not changed by admin commands)."""

    data_dir: str = "~/.awaybot"
    command_prefix: str = "!"
    timezone: str | None = None
    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    bridge: BridgeConfig = Field(default_factory=BridgeConfig)
    health: HealthConfig = Field(default_factory=HealthConfig)

    @field_validator("command_prefix")
    @classmethod
    def _single_char_prefix(cls, value: str) -> str:
        if len(value) != 1 or value.isspace():
            raise ValueError("command_prefix must be a single non-space character")
        return value

    @property
    def data_path(self) -> Path:
        """Expanded data directory path."""
        return Path(self.data_dir).expanduser()
