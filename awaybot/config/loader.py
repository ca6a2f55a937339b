"""Configuration loading utilities."""

import json
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from awaybot.config.schema import PolicyConfig, Settings
from awaybot.utils.helpers import get_data_path, read_json, write_json_atomic

SETTINGS_FILE = "settings.json"
POLICY_FILE = "bot_config.json"

# Keys written by the first version of the bot.
_LEGACY_POLICY_KEYS = {
    "ownerName": "ownerDisplayName",
    "adminNumbers": "adminIdentifiers",
    "autoReply": "autoReplyEnabled",
}


def get_data_dir(data_dir: str | Path | None = None) -> Path:
    """Get the data directory."""
    return get_data_path(data_dir)


def get_settings_path(data_dir: str | Path | None = None) -> Path:
    """Get the settings file path."""
    return get_data_dir(data_dir) / SETTINGS_FILE


def get_policy_path(data_dir: str | Path | None = None) -> Path:
    """Get the policy configuration file path."""
    return get_data_dir(data_dir) / POLICY_FILE


def load_settings(config_path: Path | None = None) -> Settings:
    """
    Load process settings from file or create defaults.

    Args:
        config_path: Optional path to settings file. Uses default if not provided.

    Returns:
        Loaded settings object.
    """
    path = config_path or get_settings_path()
    defaults = Settings(data_dir=str(path.parent))

    if not path.exists():
        return defaults

    try:
        data = read_json(path)
        settings = Settings.model_validate(data)
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError, OSError) as e:
        logger.warning(f"Failed to load settings from {path}: {e}")
        logger.warning("Using default settings.")
        return defaults

    if "dataDir" not in data and "data_dir" not in data:
        settings.data_dir = str(path.parent)
    return settings


def save_settings(settings: Settings, config_path: Path | None = None) -> None:
    """Save process settings to file."""
    path = config_path or get_settings_path(settings.data_dir)
    write_json_atomic(path, settings.model_dump(by_alias=True))


def load_policy(policy_path: Path | None = None) -> PolicyConfig:
    """
    Load the policy record.

    A missing file is created with defaults. A corrupt or invalid file is
    logged and replaced in memory by defaults; the file on disk is left for
    the operator to inspect until the next admin change rewrites it.
    """
    path = policy_path or get_policy_path()

    if not path.exists():
        policy = PolicyConfig()
        try:
            save_policy(policy, path)
            logger.info(f"Created default policy at {path}")
        except OSError as e:
            logger.warning(f"Could not create policy file {path}: {e}")
        return policy

    try:
        data = read_json(path)
        if not isinstance(data, dict):
            raise ValueError("policy file must contain a JSON object")
        return PolicyConfig.model_validate(_migrate_policy(data))
    except (json.JSONDecodeError, ValidationError, ValueError, OSError) as e:
        logger.warning(f"Failed to load policy from {path}: {e}")
        logger.warning("Using default policy.")
        return PolicyConfig()


def save_policy(policy: PolicyConfig, policy_path: Path | None = None) -> None:
    """Persist the policy record atomically. Raises OSError on failure."""
    path = policy_path or get_policy_path()
    write_json_atomic(path, policy.model_dump(by_alias=True))


def _migrate_policy(data: dict[str, Any]) -> dict[str, Any]:
    """Migrate legacy policy keys to the current names."""
    migrated = dict(data)
    for old, new in _LEGACY_POLICY_KEYS.items():
        if old not in migrated:
            continue
        value = migrated.pop(old)
        if new not in migrated:
            migrated[new] = value
    return migrated
