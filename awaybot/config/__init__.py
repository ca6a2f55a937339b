"""Configuration module for awaybot."""

from awaybot.config.loader import get_data_dir, get_policy_path, get_settings_path, load_policy, load_settings
from awaybot.config.schema import PolicyConfig, Settings
from awaybot.config.store import ConfigStore

__all__ = [
    "ConfigStore",
    "PolicyConfig",
    "Settings",
    "get_data_dir",
    "get_policy_path",
    "get_settings_path",
    "load_policy",
    "load_settings",
]
