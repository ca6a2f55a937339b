"""Utility functions for awaybot."""

from awaybot.utils.helpers import ensure_dir, get_data_path, jid_to_number

__all__ = ["ensure_dir", "get_data_path", "jid_to_number"]
