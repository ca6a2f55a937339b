import json

from awaybot.config.loader import _migrate_policy, load_policy, load_settings, save_policy
from awaybot.config.schema import PolicyConfig


def test_migrate_renames_legacy_keys():
    data = {"ownerName": "Budi", "adminNumbers": ["628777"], "autoReply": False, "mode": "busy"}

    migrated = _migrate_policy(data)

    assert migrated["ownerDisplayName"] == "Budi"
    assert migrated["adminIdentifiers"] == ["628777"]
    assert migrated["autoReplyEnabled"] is False
    assert "ownerName" not in migrated


def test_migrate_does_not_override_current_keys():
    migrated = _migrate_policy({"ownerName": "Old", "ownerDisplayName": "New"})

    assert migrated["ownerDisplayName"] == "New"
    assert "ownerName" not in migrated


def test_load_policy_creates_defaults_when_missing(tmp_path):
    path = tmp_path / "bot_config.json"

    policy = load_policy(path)

    assert policy == PolicyConfig()
    assert json.loads(path.read_text(encoding="utf-8"))["mode"] == "online"


def test_load_policy_reads_legacy_file(tmp_path):
    path = tmp_path / "bot_config.json"
    path.write_text(
        json.dumps({"mode": "offline", "ownerName": "Budi", "adminNumbers": ["628777"], "autoReply": True}),
        encoding="utf-8",
    )

    policy = load_policy(path)

    assert policy.mode == "offline"
    assert policy.owner_display_name == "Budi"
    assert policy.admin_identifiers == ["628777"]


def test_load_policy_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "bot_config.json"
    path.write_text("{oops", encoding="utf-8")

    assert load_policy(path) == PolicyConfig()
    assert path.read_text(encoding="utf-8") == "{oops"


def test_load_policy_invalid_utf8_falls_back_to_defaults(tmp_path):
    path = tmp_path / "bot_config.json"
    path.write_bytes(b'{"ownerDisplayName": "\xff\xfe"}')

    assert load_policy(path) == PolicyConfig()


def test_load_settings_invalid_utf8_falls_back_to_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_bytes(b'{"commandPrefix": "\xff"}')

    settings = load_settings(path)

    assert settings.command_prefix == "!"
    assert settings.data_path == tmp_path


def test_load_policy_invalid_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "bot_config.json"
    path.write_text(json.dumps({"replyCooldownSeconds": -3}), encoding="utf-8")

    assert load_policy(path).reply_cooldown_seconds == 60


def test_save_policy_round_trip(tmp_path):
    path = tmp_path / "bot_config.json"
    save_policy(PolicyConfig(reply_cooldown_seconds=45), path)

    assert load_policy(path).reply_cooldown_seconds == 45


def test_load_settings_defaults_to_file_directory(tmp_path):
    settings = load_settings(tmp_path / "settings.json")

    assert settings.data_path == tmp_path


def test_load_settings_reads_nested_camel_case(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"bridge": {"url": "ws://bridge:9000", "reconnectDelaySeconds": 2}}), encoding="utf-8")

    settings = load_settings(path)

    assert settings.bridge.url == "ws://bridge:9000"
    assert settings.bridge.reconnect_delay_seconds == 2
    assert settings.data_path == tmp_path
