from __future__ import annotations

import pytest
import yaml

from keeper.shared.core.configuration import ConfigManager, SystemConfig, ValidationLevel

_ENV_VARS = (
    "KEEPER_STORAGE_BACKEND",
    "KEEPER_DB_PATH",
    "KEEPER_AUTH_TIMEOUT",
    "KEEPER_REJECT_CONCURRENT",
    "KEEPER_SIMULATED_AUTH_DELAY",
    "KEEPER_DEFAULT_THEME",
    "LOG_LEVEL",
    "KEEPER_LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_packaged_defaults(tmp_path):
    config = ConfigManager(config_dir=tmp_path).get_config()

    assert config == SystemConfig()
    assert config.session.user_storage_key == "AUTH_USER"
    assert config.preferences.theme_storage_key == "@app_theme"
    assert config.session.auth_timeout_seconds == 10.0


def test_user_file_overrides_defaults(tmp_path):
    (tmp_path / "user.yaml").write_text(
        yaml.safe_dump({"storage": {"backend": "memory"}, "preferences": {"default_theme": "dark"}}),
        encoding="utf-8",
    )
    config = ConfigManager(config_dir=tmp_path).get_config()

    assert config.storage.backend == "memory"
    assert config.storage.table_name == "kv_store"
    assert config.preferences.default_theme == "dark"


def test_env_overrides_user_file(tmp_path, monkeypatch):
    (tmp_path / "user.yaml").write_text(yaml.safe_dump({"storage": {"backend": "memory"}}), encoding="utf-8")
    monkeypatch.setenv("KEEPER_STORAGE_BACKEND", "duckdb")
    monkeypatch.setenv("KEEPER_AUTH_TIMEOUT", "none")
    monkeypatch.setenv("KEEPER_REJECT_CONCURRENT", "false")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = ConfigManager(config_dir=tmp_path).get_config()

    assert config.storage.backend == "duckdb"
    assert config.session.auth_timeout_seconds is None
    assert config.session.reject_concurrent is False
    assert config.logging.level == "DEBUG"


def test_strict_validation_raises(tmp_path):
    (tmp_path / "user.yaml").write_text(yaml.safe_dump({"storage": {"backend": "floppy"}}), encoding="utf-8")
    with pytest.raises(ValueError):
        ConfigManager(config_dir=tmp_path).get_config(ValidationLevel.STRICT)


def test_lenient_validation_falls_back(tmp_path):
    (tmp_path / "user.yaml").write_text(yaml.safe_dump({"session": {"bogus": 1}}), encoding="utf-8")
    config = ConfigManager(config_dir=tmp_path).get_config(ValidationLevel.LENIENT)
    assert config == SystemConfig()


def test_corrupt_yaml_is_ignored(tmp_path):
    (tmp_path / "user.yaml").write_text("storage: [unclosed", encoding="utf-8")
    assert ConfigManager(config_dir=tmp_path).get_config() == SystemConfig()


def test_save_user_config_round_trips(tmp_path):
    manager = ConfigManager(config_dir=tmp_path / "settings")
    assert manager.save_user_config({"session": {"reject_concurrent": False}})
    assert manager.save_user_config({"session": {"simulated_auth_delay": 0.5}})

    config = manager.get_config()
    assert config.session.reject_concurrent is False
    assert config.session.simulated_auth_delay == 0.5
