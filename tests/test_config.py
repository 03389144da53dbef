import os
from pathlib import Path

import pytest

from alarms.gateway import RepeatPolicy
from config import load_config

ENV_VARS = (
    "LOG_LEVEL",
    "LOG_DIR",
    "ALARM_TIMEZONE",
    "NOTIFICATION_TITLE",
    "NOTIFICATION_DEFAULT_BODY",
    "ALARM_REPEAT_POLICY",
    "ALARM_STORAGE_PATH",
    "ALARM_SOUND_PATH",
    "ALARM_CHECK_INTERVAL_MS",
    "NOTIFICATIONS_ENABLED",
    "ENABLE_SPEECH",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path: Path):
    config = load_config(tmp_path / "missing.env")
    assert config.log_level == "INFO"
    assert config.repeat_policy is RepeatPolicy.DAILY
    assert config.storage_path is None
    assert config.timezone_name is None
    assert config.notification_title == "Alarm"
    assert config.alarm_check_interval_ms == 800
    assert config.notifications_enabled is True


def test_env_overrides(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("ALARM_REPEAT_POLICY", "weekdays")
    monkeypatch.setenv("ALARM_STORAGE_PATH", str(tmp_path / "alarms.json"))
    monkeypatch.setenv("NOTIFICATIONS_ENABLED", "0")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    config = load_config(tmp_path / "missing.env")
    assert config.repeat_policy is RepeatPolicy.WEEKDAYS
    assert config.storage_path == tmp_path / "alarms.json"
    assert config.notifications_enabled is False
    assert config.log_level == "DEBUG"


def test_dotenv_file_is_loaded(tmp_path: Path):
    env_file = tmp_path / ".env"
    env_file.write_text("NOTIFICATION_TITLE=Wake up\n", encoding="utf-8")
    try:
        config = load_config(env_file)
    finally:
        os.environ.pop("NOTIFICATION_TITLE", None)
    assert config.notification_title == "Wake up"


def test_invalid_values_raise(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("ALARM_CHECK_INTERVAL_MS", "fast")
    with pytest.raises(ValueError, match="ALARM_CHECK_INTERVAL_MS"):
        load_config(tmp_path / "missing.env")

    monkeypatch.setenv("ALARM_CHECK_INTERVAL_MS", "500")
    monkeypatch.setenv("ALARM_REPEAT_POLICY", "hourly")
    with pytest.raises(ValueError, match="ALARM_REPEAT_POLICY"):
        load_config(tmp_path / "missing.env")
