import logging
import logging.handlers
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from alarms.gateway import DEFAULT_BODY, DEFAULT_TITLE, RepeatPolicy


def _get_env_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip() in {"1", "true", "True", "yes", "YES", "y"}


def _get_env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    try:
        return int(val)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer") from exc


def _get_env_path(name: str) -> Optional[Path]:
    val = os.getenv(name)
    if not val or not val.strip():
        return None
    return Path(val.strip())


@dataclass
class Config:
    log_level: str
    log_dir: Path
    timezone_name: Optional[str]
    notification_title: str
    notification_default_body: str
    repeat_policy: RepeatPolicy
    storage_path: Optional[Path]
    alarm_sound_path: Path
    alarm_check_interval_ms: int
    notifications_enabled: bool
    enable_speech: bool


def load_config(env_path: Optional[Path] = None) -> Config:
    if env_path is None:
        env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    try:
        repeat_policy = RepeatPolicy.parse(os.getenv("ALARM_REPEAT_POLICY", RepeatPolicy.DAILY.value))
    except ValueError as exc:
        raise ValueError(f"Environment variable ALARM_REPEAT_POLICY: {exc}") from exc

    check_interval_ms = _get_env_int("ALARM_CHECK_INTERVAL_MS", 800)
    if check_interval_ms <= 0:
        raise ValueError("Environment variable ALARM_CHECK_INTERVAL_MS must be positive")

    return Config(
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_dir=Path(os.getenv("LOG_DIR", "logs")),
        timezone_name=os.getenv("ALARM_TIMEZONE") or None,
        notification_title=os.getenv("NOTIFICATION_TITLE", DEFAULT_TITLE),
        notification_default_body=os.getenv("NOTIFICATION_DEFAULT_BODY", DEFAULT_BODY),
        repeat_policy=repeat_policy,
        storage_path=_get_env_path("ALARM_STORAGE_PATH"),
        alarm_sound_path=Path(os.getenv("ALARM_SOUND_PATH", "data/alarm.wav")),
        alarm_check_interval_ms=check_interval_ms,
        notifications_enabled=_get_env_bool("NOTIFICATIONS_ENABLED", True),
        enable_speech=_get_env_bool("ENABLE_SPEECH", True),
    )


def setup_logging(log_level: str = "INFO", log_dir: Path = Path("logs")) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)

    log_path = log_dir / "alarms.log"
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        handlers=[file_handler, console_handler],
    )
