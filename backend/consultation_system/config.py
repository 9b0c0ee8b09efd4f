from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from loguru import logger

DEFAULT_API_BASE = "https://api.telegram.org"
DEFAULT_ORIGINS = "http://localhost:3000"


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class TelegramConfig:
    bot_token: str
    admin_chat_id: str
    api_base: str = DEFAULT_API_BASE
    timeout: float = 10.0
    timezone: str = "Europe/Moscow"


@dataclass(frozen=True)
class Settings:
    telegram: TelegramConfig
    data_dir: Path
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    allowed_origins: list[str] = field(default_factory=lambda: [DEFAULT_ORIGINS])


def load_env_file() -> None:
    # .env не перекрывает реально заданные переменные окружения
    load_dotenv(find_dotenv(usecwd=True), override=False)


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, str(default)))
    except ValueError:
        return default


def allowed_origins() -> list[str]:
    raw = os.environ.get("ALLOWED_ORIGINS", DEFAULT_ORIGINS)
    return [o.strip() for o in raw.split(",") if o.strip()]


def load_telegram_config() -> TelegramConfig:
    token = os.environ.get("TELEGRAM_BOT_TOKEN", "").strip()
    chat_id = os.environ.get("TELEGRAM_ADMIN_CHAT_ID", "").strip()
    missing = [
        name
        for name, value in (("TELEGRAM_BOT_TOKEN", token), ("TELEGRAM_ADMIN_CHAT_ID", chat_id))
        if not value
    ]
    if missing:
        raise ConfigError(f"Telegram configuration is missing: {', '.join(missing)}")
    return TelegramConfig(
        bot_token=token,
        admin_chat_id=chat_id,
        api_base=os.environ.get("TELEGRAM_API_BASE", DEFAULT_API_BASE).rstrip("/"),
        timeout=_float_env("TELEGRAM_TIMEOUT", 10.0),
        timezone=os.environ.get("NOTIFY_TIMEZONE", "Europe/Moscow"),
    )


def load_settings() -> Settings:
    """
    Собирает настройки сервиса из окружения.
    Без токена бота или chat id сервис не стартует (ConfigError).
    """
    return Settings(
        telegram=load_telegram_config(),
        data_dir=Path(os.environ.get("CONSULTATION_DATA_DIR", "data")).resolve(),
        host=os.environ.get("CONSULTATION_HOST", "0.0.0.0"),
        port=_int_env("CONSULTATION_PORT", 3001),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        allowed_origins=allowed_origins(),
    )


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        backtrace=True,
        diagnose=False,
    )
