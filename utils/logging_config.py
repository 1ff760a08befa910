"""Настройка логирования для бота."""
import logging
import sys
from pathlib import Path

from config import LOG_LEVEL

LOG_DIR = Path("logs")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# aiogram пишет каждый апдейт, SQLAlchemy каждый запрос
QUIET_LOGGERS = ("aiogram", "aiohttp", "sqlalchemy.engine")


def setup_logging(log_level: str = LOG_LEVEL, log_dir: Path = LOG_DIR) -> None:
    """Консоль и logs/bot.log. Уровень по умолчанию берётся из LOG_LEVEL."""
    log_dir.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_dir / "bot.log", encoding="utf-8"),
        ],
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Логирование настроено. Уровень: {logging.getLevelName(level)}")
