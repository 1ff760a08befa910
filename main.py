"""
Точка входа для запуска бота.
"""
import asyncio
import nest_asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.enums import ParseMode
from aiogram.client.default import DefaultBotProperties
from aiogram.types import BotCommand

from config import API_TOKEN
from utils.logging_config import setup_logging

# Настраиваем логирование
setup_logging()

logger = logging.getLogger(__name__)

from database.session import init_db
from handlers import (
    BOT_COMMANDS,
    register_common_handlers,
    register_start_handlers,
    register_profile_handlers,
    register_meal_handlers,
)


async def main():
    """Основная функция запуска бота."""
    if not API_TOKEN:
        raise RuntimeError("API_TOKEN не найден. Установи переменную окружения или создай .env с API_TOKEN.")

    # Инициализация БД
    logger.info("Инициализация базы данных...")
    init_db()

    # Создаём бота и диспетчер. Состояние анкеты хранится в БД, FSM не нужен
    bot = Bot(token=API_TOKEN, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    dp = Dispatcher()

    # Регистрируем обработчики (сообщения подключаем последними)
    logger.info("Регистрация обработчиков...")
    register_start_handlers(dp)
    register_common_handlers(dp)
    register_profile_handlers(dp)
    register_meal_handlers(dp)

    await bot.set_my_commands(
        [BotCommand(command=name, description=description) for name, description in BOT_COMMANDS.items()]
    )

    logger.info("🚀 Бот запущен и готов к работе!")

    # Запускаем polling
    await dp.start_polling(bot)


if __name__ == "__main__":
    nest_asyncio.apply()
    asyncio.run(main())
