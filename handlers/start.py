"""Обработчик команды /start: регистрация и запуск анкеты."""
import logging
from aiogram import Router
from aiogram.types import Message
from aiogram.filters import Command
from services.food_diary import food_diary
from handlers.common import answer_prompts

logger = logging.getLogger(__name__)

router = Router()


@router.message(Command("start"))
async def start(message: Message):
    """Обработчик команды /start."""
    user = message.from_user
    logger.info(f"User {user.id} started the bot")

    reply = food_diary.start_onboarding(
        user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        login=user.username,
    )
    await answer_prompts(message, reply.replies)


def register_start_handlers(dp):
    """Регистрирует обработчики команды /start."""
    dp.include_router(router)
