"""Обработчики команд профиля: /myprofile, /mynorm, /today."""
import logging
from aiogram import Router
from aiogram.types import Message
from aiogram.filters import Command
from services.food_diary import food_diary
from handlers.common import answer_prompts

logger = logging.getLogger(__name__)

router = Router()


@router.message(Command("myprofile"))
async def my_profile(message: Message):
    """Показывает профиль пользователя."""
    logger.info(f"User {message.from_user.id} requested profile")
    await answer_prompts(message, [food_diary.profile_reply(message.from_user.id)])


@router.message(Command("mynorm"))
async def my_norm(message: Message):
    """Показывает дневную норму КБЖУ."""
    logger.info(f"User {message.from_user.id} requested norm")
    await answer_prompts(message, [food_diary.norm_reply(message.from_user.id)])


@router.message(Command("today"))
async def today_summary(message: Message):
    """Показывает сводку КБЖУ за сегодня."""
    logger.info(f"User {message.from_user.id} requested today summary")
    await answer_prompts(message, [food_diary.today_reply(message.from_user.id)])


def register_profile_handlers(dp):
    """Регистрирует обработчики команд профиля."""
    dp.include_router(router)
