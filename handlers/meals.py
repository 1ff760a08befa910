"""Обработчики входящих сообщений: ответы анкеты и записи в дневник питания."""
import logging
from aiogram import Router, F
from aiogram.types import Message
from services.food_diary import food_diary
from handlers.common import answer_prompts

logger = logging.getLogger(__name__)

router = Router()


@router.message(F.photo)
async def handle_photo(message: Message):
    """Фото еды: пока только подтверждаем получение."""
    photo = message.photo[-1]  # Берём самое большое разрешение
    reply = food_diary.handle_food_message(
        message.from_user.id,
        text=message.caption,
        photo_id=photo.file_id,
        message_id=message.message_id,
    )
    await answer_prompts(message, reply.replies)


@router.message(F.text & ~F.text.startswith("/"))
async def handle_text(message: Message):
    """Текст: ответ на шаг анкеты или продукт для дневника."""
    user_id = message.from_user.id
    logger.info(f"User {user_id} sent text: {message.text!r}")
    reply = food_diary.handle_text(user_id, message.text, message_id=message.message_id)
    await answer_prompts(message, reply.replies)


@router.message(F.text.startswith("/"))
async def unknown_command(message: Message):
    """Неизвестная команда не попадает в анкету и дневник."""
    logger.info(f"Ignoring command {message.text!r} from user {message.from_user.id}")
    await message.answer("Неизвестная команда. Используйте /help, чтобы увидеть список команд.")


def register_meal_handlers(dp):
    """Регистрирует обработчики сообщений (подключать последними)."""
    dp.include_router(router)
