"""Общие обработчики: /help, /about, /menu и кнопки инлайн-меню."""
import logging
from aiogram import Router, F
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command
from aiogram.types import Message, CallbackQuery
from services.food_diary import food_diary
from services.schemas import PromptSpec
from utils.keyboards import build_reply_markup, menu_inline_keyboard

logger = logging.getLogger(__name__)

router = Router()

BOT_COMMANDS = {
    "start": "Начало работы с ботом и настройка профиля",
    "menu": "Показать меню действий",
    "myprofile": "Показать данные моего профиля",
    "mynorm": "Показать мою дневную норму калорий",
    "today": "Показать сводку КБЖУ за сегодня",
    "help": "Показать список доступных команд",
    "about": "Информация о боте",
}


async def answer_prompts(message: Message, prompts: list[PromptSpec]) -> None:
    """Отправляет ответы по очереди. Ошибка отправки только логируется: данные уже сохранены."""
    for prompt in prompts:
        try:
            await message.answer(
                prompt.text,
                reply_markup=build_reply_markup(prompt),
                parse_mode=prompt.parse_mode,
            )
        except TelegramAPIError as e:
            logger.error(f"Failed to send message to chat {message.chat.id}: {e}")


@router.message(Command("help"))
async def help_command(message: Message):
    """Список доступных команд."""
    lines = ["Список доступных команд:"]
    lines.extend(f"/{name} - {description}" for name, description in BOT_COMMANDS.items())
    await message.answer("\n".join(lines))


@router.message(Command("about"))
async def about_command(message: Message):
    """Информация о боте."""
    await message.answer(
        "Этот бот помогает считать калории: рассчитывает дневную норму КБЖУ "
        "по вашему профилю и ведёт дневник питания.\n"
        "Версия: 0.1"
    )


@router.message(Command("menu"))
async def menu_command(message: Message):
    """Показывает инлайн-меню."""
    logger.info(f"User {message.from_user.id} opened menu")
    await message.answer("Выберите действие:", reply_markup=menu_inline_keyboard)


@router.callback_query(F.data.in_({"profile", "norm", "today", "start"}))
async def menu_callback(callback: CallbackQuery):
    """Обрабатывает кнопки инлайн-меню, обновляя сообщение меню."""
    user_id = callback.from_user.id
    data = callback.data
    logger.info(f"User {user_id} pressed menu button '{data}'")

    follow_up = []
    if data == "profile":
        prompt = food_diary.profile_reply(user_id)
    elif data == "norm":
        prompt = food_diary.norm_reply(user_id)
    elif data == "today":
        prompt = food_diary.today_reply(user_id)
    else:
        reply = food_diary.start_onboarding(
            user_id,
            first_name=callback.from_user.first_name,
            last_name=callback.from_user.last_name,
            login=callback.from_user.username,
        )
        if reply.state_after is None:
            prompt = reply.replies[0]
        else:
            prompt = PromptSpec("Давайте начнём заново.")
            follow_up = reply.replies[1:]

    await callback.answer()
    try:
        await callback.message.edit_text(
            prompt.text,
            parse_mode=prompt.parse_mode,
            reply_markup=menu_inline_keyboard,
        )
    except TelegramAPIError as e:
        logger.error(f"Failed to edit menu message for user {user_id}: {e}")
    if follow_up:
        await answer_prompts(callback.message, follow_up)


@router.callback_query()
async def unknown_callback(callback: CallbackQuery):
    """Неизвестная кнопка."""
    await callback.answer("Неизвестное действие. Попробуйте снова.")


def register_common_handlers(dp):
    """Регистрирует общие обработчики."""
    dp.include_router(router)
