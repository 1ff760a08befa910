"""Клавиатуры для бота."""
from aiogram.types import (
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    KeyboardButton,
    ReplyKeyboardMarkup,
    ReplyKeyboardRemove,
)
from services.schemas import PromptSpec

# Инлайн-меню (/menu)
menu_inline_keyboard = InlineKeyboardMarkup(
    inline_keyboard=[
        [
            InlineKeyboardButton(text="⚙️ Мой профиль", callback_data="profile"),
            InlineKeyboardButton(text="🎯 Моя норма", callback_data="norm"),
        ],
        [InlineKeyboardButton(text="📊 Сводка за сегодня", callback_data="today")],
        [InlineKeyboardButton(text="🔄 Начать заново", callback_data="start")],
    ]
)


def build_reply_markup(prompt: PromptSpec):
    """Клавиатура для вопроса: кнопки вариантов, удаление клавиатуры или ничего."""
    if prompt.options:
        return ReplyKeyboardMarkup(
            keyboard=[[KeyboardButton(text=label) for label in row] for row in prompt.options],
            resize_keyboard=True,
            one_time_keyboard=True,
        )
    if prompt.remove_keyboard:
        return ReplyKeyboardRemove()
    return None
