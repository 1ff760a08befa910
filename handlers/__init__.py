"""Обработчики сообщений бота."""
from .common import register_common_handlers, BOT_COMMANDS
from .start import register_start_handlers
from .profile import register_profile_handlers
from .meals import register_meal_handlers

__all__ = [
    "register_common_handlers",
    "register_start_handlers",
    "register_profile_handlers",
    "register_meal_handlers",
    "BOT_COMMANDS",
]
