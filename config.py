"""Конфигурация приложения."""
import os
from dotenv import load_dotenv

# Загружаем переменные окружения
load_dotenv()

# База данных
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///calorie_bot.db")

# Telegram Bot (проверяется при запуске в main.py)
API_TOKEN = os.getenv("API_TOKEN")

# Часовой пояс для границ «сегодня»
TIMEZONE = os.getenv("TIMEZONE", "Europe/Moscow")

# Как спрашивать возраст: "age" (полных лет) или "birthdate" (дата рождения)
AGE_INPUT_MODE = os.getenv("AGE_INPUT_MODE", "age")
if AGE_INPUT_MODE not in ("age", "birthdate"):
    print(f"⚠️ ВНИМАНИЕ: неизвестный AGE_INPUT_MODE={AGE_INPUT_MODE!r}, используется 'age'.")
    AGE_INPUT_MODE = "age"

# Логирование
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Настройки БД
DB_POOL_PRE_PING = True
DB_POOL_RECYCLE = 1800  # 30 минут
