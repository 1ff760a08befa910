"""Запись распознанного продукта в дневник."""
import logging
from typing import Optional
from services.clock import Clock
from services.errors import NotRecognizedError
from services.food_lookup import lookup_food
from services.schemas import FoodItem, MealEntry

logger = logging.getLogger(__name__)


class MealLogger:
    """Добавляет записи в хранилище приёмов пищи. Записи не меняются и не удаляются."""

    def __init__(self, meal_store, clock: Optional[Clock] = None):
        self.meal_store = meal_store
        self.clock = clock or Clock()

    def recognize(self, text: str) -> FoodItem:
        """
        Raises:
            NotRecognizedError: если текста нет в справочнике
        """
        food = lookup_food(text)
        if food is None:
            raise NotRecognizedError(text)
        return food

    def log_meal(self, user_id: int, food: FoodItem, source_message_id: Optional[int] = None) -> MealEntry:
        """
        Сохраняет продукт с текущим временем.

        Raises:
            PersistenceError: если запись не удалась
        """
        return self.meal_store.append(
            user_id,
            food,
            self.clock.now(),
            source_message_id=source_message_id,
        )
