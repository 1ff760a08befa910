"""Поиск продукта в статическом справочнике КБЖУ."""
import logging
import re
from typing import Optional
from services.schemas import FoodItem
from utils.numbers import round_half_up

logger = logging.getLogger(__name__)

FOOD_DATABASE = {
    "яблоко": FoodItem("Яблоко (среднее)", 150, 80, 0.4, 0.3, 20),
    "банан": FoodItem("Банан (средний)", 120, 110, 1.3, 0.4, 27),
    "куриная грудка 100г": FoodItem("Куриная грудка (100г)", 100, 165, 31, 3.6, 0),
    "гречка 100г": FoodItem("Гречка отварная (100г)", 100, 110, 4.2, 1.1, 21.3),
    "овсянка 50г": FoodItem("Овсянка сухая (50г)", 50, 190, 6, 3.5, 32),
    "творог 100г": FoodItem("Творог 5% (100г)", 100, 120, 17, 5, 1.8),
    "яйцо": FoodItem("Яйцо куриное (1 шт)", 55, 75, 6.5, 5, 0.6),
    "хлеб": FoodItem("Хлеб ржаной (1 кусок)", 30, 70, 2, 0.5, 14),
    "кофе": FoodItem("Кофе черный", 200, 2, 0, 0, 0),
    "чай": FoodItem("Чай без сахара", 200, 1, 0, 0, 0),
}

_WEIGHTED_RE = re.compile(r"^(.*?)\s+(\d{1,5})\s*(г|гр|грамм?)$", re.IGNORECASE)
_BASE_SUFFIX = " 100г"
MAX_GRAMS = 5000


def scale_food(base: FoodItem, grams: int) -> FoodItem:
    """Пересчитывает продукт со 100 г на ``grams`` грамм."""
    multiplier = grams / 100.0
    base_name = re.sub(r"\s*\(100г\)", "", base.name, flags=re.IGNORECASE).strip()
    return FoodItem(
        name=f"{base_name} ({grams}г)",
        grams=grams,
        calories=round_half_up(base.calories * multiplier),
        protein=round_half_up(base.protein * multiplier, 1),
        fat=round_half_up(base.fat * multiplier, 1),
        carbs=round_half_up(base.carbs * multiplier, 1),
    )


def lookup_food(text: str, food_database: Optional[dict] = None) -> Optional[FoodItem]:
    """
    Ищет продукт по тексту сообщения.

    Сначала точное совпадение («яблоко», «гречка 100г»), затем шаблон
    «<название> <N>г»: берётся запись «<название> 100г» и масштабируется.
    Порции больше MAX_GRAMS не распознаются.

    Returns:
        FoodItem или None, если продукт не распознан
    """
    foods = FOOD_DATABASE if food_database is None else food_database
    key = (text or "").strip().lower()
    if not key:
        return None

    if key in foods:
        return foods[key]

    match = _WEIGHTED_RE.match(key)
    if match:
        base_key = match.group(1).strip() + _BASE_SUFFIX
        grams = int(match.group(2))
        base = foods.get(base_key)
        if base is not None and 0 < grams <= MAX_GRAMS:
            return scale_food(base, grams)

    logger.debug(f"Food not recognized: {text!r}")
    return None
