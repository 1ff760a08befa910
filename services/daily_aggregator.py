"""Суммы КБЖУ за день и сравнение с нормой."""
import logging
from datetime import date
from typing import Iterable, Optional, Tuple
from services.clock import Clock
from services.schemas import CalorieTarget, DailyTotals, MealEntry, SummaryFlag
from utils.numbers import round_half_up

logger = logging.getLogger(__name__)

NEAR_LIMIT_SHARE = 0.9


def totals_from_sums(calories, protein, fat, carbs) -> DailyTotals:
    return DailyTotals(
        total_calories=int(calories or 0),
        total_protein=round_half_up(protein or 0.0, 1),
        total_fat=round_half_up(fat or 0.0, 1),
        total_carbs=round_half_up(carbs or 0.0, 1),
    )


def sum_entries(entries: Iterable[MealEntry]) -> DailyTotals:
    """Сумма по списку записей. Пустой список даёт нули."""
    calories = protein = fat = carbs = 0
    for entry in entries:
        calories += entry.calories
        protein += entry.protein_g
        fat += entry.fat_g
        carbs += entry.carbs_g
    return totals_from_sums(calories, protein, fat, carbs)


def compare_with_target(totals: DailyTotals, target: Optional[CalorieTarget]) -> Tuple[SummaryFlag, int]:
    """
    Сравнивает калории за день с нормой.

    Returns:
        (флаг, на сколько ккал превышена норма)
    """
    if target is None:
        return SummaryFlag.NO_TARGET, 0
    if totals.total_calories > target.calories:
        return SummaryFlag.EXCEEDED, totals.total_calories - target.calories
    if totals.total_calories > target.calories * NEAR_LIMIT_SHARE:
        return SummaryFlag.NEAR_LIMIT, 0
    return SummaryFlag.NONE, 0


class DailyAggregator:
    """Считает суммы по хранилищу приёмов пищи за календарный день."""

    def __init__(self, meal_store, clock: Optional[Clock] = None):
        self.meal_store = meal_store
        self.clock = clock or Clock()

    def daily_totals(self, user_id: int, reference_date: Optional[date] = None) -> DailyTotals:
        """Суммы за день ``reference_date`` (по умолчанию сегодня) в часовом поясе бота."""
        day = reference_date or self.clock.today()
        start, end = self.clock.day_bounds(day)
        sums = self.meal_store.sum_for_range(user_id, start, end)
        totals = totals_from_sums(sums["calories"], sums["protein"], sums["fat"], sums["carbs"])
        logger.debug(f"Daily totals for user {user_id} on {day}: {totals}")
        return totals
