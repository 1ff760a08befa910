"""Сервис для расчёта дневной нормы КБЖУ по профилю."""
import logging
from typing import Optional
from services.clock import Clock
from services.errors import MissingDataError
from services.schemas import ActivityLevel, CalorieTarget, Gender, Goal, Profile
from utils.numbers import round_half_up

logger = logging.getLogger(__name__)

ACTIVITY_FACTORS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.HIGH: 1.725,
}

GOAL_ADJUSTMENTS = {
    Goal.REDUCE_WEIGHT: -500,
    Goal.MAINTAIN_WEIGHT: 0,
    Goal.GAIN_MUSCLE: 400,
}

PROTEIN_PER_KG = {
    Goal.REDUCE_WEIGHT: 1.8,
    Goal.MAINTAIN_WEIGHT: 1.4,
    Goal.GAIN_MUSCLE: 1.8,
}

MIN_CALORIES = {
    Gender.MALE: 1400,
    Gender.FEMALE: 1200,
}

KCAL_PER_PROTEIN = 4
KCAL_PER_FAT = 9
KCAL_PER_CARB = 4
MIN_FAT_PER_KG = 0.8
FAT_SHARE_DEFAULT = 0.25
MAX_AGE_YEARS = 120


class CalorieCalculator:
    """Норма по Миффлину-Сан Жеору с поправкой на активность и цель."""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or Clock()

    def check_required_data(self, profile: Profile) -> dict:
        """Результат каждой проверки профиля по отдельности."""
        current_year = self.clock.current_year()
        return {
            "weight_check": profile.weight_kg is not None and profile.weight_kg > 0,
            "height_check": profile.height_cm is not None and profile.height_cm > 0,
            "birth_year_check": (
                profile.birth_year is not None
                and current_year - MAX_AGE_YEARS < profile.birth_year <= current_year
            ),
            "gender_check": profile.gender in MIN_CALORIES,
            "activity_check": profile.activity_level in ACTIVITY_FACTORS,
            "goal_check": profile.goal in GOAL_ADJUSTMENTS,
        }

    def has_required_data(self, profile: Optional[Profile]) -> bool:
        """True только если все шесть полей заполнены и в допустимых границах."""
        if profile is None:
            return False
        checks = self.check_required_data(profile)
        result = all(checks.values())
        logger.debug(f"Required data checks for user {profile.user_id}: {checks} -> {result}")
        return result

    def calculate_norm(self, profile: Optional[Profile]) -> CalorieTarget:
        """
        Рассчитывает дневную норму калорий и БЖУ.

        Args:
            profile: Профиль с полями goal, gender, birth_year,
                activity_level, height_cm, weight_kg

        Returns:
            CalorieTarget с округлёнными граммами

        Raises:
            MissingDataError: если профиль неполный
        """
        if not self.has_required_data(profile):
            user_id = profile.user_id if profile else None
            logger.warning(f"Calorie calculation failed: missing or invalid data for user {user_id}")
            raise MissingDataError("Profile is incomplete")

        age = self.clock.current_year() - profile.birth_year
        weight = float(profile.weight_kg)
        height = int(profile.height_cm)

        bmr = 10 * weight + 6.25 * height - 5 * age
        bmr += 5 if profile.gender == Gender.MALE else -161

        tdee = bmr * ACTIVITY_FACTORS[profile.activity_level]
        calories = tdee + GOAL_ADJUSTMENTS[profile.goal]

        min_calories = MIN_CALORIES[profile.gender]
        if calories < min_calories:
            logger.info(f"Calorie norm adjusted to minimum ({min_calories}) for user {profile.user_id}")
            calories = min_calories

        calories = round_half_up(calories)

        protein = weight * PROTEIN_PER_KG[profile.goal]
        protein_kcal = protein * KCAL_PER_PROTEIN

        min_fat = weight * MIN_FAT_PER_KG
        fat_kcal = max(min_fat * KCAL_PER_FAT, (calories - protein_kcal) * FAT_SHARE_DEFAULT)
        fat = fat_kcal / KCAL_PER_FAT

        carbs = (calories - protein_kcal - fat_kcal) / KCAL_PER_CARB
        if carbs < 0:
            # белок и калории не трогаем, БЖУ может не сойтись с нормой
            fat = min_fat
            fat_kcal = fat * KCAL_PER_FAT
            carbs = max(0.0, (calories - protein_kcal - fat_kcal) / KCAL_PER_CARB)

        return CalorieTarget(
            calories=calories,
            protein_g=round_half_up(protein),
            fat_g=round_half_up(fat),
            carbs_g=round_half_up(carbs),
        )
