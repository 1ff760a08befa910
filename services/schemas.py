"""Доменные типы: профиль, норма, приёмы пищи, ответы бота."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from states.user_states import OnboardingState
from utils.numbers import round_half_up


class _LabeledEnum(str, Enum):
    """Enum с русской подписью для кнопок и сообщений."""

    @property
    def label(self) -> str:
        return self._labels()[self]

    @classmethod
    def _labels(cls) -> dict:
        raise NotImplementedError

    @classmethod
    def from_label(cls, text: str):
        """Ищет значение по подписи кнопки (без учёта регистра и пробелов по краям)."""
        needle = (text or "").strip().casefold()
        for member, label in cls._labels().items():
            if label.casefold() == needle:
                return member
        return None

    @classmethod
    def from_db(cls, value: Optional[str]):
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class Goal(_LabeledEnum):
    REDUCE_WEIGHT = "reduce_weight"
    MAINTAIN_WEIGHT = "maintain_weight"
    GAIN_MUSCLE = "gain_muscle"

    @classmethod
    def _labels(cls) -> dict:
        return GOAL_LABELS


class Gender(_LabeledEnum):
    MALE = "male"
    FEMALE = "female"

    @classmethod
    def _labels(cls) -> dict:
        return GENDER_LABELS


class ActivityLevel(_LabeledEnum):
    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    HIGH = "high"

    @classmethod
    def _labels(cls) -> dict:
        return ACTIVITY_LABELS


GOAL_LABELS = {
    Goal.REDUCE_WEIGHT: "Сбросить вес",
    Goal.MAINTAIN_WEIGHT: "Удержать вес",
    Goal.GAIN_MUSCLE: "Нарастить мышцы",
}

GENDER_LABELS = {
    Gender.MALE: "Мужской",
    Gender.FEMALE: "Женский",
}

ACTIVITY_LABELS = {
    ActivityLevel.HIGH: "Высокая активность",
    ActivityLevel.MODERATE: "Средняя активность",
    ActivityLevel.LIGHT: "Минимум активности",
    ActivityLevel.SEDENTARY: "Сидячий образ жизни",
}


@dataclass(frozen=True)
class Profile:
    """Последняя версия профиля пользователя."""
    user_id: int
    goal: Optional[Goal] = None
    gender: Optional[Gender] = None
    birth_year: Optional[int] = None
    activity_level: Optional[ActivityLevel] = None
    height_cm: Optional[int] = None
    weight_kg: Optional[float] = None
    onboarding_state: Optional[OnboardingState] = None
    info_id: Optional[int] = None

    def age(self, current_year: int) -> Optional[int]:
        if self.birth_year is None:
            return None
        return current_year - self.birth_year


@dataclass(frozen=True)
class ProfileView:
    """Профиль в виде для показа пользователю."""
    user_id: int
    goal: Optional[str]
    gender: Optional[str]
    age: Optional[int]
    activity_level: Optional[str]
    height_cm: Optional[int]
    weight_kg: Optional[float]
    complete: bool
    onboarding_state: Optional[OnboardingState] = None


@dataclass(frozen=True)
class CalorieTarget:
    """Дневная норма калорий и БЖУ."""
    calories: int
    protein_g: int
    fat_g: int
    carbs_g: int


@dataclass(frozen=True)
class FoodItem:
    """Результат поиска продукта в справочнике."""
    name: str
    grams: Optional[int]
    calories: int
    protein: float
    fat: float
    carbs: float


@dataclass(frozen=True)
class MealEntry:
    """Сохранённый приём пищи."""
    id: int
    user_id: int
    food_name: str
    grams: Optional[int]
    calories: int
    protein_g: float
    fat_g: float
    carbs_g: float
    logged_at: datetime


@dataclass(frozen=True)
class DailyTotals:
    """Суммы за день: калории целым числом, БЖУ с одним знаком."""
    total_calories: int = 0
    total_protein: float = 0.0
    total_fat: float = 0.0
    total_carbs: float = 0.0

    def __add__(self, other: "DailyTotals") -> "DailyTotals":
        return DailyTotals(
            total_calories=self.total_calories + other.total_calories,
            total_protein=round_half_up(self.total_protein + other.total_protein, 1),
            total_fat=round_half_up(self.total_fat + other.total_fat, 1),
            total_carbs=round_half_up(self.total_carbs + other.total_carbs, 1),
        )


class SummaryFlag(str, Enum):
    """Отметка сравнения суммы за день с нормой."""
    NONE = "none"
    NEAR_LIMIT = "near_limit"
    EXCEEDED = "exceeded"
    NO_TARGET = "no_target"


@dataclass(frozen=True)
class TodaySummary:
    totals: DailyTotals
    target: Optional[CalorieTarget]
    flag: SummaryFlag
    exceeded_by: int = 0


@dataclass(frozen=True)
class PromptSpec:
    """Сообщение для отправки: текст, кнопки и режим разметки."""
    text: str
    options: Optional[tuple] = None  # ряды подписей кнопок
    remove_keyboard: bool = False
    parse_mode: Optional[str] = None


@dataclass(frozen=True)
class OnboardingReply:
    replies: list = field(default_factory=list)
    state_after: Optional[OnboardingState] = None


@dataclass(frozen=True)
class DiaryReply:
    replies: list = field(default_factory=list)
    entry: Optional[MealEntry] = None
