"""Состояния анкеты пользователя.

Состояние хранится в таблице customers, а не в FSM-хранилище aiogram,
поэтому переживает перезапуск бота и работает с несколькими инстансами.
"""
from enum import Enum
from typing import Optional


class OnboardingState(str, Enum):
    """Шаги анкеты. ``None`` в базе означает, что анкета завершена или не начиналась."""
    AWAITING_GOAL = "awaiting_goal"
    AWAITING_GENDER = "awaiting_gender"
    AWAITING_AGE = "awaiting_age"
    AWAITING_ACTIVITY = "awaiting_activity"
    AWAITING_HEIGHT = "awaiting_height"
    AWAITING_WEIGHT = "awaiting_weight"

    @classmethod
    def from_db(cls, value: Optional[str]) -> Optional["OnboardingState"]:
        """Преобразует значение из базы. Неизвестное значение считается простоем."""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


ONBOARDING_ORDER = (
    OnboardingState.AWAITING_GOAL,
    OnboardingState.AWAITING_GENDER,
    OnboardingState.AWAITING_AGE,
    OnboardingState.AWAITING_ACTIVITY,
    OnboardingState.AWAITING_HEIGHT,
    OnboardingState.AWAITING_WEIGHT,
)


def next_state(state: OnboardingState) -> Optional[OnboardingState]:
    """Следующий шаг анкеты или ``None`` после последнего."""
    idx = ONBOARDING_ORDER.index(state)
    if idx + 1 < len(ONBOARDING_ORDER):
        return ONBOARDING_ORDER[idx + 1]
    return None
