"""Анкета: проверка ответа на текущем шаге и переход к следующему.

``advance`` это чистая функция без доступа к базе и Telegram: по шагу и тексту
ответа она решает, принять ли ответ, какие поля сохранить и что спросить дальше.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from services.errors import ValidationError
from services.schemas import ActivityLevel, Gender, Goal, PromptSpec
from states.user_states import OnboardingState, next_state
from utils.validators import parse_date, parse_int_input, parse_weight

MIN_AGE, MAX_AGE = 7, 100
MIN_HEIGHT, MAX_HEIGHT = 50, 280
MIN_WEIGHT, MAX_WEIGHT = 20, 500  # границы не включаются
MAX_BIRTHDATE_AGE = 120

GOAL_ROWS = ((Goal.REDUCE_WEIGHT.label, Goal.MAINTAIN_WEIGHT.label, Goal.GAIN_MUSCLE.label),)
GENDER_ROWS = ((Gender.MALE.label, Gender.FEMALE.label),)
ACTIVITY_ROWS = (
    (ActivityLevel.HIGH.label, ActivityLevel.MODERATE.label),
    (ActivityLevel.LIGHT.label, ActivityLevel.SEDENTARY.label),
)


@dataclass(frozen=True)
class StepOutcome:
    """Результат обработки ответа на шаг анкеты."""
    accepted: bool
    state: Optional[OnboardingState]
    prompt: Optional[PromptSpec] = None
    fields: dict = field(default_factory=dict)
    new_record: bool = False

    @property
    def completed(self) -> bool:
        return self.accepted and self.state is None


def question_for(state: OnboardingState, age_input_mode: str = "age") -> PromptSpec:
    """Вопрос, который задаётся при входе в шаг."""
    if state == OnboardingState.AWAITING_GOAL:
        return PromptSpec("Какая у тебя основная цель?", options=GOAL_ROWS)
    if state == OnboardingState.AWAITING_GENDER:
        return PromptSpec("Отлично! Теперь выберите свой пол:", options=GENDER_ROWS)
    if state == OnboardingState.AWAITING_AGE:
        if age_input_mode == "birthdate":
            return PromptSpec(
                "Пожалуйста, введите вашу дату рождения (например, 1994-05-21 или 21.05.1994):",
                remove_keyboard=True,
            )
        return PromptSpec("Пожалуйста, введите ваш возраст (полных лет):", remove_keyboard=True)
    if state == OnboardingState.AWAITING_ACTIVITY:
        return PromptSpec("Выберите ваш обычный уровень активности:", options=ACTIVITY_ROWS)
    if state == OnboardingState.AWAITING_HEIGHT:
        return PromptSpec("Введите ваш рост в сантиметрах (например, 175):", remove_keyboard=True)
    return PromptSpec("Введите ваш текущий вес в килограммах (например, 68.5):", remove_keyboard=True)


def reprompt_for(state: OnboardingState, age_input_mode: str = "age") -> PromptSpec:
    """Повторный вопрос после некорректного ответа, с подсказкой формата."""
    if state == OnboardingState.AWAITING_GOAL:
        return PromptSpec("Пожалуйста, выберите цель:", options=GOAL_ROWS)
    if state == OnboardingState.AWAITING_GENDER:
        return PromptSpec("Пожалуйста, выберите пол:", options=GENDER_ROWS)
    if state == OnboardingState.AWAITING_AGE:
        if age_input_mode == "birthdate":
            return PromptSpec(
                "Пожалуйста, введите дату рождения в формате ГГГГ-ММ-ДД или ДД.ММ.ГГГГ "
                "(например, 1994-05-21). Дата не может быть в будущем."
            )
        return PromptSpec(
            "Пожалуйста, введите ваш возраст цифрами (например, 25). "
            f"Допустимый возраст от {MIN_AGE} до {MAX_AGE} лет."
        )
    if state == OnboardingState.AWAITING_ACTIVITY:
        return PromptSpec("Пожалуйста, выберите уровень активности, используя кнопки.", options=ACTIVITY_ROWS)
    if state == OnboardingState.AWAITING_HEIGHT:
        return PromptSpec(
            f"Пожалуйста, введите ваш рост в сантиметрах (число от {MIN_HEIGHT} до {MAX_HEIGHT})."
        )
    return PromptSpec(
        f"Пожалуйста, введите ваш вес в килограммах (число от {MIN_WEIGHT} до {MAX_WEIGHT}, "
        "можно с точкой или запятой)."
    )


def _parse_birth_year(text: str, today: date, age_input_mode: str) -> Optional[int]:
    if age_input_mode == "birthdate":
        born = parse_date(text)
        if born is None or born > today or born.year <= today.year - MAX_BIRTHDATE_AGE:
            return None
        # точная дата сужается до года
        return born.year

    age = parse_int_input(text)
    if age is None or not MIN_AGE <= age <= MAX_AGE:
        return None
    return today.year - age


def parse_answer(state: OnboardingState, text: str, today: date, age_input_mode: str = "age") -> dict:
    """
    Разбирает ответ на шаг и возвращает поля профиля.

    Raises:
        ValidationError: ответ не подходит для шага
    """
    fields = _parse_fields(state, text, today, age_input_mode)
    if fields is None:
        raise ValidationError(f"Invalid answer for {state.value}: {text!r}")
    return fields


def _parse_fields(state: OnboardingState, text: str, today: date, age_input_mode: str) -> Optional[dict]:
    if state == OnboardingState.AWAITING_GOAL:
        goal = Goal.from_label(text)
        return {"goal": goal} if goal else None

    if state == OnboardingState.AWAITING_GENDER:
        gender = Gender.from_label(text)
        return {"gender": gender} if gender else None

    if state == OnboardingState.AWAITING_AGE:
        birth_year = _parse_birth_year(text, today, age_input_mode)
        return {"birth_year": birth_year} if birth_year is not None else None

    if state == OnboardingState.AWAITING_ACTIVITY:
        activity = ActivityLevel.from_label(text)
        return {"activity_level": activity} if activity else None

    if state == OnboardingState.AWAITING_HEIGHT:
        height = parse_int_input(text)
        if height is None or not MIN_HEIGHT <= height <= MAX_HEIGHT:
            return None
        return {"height_cm": height}

    weight = parse_weight(text)
    if weight is None or not MIN_WEIGHT < weight < MAX_WEIGHT:
        return None
    return {"weight_kg": weight}


def advance(state: OnboardingState, text: str, *, today: date, age_input_mode: str = "age") -> StepOutcome:
    """
    Переход анкеты: (шаг, ответ) -> (следующий шаг, что сохранить, что спросить).

    Некорректный ответ не меняет шаг и возвращает повторный вопрос.
    После веса следующий шаг None (анкета завершена), вопрос не задаётся.
    """
    try:
        fields = parse_answer(state, text, today, age_input_mode)
    except ValidationError:
        return StepOutcome(accepted=False, state=state, prompt=reprompt_for(state, age_input_mode))

    following = next_state(state)
    prompt = question_for(following, age_input_mode) if following is not None else None
    return StepOutcome(
        accepted=True,
        state=following,
        prompt=prompt,
        fields=fields,
        new_record=state == OnboardingState.AWAITING_GOAL,
    )
