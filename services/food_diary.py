"""Фасад дневника питания: анкета, норма КБЖУ, записи еды и сводка за день.

Обработчики Telegram вызывают только этот модуль. Методы ``*_reply`` и
``handle_*`` никогда не выбрасывают ошибки дневника наружу: любая ошибка
превращается в сообщение пользователю, а данные в базе остаются согласованными.
"""
import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Optional, Union

from config import AGE_INPUT_MODE
from database.repositories import MealRepository, ProfileRepository
from services.clock import Clock
from services.daily_aggregator import DailyAggregator, compare_with_target
from services.errors import (
    DiaryError,
    MissingDataError,
    NotRecognizedError,
    PersistenceError,
    StaleStateError,
)
from services.kbju_calculator import CalorieCalculator
from services.meal_logger import MealLogger
from services.onboarding import advance, question_for
from services.schemas import (
    CalorieTarget,
    DiaryReply,
    OnboardingReply,
    Profile,
    ProfileView,
    PromptSpec,
    TodaySummary,
)
from states.user_states import OnboardingState
from utils.formatters import (
    format_daily_summary,
    format_final_summary,
    format_meal_added,
    format_norm,
    format_profile,
)

logger = logging.getLogger(__name__)

PROFILE_NOT_FOUND = "Ваш профиль не найден. Пожалуйста, нажмите /start для начала."
PROFILE_INCOMPLETE = (
    "Ваш профиль заполнен не полностью. 🙁 Пожалуйста, завершите настройку через /start, "
    "чтобы я мог рассчитать вашу норму."
)
SAVE_FAILED = "Произошла ошибка при обработке ваших данных. Пожалуйста, попробуйте еще раз."
GENERIC_FAILURE = "Ой! Произошла ошибка... Попробуйте позже."
NORM_FAILED = "Не удалось рассчитать вашу норму калорий и БЖУ. Вы можете попробовать команду /mynorm позже."


def _welcome_text(first_name: Optional[str]) -> str:
    name = first_name or "друг"
    return (
        f"Привет, {name}! 👋 Я твой личный помощник по здоровому питанию и помогу тебе "
        "следить за калориями и вести дневник питания.\n\n"
        "Чтобы я помогал тебе ещё лучше, давай настроим твой профиль — "
        "это займёт всего несколько секунд! ✨\n\n"
        "Используй команду /help, чтобы увидеть список доступных команд."
    )


class FoodDiaryService:
    """Ядро бота: анкета, расчёт нормы, дневник и сводка."""

    def __init__(
        self,
        profiles=ProfileRepository,
        meals=MealRepository,
        clock: Optional[Clock] = None,
        age_input_mode: str = AGE_INPUT_MODE,
    ):
        self.profiles = profiles
        self.meals = meals
        self.clock = clock or Clock()
        self.age_input_mode = age_input_mode
        self.calculator = CalorieCalculator(self.clock)
        self.aggregator = DailyAggregator(meals, self.clock)
        self.meal_logger = MealLogger(meals, self.clock)
        self._locks: dict = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _user_lock(self, user_id: int):
        """
        Сериализует запросы одного пользователя внутри процесса.

        Между процессами шаг анкеты защищает условный UPDATE в
        ProfileRepository.save_step. Запись словаря удаляется, когда
        замок больше никто не ждёт.
        """
        with self._locks_guard:
            entry = self._locks.setdefault(user_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[user_id]

    # ---------- Анкета ----------

    def start_onboarding(
        self,
        user_id: int,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        login: Optional[str] = None,
    ) -> OnboardingReply:
        """Регистрирует пользователя (или перезапускает анкету) и задаёт первый вопрос.

        История профиля и дневник не удаляются: новая версия профиля
        создаётся, когда пользователь выберет цель.
        """
        with self._user_lock(user_id):
            try:
                self.profiles.ensure_customer(
                    user_id,
                    first_name=first_name,
                    last_name=last_name,
                    login=login,
                    state=OnboardingState.AWAITING_GOAL,
                )
            except PersistenceError:
                logger.error(f"Failed to start onboarding for user {user_id}")
                return OnboardingReply(
                    replies=[PromptSpec("Произошла ошибка при запуске команды. Попробуйте позже.")],
                    state_after=None,
                )

        logger.info(f"User {user_id} started onboarding")
        return OnboardingReply(
            replies=[
                PromptSpec(_welcome_text(first_name)),
                question_for(OnboardingState.AWAITING_GOAL, self.age_input_mode),
            ],
            state_after=OnboardingState.AWAITING_GOAL,
        )

    def handle_onboarding_answer(self, user_id: int, text: str) -> OnboardingReply:
        """Обрабатывает ответ на текущий шаг анкеты."""
        with self._user_lock(user_id):
            try:
                profile = self.profiles.get(user_id)
            except PersistenceError:
                return OnboardingReply(replies=[PromptSpec(GENERIC_FAILURE)], state_after=None)

            if profile is None:
                logger.warning(f"Onboarding answer from unknown user {user_id}")
                return OnboardingReply(replies=[PromptSpec(PROFILE_NOT_FOUND)], state_after=None)

            state = profile.onboarding_state
            if state is None:
                return OnboardingReply(
                    replies=[PromptSpec("Анкета уже заполнена. Чтобы пройти её заново, используйте /start.")],
                    state_after=None,
                )

            outcome = advance(state, text, today=self.clock.today(), age_input_mode=self.age_input_mode)
            if not outcome.accepted:
                logger.info(f"User {user_id}: invalid answer for {state.value}")
                return OnboardingReply(replies=[outcome.prompt], state_after=state)

            try:
                saved = self.profiles.save_step(
                    user_id,
                    expected_state=state,
                    fields=outcome.fields,
                    new_state=outcome.state,
                    new_record=outcome.new_record,
                )
            except StaleStateError as e:
                logger.warning(f"User {user_id}: step {state.value} already handled, state is {e.actual}")
                if e.actual is None:
                    return OnboardingReply(replies=[], state_after=None)
                return OnboardingReply(
                    replies=[question_for(e.actual, self.age_input_mode)],
                    state_after=e.actual,
                )
            except PersistenceError:
                logger.error(f"User {user_id}: failed to save step {state.value}, state unchanged")
                return OnboardingReply(replies=[PromptSpec(SAVE_FAILED)], state_after=state)

        if outcome.completed:
            logger.info(f"Onboarding completed for user {user_id}")
            view = self._to_view(saved)
            replies = [
                PromptSpec(format_final_summary(view), remove_keyboard=True, parse_mode="HTML"),
                self._norm_prompt(saved),
            ]
            return OnboardingReply(replies=replies, state_after=None)

        return OnboardingReply(replies=[outcome.prompt], state_after=outcome.state)

    # ---------- Дневник ----------

    def handle_text(self, user_id: int, text: str, message_id: Optional[int] = None) -> Union[OnboardingReply, DiaryReply]:
        """Маршрутизация текста: ответ на шаг анкеты, если она идёт, иначе запись еды."""
        try:
            profile = self.profiles.get(user_id)
        except PersistenceError:
            return DiaryReply(replies=[PromptSpec(GENERIC_FAILURE)])

        if profile is not None and profile.onboarding_state is not None:
            return self.handle_onboarding_answer(user_id, text)
        return self.handle_food_message(user_id, text=text, message_id=message_id)

    def handle_food_message(
        self,
        user_id: int,
        text: Optional[str] = None,
        photo_id: Optional[str] = None,
        message_id: Optional[int] = None,
    ) -> DiaryReply:
        """Записывает продукт из текста и отвечает сводкой за день."""
        with self._user_lock(user_id):
            try:
                profile = self.profiles.get(user_id)
            except PersistenceError:
                return DiaryReply(replies=[PromptSpec(GENERIC_FAILURE)])

            if profile is None:
                return DiaryReply(replies=[PromptSpec(PROFILE_NOT_FOUND)])

            if profile.onboarding_state is not None:
                # сначала анкета: повторяем текущий вопрос
                return DiaryReply(replies=[question_for(profile.onboarding_state, self.age_input_mode)])

            if photo_id is not None and not text:
                logger.info(f"User {user_id} sent photo {photo_id}")
                return DiaryReply(
                    replies=[PromptSpec(
                        "📸 Фото получил! Распознавание еды по фото пока не поддерживается — "
                        "напишите название продукта текстом (например, «гречка 200г»)."
                    )]
                )

            try:
                food = self.meal_logger.recognize(text)
            except NotRecognizedError:
                return DiaryReply(
                    replies=[PromptSpec(
                        f"Не удалось распознать «{text}». Попробуйте ввести название проще "
                        "(например, «яблоко», «гречка 100г»)."
                    )]
                )

            try:
                entry = self.meal_logger.log_meal(user_id, food, source_message_id=message_id)
            except MissingDataError:
                return DiaryReply(replies=[PromptSpec(PROFILE_NOT_FOUND)])
            except PersistenceError:
                return DiaryReply(
                    replies=[PromptSpec(f"Не удалось сохранить запись о приёме пищи «{food.name}». Попробуйте позже.")]
                )

        added = format_meal_added(food)
        try:
            summary = self._today_summary(profile)
        except PersistenceError:
            return DiaryReply(
                replies=[PromptSpec(added + "\n\nНе удалось загрузить сводку за день.", parse_mode="HTML")],
                entry=entry,
            )
        text_out = added + "\n\n" + format_daily_summary(summary)
        return DiaryReply(replies=[PromptSpec(text_out, parse_mode="HTML")], entry=entry)

    # ---------- Запросы ----------

    def get_profile_summary(self, user_id: int) -> ProfileView:
        """
        Raises:
            MissingDataError: пользователь не найден или анкета не начата
            PersistenceError: ошибка базы данных
        """
        profile = self.profiles.get(user_id)
        if profile is None or profile.info_id is None:
            raise MissingDataError(f"No profile for user {user_id}")
        return self._to_view(profile)

    def get_calorie_target(self, user_id: int) -> CalorieTarget:
        """
        Raises:
            MissingDataError: профиль неполный
            PersistenceError: ошибка базы данных
        """
        return self.calculator.calculate_norm(self.profiles.get(user_id))

    def get_today_summary(self, user_id: int, reference_date: Optional[date] = None) -> TodaySummary:
        """Суммы за день. Без нормы суммы всё равно возвращаются, с флагом NO_TARGET."""
        return self._today_summary(self.profiles.get(user_id), user_id, reference_date)

    # ---------- Готовые ответы для команд ----------

    def profile_reply(self, user_id: int) -> PromptSpec:
        try:
            return PromptSpec(format_profile(self.get_profile_summary(user_id)), parse_mode="HTML")
        except MissingDataError:
            return PromptSpec("Ваш профиль ещё не настроен. 🙁 Завершите настройку через /start.")
        except DiaryError:
            return PromptSpec("Ой! Произошла ошибка при загрузке профиля. Попробуйте позже.")

    def norm_reply(self, user_id: int) -> PromptSpec:
        try:
            profile = self.profiles.get(user_id)
        except DiaryError:
            return PromptSpec(GENERIC_FAILURE)
        if profile is None:
            return PromptSpec(
                "Я не нашел ваш профиль. 🤔 Пожалуйста, пройдите быструю настройку с помощью команды /start."
            )
        if not self.calculator.has_required_data(profile):
            return PromptSpec(PROFILE_INCOMPLETE)
        return self._norm_prompt(profile)

    def today_reply(self, user_id: int) -> PromptSpec:
        try:
            profile = self.profiles.get(user_id)
            if profile is None:
                return PromptSpec("Профиль не найден. Используйте /start.")
            summary = self._today_summary(profile)
        except DiaryError:
            return PromptSpec(GENERIC_FAILURE)
        return PromptSpec(format_daily_summary(summary, title="📊 <b>Сводка за сегодня:</b>"), parse_mode="HTML")

    # ---------- Внутреннее ----------

    def _norm_prompt(self, profile: Profile) -> PromptSpec:
        try:
            target = self.calculator.calculate_norm(profile)
        except MissingDataError:
            return PromptSpec(NORM_FAILED)
        goal_label = profile.goal.label if profile.goal else None
        return PromptSpec(format_norm(goal_label, target), parse_mode="HTML")

    def _today_summary(
        self,
        profile: Optional[Profile],
        user_id: Optional[int] = None,
        reference_date: Optional[date] = None,
    ) -> TodaySummary:
        if user_id is None:
            user_id = profile.user_id
        target = None
        if self.calculator.has_required_data(profile):
            target = self.calculator.calculate_norm(profile)
        totals = self.aggregator.daily_totals(user_id, reference_date)
        flag, exceeded_by = compare_with_target(totals, target)
        return TodaySummary(totals=totals, target=target, flag=flag, exceeded_by=exceeded_by)

    def _to_view(self, profile: Profile) -> ProfileView:
        return ProfileView(
            user_id=profile.user_id,
            goal=profile.goal.label if profile.goal else None,
            gender=profile.gender.label if profile.gender else None,
            age=profile.age(self.clock.current_year()),
            activity_level=profile.activity_level.label if profile.activity_level else None,
            height_cm=profile.height_cm,
            weight_kg=profile.weight_kg,
            complete=self.calculator.has_required_data(profile),
            onboarding_state=profile.onboarding_state,
        )


# Глобальный экземпляр сервиса
food_diary = FoodDiaryService()
