import threading
import unittest
from unittest.mock import Mock
from tests.test_config import BaseTestCase, DatabaseTestCase
from database.repositories import ProfileRepository
from services.errors import MissingDataError, PersistenceError, StaleStateError
from services.food_diary import PROFILE_INCOMPLETE, PROFILE_NOT_FOUND, SAVE_FAILED, FoodDiaryService
from services.schemas import CalorieTarget, DailyTotals, Goal, Profile, SummaryFlag
from states.user_states import OnboardingState

USER_ID = 1001
ANSWERS = ["Удержать вес", "Мужской", "30", "Сидячий образ жизни", "175", "70"]


class TestFoodDiaryService(DatabaseTestCase):
    """End-to-end tests for the diary facade on an in-memory database"""

    def setUp(self):
        super().setUp()
        self.diary = FoodDiaryService(clock=self.clock, age_input_mode="age")

    def complete_onboarding(self, answers=ANSWERS):
        self.diary.start_onboarding(USER_ID, first_name="Иван")
        reply = None
        for answer in answers:
            reply = self.diary.handle_onboarding_answer(USER_ID, answer)
        return reply

    def test_start_onboarding(self):
        reply = self.diary.start_onboarding(USER_ID, first_name="Иван", login="ivan")

        self.assertEqual(reply.state_after, OnboardingState.AWAITING_GOAL)
        self.assertEqual(len(reply.replies), 2)
        self.assertIn("Иван", reply.replies[0].text)
        self.assertEqual(reply.replies[1].text, "Какая у тебя основная цель?")
        self.assertEqual(ProfileRepository.get(USER_ID).onboarding_state, OnboardingState.AWAITING_GOAL)

    def test_full_onboarding(self):
        reply = self.complete_onboarding()

        self.assertIsNone(reply.state_after)
        summary, norm = reply.replies
        self.assertIn("Ваш профиль успешно настроен", summary.text)
        self.assertIn("30 лет", summary.text)
        self.assertTrue(summary.remove_keyboard)
        self.assertIn("~1979 ккал", norm.text)
        self.assertEqual(
            self.diary.get_calorie_target(USER_ID),
            CalorieTarget(calories=1979, protein_g=98, fat_g=56, carbs_g=271),
        )

        view = self.diary.get_profile_summary(USER_ID)
        self.assertTrue(view.complete)
        self.assertEqual(view.goal, "Удержать вес")
        self.assertEqual(view.age, 30)
        self.assertEqual(view.weight_kg, 70.0)
        self.assertIsNone(view.onboarding_state)

    def test_each_step_asks_next_question(self):
        self.diary.start_onboarding(USER_ID)

        reply = self.diary.handle_onboarding_answer(USER_ID, "Сбросить вес")

        self.assertEqual(reply.state_after, OnboardingState.AWAITING_GENDER)
        self.assertEqual(reply.replies[0].options, (("Мужской", "Женский"),))

    def test_invalid_answer_keeps_state(self):
        self.diary.start_onboarding(USER_ID)

        reply = self.diary.handle_onboarding_answer(USER_ID, "Мужской")

        self.assertEqual(reply.state_after, OnboardingState.AWAITING_GOAL)
        self.assertEqual(reply.replies[0].text, "Пожалуйста, выберите цель:")
        profile = ProfileRepository.get(USER_ID)
        self.assertEqual(profile.onboarding_state, OnboardingState.AWAITING_GOAL)
        self.assertIsNone(profile.goal)

    def test_answer_from_unknown_user(self):
        reply = self.diary.handle_onboarding_answer(USER_ID, "Удержать вес")

        self.assertEqual(reply.replies[0].text, PROFILE_NOT_FOUND)
        self.assertIsNone(ProfileRepository.get(USER_ID))

    def test_answer_after_completion(self):
        self.complete_onboarding()

        reply = self.diary.handle_onboarding_answer(USER_ID, "Сбросить вес")

        self.assertIn("Анкета уже заполнена", reply.replies[0].text)
        self.assertEqual(ProfileRepository.get(USER_ID).goal, Goal.MAINTAIN_WEIGHT)

    def test_food_from_unknown_user(self):
        reply = self.diary.handle_food_message(USER_ID, text="яблоко")

        self.assertEqual(reply.replies[0].text, PROFILE_NOT_FOUND)
        self.assertIsNone(reply.entry)

    def test_text_during_onboarding_goes_to_state_machine(self):
        self.diary.start_onboarding(USER_ID)

        reply = self.diary.handle_text(USER_ID, "яблоко", message_id=5)

        self.assertEqual(reply.state_after, OnboardingState.AWAITING_GOAL)
        self.assertEqual(self.diary.get_today_summary(USER_ID).totals, DailyTotals())

    def test_food_message_during_onboarding_repeats_question(self):
        self.diary.start_onboarding(USER_ID)

        reply = self.diary.handle_food_message(USER_ID, text="яблоко")

        self.assertEqual(reply.replies[0].text, "Какая у тебя основная цель?")
        self.assertIsNone(reply.entry)

    def test_log_food(self):
        self.complete_onboarding()

        reply = self.diary.handle_text(USER_ID, "гречка 250г", message_id=10)

        self.assertEqual(reply.entry.calories, 275)
        self.assertEqual(reply.entry.food_name, "Гречка отварная (250г)")
        text = reply.replies[0].text
        self.assertIn("Добавлено: Гречка отварная (250г)", text)
        self.assertIn("Калории: <b>275</b> / 1979 ккал", text)
        self.assertEqual(reply.replies[0].parse_mode, "HTML")

        summary = self.diary.get_today_summary(USER_ID)
        self.assertEqual(summary.totals, DailyTotals(275, 10.5, 2.8, 53.3))
        self.assertEqual(summary.flag, SummaryFlag.NONE)

    def test_duplicate_message_logged_once(self):
        self.complete_onboarding()

        first = self.diary.handle_food_message(USER_ID, text="банан", message_id=11)
        second = self.diary.handle_food_message(USER_ID, text="банан", message_id=11)

        self.assertEqual(first.entry.id, second.entry.id)
        self.assertEqual(self.diary.get_today_summary(USER_ID).totals.total_calories, 110)

    def test_exceeded_target(self):
        self.complete_onboarding()

        reply = self.diary.handle_food_message(USER_ID, text="куриная грудка 1300г", message_id=12)

        summary = self.diary.get_today_summary(USER_ID)
        self.assertEqual(summary.flag, SummaryFlag.EXCEEDED)
        self.assertEqual(summary.exceeded_by, 166)
        self.assertIn("Превышение нормы калорий на 166 ккал", reply.replies[0].text)

    def test_unrecognized_food(self):
        self.complete_onboarding()

        reply = self.diary.handle_food_message(USER_ID, text="пицца")

        self.assertIn("Не удалось распознать «пицца»", reply.replies[0].text)
        self.assertIsNone(reply.entry)

    def test_huge_portion_gets_reply(self):
        self.complete_onboarding()

        for digits in (19, 29):
            with self.subTest(digits=digits):
                reply = self.diary.handle_food_message(USER_ID, text="гречка 1" + "0" * digits + "г")
                self.assertIn("Не удалось распознать", reply.replies[0].text)
                self.assertIsNone(reply.entry)

        self.assertEqual(self.diary.get_today_summary(USER_ID).totals, DailyTotals())

    def test_photo_is_acknowledged(self):
        self.complete_onboarding()

        reply = self.diary.handle_food_message(USER_ID, photo_id="AgACAgIAAx", message_id=13)

        self.assertIn("Фото получил", reply.replies[0].text)
        self.assertIsNone(reply.entry)

    def test_restart_keeps_meals_and_history(self):
        self.complete_onboarding()
        self.diary.handle_food_message(USER_ID, text="яблоко", message_id=14)

        self.diary.start_onboarding(USER_ID)
        self.diary.handle_onboarding_answer(USER_ID, "Сбросить вес")

        history = ProfileRepository.get_history(USER_ID)
        self.assertEqual([p.goal for p in history], [Goal.MAINTAIN_WEIGHT, Goal.REDUCE_WEIGHT])

        with self.assertRaises(MissingDataError):
            self.diary.get_calorie_target(USER_ID)

        summary = self.diary.get_today_summary(USER_ID)
        self.assertEqual(summary.totals.total_calories, 80)
        self.assertEqual(summary.flag, SummaryFlag.NO_TARGET)
        self.assertIsNone(summary.target)

    def test_profile_summary_without_profile(self):
        with self.assertRaises(MissingDataError):
            self.diary.get_profile_summary(USER_ID)

        self.diary.start_onboarding(USER_ID)
        with self.assertRaises(MissingDataError):
            self.diary.get_profile_summary(USER_ID)

    def test_command_replies(self):
        self.assertIn("/start", self.diary.profile_reply(USER_ID).text)
        self.assertIn("/start", self.diary.norm_reply(USER_ID).text)
        self.assertIn("/start", self.diary.today_reply(USER_ID).text)

        self.diary.start_onboarding(USER_ID)
        self.diary.handle_onboarding_answer(USER_ID, "Удержать вес")
        self.assertEqual(self.diary.norm_reply(USER_ID).text, PROFILE_INCOMPLETE)

        self.complete_onboarding()
        self.assertIn("<b>📋 Ваш профиль:</b>", self.diary.profile_reply(USER_ID).text)
        self.assertIn("Углеводы:</b> ~271г", self.diary.norm_reply(USER_ID).text)
        self.assertIn("Сводка за сегодня", self.diary.today_reply(USER_ID).text)


class TestFoodDiaryFailures(BaseTestCase):
    """Storage failures must leave the onboarding state unchanged"""

    def setUp(self):
        super().setUp()
        self.profiles = Mock()
        self.meals = Mock()
        self.profiles.get.return_value = Profile(
            user_id=USER_ID, goal=Goal.MAINTAIN_WEIGHT, onboarding_state=OnboardingState.AWAITING_GENDER, info_id=1
        )
        self.diary = FoodDiaryService(
            profiles=self.profiles, meals=self.meals, clock=self.clock, age_input_mode="age"
        )

    def test_save_failure_keeps_state(self):
        self.profiles.save_step.side_effect = PersistenceError("database is locked")

        reply = self.diary.handle_onboarding_answer(USER_ID, "Мужской")

        self.assertEqual(reply.replies[0].text, SAVE_FAILED)
        self.assertEqual(reply.state_after, OnboardingState.AWAITING_GENDER)

    def test_stale_state_repeats_current_question(self):
        self.profiles.save_step.side_effect = StaleStateError(
            OnboardingState.AWAITING_GENDER, OnboardingState.AWAITING_AGE
        )

        reply = self.diary.handle_onboarding_answer(USER_ID, "Мужской")

        self.assertEqual(reply.state_after, OnboardingState.AWAITING_AGE)
        self.assertIn("возраст", reply.replies[0].text)

    def test_invalid_answer_does_not_touch_storage(self):
        self.diary.handle_onboarding_answer(USER_ID, "Удержать вес")

        self.profiles.save_step.assert_not_called()

    def test_meal_save_failure(self):
        self.profiles.get.return_value = Profile(user_id=USER_ID, info_id=1)
        self.meals.append.side_effect = PersistenceError("disk I/O error")

        reply = self.diary.handle_food_message(USER_ID, text="яблоко", message_id=1)

        self.assertIn("Не удалось сохранить запись", reply.replies[0].text)
        self.assertIsNone(reply.entry)
        self.meals.sum_for_range.assert_not_called()

    def test_user_locks_are_released(self):
        self.profiles.save_step.side_effect = PersistenceError("database is locked")

        self.diary.handle_onboarding_answer(USER_ID, "Мужской")
        self.diary.handle_food_message(USER_ID + 1, text="яблоко")

        self.assertEqual(self.diary._locks, {})

    def test_user_lock_released_on_error(self):
        with self.assertRaises(RuntimeError):
            with self.diary._user_lock(USER_ID):
                raise RuntimeError("boom")

        self.assertEqual(self.diary._locks, {})
        with self.diary._user_lock(USER_ID):
            self.assertIn(USER_ID, self.diary._locks)

    def test_user_lock_serializes_same_user(self):
        entered = threading.Event()

        def worker():
            with self.diary._user_lock(USER_ID):
                entered.set()

        with self.diary._user_lock(USER_ID):
            thread = threading.Thread(target=worker)
            thread.start()
            self.assertFalse(entered.wait(0.2))
        thread.join(timeout=5)

        self.assertTrue(entered.is_set())
        self.assertEqual(self.diary._locks, {})

    def test_profile_load_failure(self):
        self.profiles.get.side_effect = PersistenceError("connection refused")

        self.assertIn("ошибка", self.diary.today_reply(USER_ID).text)
        self.assertIn("ошибка", self.diary.handle_text(USER_ID, "яблоко").replies[0].text)


if __name__ == '__main__':
    unittest.main()
