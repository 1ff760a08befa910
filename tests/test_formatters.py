import unittest
from aiogram.types import ReplyKeyboardMarkup, ReplyKeyboardRemove
from services.schemas import (
    CalorieTarget,
    DailyTotals,
    FoodItem,
    ProfileView,
    PromptSpec,
    SummaryFlag,
    TodaySummary,
)
from utils.formatters import format_daily_summary, format_meal_added, format_profile, format_weight
from utils.keyboards import build_reply_markup

TARGET = CalorieTarget(calories=1979, protein_g=98, fat_g=56, carbs_g=271)


class TestFormatters(unittest.TestCase):

    def test_format_weight(self):
        self.assertEqual(format_weight(68.0), "68")
        self.assertEqual(format_weight(68.5), "68.5")
        self.assertIsNone(format_weight(None))

    def test_profile_with_missing_fields(self):
        view = ProfileView(
            user_id=1, goal="Сбросить вес", gender=None, age=None,
            activity_level=None, height_cm=180, weight_kg=None, complete=False,
        )

        text = format_profile(view)

        self.assertIn("<b>Цель:</b> Сбросить вес", text)
        self.assertIn("<b>Пол:</b> Не указан", text)
        self.assertIn("<b>Рост:</b> 180 см", text)

    def test_meal_added_escapes_name(self):
        food = FoodItem("Сыр <Гауда>", 30, 110, 7.5, 8.8, 0)

        self.assertIn("Сыр &lt;Гауда&gt;", format_meal_added(food))
        self.assertIn("БЖУ: 7.5/8.8/0.0", format_meal_added(food))

    def test_daily_summary_flags(self):
        exceeded = TodaySummary(DailyTotals(2100, 90.0, 60.0, 250.0), TARGET, SummaryFlag.EXCEEDED, 121)
        near = TodaySummary(DailyTotals(1900, 90.0, 60.0, 250.0), TARGET, SummaryFlag.NEAR_LIMIT)
        no_target = TodaySummary(DailyTotals(300, 10.0, 5.0, 40.0), None, SummaryFlag.NO_TARGET)

        self.assertIn("Превышение нормы калорий на 121 ккал", format_daily_summary(exceeded))
        self.assertIn("почти достигнута", format_daily_summary(near))
        self.assertIn("Калории: <b>300</b> ккал", format_daily_summary(no_target))
        self.assertIn("Не удалось получить норму", format_daily_summary(no_target))


class TestKeyboards(unittest.TestCase):

    def test_options_become_buttons(self):
        markup = build_reply_markup(PromptSpec("?", options=(("А", "Б"), ("В",))))

        self.assertIsInstance(markup, ReplyKeyboardMarkup)
        self.assertEqual([[b.text for b in row] for row in markup.keyboard], [["А", "Б"], ["В"]])

    def test_remove_keyboard(self):
        self.assertIsInstance(build_reply_markup(PromptSpec("?", remove_keyboard=True)), ReplyKeyboardRemove)
        self.assertIsNone(build_reply_markup(PromptSpec("?")))


if __name__ == '__main__':
    unittest.main()
