"""Функции форматирования текста."""
import html
from typing import Optional
from services.schemas import CalorieTarget, FoodItem, ProfileView, SummaryFlag, TodaySummary


def _or_missing(value, missing: str, suffix: str = "") -> str:
    if value is None:
        return missing
    return html.escape(f"{value}{suffix}")


def format_weight(weight: Optional[float]) -> Optional[str]:
    """68.0 -> «68», 68.5 -> «68.5»."""
    if weight is None:
        return None
    return f"{weight:g}"


def _profile_lines(view: ProfileView) -> list[str]:
    return [
        f"🎯 <b>Цель:</b> {_or_missing(view.goal, 'Не указана')}",
        f"👤 <b>Пол:</b> {_or_missing(view.gender, 'Не указан')}",
        f"🎂 <b>Возраст:</b> {_or_missing(view.age, 'Не указан', ' лет')}",
        f"🏃 <b>Активность:</b> {_or_missing(view.activity_level, 'Не указана')}",
        f"📏 <b>Рост:</b> {_or_missing(view.height_cm, 'Не указан', ' см')}",
        f"⚖️ <b>Вес:</b> {_or_missing(format_weight(view.weight_kg), 'Не указан', ' кг')}",
    ]


def format_profile(view: ProfileView) -> str:
    """Форматирует профиль для /myprofile."""
    lines = ["<b>📋 Ваш профиль:</b>", ""]
    lines.extend(_profile_lines(view))
    lines.append("")
    lines.append("Если хотите обновить данные, используйте <i>/start</i>.")
    return "\n".join(lines)


def format_final_summary(view: ProfileView) -> str:
    """Форматирует итог анкеты."""
    lines = ["Спасибо! 👍 Ваш профиль успешно настроен:", ""]
    lines.extend(_profile_lines(view))
    lines.append("")
    lines.append(
        "Теперь вы можете отправлять мне названия продуктов (например, <i>яблоко</i> "
        "или <i>гречка 250г</i>), а я буду вести дневник питания! 🍽"
    )
    return "\n".join(lines)


def format_norm(goal_label: Optional[str], target: CalorieTarget) -> str:
    """Форматирует дневную норму КБЖУ."""
    return (
        f"✅ <b>Ваша текущая цель:</b> {_or_missing(goal_label, 'Не указана')}\n\n"
        f"📊 <b>Дневная норма:</b> ~{target.calories} ккал\n\n"
        "🍽 <b>Б|Ж|У:</b>\n"
        f" 🍗 <b>Белки:</b> ~{target.protein_g}г\n"
        f" 🥑 <b>Жиры:</b> ~{target.fat_g}г\n"
        f" 🍞 <b>Углеводы:</b> ~{target.carbs_g}г"
    )


def format_meal_added(food: FoodItem) -> str:
    """Строка о добавленном продукте."""
    return (
        f"✅ Добавлено: {html.escape(food.name)} "
        f"(~{food.calories} ккал, БЖУ: {food.protein:.1f}/{food.fat:.1f}/{food.carbs:.1f})"
    )


def format_daily_summary(summary: TodaySummary, title: str = "📊 <b>Итого за сегодня:</b>") -> str:
    """Форматирует суммы за день со сравнением с нормой."""
    totals = summary.totals
    target = summary.target
    lines = [title]

    if target is not None:
        lines.append(f"Калории: <b>{totals.total_calories}</b> / {target.calories} ккал")
        lines.append(f"Белки: <b>{totals.total_protein:.1f}</b> / {target.protein_g} г")
        lines.append(f"Жиры: <b>{totals.total_fat:.1f}</b> / {target.fat_g} г")
        lines.append(f"Углеводы: <b>{totals.total_carbs:.1f}</b> / {target.carbs_g} г")
    else:
        lines.append(f"Калории: <b>{totals.total_calories}</b> ккал")
        lines.append(f"Белки: <b>{totals.total_protein:.1f}</b> г")
        lines.append(f"Жиры: <b>{totals.total_fat:.1f}</b> г")
        lines.append(f"Углеводы: <b>{totals.total_carbs:.1f}</b> г")

    text = "\n".join(lines)
    if summary.flag == SummaryFlag.EXCEEDED:
        text += f"\n\n⚠️ <b>Превышение нормы калорий на {summary.exceeded_by} ккал!</b>"
    elif summary.flag == SummaryFlag.NEAR_LIMIT:
        text += "\n\n👀 <b>Норма калорий почти достигнута.</b>"
    elif summary.flag == SummaryFlag.NO_TARGET:
        text += "\n<i>(Не удалось получить норму для сравнения)</i>"
    return text
