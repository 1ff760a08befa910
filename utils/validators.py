"""Валидаторы для ввода пользователя."""
from datetime import date, datetime
import re


def parse_int_input(text: str) -> int | None:
    """Оставляет только цифры («25 лет» -> 25). Без цифр возвращает None."""
    digits = re.sub(r"\D", "", text or "")
    if not digits or len(digits) > 9:
        return None
    return int(digits)


def parse_weight(weight_str: str) -> float | None:
    """Парсит вес: запятая допускается как разделитель, лишние символы отбрасываются."""
    cleaned = re.sub(r"[^\d.]", "", (weight_str or "").replace(",", "."))
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_date(date_str: str) -> date | None:
    """Парсит дату в формате YYYY-MM-DD или DD.MM.YYYY."""
    text = (date_str or "").strip()
    for fmt in ("%Y-%m-%d", "%d.%m.%Y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None
