"""Ошибки дневника питания.

Все ошибки восстановимы: фасад превращает их в ответ пользователю,
состояние в базе при этом остаётся согласованным.
"""


class DiaryError(Exception):
    """Базовая ошибка дневника."""


class ValidationError(DiaryError):
    """Некорректный ввод пользователя. Шаг анкеты не меняется."""


class MissingDataError(DiaryError):
    """Профиль не заполнен или данные вне допустимых границ."""


class PersistenceError(DiaryError):
    """Не удалось записать или прочитать данные."""


class StaleStateError(PersistenceError):
    """Состояние анкеты уже изменил другой запрос."""

    def __init__(self, expected, actual):
        super().__init__(f"expected state {expected!r}, found {actual!r}")
        self.expected = expected
        self.actual = actual


class NotRecognizedError(DiaryError):
    """Текст не найден в справочнике продуктов."""
