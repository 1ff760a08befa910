"""Сервисы дневника питания: анкета, расчёт КБЖУ, дневник и сводка."""
from .errors import (
    DiaryError,
    ValidationError,
    MissingDataError,
    PersistenceError,
    StaleStateError,
    NotRecognizedError,
)

__all__ = [
    "DiaryError",
    "ValidationError",
    "MissingDataError",
    "PersistenceError",
    "StaleStateError",
    "NotRecognizedError",
]
