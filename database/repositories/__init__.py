"""Репозитории для работы с базой данных."""
from .profile_repository import ProfileRepository
from .meal_repository import MealRepository

__all__ = [
    "ProfileRepository",
    "MealRepository",
]
