"""Репозиторий для работы с приёмами пищи."""
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from database.session import get_db_session
from database.models import Customer, LoggedMeal
from services.clock import to_utc_naive, from_utc_naive
from services.errors import MissingDataError, PersistenceError
from services.schemas import FoodItem, MealEntry

logger = logging.getLogger(__name__)


def _to_entry(meal: LoggedMeal, user_id: int) -> MealEntry:
    return MealEntry(
        id=meal.id,
        user_id=user_id,
        food_name=meal.food_name,
        grams=meal.grams,
        calories=int(meal.calories or 0),
        protein_g=float(meal.protein or 0),
        fat_g=float(meal.fat or 0),
        carbs_g=float(meal.carbs or 0),
        logged_at=from_utc_naive(meal.logged_at),
    )


def _get_customer(session, user_id: int) -> Customer:
    customer = session.query(Customer).filter(Customer.tg_id == user_id).first()
    if customer is None:
        raise MissingDataError(f"Customer {user_id} not found")
    return customer


class MealRepository:
    """Репозиторий для работы с приёмами пищи."""

    @staticmethod
    def append(
        user_id: int,
        food: FoodItem,
        logged_at: datetime,
        source_message_id: Optional[int] = None,
    ) -> MealEntry:
        """
        Сохраняет приём пищи.

        Повторная доставка того же сообщения (тот же source_message_id)
        не создаёт вторую запись, а возвращает уже сохранённую.
        """
        try:
            with get_db_session() as session:
                customer = _get_customer(session, user_id)

                if source_message_id is not None:
                    existing = (
                        session.query(LoggedMeal)
                        .filter(LoggedMeal.customer_id == customer.id)
                        .filter(LoggedMeal.source_message_id == source_message_id)
                        .first()
                    )
                    if existing:
                        logger.info(f"Meal for message {source_message_id} already logged for user {user_id}")
                        return _to_entry(existing, user_id)

                meal = LoggedMeal(
                    customer_id=customer.id,
                    food_name=food.name,
                    grams=food.grams,
                    calories=food.calories,
                    protein=food.protein,
                    fat=food.fat,
                    carbs=food.carbs,
                    logged_at=to_utc_naive(logged_at),
                    source_message_id=source_message_id,
                )
                session.add(meal)
                session.flush()
                entry = _to_entry(meal, user_id)
            logger.info(f"Logged meal {entry.id} '{food.name}' for user {user_id}")
            return entry
        except (SQLAlchemyError, OverflowError) as e:
            logger.error(f"Failed to save logged meal for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(str(e)) from e

    @staticmethod
    def get_for_range(user_id: int, start: datetime, end: datetime) -> list[MealEntry]:
        """Все приёмы пищи в интервале [start, end]."""
        try:
            with get_db_session() as session:
                customer = session.query(Customer).filter(Customer.tg_id == user_id).first()
                if customer is None:
                    return []
                meals = (
                    session.query(LoggedMeal)
                    .filter(LoggedMeal.customer_id == customer.id)
                    .filter(LoggedMeal.logged_at.between(to_utc_naive(start), to_utc_naive(end)))
                    .order_by(LoggedMeal.logged_at.asc(), LoggedMeal.id.asc())
                    .all()
                )
                return [_to_entry(meal, user_id) for meal in meals]
        except SQLAlchemyError as e:
            logger.error(f"Failed to load meals for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(str(e)) from e

    @staticmethod
    def sum_for_range(user_id: int, start: datetime, end: datetime) -> dict:
        """Суммарные КБЖУ в интервале [start, end], включая обе границы."""
        try:
            with get_db_session() as session:
                result = (
                    session.query(
                        func.sum(LoggedMeal.calories).label("calories"),
                        func.sum(LoggedMeal.protein).label("protein"),
                        func.sum(LoggedMeal.fat).label("fat"),
                        func.sum(LoggedMeal.carbs).label("carbs"),
                    )
                    .join(Customer, Customer.id == LoggedMeal.customer_id)
                    .filter(Customer.tg_id == user_id)
                    .filter(LoggedMeal.logged_at.between(to_utc_naive(start), to_utc_naive(end)))
                    .first()
                )

                return {
                    "calories": int(result.calories) if result.calories else 0,
                    "protein": float(result.protein) if result.protein else 0.0,
                    "fat": float(result.fat) if result.fat else 0.0,
                    "carbs": float(result.carbs) if result.carbs else 0.0,
                }
        except SQLAlchemyError as e:
            logger.error(f"Failed to sum meals for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(str(e)) from e
