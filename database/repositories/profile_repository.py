"""Репозиторий профилей и состояния анкеты."""
import logging
from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from database.session import get_db_session
from database.models import Customer, CustomerInfo
from services.errors import PersistenceError, StaleStateError
from services.schemas import Profile, Goal, Gender, ActivityLevel
from states.user_states import OnboardingState

logger = logging.getLogger(__name__)

# Поле профиля -> колонка customer_info
_FIELD_COLUMNS = {
    "goal": "goal",
    "gender": "gender",
    "birth_year": "birth_year",
    "activity_level": "activity_level",
    "height_cm": "height",
    "weight_kg": "weight",
}


def _to_columns(fields: dict) -> dict:
    columns = {}
    for name, value in fields.items():
        if name not in _FIELD_COLUMNS:
            raise KeyError(f"Unknown profile field: {name}")
        if isinstance(value, Enum):
            value = value.value
        columns[_FIELD_COLUMNS[name]] = value
    return columns


def _state_value(state: Optional[OnboardingState]) -> Optional[str]:
    return state.value if state is not None else None


def _latest_info(session, customer: Customer) -> Optional[CustomerInfo]:
    return (
        session.query(CustomerInfo)
        .filter(CustomerInfo.customer_id == customer.id)
        .order_by(CustomerInfo.id.desc())
        .first()
    )


def _to_profile(customer: Customer, info: Optional[CustomerInfo]) -> Profile:
    state = OnboardingState.from_db(customer.state)
    if info is None:
        return Profile(user_id=customer.tg_id, onboarding_state=state)
    return Profile(
        user_id=customer.tg_id,
        goal=Goal.from_db(info.goal),
        gender=Gender.from_db(info.gender),
        birth_year=info.birth_year,
        activity_level=ActivityLevel.from_db(info.activity_level),
        height_cm=info.height,
        weight_kg=float(info.weight) if info.weight is not None else None,
        onboarding_state=state,
        info_id=info.id,
    )


class ProfileRepository:
    """Репозиторий профилей пользователей."""

    @staticmethod
    def get(user_id: int) -> Optional[Profile]:
        """Возвращает последнюю версию профиля или None, если пользователя нет."""
        try:
            with get_db_session() as session:
                customer = session.query(Customer).filter(Customer.tg_id == user_id).first()
                if customer is None:
                    return None
                return _to_profile(customer, _latest_info(session, customer))
        except SQLAlchemyError as e:
            logger.error(f"Failed to load profile for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(str(e)) from e

    @staticmethod
    def get_history(user_id: int) -> list[Profile]:
        """Все версии профиля, от старых к новым."""
        try:
            with get_db_session() as session:
                customer = session.query(Customer).filter(Customer.tg_id == user_id).first()
                if customer is None:
                    return []
                infos = (
                    session.query(CustomerInfo)
                    .filter(CustomerInfo.customer_id == customer.id)
                    .order_by(CustomerInfo.id.asc())
                    .all()
                )
                return [_to_profile(customer, info) for info in infos]
        except SQLAlchemyError as e:
            logger.error(f"Failed to load profile history for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(str(e)) from e

    @staticmethod
    def ensure_customer(
        user_id: int,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        login: Optional[str] = None,
        state: Optional[OnboardingState] = None,
    ) -> Profile:
        """Создаёт или обновляет пользователя и выставляет шаг анкеты."""
        try:
            with get_db_session() as session:
                customer = session.query(Customer).filter(Customer.tg_id == user_id).first()
                if customer is None:
                    customer = Customer(tg_id=user_id)
                    session.add(customer)
                    logger.info(f"New customer {user_id} registered")
                customer.first_name = first_name
                customer.last_name = last_name
                customer.login = login
                customer.state = _state_value(state)
                session.flush()
                profile = _to_profile(customer, _latest_info(session, customer))
            logger.info(f"Customer {user_id} state set to {_state_value(state)}")
            return profile
        except SQLAlchemyError as e:
            logger.error(f"Failed to save customer {user_id}: {e}", exc_info=True)
            raise PersistenceError(str(e)) from e

    @staticmethod
    def set_state(user_id: int, state: Optional[OnboardingState]) -> None:
        """Выставляет шаг анкеты без изменения полей профиля."""
        try:
            with get_db_session() as session:
                updated = (
                    session.query(Customer)
                    .filter(Customer.tg_id == user_id)
                    .update({"state": _state_value(state)}, synchronize_session=False)
                )
                if not updated:
                    raise PersistenceError(f"Customer {user_id} not found")
            logger.info(f"Customer {user_id} state set to {_state_value(state)}")
        except SQLAlchemyError as e:
            logger.error(f"Failed to set state for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(str(e)) from e

    @staticmethod
    def upsert(user_id: int, fields: dict, new_record: bool = False) -> Profile:
        """Записывает поля в последнюю версию профиля (или в новую при new_record)."""
        try:
            with get_db_session() as session:
                customer = session.query(Customer).filter(Customer.tg_id == user_id).first()
                if customer is None:
                    raise PersistenceError(f"Customer {user_id} not found")
                info = ProfileRepository._write_fields(session, customer, fields, new_record)
                session.flush()
                return _to_profile(customer, info)
        except SQLAlchemyError as e:
            logger.error(f"Failed to save profile fields for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(str(e)) from e

    @staticmethod
    def save_step(
        user_id: int,
        expected_state: OnboardingState,
        fields: dict,
        new_state: Optional[OnboardingState],
        new_record: bool = False,
    ) -> Profile:
        """
        Сохраняет ответ на шаг анкеты и переводит состояние одной транзакцией.

        Состояние меняется только если в базе всё ещё ``expected_state``;
        иначе транзакция откатывается и выбрасывается StaleStateError.

        Raises:
            StaleStateError: шаг уже обработан другим запросом
            PersistenceError: ошибка базы данных
        """
        try:
            with get_db_session() as session:
                customer = session.query(Customer).filter(Customer.tg_id == user_id).first()
                if customer is None:
                    raise PersistenceError(f"Customer {user_id} not found")

                info = ProfileRepository._write_fields(session, customer, fields, new_record)

                moved = (
                    session.query(Customer)
                    .filter(Customer.id == customer.id)
                    .filter(Customer.state == expected_state.value)
                    .update({"state": _state_value(new_state)}, synchronize_session=False)
                )
                if not moved:
                    session.refresh(customer)
                    raise StaleStateError(expected_state, OnboardingState.from_db(customer.state))

                session.flush()
                session.refresh(customer)
                profile = _to_profile(customer, info)
            logger.info(
                f"User {user_id}: step {expected_state.value} saved, "
                f"state -> {_state_value(new_state)}"
            )
            return profile
        except SQLAlchemyError as e:
            logger.error(f"Failed to save step {expected_state.value} for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(str(e)) from e

    @staticmethod
    def _write_fields(session, customer: Customer, fields: dict, new_record: bool) -> CustomerInfo:
        columns = _to_columns(fields)
        info = _latest_info(session, customer)
        if new_record or info is None:
            if info is not None and info.archive_at is None:
                info.archive_at = datetime.utcnow()
            info = CustomerInfo(customer_id=customer.id, **columns)
            session.add(info)
            logger.info(f"Created new profile record for customer {customer.tg_id}")
        else:
            for column, value in columns.items():
                setattr(info, column, value)
        return info
