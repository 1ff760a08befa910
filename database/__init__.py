"""Модуль для работы с базой данных."""
from .session import get_db_session, SessionLocal, init_db, configure_engine
from .models import (
    Base,
    Customer,
    CustomerInfo,
    LoggedMeal,
)

__all__ = [
    "get_db_session",
    "SessionLocal",
    "init_db",
    "configure_engine",
    "Base",
    "Customer",
    "CustomerInfo",
    "LoggedMeal",
]
