"""Управление сессиями базы данных."""
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from config import DATABASE_URL, DB_POOL_PRE_PING, DB_POOL_RECYCLE
from database.models import Base
import logging

logger = logging.getLogger(__name__)


def _build_engine(database_url: str):
    """Создаёт engine. In-memory SQLite держим на одном соединении."""
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        database_url,
        pool_pre_ping=DB_POOL_PRE_PING,
        pool_recycle=DB_POOL_RECYCLE,
    )


# Создаём engine
engine = _build_engine(DATABASE_URL)

# Создаём фабрику сессий
SessionLocal = sessionmaker(bind=engine)


def configure_engine(database_url: str):
    """Переподключает фабрику сессий к другой базе (например, для тестов)."""
    global engine
    engine.dispose()
    engine = _build_engine(database_url)
    SessionLocal.configure(bind=engine)
    logger.debug(f"Engine переключён на {engine.url}")
    return engine


def init_db():
    """Инициализация базы данных: создание таблиц."""
    Base.metadata.create_all(engine)
    logger.info("База данных инициализирована")


def drop_db():
    """Удаляет все таблицы."""
    Base.metadata.drop_all(engine)


@contextmanager
def get_db_session():
    """
    Контекстный менеджер для работы с сессией БД.

    Использование:
        with get_db_session() as session:
            customer = session.query(Customer).first()
            session.commit()
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
