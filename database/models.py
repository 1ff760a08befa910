"""SQLAlchemy модели для базы данных."""
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy import (
    Column,
    Integer,
    BigInteger,
    String,
    Float,
    DateTime,
    ForeignKey,
    UniqueConstraint,
)
from datetime import datetime

Base = declarative_base()


class Customer(Base):
    """Пользователь Telegram и текущий шаг анкеты."""
    __tablename__ = "customers"
    id = Column(Integer, primary_key=True)
    tg_id = Column(BigInteger, unique=True, nullable=False, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    login = Column(String, nullable=True)
    state = Column(String, nullable=True)  # None: анкета не идёт
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    infos = relationship(
        "CustomerInfo",
        back_populates="customer",
        order_by="CustomerInfo.id",
        cascade="all, delete-orphan",
    )


class CustomerInfo(Base):
    """Версия профиля. Новая запись на каждый перезапуск анкеты, старые остаются историей."""
    __tablename__ = "customer_info"
    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    goal = Column(String, nullable=True)  # "reduce_weight" / "maintain_weight" / "gain_muscle"
    gender = Column(String, nullable=True)  # "male" / "female"
    birth_year = Column(Integer, nullable=True)
    activity_level = Column(String, nullable=True)  # "sedentary" / "light" / "moderate" / "high"
    height = Column(Integer, nullable=True)  # см
    weight = Column(Float, nullable=True)  # кг
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    archive_at = Column(DateTime, nullable=True)

    customer = relationship("Customer", back_populates="infos")


class LoggedMeal(Base):
    """Запись о съеденном продукте."""
    __tablename__ = "logged_meals"
    __table_args__ = (
        UniqueConstraint("customer_id", "source_message_id", name="uq_logged_meals_message"),
    )
    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    food_name = Column(String(500), nullable=False)
    grams = Column(Integer, nullable=True)
    calories = Column(Integer, nullable=False, default=0)
    protein = Column(Float, nullable=False, default=0)
    fat = Column(Float, nullable=False, default=0)
    carbs = Column(Float, nullable=False, default=0)
    logged_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)  # UTC
    source_message_id = Column(BigInteger, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
