"""
SQLAlchemy database models and session management for finalized bookings.
"""
import random
import time
from contextlib import contextmanager
from datetime import datetime, time as dt_time
from typing import Generator, Optional
from loguru import logger

from sqlalchemy import (
    create_engine,
    Column,
    Integer,
    String,
    Text,
    Date,
    DateTime,
    Enum,
    Index,
    JSON,
)
from sqlalchemy.orm import declarative_base, Session, sessionmaker
from sqlalchemy.engine import Engine

from config import get_settings

# Create declarative base
Base = declarative_base()

# Database engine and session factory (initialized by init_db)
engine: Engine | None = None
SessionLocal: sessionmaker | None = None

CUISINE_VALUES = (
    "Italian", "Chinese", "Indian", "Mexican", "Japanese",
    "American", "Mediterranean", "Thai", "French", "Other",
)
SEATING_VALUES = ("indoor", "outdoor", "no preference")
STATUS_VALUES = ("pending", "confirmed", "cancelled", "completed")


def generate_booking_id() -> str:
    """Booking ids look like BK1760871234567042: epoch milliseconds plus 0-999."""
    return f"BK{int(time.time() * 1000)}{random.randint(0, 999)}"


class Booking(Base):
    """
    Booking model representing a finalized restaurant reservation.
    """
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(String(32), nullable=False, unique=True, default=generate_booking_id)
    customer_name = Column(String(100), nullable=False)
    number_of_guests = Column(Integer, nullable=False)
    booking_date = Column(Date, nullable=False)
    booking_time = Column(String(5), nullable=False)
    cuisine_preference = Column(
        Enum(*CUISINE_VALUES, name="cuisine_preference"),
        nullable=False,
        default="Other",
    )
    special_requests = Column(Text, nullable=False, default="")
    weather_info = Column(JSON, nullable=True)
    seating_preference = Column(
        Enum(*SEATING_VALUES, name="seating_preference"),
        nullable=False,
        default="no preference",
    )
    status = Column(
        Enum(*STATUS_VALUES, name="booking_status"),
        nullable=False,
        default="confirmed",
    )
    contact_phone = Column(String(20), nullable=True)
    contact_email = Column(String(255), nullable=True)
    table_number = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        Index("ix_booking_date_time", "booking_date", "booking_time"),
        Index("ix_booking_status", "status"),
        Index("ix_booking_customer_name", "customer_name"),
    )

    def is_upcoming(self, now: Optional[datetime] = None) -> bool:
        """Whether the booking's date and time are still ahead of ``now``."""
        now = now or datetime.now()
        hours, minutes = (int(part) for part in self.booking_time.split(":"))
        starts_at = datetime.combine(self.booking_date, dt_time(hours, minutes))
        return starts_at > now

    def __repr__(self) -> str:
        return (
            f"<Booking(booking_id={self.booking_id}, date={self.booking_date}, "
            f"time={self.booking_time}, guests={self.number_of_guests}, "
            f"customer_name='{self.customer_name}', status='{self.status}')>"
        )


def init_db(database_url: str | None = None) -> Engine:
    """
    Initialize database engine and session factory.

    Args:
        database_url: Optional database connection string. Defaults to the
                     DATABASE_URL setting.

    Returns:
        SQLAlchemy Engine instance
    """
    global engine, SessionLocal

    if database_url is None:
        database_url = get_settings().database_url

    engine = create_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
    )

    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )

    logger.info(f"Database initialized: {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_tables() -> None:
    """
    Create all tables in the database.

    Raises:
        RuntimeError: If database engine is not initialized
    """
    if engine is None:
        raise RuntimeError("Database engine not initialized. Call init_db() first.")

    Base.metadata.create_all(bind=engine)


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions with automatic cleanup.

    Yields:
        SQLAlchemy Session instance

    Raises:
        RuntimeError: If session factory is not initialized
    """
    if SessionLocal is None:
        raise RuntimeError("Session factory not initialized. Call init_db() first.")

    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

