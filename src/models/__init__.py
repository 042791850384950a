"""
Models package - SQLAlchemy ORM models and Pydantic schemas.
"""
from .database import (
    Base,
    Booking,
    generate_booking_id,
    init_db,
    create_tables,
    get_db_session,
)

from .schemas import (
    Cuisine,
    SeatingPreference,
    BookingStatus,
    Location,
    WeatherInfo,
    WeatherForecast,
    BookingCreate,
    BookingUpdate,
    BookingResponse,
    BookingPage,
    BookingStats,
)

__all__ = [
    # Database models
    "Base",
    "Booking",
    "generate_booking_id",
    # Database utilities
    "init_db",
    "create_tables",
    "get_db_session",
    # Enums
    "Cuisine",
    "SeatingPreference",
    "BookingStatus",
    # Pydantic schemas
    "Location",
    "WeatherInfo",
    "WeatherForecast",
    "BookingCreate",
    "BookingUpdate",
    "BookingResponse",
    "BookingPage",
    "BookingStats",
]
