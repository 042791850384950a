"""
Pydantic models and enums for data validation and serialization.
"""
import re
from datetime import date, datetime
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, Field, field_validator, ConfigDict, ValidationInfo


class Cuisine(str, Enum):
    """Cuisines a booking can be tagged with."""

    ITALIAN = "Italian"
    CHINESE = "Chinese"
    INDIAN = "Indian"
    MEXICAN = "Mexican"
    JAPANESE = "Japanese"
    AMERICAN = "American"
    MEDITERRANEAN = "Mediterranean"
    THAI = "Thai"
    FRENCH = "French"
    OTHER = "Other"

    def __str__(self) -> str:
        return self.value


class SeatingPreference(str, Enum):
    """Where the party would like to be seated."""

    INDOOR = "indoor"
    OUTDOOR = "outdoor"
    NO_PREFERENCE = "no preference"

    def __str__(self) -> str:
        return self.value


class BookingStatus(str, Enum):
    """Lifecycle status of a persisted booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    def __str__(self) -> str:
        return self.value


TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


def _today_from(info: ValidationInfo) -> date:
    """Reference date for past-date checks; callers may pin it via validation context."""
    if info.context and info.context.get("today"):
        return info.context["today"]
    return date.today()


class Location(BaseModel):
    """Where to look up the weather. Coordinates win over the city name."""
    city: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None


class WeatherInfo(BaseModel):
    """
    Weather snapshot stored alongside a booking.
    """
    condition: Optional[str] = None
    temperature: Optional[float] = None
    description: Optional[str] = None
    humidity: Optional[float] = None
    wind_speed: Optional[float] = None
    date: Optional[datetime] = None


class WeatherForecast(BaseModel):
    """
    Forecast for a booking date together with the seating suggestion.
    """
    location: Optional[str] = None
    date: Optional[datetime] = None
    temperature: float
    feels_like: Optional[float] = None
    condition: str
    description: str
    humidity: Optional[float] = None
    wind_speed: Optional[float] = None
    recommendation: str = ""
    suggested_seating: SeatingPreference = SeatingPreference.NO_PREFERENCE
    is_closest: bool = False

    def to_weather_info(self) -> WeatherInfo:
        """Strip the forecast down to what a booking record keeps."""
        return WeatherInfo(
            condition=self.condition,
            temperature=self.temperature,
            description=self.description,
            humidity=self.humidity,
            wind_speed=self.wind_speed,
            date=self.date,
        )


class BookingCreate(BaseModel):
    """
    Pydantic model for validating new bookings before they are persisted.
    """
    customer_name: str = Field(..., min_length=2, max_length=100, description="Customer name")
    number_of_guests: int = Field(..., ge=1, le=20, description="Number of guests (1-20)")
    booking_date: date = Field(..., description="Booking date")
    booking_time: str = Field(..., pattern=TIME_PATTERN, description="24-hour HH:MM")
    cuisine_preference: Cuisine = Cuisine.OTHER
    special_requests: str = Field(default="", max_length=500)
    weather_info: Optional[WeatherInfo] = None
    seating_preference: SeatingPreference = SeatingPreference.NO_PREFERENCE
    status: BookingStatus = BookingStatus.CONFIRMED
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    table_number: Optional[int] = Field(default=None, ge=1)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("customer_name", mode="before")
    @classmethod
    def strip_customer_name(cls, v):
        """Trim whitespace before the length checks run."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("booking_date")
    @classmethod
    def validate_date_not_in_past(cls, v: date, info: ValidationInfo) -> date:
        """Validate that the booking date is not in the past."""
        if v < _today_from(info):
            raise ValueError("Booking date cannot be in the past")
        return v

    @field_validator("contact_phone")
    @classmethod
    def validate_phone_format(cls, v: Optional[str]) -> Optional[str]:
        """Accept 10-digit numbers with optional dashes, spaces and parentheses."""
        if v is None or v.strip() == "":
            return None
        cleaned = re.sub(r'[-()\s]', '', v)
        if not re.match(r'^[0-9]{10}$', cleaned):
            raise ValueError("Invalid phone number format")
        return cleaned

    @field_validator("contact_email")
    @classmethod
    def validate_email_format(cls, v: Optional[str]) -> Optional[str]:
        """Validate email format if provided."""
        if v is None or v.strip() == "":
            return None
        v = v.strip().lower()
        if not re.match(r'^[^\s@]+@[^\s@]+\.[^\s@]+$', v):
            raise ValueError("Invalid email format")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "customer_name": "Alice Smith",
                "number_of_guests": 4,
                "booking_date": "2026-12-10",
                "booking_time": "19:00",
                "cuisine_preference": "Italian",
                "special_requests": "birthday, window",
                "seating_preference": "outdoor",
                "status": "confirmed"
            }
        }
    )


class BookingUpdate(BaseModel):
    """
    Partial update of an existing booking; only fields that were set are applied.
    """
    number_of_guests: Optional[int] = Field(default=None, ge=1, le=20)
    booking_date: Optional[date] = None
    booking_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    cuisine_preference: Optional[Cuisine] = None
    special_requests: Optional[str] = Field(default=None, max_length=500)
    seating_preference: Optional[SeatingPreference] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[BookingStatus] = None


class BookingResponse(BaseModel):
    """
    Pydantic model for formatting persisted bookings.
    """
    booking_id: str
    customer_name: str
    number_of_guests: int
    booking_date: date
    booking_time: str
    cuisine_preference: Cuisine
    special_requests: str
    weather_info: Optional[WeatherInfo] = None
    seating_preference: SeatingPreference
    status: BookingStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingPage(BaseModel):
    """One page of a filtered booking listing."""
    items: List[BookingResponse]
    count: int
    total: int
    page: int
    total_pages: int


class CountEntry(BaseModel):
    key: str
    count: int


class BookingStats(BaseModel):
    """Aggregate counts over all stored bookings."""
    total: int
    confirmed: int
    pending: int
    cancelled: int
    completed: int
    popular_cuisines: List[CountEntry]
    seating_preferences: List[CountEntry]
