"""
Pytest configuration and shared fixtures.
"""
import sys
import random
from pathlib import Path
from datetime import date, datetime
from typing import Any, Callable, Dict, Generator, List, Optional
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from config import reset_settings
from conversation.session_store import InMemorySessionStore
from conversation.state_manager import DialogueEngine
from agent.orchestrator import BookingAgent
from error_handling.exceptions import WeatherServiceError
from models.database import Base
from models.schemas import BookingCreate, SeatingPreference, WeatherForecast
from response.generator import ResponseGenerator
from services.booking_service import BookingService
from services.notification_service import InMemoryEventPublisher

# Monday 19 October 2026, noon
REFERENCE_NOW = datetime(2026, 10, 19, 12, 0)
TODAY = REFERENCE_NOW.date()


class StubWeatherService:
    """Weather collaborator returning a fixed forecast or raising a fixed error."""

    def __init__(self, forecast: Optional[WeatherForecast] = None, error: Optional[Exception] = None):
        self.forecast = forecast
        self.error = error
        self.calls: List[date] = []

    def get_forecast(self, target_date: date, location=None) -> WeatherForecast:
        self.calls.append(target_date)
        if self.error is not None:
            raise self.error
        return self.forecast


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """
    Keep cached settings and the real environment out of tests.
    """
    monkeypatch.delenv("OPENWEATHER_API_KEY", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def reference_now() -> datetime:
    """The moment every utterance is made at in tests."""
    return REFERENCE_NOW


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so template choice is deterministic."""
    return random.Random(1234)


@pytest.fixture
def responder(rng: random.Random) -> ResponseGenerator:
    return ResponseGenerator(rng=rng)


@pytest.fixture(scope="function")
def db_engine():
    """
    Create an in-memory SQLite engine with all tables.
    Each test gets a fresh database.
    """
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """
    Create a database session for testing with automatic rollback.
    """
    SessionLocal = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)
    session = SessionLocal()

    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture
def booking_service(db_session: Session) -> BookingService:
    return BookingService(db_session)


@pytest.fixture
def make_booking(today: date) -> Callable[..., BookingCreate]:
    """
    Factory for valid booking requests; keyword arguments override fields.
    Dates are validated against the fixed test "today".
    """
    def factory(**overrides: Any) -> BookingCreate:
        fields: Dict[str, Any] = {
            "customer_name": "Alice Smith",
            "number_of_guests": 4,
            "booking_date": date(2026, 10, 20),
            "booking_time": "19:00",
            "cuisine_preference": "Italian",
            "special_requests": "",
            "seating_preference": "indoor",
        }
        fields.update(overrides)
        return BookingCreate.model_validate(fields, context={"today": today})

    return factory


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def engine(session_store, booking_service, responder, reference_now) -> DialogueEngine:
    """Dialogue engine wired to SQLite persistence and a frozen clock."""
    return DialogueEngine(
        session_store=session_store,
        booking_store=booking_service,
        responder=responder,
        clock=lambda: reference_now,
    )


@pytest.fixture
def publisher() -> InMemoryEventPublisher:
    return InMemoryEventPublisher()


@pytest.fixture
def sunny_forecast() -> WeatherForecast:
    return WeatherForecast(
        location="Mumbai",
        date=datetime(2026, 10, 20, 12, 0),
        temperature=26.0,
        feels_like=27.5,
        condition="Clear",
        description="clear sky",
        humidity=60,
        wind_speed=3.2,
        recommendation="Perfect weather for outdoor dining!",
        suggested_seating=SeatingPreference.OUTDOOR,
    )


@pytest.fixture
def stub_weather(sunny_forecast) -> StubWeatherService:
    return StubWeatherService(forecast=sunny_forecast)


@pytest.fixture
def failing_weather() -> StubWeatherService:
    return StubWeatherService(error=WeatherServiceError("OpenWeather forecast request failed", status_code=503))


@pytest.fixture
def agent(engine, stub_weather, publisher) -> BookingAgent:
    return BookingAgent(engine, weather_service=stub_weather, publisher=publisher)


def run_dialogue(engine: DialogueEngine, session_id: str, utterances: List[str]):
    """Feed utterances in order and return the last TurnResult."""
    result = None
    for text in utterances:
        result = engine.process_turn(session_id, text)
    return result
