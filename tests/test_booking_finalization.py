"""
Tests for turning a finished conversation into a stored booking.

Tests:
- Booking request defaults and past-date repair
- Unknown seating values
- Seating preference precedence
- Session deletion only after a successful store
- Unknown sessions and collaborator failures
"""
import pytest
from datetime import date, datetime
from unittest.mock import MagicMock

from conversation.state_manager import DialogueEngine, resolve_booking_date, resolve_seating_preference
from conversation.states import RequiredAction
from error_handling.error_messages import format_date_friendly
from error_handling.exceptions import (
    BookingValidationError,
    CollaboratorError,
    DatabaseError,
    InputValidationError,
    UnknownSessionError,
)
from models.schemas import BookingStatus, Cuisine, SeatingPreference


def complete_dialogue(engine, session_id="s1"):
    for text in ["2 guests", "tomorrow", "7pm", "thai", "birthday", "no", "my name is Alice Smith"]:
        result = engine.process_turn(session_id, text)
    assert result.required_action == RequiredAction.CREATE_BOOKING
    return result


@pytest.fixture
def session(engine):
    """A session at the name step, built directly."""
    session = engine.sessions.create("s1")
    session.data.number_of_guests = 3
    session.data.customer_name = "Carol"
    return session


class TestBuildBookingRequest:
    """Test how session data becomes a BookingCreate."""

    def test_defaults(self, engine, session, today):
        request = engine.build_booking_request(session)

        assert request.booking_date == today
        assert request.booking_time == "19:00"
        assert request.cuisine_preference == Cuisine.OTHER
        assert request.special_requests == ""
        assert request.seating_preference == SeatingPreference.NO_PREFERENCE
        assert request.status == BookingStatus.CONFIRMED
        assert request.weather_info is None

    def test_past_date_moves_one_day(self, engine, session):
        session.data.parsed_date = date(2026, 10, 18)

        request = engine.build_booking_request(session)
        assert request.booking_date == date(2026, 10, 19)

    def test_today_moves_to_tomorrow(self, engine, session, today):
        session.data.parsed_date = today
        assert engine.build_booking_request(session).booking_date == date(2026, 10, 20)

    def test_said_today_books_tomorrow(self, engine):
        for text in ["4 people", "today"]:
            engine.process_turn("s1", text)
        session = engine.get_session("s1")
        session.data.customer_name = "Carol"

        assert engine.build_booking_request(session).booking_date == date(2026, 10, 20)

    def test_unknown_explicit_seating(self, engine, session):
        with pytest.raises(InputValidationError) as exc_info:
            engine.build_booking_request(session, seating_preference="patio")
        assert exc_info.value.field == "seating_preference"

    def test_unknown_weather_seating(self, engine, session):
        weather = {"condition": "Clear", "temperature": 24.0, "suggested_seating": "patio"}

        with pytest.raises(InputValidationError):
            engine.build_booking_request(session, weather=weather)

    def test_special_request_list_is_joined(self, engine, session):
        session.data.special_requests = ["birthday", "window"]
        assert engine.build_booking_request(session).special_requests == "birthday, window"

    def test_special_request_text_is_kept(self, engine, session):
        session.data.special_requests = "balloons"
        assert engine.build_booking_request(session).special_requests == "balloons"

    def test_configured_default_time(self, booking_service, responder, reference_now):
        engine = DialogueEngine(
            booking_store=booking_service,
            responder=responder,
            clock=lambda: reference_now,
            default_booking_time="18:30",
        )
        session = engine.sessions.create("s1")
        session.data.number_of_guests = 2
        session.data.customer_name = "Dan"

        assert engine.build_booking_request(session).booking_time == "18:30"

    def test_weather_is_attached(self, engine, session, sunny_forecast):
        request = engine.build_booking_request(session, weather=sunny_forecast)

        assert request.weather_info.condition == "Clear"
        assert request.weather_info.temperature == 26.0

    def test_weather_dict_is_accepted(self, engine, session):
        weather = {"condition": "Rain", "temperature": 22.5, "suggested_seating": "indoor"}
        request = engine.build_booking_request(session, weather=weather)

        assert request.weather_info.condition == "Rain"
        assert request.seating_preference == SeatingPreference.INDOOR

    def test_short_name_is_rejected(self, engine, session):
        session.data.customer_name = "A"

        with pytest.raises(BookingValidationError) as exc_info:
            engine.build_booking_request(session)

        assert exc_info.value.field == "customer_name"

    def test_zero_guests_is_rejected(self, engine, session):
        session.data.number_of_guests = 0

        with pytest.raises(BookingValidationError) as exc_info:
            engine.build_booking_request(session)

        assert exc_info.value.field == "number_of_guests"


class TestResolveBookingDate:
    """Test the date a booking is made for."""

    def test_no_date_is_today(self, reference_now, today):
        assert resolve_booking_date(None, reference_now) == today

    def test_future_date_is_kept(self, reference_now):
        assert resolve_booking_date(date(2026, 10, 25), reference_now) == date(2026, 10, 25)

    def test_exact_midnight_is_kept(self):
        midnight = datetime(2026, 10, 19, 0, 0)
        assert resolve_booking_date(date(2026, 10, 19), midnight) == date(2026, 10, 19)

    def test_after_midnight_moves_one_day(self):
        just_after = datetime(2026, 10, 19, 0, 1)
        assert resolve_booking_date(date(2026, 10, 19), just_after) == date(2026, 10, 20)


class TestSeatingPrecedence:
    """Explicit request > stored preference > weather > no preference."""

    def test_weather_suggestion_used_alone(self, session, sunny_forecast):
        assert resolve_seating_preference(session, weather=sunny_forecast) == SeatingPreference.OUTDOOR

    def test_stored_preference_beats_weather(self, engine, session, sunny_forecast):
        engine.update_seating_preference("s1", "indoor")

        request = engine.build_booking_request(session, weather=sunny_forecast)
        assert request.seating_preference == SeatingPreference.INDOOR

    def test_explicit_beats_stored(self, engine, session, sunny_forecast):
        engine.update_seating_preference("s1", "indoor")

        seating = resolve_seating_preference(session, "no preference", sunny_forecast)
        assert seating == SeatingPreference.NO_PREFERENCE

    def test_nothing_known(self, session):
        assert resolve_seating_preference(session) == SeatingPreference.NO_PREFERENCE


class TestUpdateSeatingPreference:
    """Test out-of-band preference updates."""

    def test_creates_session_when_missing(self, engine):
        data = engine.update_seating_preference("new", "outdoor")

        assert data == {"seating_preference": SeatingPreference.OUTDOOR}
        assert engine.get_session("new") is not None

    def test_unknown_value(self, engine):
        with pytest.raises(InputValidationError) as exc_info:
            engine.update_seating_preference("s1", "balcony")
        assert exc_info.value.field == "seating_preference"
        assert engine.get_session("s1") is None

    @pytest.mark.parametrize("session_id,preference", [("", "indoor"), ("s1", ""), ("s1", None)])
    def test_missing_arguments(self, engine, session_id, preference):
        with pytest.raises(InputValidationError):
            engine.update_seating_preference(session_id, preference)
        assert engine.get_session("s1") is None


class TestCreateBookingFromSession:
    """Test finalization against the SQLite booking service."""

    def test_creates_booking_and_deletes_session(self, engine, booking_service):
        complete_dialogue(engine)

        outcome = engine.create_booking_from_session("s1")
        booking = outcome.booking

        assert booking.booking_id.startswith("BK")
        assert booking.customer_name == "Alice Smith"
        assert booking.number_of_guests == 2
        assert booking.booking_date == date(2026, 10, 20)
        assert booking.booking_time == "19:00"
        assert booking.cuisine_preference == Cuisine.THAI
        assert booking.special_requests == "birthday"
        assert booking.status == BookingStatus.CONFIRMED
        assert outcome.reply_text

        assert engine.get_session("s1") is None
        assert booking_service.get_booking(booking.booking_id).customer_name == "Alice Smith"

    def test_explicit_seating_and_weather(self, engine, sunny_forecast):
        complete_dialogue(engine)

        outcome = engine.create_booking_from_session(
            "s1", weather=sunny_forecast, seating_preference="indoor"
        )

        assert outcome.booking.seating_preference == SeatingPreference.INDOOR
        assert outcome.booking.weather_info.condition == "Clear"

    def test_unknown_seating_keeps_session(self, engine, booking_service):
        complete_dialogue(engine)

        with pytest.raises(InputValidationError) as exc_info:
            engine.create_booking_from_session("s1", seating_preference="patio")

        assert exc_info.value.field == "seating_preference"
        assert engine.get_session("s1") is not None
        assert booking_service.list_bookings().total == 0

    def test_confirmation_speaks_the_date(self, engine, today):
        complete_dialogue(engine)

        outcome = engine.create_booking_from_session("s1")

        assert format_date_friendly(outcome.booking.booking_date, today) in outcome.reply_text
        assert outcome.booking.booking_date.isoformat() not in outcome.reply_text

    def test_unknown_session(self, engine, booking_service):
        with pytest.raises(UnknownSessionError):
            engine.create_booking_from_session("nobody")

        assert booking_service.list_bookings().total == 0

    def test_missing_session_id(self, engine):
        with pytest.raises(InputValidationError):
            engine.create_booking_from_session("")

    def test_validation_failure_keeps_session(self, engine, session, booking_service):
        session.data.customer_name = "X"

        with pytest.raises(BookingValidationError):
            engine.create_booking_from_session("s1")

        assert engine.get_session("s1") is session
        assert booking_service.list_bookings().total == 0

    def test_store_failure_keeps_session(self, session_store, responder, reference_now):
        store = MagicMock()
        store.create_booking.side_effect = DatabaseError("disk full", operation="create_booking")
        engine = DialogueEngine(
            session_store=session_store,
            booking_store=store,
            responder=responder,
            clock=lambda: reference_now,
        )
        complete_dialogue(engine)

        with pytest.raises(DatabaseError):
            engine.create_booking_from_session("s1")

        assert engine.get_session("s1") is not None
        store.create_booking.assert_called_once()

    def test_without_booking_store(self, responder, reference_now):
        engine = DialogueEngine(responder=responder, clock=lambda: reference_now)
        complete_dialogue(engine)

        with pytest.raises(CollaboratorError):
            engine.create_booking_from_session("s1")
        assert engine.get_session("s1") is not None
