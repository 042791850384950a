"""
Dialogue engine for orchestrating the booking conversation.

This module provides the DialogueEngine class that:
- Owns the per-session conversation state (through a SessionStore)
- Runs the extractor on every utterance and merges the result
- Dispatches to the current step's handler
- Builds and hands finalized bookings to the persistence collaborator
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Dict, Mapping, Optional, Union

from loguru import logger
from pydantic import ValidationError

from error_handling.exceptions import (
    BookingValidationError,
    CollaboratorError,
    InputValidationError,
    UnknownSessionError,
)
from error_handling.error_messages import format_date_friendly
from error_handling.logging_config import log_booking_event, log_conversation_event
from models.schemas import (
    BookingCreate,
    BookingResponse,
    BookingStatus,
    Cuisine,
    SeatingPreference,
    WeatherForecast,
    WeatherInfo,
)
from nlu.extractor import extract_booking_info
from response.generator import ResponseGenerator
from .context import ConversationSession
from .handlers import STEP_HANDLERS, StepHandler
from .session_store import InMemorySessionStore, SessionStore
from .states import ConversationStep, RequiredAction

DEFAULT_BOOKING_TIME = "19:00"

WeatherData = Union[WeatherForecast, Mapping[str, Any]]


@dataclass
class TurnResult:
    """
    Result of processing one utterance.

    Attributes:
        reply_text: What the agent says back
        next_step: Step the session is now in
        required_action: Work the caller must do before the next turn, if any
        session_data: Snapshot of the accumulated session data
        extracted: Fields found in this utterance alone
    """
    reply_text: str
    next_step: ConversationStep
    required_action: Optional[RequiredAction] = None
    session_data: Dict[str, Any] = field(default_factory=dict)
    extracted: Dict[str, Any] = field(default_factory=dict)


@dataclass
class BookingOutcome:
    """A persisted booking and the confirmation spoken to the guest."""
    booking: BookingResponse
    reply_text: str


def parse_seating_preference(
    value: Union[str, SeatingPreference],
    field_name: str = "seating_preference",
) -> SeatingPreference:
    """
    Convert a seating value to the enum.

    Raises:
        InputValidationError: If the value is not indoor, outdoor or "no preference"
    """
    try:
        return SeatingPreference(value)
    except ValueError:
        raise InputValidationError(
            f"Unknown seating preference: {value!r}",
            field=field_name,
            value=value,
        )


def _seating_from_weather(weather: Optional[WeatherData]) -> Optional[SeatingPreference]:
    if weather is None:
        return None
    if isinstance(weather, WeatherForecast):
        return weather.suggested_seating
    suggested = weather.get("suggested_seating")
    return parse_seating_preference(suggested, "weather.suggested_seating") if suggested else None


def resolve_seating_preference(
    session: ConversationSession,
    explicit: Optional[Union[str, SeatingPreference]] = None,
    weather: Optional[WeatherData] = None,
) -> SeatingPreference:
    """
    Decide the seating for a booking.

    Precedence, highest first: the preference passed with the request, the
    preference stored by an earlier update, the weather suggestion, and
    finally "no preference".

    Args:
        session: Session being finalized
        explicit: Preference supplied with this request
        weather: Forecast (or forecast dict) with a suggested seating

    Returns:
        The resolved SeatingPreference

    Raises:
        InputValidationError: If the explicit or suggested value is unknown
    """
    if explicit:
        return parse_seating_preference(explicit)
    if session.data.seating_preference is not None:
        return session.data.seating_preference
    return _seating_from_weather(weather) or SeatingPreference.NO_PREFERENCE


def _to_weather_info(weather: Optional[WeatherData]) -> Optional[WeatherInfo]:
    if weather is None:
        return None
    if isinstance(weather, WeatherForecast):
        return weather.to_weather_info()
    try:
        return WeatherInfo.model_validate(dict(weather))
    except ValidationError as e:
        raise InputValidationError(
            f"Malformed weather data: {e.errors()[0]['msg']}",
            field="weather",
            value=dict(weather),
        ) from e


def resolve_booking_date(parsed_date: Optional[date], now: datetime) -> date:
    """
    Booking date for a session.

    A parsed date stands for midnight at the start of that day. If that
    moment is already past, the date moves forward exactly one day, so
    "today" said after midnight books tomorrow. Without a parsed date the
    booking is for the current day.
    """
    if parsed_date is None:
        return now.date()
    if datetime.combine(parsed_date, time.min) < now:
        return parsed_date + timedelta(days=1)
    return parsed_date


class DialogueEngine:
    """
    Drives booking conversations one utterance at a time.

    Each call advances a session by at most one step, even when the
    utterance mentions several fields; fields for later steps are stored and
    picked up when their step is reached.

    Attributes:
        sessions: Store holding every in-progress session
        booking_store: Persistence collaborator with ``create_booking``
        responder: Reply renderer
        clock: Callable returning the current moment
    """

    def __init__(
        self,
        session_store: Optional[SessionStore] = None,
        booking_store: Optional[Any] = None,
        responder: Optional[ResponseGenerator] = None,
        clock: Optional[Callable[[], datetime]] = None,
        default_booking_time: str = DEFAULT_BOOKING_TIME,
    ):
        """
        Initialize the dialogue engine.

        Args:
            session_store: Session storage (default: a new InMemorySessionStore)
            booking_store: Object with ``create_booking(BookingCreate)``, e.g. BookingService
            responder: Reply renderer (default: unseeded ResponseGenerator)
            clock: Source of "now" for relative dates and past-date repair
            default_booking_time: Time used when the guest never gave one
        """
        self.sessions = session_store if session_store is not None else InMemorySessionStore()
        self.booking_store = booking_store
        self.responder = responder or ResponseGenerator()
        self.clock = clock or datetime.now
        self.default_booking_time = default_booking_time
        self.handlers: Dict[ConversationStep, StepHandler] = dict(STEP_HANDLERS)

        logger.info(f"DialogueEngine initialized with {type(self.sessions).__name__}")

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    def process_turn(self, session_id: str, text: str) -> TurnResult:
        """
        Process one user utterance.

        Args:
            session_id: Conversation identifier; unknown ids start a new session
            text: Raw utterance

        Returns:
            TurnResult with the reply, the new step and any required action

        Raises:
            InputValidationError: If session_id or text is missing
        """
        _require(session_id, "session_id", "Session id is required")
        if text is None or not text.strip():
            raise InputValidationError("Text input is required", field="text", value=text)

        session = self.sessions.get(session_id)
        if session is None:
            session = self.sessions.create(session_id)
            log_conversation_event("STARTED", session_id, session.step.value)

        session.add_turn("user", text)

        extracted = extract_booking_info(text, reference=self.clock())
        updated = session.data.merge(extracted)
        if updated:
            logger.debug(f"Session {session_id} updated fields: {updated}")

        previous_step = session.step
        outcome = self.handlers[previous_step].handle(session, extracted, text, self.responder)

        session.step = outcome.next_step
        session.add_turn("agent", outcome.reply)

        if outcome.next_step != previous_step:
            log_conversation_event(
                "STEP_CHANGE",
                session_id,
                outcome.next_step.value,
                {"from": previous_step.value},
            )
        if outcome.required_action is not None:
            logger.info(f"Session {session_id} requires action: {outcome.required_action}")

        return TurnResult(
            reply_text=outcome.reply,
            next_step=outcome.next_step,
            required_action=outcome.required_action,
            session_data=session.data.snapshot(),
            extracted=extracted.to_dict(),
        )

    # ------------------------------------------------------------------
    # Out-of-band updates
    # ------------------------------------------------------------------

    def update_seating_preference(
        self,
        session_id: str,
        preference: Union[str, SeatingPreference],
    ) -> Dict[str, Any]:
        """
        Store an explicit seating preference for a session.

        The session is created if it does not exist yet.

        Args:
            session_id: Conversation identifier
            preference: "indoor", "outdoor" or "no preference"

        Returns:
            Snapshot of the session data

        Raises:
            InputValidationError: If an argument is missing or the preference is unknown
        """
        _require(session_id, "session_id", "Session id is required")
        _require(preference, "seating_preference", "Seating preference is required")
        seating = parse_seating_preference(preference)

        session = self.sessions.get_or_create(session_id)
        session.data.seating_preference = seating
        log_conversation_event(
            "PREFERENCE_UPDATED", session_id, session.step.value, {"seating": seating.value}
        )
        return session.data.snapshot()

    def reset_session(self, session_id: str) -> bool:
        """
        Delete a session immediately.

        Returns:
            True if a session was deleted
        """
        _require(session_id, "session_id", "Session id is required")
        deleted = self.sessions.delete(session_id)
        log_conversation_event("RESET", session_id, details={"existed": deleted})
        return deleted

    def get_session(self, session_id: str) -> Optional[ConversationSession]:
        """Look up a session without creating it."""
        return self.sessions.get(session_id)

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def build_booking_request(
        self,
        session: ConversationSession,
        weather: Optional[WeatherData] = None,
        seating_preference: Optional[Union[str, SeatingPreference]] = None,
    ) -> BookingCreate:
        """
        Turn accumulated session data into a validated booking request.

        The date comes from ``resolve_booking_date``; missing time and
        cuisine get their defaults.

        Args:
            session: Session to finalize
            weather: Forecast for the booking date, if one was fetched
            seating_preference: Explicit preference for this request

        Returns:
            Validated BookingCreate

        Raises:
            InputValidationError: If the seating value or weather data is unusable
            BookingValidationError: If the data breaks a booking rule
        """
        data = session.data
        now = self.clock()
        today = now.date()
        booking_date = resolve_booking_date(data.parsed_date, now)

        special_requests = data.special_requests
        if isinstance(special_requests, list):
            special_requests = ", ".join(special_requests)

        payload = {
            "customer_name": data.customer_name,
            "number_of_guests": data.number_of_guests,
            "booking_date": booking_date,
            "booking_time": data.time_text or self.default_booking_time,
            "cuisine_preference": data.cuisine_preference or Cuisine.OTHER,
            "special_requests": special_requests or "",
            "weather_info": _to_weather_info(weather),
            "seating_preference": resolve_seating_preference(session, seating_preference, weather),
            "status": BookingStatus.CONFIRMED,
        }

        try:
            return BookingCreate.model_validate(payload, context={"today": today})
        except ValidationError as e:
            errors = e.errors()
            first = errors[0]
            field_name = str(first["loc"][0]) if first["loc"] else None
            raise BookingValidationError(
                f"Invalid booking data for session {session.session_id}: {first['msg']}",
                field=field_name,
                value=payload.get(field_name) if field_name else None,
                details=[{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in errors],
            ) from e

    def create_booking_from_session(
        self,
        session_id: str,
        weather: Optional[WeatherData] = None,
        seating_preference: Optional[Union[str, SeatingPreference]] = None,
    ) -> BookingOutcome:
        """
        Persist the booking a session has collected and end the session.

        The session is deleted only after the booking store succeeded; if
        validation or persistence fails the session is left untouched.

        Args:
            session_id: Conversation identifier
            weather: Forecast fetched for the booking date
            seating_preference: Explicit seating for this request

        Returns:
            BookingOutcome with the stored booking and the confirmation reply

        Raises:
            InputValidationError: If session_id is missing or the seating value is unknown
            UnknownSessionError: If the session does not exist
            BookingValidationError: If the collected data is not bookable
            CollaboratorError: If no booking store is configured, or the store fails
        """
        _require(session_id, "session_id", "Session id is required")
        session = self.sessions.get(session_id)
        if session is None:
            raise UnknownSessionError(session_id)
        if self.booking_store is None:
            raise CollaboratorError("No booking store configured", service="booking_store")

        request = self.build_booking_request(session, weather, seating_preference)
        booking = self.booking_store.create_booking(request)

        reply = self.responder.generate(
            "final_confirmation",
            name=booking.customer_name,
            booking_id=booking.booking_id,
            date=format_date_friendly(booking.booking_date, today=self.clock().date()),
            time=booking.booking_time,
        )
        session.add_turn("agent", reply)
        self.sessions.delete(session_id)

        log_booking_event(
            "CREATED",
            session_id=session_id,
            booking_id=booking.booking_id,
            details={
                "guests": booking.number_of_guests,
                "date": str(booking.booking_date),
                "time": booking.booking_time,
                "seating": str(booking.seating_preference),
            },
        )
        log_conversation_event("COMPLETED", session_id, session.step.value)

        return BookingOutcome(booking=booking, reply_text=reply)


def _require(value: Any, field_name: str, message: str) -> None:
    if not value:
        raise InputValidationError(message, field=field_name, value=value)
