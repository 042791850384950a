"""
Booking Agent Orchestrator - drives the dialogue engine and its collaborators.

This module provides the BookingAgent class. It hands every utterance to the
DialogueEngine, runs the action the engine asks for (weather lookup or
booking creation) and publishes realtime events about the conversation.
Collaborator failures are handled here, not in the engine: a weather failure
falls back to "no preference" seating, and a persistence failure keeps the
session so the guest can try again.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional

from loguru import logger

from conversation.context import ConversationSession
from conversation.state_manager import DialogueEngine
from conversation.states import ConversationStep, RequiredAction
from error_handling.error_messages import WEATHER_FALLBACK_MESSAGE, get_error_message
from error_handling.exceptions import BookingSystemError, WeatherServiceError
from error_handling.logging_config import LogContext, log_error_with_context
from models.schemas import BookingResponse, Location, SeatingPreference, WeatherForecast
from services.notification_service import EventPublisher, LoggingEventPublisher
from services.weather_service import WeatherService


def _jsonable(data: Dict[str, Any]) -> Dict[str, Any]:
    """Session data with dates and enums turned into plain strings."""
    result = {}
    for key, value in data.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, (date, datetime)):
            value = value.isoformat()
        result[key] = value
    return result


@dataclass
class AgentReply:
    """
    Everything the agent produced for one utterance.

    Attributes:
        reply_text: What to say to the guest
        next_step: Dialogue step after this turn
        required_action: Action the engine asked for, already executed
        session_data: Snapshot of the accumulated session data
        extracted: Fields found in the utterance
        weather: Forecast fetched during this turn, if any
        booking: Booking created during this turn, if any
        error: Technical message of a collaborator failure, if any
    """
    reply_text: str
    next_step: ConversationStep
    required_action: Optional[RequiredAction] = None
    session_data: Dict[str, Any] = field(default_factory=dict)
    extracted: Dict[str, Any] = field(default_factory=dict)
    weather: Optional[WeatherForecast] = None
    booking: Optional[BookingResponse] = None
    error: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.booking is not None


class BookingAgent:
    """
    Caller of the dialogue engine.

    Attributes:
        engine: Dialogue engine owning the sessions
        weather_service: Forecast collaborator; None disables weather lookups
        publisher: Realtime event publisher
        location: Location used for forecasts
    """

    def __init__(
        self,
        engine: DialogueEngine,
        weather_service: Optional[WeatherService] = None,
        publisher: Optional[EventPublisher] = None,
        location: Optional[Location] = None,
    ):
        self.engine = engine
        self.weather_service = weather_service
        self.publisher = publisher or LoggingEventPublisher()
        self.location = location
        self._forecasts: Dict[str, WeatherForecast] = {}

        logger.info(
            f"BookingAgent initialized (weather: {'enabled' if weather_service else 'disabled'})"
        )

    def _publish(self, event: str, payload: Dict[str, Any], room: Optional[str] = None) -> None:
        payload = {**payload, "timestamp": datetime.now().isoformat()}
        self.publisher.publish(event, payload, room)

    def handle_utterance(self, session_id: str, text: str) -> AgentReply:
        """
        Process one utterance end to end.

        Args:
            session_id: Conversation identifier
            text: Raw utterance

        Returns:
            AgentReply for the turn

        Raises:
            InputValidationError: If session_id or text is missing

        Any exception from the engine is published as an "agent-error"
        event before it propagates.
        """
        with LogContext(session_id=session_id):
            self._publish(
                "agent-processing",
                {"session_id": session_id, "status": "processing",
                 "message": "Agent is processing your request..."},
                room=session_id,
            )

            try:
                result = self.engine.process_turn(session_id, text)
            except Exception as e:
                log_error_with_context(e, {"session_id": session_id, "operation": "process_turn"})
                self._publish(
                    "agent-error",
                    {"session_id": session_id, "error": str(e)},
                    room=session_id,
                )
                raise

            self._publish(
                "info-extracted",
                {"session_id": session_id, "extracted_info": _jsonable(result.extracted)},
                room=session_id,
            )

            reply = AgentReply(
                reply_text=result.reply_text,
                next_step=result.next_step,
                required_action=result.required_action,
                session_data=result.session_data,
                extracted=result.extracted,
            )

            if result.required_action == RequiredAction.FETCH_WEATHER:
                self._run_weather_lookup(session_id, reply)
            elif result.required_action == RequiredAction.CREATE_BOOKING:
                self._run_booking_creation(session_id, reply)

            session_data = _jsonable(reply.session_data)
            self._publish(
                "agent-response",
                {"session_id": session_id, "response": reply.reply_text,
                 "next_step": reply.next_step.value, "session_data": session_data},
                room=session_id,
            )
            self._publish(
                "conversation-update",
                {"session_id": session_id, "step": reply.next_step.value, "data": session_data},
                room=session_id,
            )
            return reply

    def _run_weather_lookup(self, session_id: str, reply: AgentReply) -> None:
        if self.weather_service is None:
            return

        session = self.engine.get_session(session_id)
        target_date = session.data.parsed_date if session else None
        if target_date is None:
            return

        try:
            forecast = self.weather_service.get_forecast(target_date, self.location)
        except WeatherServiceError as e:
            log_error_with_context(e, {"session_id": session_id, "date": str(target_date)}, "WARNING")
            self._publish(
                "seating-suggestion",
                {"session_id": session_id,
                 "suggested_seating": SeatingPreference.NO_PREFERENCE.value,
                 "message": WEATHER_FALLBACK_MESSAGE},
                room=session_id,
            )
            self._append_weather_message(reply, WEATHER_FALLBACK_MESSAGE)
            reply.error = str(e)
            return

        self._forecasts[session_id] = forecast
        reply.weather = forecast
        self._append_weather_message(reply, forecast.recommendation)

        self._publish(
            "weather-recommendation",
            {"session_id": session_id, "weather": forecast.model_dump(mode="json"),
             "is_closest": forecast.is_closest},
            room=session_id,
        )
        self._publish(
            "seating-suggestion",
            {"session_id": session_id,
             "suggested_seating": forecast.suggested_seating.value,
             "message": forecast.recommendation},
            room=session_id,
        )

    def _append_weather_message(self, reply: AgentReply, weather_message: str) -> None:
        suggestion = self.engine.responder.generate("weather_suggestion", weather_message=weather_message)
        reply.reply_text = f"{reply.reply_text} {suggestion}"

    def _run_booking_creation(self, session_id: str, reply: AgentReply) -> None:
        try:
            outcome = self.engine.create_booking_from_session(
                session_id, weather=self._forecasts.get(session_id)
            )
        except BookingSystemError as e:
            log_error_with_context(e, {"session_id": session_id, "operation": "create_booking"})
            self._publish(
                "agent-error",
                {"session_id": session_id, "error": e.message},
                room=session_id,
            )
            reply.reply_text = get_error_message(e)
            reply.error = e.message
            return

        self._forecasts.pop(session_id, None)
        reply.booking = outcome.booking
        reply.reply_text = outcome.reply_text

        self._publish(
            "voice-booking-created",
            {"session_id": session_id,
             "booking": outcome.booking.model_dump(mode="json"),
             "message": f"Voice booking created: {outcome.booking.booking_id}"},
        )

    def update_seating_preference(self, session_id: str, preference: str) -> Dict[str, Any]:
        """
        Store an explicit seating preference; it beats the weather suggestion.

        Raises:
            InputValidationError: If an argument is missing or unknown
        """
        session_data = self.engine.update_seating_preference(session_id, preference)
        seating = str(session_data["seating_preference"])
        self._publish(
            "preference-updated",
            {"session_id": session_id, "seating_preference": seating,
             "message": self.engine.responder.generate("seating_updated", seating=seating)},
            room=session_id,
        )
        return session_data

    def reset(self, session_id: str) -> bool:
        """
        Drop a conversation and its cached forecast.

        Returns:
            True if a session existed
        """
        deleted = self.engine.reset_session(session_id)
        self._forecasts.pop(session_id, None)
        if deleted:
            self._publish(
                "session-reset",
                {"session_id": session_id, "message": "Conversation reset"},
                room=session_id,
            )
        return deleted

    def get_session(self, session_id: str) -> Optional[ConversationSession]:
        return self.engine.get_session(session_id)

    def cached_forecast(self, session_id: str) -> Optional[WeatherForecast]:
        return self._forecasts.get(session_id)
