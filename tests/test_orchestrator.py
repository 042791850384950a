"""
Integration tests for the booking agent.

Tests:
- Event sequence for ordinary turns
- Weather lookup, caching and failure fallback
- Booking creation, broadcast and persistence failure
- Seating preference and reset events
"""
import pytest
from datetime import date
from unittest.mock import MagicMock

from agent.orchestrator import BookingAgent
from conversation.state_manager import DialogueEngine
from conversation.states import ConversationStep, RequiredAction
from error_handling.error_messages import WEATHER_FALLBACK_MESSAGE
from error_handling.exceptions import DatabaseError, InputValidationError
from models.schemas import SeatingPreference
from response.prompts import get_templates

TO_NAME_STEP = ["hi", "2 guests", "tomorrow", "7pm", "thai", "no"]


def talk(agent: BookingAgent, session_id: str, utterances):
    reply = None
    for text in utterances:
        reply = agent.handle_utterance(session_id, text)
    return reply


class TestEvents:
    """Test what is published on an ordinary turn."""

    def test_turn_event_sequence(self, agent, publisher):
        agent.handle_utterance("s1", "hello")

        assert publisher.names() == [
            "agent-processing",
            "info-extracted",
            "agent-response",
            "conversation-update",
        ]
        assert all(event.room == "s1" for event in publisher.events)
        assert all("timestamp" in event.payload for event in publisher.events)

    def test_payloads_are_plain_values(self, agent, publisher):
        agent.handle_utterance("s1", "4 people tomorrow, thai")

        extracted = publisher.events_named("info-extracted")[0].payload["extracted_info"]
        assert extracted["parsed_date"] == "2026-10-20"
        assert extracted["cuisine_preference"] == "Thai"

        update = publisher.events_named("conversation-update")[0].payload
        assert update["step"] == "awaiting_date"
        assert update["data"]["number_of_guests"] == 4

    def test_input_error_propagates(self, agent, publisher):
        with pytest.raises(InputValidationError):
            agent.handle_utterance("s1", "")

        assert publisher.names() == ["agent-processing", "agent-error"]
        error = publisher.events_named("agent-error")[0]
        assert error.room == "s1"
        assert error.payload["session_id"] == "s1"
        assert error.payload["error"]

    def test_unexpected_engine_failure_is_published(self, stub_weather, publisher):
        engine = MagicMock()
        engine.process_turn.side_effect = RuntimeError("store unavailable")
        agent = BookingAgent(engine, weather_service=stub_weather, publisher=publisher)

        with pytest.raises(RuntimeError):
            agent.handle_utterance("s1", "hello")

        errors = publisher.events_named("agent-error")
        assert len(errors) == 1
        assert errors[0].payload["error"] == "store unavailable"
        assert publisher.events_named("agent-response") == []


class TestWeather:
    """Test the weather lookup after the date step."""

    def test_forecast_is_fetched_and_cached(self, agent, publisher, stub_weather, sunny_forecast):
        reply = talk(agent, "s1", ["4 people", "tomorrow"])

        assert reply.required_action == RequiredAction.FETCH_WEATHER
        assert reply.weather == sunny_forecast
        assert reply.reply_text.endswith(sunny_forecast.recommendation)
        assert stub_weather.calls == [date(2026, 10, 20)]
        assert agent.cached_forecast("s1") == sunny_forecast

        suggestion = publisher.events_named("seating-suggestion")[0].payload
        assert suggestion["suggested_seating"] == "outdoor"
        assert publisher.events_named("weather-recommendation")[0].payload["weather"]["condition"] == "Clear"

    def test_failure_falls_back(self, engine, failing_weather, publisher):
        agent = BookingAgent(engine, weather_service=failing_weather, publisher=publisher)

        reply = talk(agent, "s1", ["4 people", "tomorrow"])

        assert reply.next_step == ConversationStep.AWAITING_TIME
        assert reply.weather is None
        assert reply.error
        assert reply.reply_text.endswith(WEATHER_FALLBACK_MESSAGE)
        assert agent.cached_forecast("s1") is None

        suggestion = publisher.events_named("seating-suggestion")[0].payload
        assert suggestion["suggested_seating"] == "no preference"
        assert publisher.events_named("weather-recommendation") == []

    def test_disabled_weather_is_skipped(self, engine, publisher):
        agent = BookingAgent(engine, publisher=publisher)

        reply = talk(agent, "s1", ["4 people", "tomorrow"])

        assert reply.required_action == RequiredAction.FETCH_WEATHER
        assert reply.weather is None
        assert reply.error is None
        assert publisher.events_named("seating-suggestion") == []


class TestBookingCreation:
    """Test finalization through the agent."""

    def test_booking_is_created(self, agent, publisher, booking_service, sunny_forecast):
        talk(agent, "s1", TO_NAME_STEP)

        reply = agent.handle_utterance("s1", "my name is Alice Smith")

        assert reply.completed
        assert reply.booking.customer_name == "Alice Smith"
        assert reply.booking.seating_preference == SeatingPreference.OUTDOOR
        assert reply.booking.weather_info.condition == sunny_forecast.condition
        assert reply.booking.booking_id in reply.reply_text
        assert agent.get_session("s1") is None
        assert agent.cached_forecast("s1") is None
        assert booking_service.list_bookings().total == 1

        created = publisher.events_named("voice-booking-created")
        assert len(created) == 1
        assert created[0].room is None
        assert created[0].payload["booking"]["booking_id"] == reply.booking.booking_id

    def test_preference_beats_weather(self, agent):
        talk(agent, "s1", TO_NAME_STEP)
        agent.update_seating_preference("s1", "indoor")

        reply = agent.handle_utterance("s1", "Alice Smith")

        assert reply.booking.seating_preference == SeatingPreference.INDOOR

    def test_persistence_failure_keeps_session(self, session_store, responder, reference_now, stub_weather, publisher):
        store = MagicMock()
        store.create_booking.side_effect = DatabaseError("connection lost", operation="create_booking")
        engine = DialogueEngine(
            session_store=session_store,
            booking_store=store,
            responder=responder,
            clock=lambda: reference_now,
        )
        agent = BookingAgent(engine, weather_service=stub_weather, publisher=publisher)
        talk(agent, "s1", TO_NAME_STEP)

        reply = agent.handle_utterance("s1", "Alice Smith")

        assert not reply.completed
        assert reply.error == "connection lost"
        assert reply.reply_text
        assert agent.get_session("s1") is not None
        assert agent.cached_forecast("s1") is not None
        assert publisher.events_named("agent-error")[0].payload["error"] == "connection lost"
        assert publisher.events_named("voice-booking-created") == []

    def test_invalid_name_keeps_session(self, agent, publisher):
        talk(agent, "s1", TO_NAME_STEP)

        reply = agent.handle_utterance("s1", "A")

        assert not reply.completed
        assert agent.get_session("s1").step == ConversationStep.AWAITING_NAME
        assert len(publisher.events_named("agent-error")) == 1

        reply = agent.handle_utterance("s1", "Alice")
        assert reply.completed


class TestPreferenceAndReset:
    """Test out-of-band operations."""

    def test_update_seating_preference(self, agent, publisher):
        data = agent.update_seating_preference("s1", "outdoor")

        assert data["seating_preference"] == SeatingPreference.OUTDOOR
        event = publisher.events_named("preference-updated")[0]
        assert event.payload["seating_preference"] == "outdoor"
        assert event.room == "s1"
        assert event.payload["message"] in [
            template.format(seating="outdoor") for template in get_templates("seating_updated")
        ]

    def test_unknown_preference_publishes_nothing(self, agent, publisher):
        with pytest.raises(InputValidationError):
            agent.update_seating_preference("s1", "patio")

        assert publisher.events_named("preference-updated") == []
        assert agent.get_session("s1") is None

    def test_reset(self, agent, publisher):
        talk(agent, "s1", ["4 people", "tomorrow"])

        assert agent.reset("s1") is True
        assert agent.get_session("s1") is None
        assert agent.cached_forecast("s1") is None
        assert len(publisher.events_named("session-reset")) == 1

    def test_reset_unknown_session(self, agent, publisher):
        assert agent.reset("nobody") is False
        assert publisher.events_named("session-reset") == []
