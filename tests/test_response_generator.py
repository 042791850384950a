"""
Unit tests for template-based reply generation.
"""
import random
import pytest
from datetime import date

from response.generator import ResponseGenerator
from response.personality import AGENT_NAME, featured_cuisines_phrase
from response.prompts import (
    REPROMPTS,
    RESPONSE_TEMPLATES,
    get_available_intents,
    get_reprompt,
    get_templates,
)


class TestTemplates:
    """Test the template tables."""

    def test_every_intent_has_one_or_two_phrasings(self):
        for intent, phrasings in RESPONSE_TEMPLATES.items():
            assert 1 <= len(phrasings) <= 2, intent

    def test_unknown_intent_uses_fallback(self):
        assert get_templates("order_pizza") == RESPONSE_TEMPLATES["fallback"]

    def test_available_intents(self):
        intents = get_available_intents()
        assert "greeting" in intents
        assert "final_confirmation" in intents

    def test_reprompt_for_unknown_step(self):
        with pytest.raises(KeyError):
            get_reprompt("greeting")


class TestResponseGenerator:
    """Test rendering."""

    def test_same_seed_same_choice(self):
        first = ResponseGenerator(rng=random.Random(7))
        second = ResponseGenerator(rng=random.Random(7))

        replies = [first.generate("greeting") for _ in range(10)]
        assert replies == [second.generate("greeting") for _ in range(10)]

    def test_choice_comes_from_the_templates(self, responder):
        rendered = {
            template.format(restaurant=responder.restaurant_name, agent=responder.agent_name)
            for template in RESPONSE_TEMPLATES["greeting"]
        }
        for _ in range(10):
            assert responder.generate("greeting") in rendered

    def test_single_phrasing_does_not_consume_randomness(self):
        rng = random.Random(3)
        expected_next = random.Random(3).random()

        ResponseGenerator(rng=rng).generate("finalizing", name="Alice")

        assert rng.random() == expected_next

    def test_placeholders_are_filled(self, responder):
        reply = responder.generate("final_confirmation", name="Alice", booking_id="BK123", date="tomorrow", time="19:00")

        for value in ("Alice", "BK123", "tomorrow", "19:00"):
            assert value in reply
        assert "{" not in reply

    def test_missing_placeholders_render_blank(self, responder):
        reply = responder.generate("final_confirmation")

        assert "{" not in reply
        assert "None" not in reply

    def test_dates_are_spoken(self, responder):
        reply = responder.generate("confirm_date", date=date(2026, 12, 10))
        assert "Thursday, December 10" in reply

    def test_restaurant_name(self):
        generator = ResponseGenerator(rng=random.Random(0), restaurant_name="Trattoria Uno")
        assert "Trattoria Uno" in generator.generate("greeting")

    def test_greeting_introduces_the_host(self, responder):
        assert AGENT_NAME in responder.generate("greeting")

    def test_host_name(self):
        generator = ResponseGenerator(rng=random.Random(0), agent_name="Sam")
        assert "Sam" in generator.generate("greeting")

    def test_unknown_intent(self, responder):
        assert responder.generate("order_pizza") in RESPONSE_TEMPLATES["fallback"]

    def test_reprompt(self, responder):
        assert responder.reprompt("awaiting_guests") == REPROMPTS["awaiting_guests"]
        assert featured_cuisines_phrase() in responder.reprompt("awaiting_cuisine")

    def test_booking_summary(self, responder):
        summary = responder.booking_summary(
            {"number_of_guests": 4, "date_text": "tomorrow", "time_text": "19:00"},
            weather="Sunny and warm.",
        )

        for value in ("4", "tomorrow", "19:00", "Any", "Sunny and warm."):
            assert value in summary
