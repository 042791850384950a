"""
Response Generator - template-based reply generation.

This module renders the agent's replies. Each intent has one or two
phrasings (see ``prompts``); one is picked with an injectable random source
so that tests can seed it and get a deterministic choice.
"""
import random
from datetime import date
from typing import Any, Dict, Optional
from loguru import logger

from .prompts import get_templates, get_reprompt
from .personality import AGENT_NAME, ANY_CUISINE, RESTAURANT_NAME, featured_cuisines_phrase


class _BlankDefault(dict):
    """Format mapping that renders unknown placeholders as empty strings."""

    def __missing__(self, key: str) -> str:
        return ""


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.strftime('%A, %B %d')
    return str(value)


class ResponseGenerator:
    """
    Renders reply text for dialogue intents.

    Attributes:
        rng: Random source used to pick between phrasings
        restaurant_name: Name spoken in the greeting
        agent_name: Name the host introduces itself with
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        restaurant_name: Optional[str] = None,
        agent_name: Optional[str] = None,
    ):
        self.rng = rng or random.Random()
        self.restaurant_name = restaurant_name or RESTAURANT_NAME
        self.agent_name = agent_name or AGENT_NAME

    def generate(self, intent: str, **context: Any) -> str:
        """
        Render one phrasing of an intent.

        Args:
            intent: Template key, e.g. "confirm_guests"
            **context: Placeholder values

        Returns:
            Reply text
        """
        templates = get_templates(intent)
        template = templates[0] if len(templates) == 1 else self.rng.choice(templates)

        values = _BlankDefault(restaurant=self.restaurant_name, agent=self.agent_name)
        values.update({key: _format_value(value) for key, value in context.items()})

        reply = template.format_map(values)
        logger.debug(f"Generated '{intent}' reply: {reply!r}")
        return reply

    def reprompt(self, step: str) -> str:
        """Re-ask for whatever the given step is still missing."""
        return get_reprompt(step).format(cuisines=featured_cuisines_phrase())

    def booking_summary(self, data: Dict[str, Any], weather: Optional[str] = None) -> str:
        """
        Render the pre-name confirmation summary.

        Args:
            data: Session data snapshot
            weather: Optional weather line to include

        Returns:
            Summary reply asking for the customer's name
        """
        return self.generate(
            "confirm_booking",
            guests=data.get("number_of_guests"),
            date=data.get("date_text"),
            time=data.get("time_text"),
            cuisine=data.get("cuisine_preference") or ANY_CUISINE,
            weather=weather or "",
        )
