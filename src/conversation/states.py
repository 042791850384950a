"""
Conversation state definitions for the restaurant booking system.

This module defines every step of the booking dialogue and the actions the
engine can ask its caller to perform between turns.
"""

from enum import Enum


class ConversationStep(str, Enum):
    """
    Enum representing what the dialogue currently expects from the user.

    The conversation flows linearly through these steps:
    greeting -> awaiting_guests -> awaiting_date -> awaiting_time
    -> awaiting_cuisine -> awaiting_special_requests -> awaiting_name

    A step may repeat while its required data is missing, but never moves
    backwards. There is no terminal step: completion is signalled by the
    CREATE_BOOKING action instead.
    """

    GREETING = "greeting"
    """Initial step of a fresh session."""

    AWAITING_GUESTS = "awaiting_guests"
    """Waiting for the number of guests."""

    AWAITING_DATE = "awaiting_date"
    """Waiting for the booking date."""

    AWAITING_TIME = "awaiting_time"
    """Waiting for the booking time."""

    AWAITING_CUISINE = "awaiting_cuisine"
    """Waiting for a cuisine preference."""

    AWAITING_SPECIAL_REQUESTS = "awaiting_special_requests"
    """Collecting special requests until the user says no or proceed."""

    AWAITING_NAME = "awaiting_name"
    """Waiting for the name the booking is made under."""

    def __str__(self) -> str:
        """Return the string value of the step."""
        return self.value

    @classmethod
    def get_ordered_steps(cls) -> list['ConversationStep']:
        """
        Get the linear progression order of steps.

        Returns:
            List of ConversationStep in expected order
        """
        return [
            cls.GREETING,
            cls.AWAITING_GUESTS,
            cls.AWAITING_DATE,
            cls.AWAITING_TIME,
            cls.AWAITING_CUISINE,
            cls.AWAITING_SPECIAL_REQUESTS,
            cls.AWAITING_NAME,
        ]

    def position(self) -> int:
        """Index of this step in the progression order."""
        return self.get_ordered_steps().index(self)


class RequiredAction(str, Enum):
    """Work the caller must do against an external collaborator before the next turn."""

    FETCH_WEATHER = "fetch_weather"
    CREATE_BOOKING = "create_booking"

    def __str__(self) -> str:
        return self.value
