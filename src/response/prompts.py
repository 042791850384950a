"""
Reply Templates for Restaurant Booking Agent.

This module contains the reply templates for every dialogue intent. Each
intent has one or two phrasings; the generator picks one at random and fills
in the ``{placeholders}`` from the conversation context.
"""
from typing import Dict, List, Tuple


# Intent-keyed templates
# Placeholders missing from the context render as empty strings

RESPONSE_TEMPLATES: Dict[str, Tuple[str, ...]] = {
    "greeting": (
        "Hello! Welcome to {restaurant}, I'm {agent}. I'd be happy to help you book a table. "
        "How many guests will be dining with us?",
        "Hi there! Thanks for choosing {restaurant}. I'm {agent} and I'll help you with your reservation. "
        "How many people will be joining you?",
    ),
    "confirm_guests": (
        "Perfect! A table for {guests}. What date would you like to book?",
        "Great! {guests} guests noted. When would you like to dine with us?",
    ),
    "confirm_date": (
        "Excellent! {date} is noted. What time would you prefer?",
        "Perfect! I have {date} marked down. What time should I reserve for you?",
    ),
    "confirm_time": (
        "{time} sounds good! Do you have any cuisine preference?",
        "Perfect timing at {time}! What type of cuisine would you like?",
    ),
    "confirm_cuisine": (
        "Excellent choice! {cuisine} cuisine it is. Any special requests?",
    ),
    "special_requests_noted": (
        "Noted! Any other special requirements, or should I proceed with the booking?",
    ),
    "special_requests_verbatim": (
        "Got it! Any other requirements, or shall I proceed?",
    ),
    "confirm_booking": (
        "Perfect! Let me confirm:\n"
        "• {guests} guests\n"
        "• {date} at {time}\n"
        "• {cuisine} cuisine\n"
        "{weather}\n\n"
        "Could you provide your name to complete the reservation?",
    ),
    "finalizing": (
        "Thank you, {name}! One moment while I confirm your booking.",
    ),
    "final_confirmation": (
        "Excellent! Your booking is confirmed, {name}! Booking ID: {booking_id}. "
        "Your table is booked for {date} at {time}. "
        "Is there anything else I can help you with?",
    ),
    "weather_suggestion": (
        "{weather_message}",
    ),
    "seating_updated": (
        "Got it, I've noted {seating} seating for you.",
    ),
    "session_reset": (
        "No problem, let's start over. How many guests will be dining with us?",
    ),
    "fallback": (
        "I'm sorry, I didn't quite catch that. Could you please repeat?",
        "Could you clarify that for me?",
    ),
}


# Re-prompts used while a step's required data is still missing

REPROMPTS: Dict[str, str] = {
    "awaiting_guests": "I need to know how many guests will be dining. How many people?",
    "awaiting_date": (
        "What date would you like to book? You can say 'today', 'tomorrow', "
        "or a specific date like '10 December'."
    ),
    "awaiting_time": "What time would you prefer? For example, '7 PM' or '19:00'.",
    "awaiting_cuisine": "What type of cuisine would you prefer? We offer {cuisines}.",
}


def get_templates(intent: str) -> Tuple[str, ...]:
    """
    Get the candidate phrasings for an intent.

    Unknown intents get the fallback phrasings.
    """
    return RESPONSE_TEMPLATES.get(intent, RESPONSE_TEMPLATES["fallback"])


def get_reprompt(step: str) -> str:
    """
    Get the re-prompt for a step.

    Raises:
        KeyError: If the step never re-prompts
    """
    return REPROMPTS[step]


def get_available_intents() -> List[str]:
    """List all intents that have templates."""
    return list(RESPONSE_TEMPLATES.keys())
