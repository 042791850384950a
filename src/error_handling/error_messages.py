"""
Natural language error message generation for the booking dialogue.

This module provides user-friendly, conversational error messages that can be
spoken or shown to the guest when a collaborator or an input check fails.
"""
from datetime import date, datetime
from typing import Optional
from loguru import logger

from .exceptions import (
    BookingSystemError,
    BookingValidationError,
    BookingNotFoundError,
    CollaboratorError,
    DatabaseError,
    InputValidationError,
    UnknownSessionError,
    WeatherServiceError,
)

WEATHER_FALLBACK_MESSAGE = "Unable to fetch weather data. Please choose seating manually."


def format_date_friendly(date_obj: date, today: Optional[date] = None) -> str:
    """
    Format date in a friendly, speakable format.

    Args:
        date_obj: Date to format
        today: Reference date (defaults to today)

    Returns:
        Friendly date string (e.g., "tomorrow", "this Monday", "December 25th")
    """
    today = today or datetime.now().date()
    delta = (date_obj - today).days

    if delta == 0:
        return "today"
    elif delta == 1:
        return "tomorrow"
    elif delta == 2:
        return "the day after tomorrow"
    elif 3 <= delta <= 6:
        return f"this {date_obj.strftime('%A')}"
    else:
        day = date_obj.day
        suffix = "th" if 11 <= day <= 13 else {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
        return date_obj.strftime(f"%B {day}{suffix}")


def get_validation_error_message(error: BookingValidationError) -> str:
    """Message for a booking the persistence layer refused."""
    if error.field == "customer_name":
        return "I didn't quite get your name. Could you tell me your full name?"
    if error.field == "booking_date":
        return "That date has already passed. Which date would you like instead?"
    if error.field == "number_of_guests":
        return "We can seat between 1 and 20 guests per booking. How many will be joining?"
    return "Some of the booking details don't look right. Could you go over them again?"


def get_database_error_message(error: DatabaseError) -> str:
    """Message for persistence failures."""
    if isinstance(error, BookingNotFoundError):
        return "I couldn't find that booking."
    return "I'm having trouble saving your booking right now. Please try again in a moment."


def get_error_message(error: Exception) -> str:
    """
    Get natural language error message for any exception.

    Args:
        error: Exception that occurred

    Returns:
        Natural language error message suitable for a reply
    """
    if isinstance(error, BookingValidationError):
        return get_validation_error_message(error)
    elif isinstance(error, DatabaseError):
        return get_database_error_message(error)
    elif isinstance(error, WeatherServiceError):
        return WEATHER_FALLBACK_MESSAGE
    elif isinstance(error, UnknownSessionError):
        return error.user_message
    elif isinstance(error, InputValidationError):
        return "I didn't catch that. Could you say it again?"
    elif isinstance(error, CollaboratorError):
        return "Something went wrong on our side. Please try again in a moment."
    elif isinstance(error, BookingSystemError):
        return error.user_message if error.user_message else "I'm sorry, something went wrong. Could you try that again?"
    else:
        logger.error(f"Unhandled error type: {type(error).__name__}: {str(error)}")
        return "I'm sorry, something unexpected happened. Could you try that again?"
