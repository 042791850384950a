"""
Error handling module for the restaurant booking dialogue service.

This module provides the error handling infrastructure including:
- Custom exception hierarchy (input, session and collaborator errors)
- Natural language error message generation for replies
- Loguru logging configuration and audit helpers

Main Components:
    - exceptions: Custom exception classes for all error scenarios
    - error_messages: User-friendly message generation
    - logging_config: Sinks, audit categories and log context
"""

from .exceptions import (
    # Base exceptions
    BookingSystemError,

    # Input and session errors
    InputValidationError,
    UnknownSessionError,

    # Business logic errors
    BookingValidationError,

    # Collaborator errors
    CollaboratorError,
    WeatherServiceError,
    DatabaseError,
    BookingNotFoundError,
)

from .error_messages import (
    WEATHER_FALLBACK_MESSAGE,
    get_error_message,
    format_date_friendly,
)

from .logging_config import (
    configure_logging,
    init_logging,
    log_booking_event,
    log_conversation_event,
    log_api_call,
    log_error_with_context,
    LogContext,
)

__all__ = [
    # Exceptions
    "BookingSystemError",
    "InputValidationError",
    "UnknownSessionError",
    "BookingValidationError",
    "CollaboratorError",
    "WeatherServiceError",
    "DatabaseError",
    "BookingNotFoundError",

    # Error Messages
    "WEATHER_FALLBACK_MESSAGE",
    "get_error_message",
    "format_date_friendly",

    # Logging
    "configure_logging",
    "init_logging",
    "log_booking_event",
    "log_conversation_event",
    "log_api_call",
    "log_error_with_context",
    "LogContext",
]
