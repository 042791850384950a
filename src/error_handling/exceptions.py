"""
Custom Exception Classes for the Restaurant Booking Dialogue Service.

This module defines exception classes for different error categories:
- Input Errors (missing utterance text, missing session id)
- Session Errors (operations on a session that does not exist)
- Collaborator Errors (weather lookups, booking persistence)

Extraction ambiguity is deliberately absent: unmatched fields stay empty
and the dialogue re-prompts.
"""

from typing import Optional, Any, Dict


class BookingSystemError(Exception):
    """Base exception for all booking system errors."""

    def __init__(
        self,
        message: str,
        user_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        recoverable: bool = True
    ):
        """
        Initialize booking system error.

        Args:
            message: Technical error message for logging
            user_message: User-friendly message for the reply
            context: Additional context for error recovery
            recoverable: Whether the error is recoverable
        """
        super().__init__(message)
        self.message = message
        self.user_message = user_message or message
        self.context = context or {}
        self.recoverable = recoverable


# ============================================================================
# Input Errors
# ============================================================================

class InputValidationError(BookingSystemError):
    """
    Raised when a caller omits or malforms a required input.

    Examples:
    - No utterance text on a turn
    - No session id on a preference update
    - Unknown seating preference value
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        context = {"field": field, "value": value, **kwargs}
        super().__init__(message, context=context, recoverable=True)
        self.field = field
        self.value = value


class UnknownSessionError(BookingSystemError):
    """Raised when an operation needs an existing session that is not there."""

    def __init__(self, session_id: Optional[str], **kwargs):
        message = f"Invalid session: {session_id!r}"
        super().__init__(
            message,
            user_message="I couldn't find your booking conversation. Let's start again.",
            context={"session_id": session_id, **kwargs},
            recoverable=True
        )
        self.session_id = session_id


# ============================================================================
# Business Logic Errors
# ============================================================================

class BookingValidationError(BookingSystemError):
    """
    Raised when a booking record violates persistence rules.

    Examples:
    - Customer name shorter than two characters
    - Booking date in the past
    - Invalid status value
    """

    def __init__(
        self,
        message: str,
        user_message: Optional[str] = None,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[list] = None,
        **kwargs
    ):
        context = {
            "field": field,
            "value": value,
            "details": details or [],
            **kwargs
        }
        super().__init__(message, user_message, context, recoverable=True)
        self.field = field
        self.value = value
        self.details = details or []


# ============================================================================
# Collaborator Errors
# ============================================================================

class CollaboratorError(BookingSystemError):
    """Base class for failures of services outside the dialogue core."""

    def __init__(
        self,
        message: str,
        service: str = "unknown",
        original_error: Optional[Exception] = None,
        **kwargs
    ):
        context = {
            "service": service,
            "original_error": str(original_error) if original_error else None,
            **kwargs
        }
        super().__init__(message, context=context, recoverable=True)
        self.service = service
        self.original_error = original_error


class WeatherServiceError(CollaboratorError):
    """Raised when the weather forecast cannot be fetched or parsed."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(
            message,
            service="weather",
            status_code=status_code,
            **kwargs
        )
        self.status_code = status_code


class DatabaseError(CollaboratorError):
    """
    Raised when booking persistence fails.

    Examples:
    - Connection failures
    - Integrity violations
    """

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        super().__init__(message, service="database", operation=operation, **kwargs)
        self.operation = operation


class BookingNotFoundError(DatabaseError):
    """Raised when a booking id does not match any stored booking."""

    def __init__(self, booking_id: str, **kwargs):
        super().__init__(
            f"Booking not found: {booking_id}",
            operation="lookup",
            booking_id=booking_id,
            **kwargs
        )
        self.booking_id = booking_id
