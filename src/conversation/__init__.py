"""
Conversation package for managing booking dialogue state.

This package provides:
- ConversationStep / RequiredAction: dialogue steps and caller directives
- ConversationSession / SessionData: per-session state and accumulated fields
- SessionStore / InMemorySessionStore: where sessions live
- DialogueEngine: processes turns and finalizes bookings
"""

from .states import ConversationStep, RequiredAction
from .context import ConversationSession, SessionData, Turn
from .session_store import SessionStore, InMemorySessionStore
from .handlers import STEP_HANDLERS, StepHandler, StepOutcome
from .state_manager import (
    BookingOutcome,
    DialogueEngine,
    TurnResult,
    parse_seating_preference,
    resolve_booking_date,
    resolve_seating_preference,
)

__all__ = [
    "ConversationStep",
    "RequiredAction",
    "ConversationSession",
    "SessionData",
    "Turn",
    "SessionStore",
    "InMemorySessionStore",
    "STEP_HANDLERS",
    "StepHandler",
    "StepOutcome",
    "BookingOutcome",
    "DialogueEngine",
    "TurnResult",
    "parse_seating_preference",
    "resolve_booking_date",
    "resolve_seating_preference",
]
