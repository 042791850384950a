"""
Conversation session models for storing booking information during a dialogue.

This module defines the per-session accumulator (SessionData), the audit
history entries (Turn) and the ConversationSession that ties them to a step.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ConfigDict

from models.schemas import Cuisine, SeatingPreference
from nlu.extractor import ExtractedInfo
from .states import ConversationStep


class SessionData(BaseModel):
    """
    Last known value of every booking field mentioned so far.

    Values are overwritten whenever a later utterance mentions the same field
    again; nothing is ever cleared.

    Attributes:
        number_of_guests: Party size
        cuisine_preference: Canonical cuisine
        date_text: Phrase the date was read from
        parsed_date: Resolved calendar date
        time_text: 24-hour "HH:MM"
        special_requests: Keyword list from extraction, or the joined/verbatim
            text stored on the special-requests step
        customer_name: Name the booking is made under
        seating_preference: Set only by an explicit preference update
    """

    number_of_guests: Optional[int] = None
    cuisine_preference: Optional[Cuisine] = None
    date_text: Optional[str] = None
    parsed_date: Optional[date] = None
    time_text: Optional[str] = None
    special_requests: Optional[Union[str, List[str]]] = None
    customer_name: Optional[str] = None
    seating_preference: Optional[SeatingPreference] = None

    model_config = ConfigDict(validate_assignment=True)

    def merge(self, extracted: ExtractedInfo) -> List[str]:
        """
        Apply an utterance's extraction, last mention wins.

        Args:
            extracted: Fields found in the current utterance

        Returns:
            Names of the fields that were written
        """
        updated = []
        for field_name, value in extracted.to_dict().items():
            setattr(self, field_name, value)
            updated.append(field_name)
        return updated

    def snapshot(self) -> Dict[str, Any]:
        """Fields that have a value, as a plain dict."""
        return self.model_dump(exclude_none=True)


class Turn(BaseModel):
    """One entry of the session history."""
    role: Literal["user", "agent"]
    text: str
    timestamp: datetime = Field(default_factory=datetime.now)


class ConversationSession(BaseModel):
    """
    State of one in-progress booking conversation.

    The history is kept for auditing only; transitions never read it.
    """

    session_id: str
    step: ConversationStep = ConversationStep.GREETING
    data: SessionData = Field(default_factory=SessionData)
    history: List[Turn] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def add_turn(self, role: str, text: str) -> None:
        self.history.append(Turn(role=role, text=text))
        self.updated_at = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view for publishing and debugging."""
        return {
            "session_id": self.session_id,
            "step": self.step.value,
            "data": self.data.model_dump(mode="json", exclude_none=True),
            "history": [turn.model_dump(mode="json") for turn in self.history],
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
