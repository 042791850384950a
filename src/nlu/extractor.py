"""
Information extraction module for restaurant booking system.

This module turns a free-form utterance into the partial booking fields it
mentions. Each field is filled by its own ordered matcher cascade (see
``nlu.matchers``); fields the utterance does not mention stay absent.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from loguru import logger

from models.schemas import Cuisine
from .matchers import (
    CUISINE_MATCHERS,
    DATE_MATCHERS,
    GUEST_MATCHERS,
    NAME_MATCHERS,
    SPECIAL_REQUEST_MATCHERS,
    TIME_MATCHERS,
    first_match,
)


@dataclass
class ExtractedInfo:
    """
    Booking fields found in a single utterance.

    Attributes:
        number_of_guests: Party size
        cuisine_preference: Canonical cuisine
        date_text: Source phrase the date was read from (e.g. "next friday")
        parsed_date: Calendar date the phrase resolves to
        time_text: 24-hour "HH:MM"
        special_requests: Every special-request keyword found, in keyword order
        customer_name: Name with each word's first letter upper-cased
    """
    number_of_guests: Optional[int] = None
    cuisine_preference: Optional[Cuisine] = None
    date_text: Optional[str] = None
    parsed_date: Optional[date] = None
    time_text: Optional[str] = None
    special_requests: List[str] = field(default_factory=list)
    customer_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Only the fields that were mentioned; empty lists count as absent."""
        result: Dict[str, Any] = {}
        for name, value in vars(self).items():
            if value is None or value == []:
                continue
            result[name] = list(value) if isinstance(value, list) else value
        return result

    def is_empty(self) -> bool:
        return not self.to_dict()


def extract_booking_info(text: Optional[str], reference: Optional[datetime] = None) -> ExtractedInfo:
    """
    Extract booking fields from a natural language utterance.

    Args:
        text: Raw utterance (typed or transcribed)
        reference: Moment the utterance was made, used for "today",
                   "next friday" and missing years. Defaults to now.

    Returns:
        ExtractedInfo with every field the utterance mentions. Never raises;
        empty or unmatched input yields an empty result.

    Example:
        >>> info = extract_booking_info("table for 4 tomorrow at 7pm")
        >>> info.number_of_guests, info.date_text, info.time_text
        (4, 'tomorrow', '19:00')
    """
    info = ExtractedInfo()
    if not text or not text.strip():
        return info

    reference = reference or datetime.now()

    info.number_of_guests = first_match(GUEST_MATCHERS, text, reference)
    info.cuisine_preference = first_match(CUISINE_MATCHERS, text, reference)

    date_match = first_match(DATE_MATCHERS, text, reference)
    if date_match is not None:
        info.date_text = date_match.text
        info.parsed_date = date_match.parsed

    info.time_text = first_match(TIME_MATCHERS, text, reference)
    info.special_requests = first_match(SPECIAL_REQUEST_MATCHERS, text, reference) or []
    info.customer_name = first_match(NAME_MATCHERS, text, reference)

    logger.debug(f"Extracted from '{text}': {info.to_dict()}")
    return info
