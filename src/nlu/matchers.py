"""
Ordered matcher cascades for each booking field.

Every field is extracted by a tuple of independent matchers tried in priority
order; the first matcher whose ``attempt`` returns a value wins. Matchers
are independent across fields, so one utterance can fill several fields.
"""
import re
from datetime import datetime, timedelta
from typing import Any, Callable, List, NamedTuple, Optional, Sequence, Tuple

from .parsers import (
    CUISINE_KEYWORDS,
    GUEST_NOUN_PATTERN,
    HOUR_WORD_PATTERN,
    MONTHS,
    MONTH_PATTERN,
    NUMBER_WORD_PATTERN,
    SPECIAL_REQUEST_KEYWORDS,
    TIME_PHRASES,
    WEEKDAY_PATTERN,
    build_date,
    capitalize_name,
    expand_year,
    resolve_weekday,
    to_24_hour,
    word_to_number,
)


class DateMatch(NamedTuple):
    """Matched source phrase and the calendar date it resolves to."""
    text: str
    parsed: Any


class Matcher:
    """
    Base class for a single extraction attempt.

    Subclasses return the extracted value, or None when the utterance
    does not contain what they look for.
    """

    name: str = "matcher"

    def attempt(self, text: str, reference: datetime) -> Optional[Any]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class RegexMatcher(Matcher):
    """Search a case-insensitive pattern and convert the match."""

    def __init__(
        self,
        name: str,
        pattern: str,
        convert: Callable[[re.Match, datetime], Optional[Any]],
    ):
        self.name = name
        self.pattern = re.compile(pattern, re.IGNORECASE)
        self.convert = convert

    def attempt(self, text: str, reference: datetime) -> Optional[Any]:
        match = self.pattern.search(text)
        if not match:
            return None
        return self.convert(match, reference)


class KeywordMatcher(Matcher):
    """First keyword of an ordered table found anywhere in the lowercased text."""

    def __init__(self, name: str, table: dict):
        self.name = name
        self.table = table

    def attempt(self, text: str, reference: datetime) -> Optional[Any]:
        lowered = text.lower()
        for keyword, value in self.table.items():
            if keyword in lowered:
                return value
        return None


class KeywordCollector(Matcher):
    """All keywords of an ordered list present in the text, in list order."""

    def __init__(self, name: str, keywords: Sequence[str]):
        self.name = name
        self.keywords = tuple(keywords)

    def attempt(self, text: str, reference: datetime) -> Optional[List[str]]:
        lowered = text.lower()
        found = [keyword for keyword in self.keywords if keyword in lowered]
        return found or None


class PhraseMatcher(Matcher):
    """First phrase pattern of an ordered table that matches."""

    def __init__(self, name: str, phrases: Sequence[Tuple[str, Any]]):
        self.name = name
        self.phrases = [(re.compile(p, re.IGNORECASE), value) for p, value in phrases]

    def attempt(self, text: str, reference: datetime) -> Optional[Any]:
        for pattern, value in self.phrases:
            if pattern.search(text):
                return value
        return None


# ============================================================================
# Converters
# ============================================================================

def _guest_count(match: re.Match, reference: datetime) -> Optional[int]:
    return word_to_number(match.group(1))


def _relative_day(offset: int, label: str):
    def convert(match: re.Match, reference: datetime) -> DateMatch:
        return DateMatch(label, reference.date() + timedelta(days=offset))
    return convert


def _weekday(match: re.Match, reference: datetime) -> DateMatch:
    prefix = match.group(1).lower() if match.group(1) else None
    resolved = resolve_weekday(reference.date(), match.group(2), prefix)
    return DateMatch(match.group(0).strip().lower(), resolved)


def _day_month(match: re.Match, reference: datetime) -> Optional[DateMatch]:
    day = int(match.group(1))
    month = MONTHS.index(match.group(2).lower()) + 1
    year = expand_year(match.group(3), reference.year)
    resolved = build_date(year, month, day)
    if resolved is None:
        return None
    return DateMatch(match.group(0).lower(), resolved)


def _month_day(match: re.Match, reference: datetime) -> Optional[DateMatch]:
    month = MONTHS.index(match.group(1).lower()) + 1
    day = int(match.group(2))
    year = expand_year(match.group(3), reference.year)
    resolved = build_date(year, month, day)
    if resolved is None:
        return None
    return DateMatch(match.group(0).lower(), resolved)


def _numeric_date(match: re.Match, reference: datetime) -> Optional[DateMatch]:
    month = int(match.group(1))
    day = int(match.group(2))
    year = expand_year(match.group(3), reference.year)
    resolved = build_date(year, month, day)
    if resolved is None:
        return None
    return DateMatch(match.group(0), resolved)


def _twelve_hour(match: re.Match, reference: datetime) -> Optional[str]:
    hour = word_to_number(match.group(1))
    minute = int(match.group(2)) if match.group(2) else 0
    if hour is None or not (1 <= hour <= 12) or minute > 59:
        return None
    return to_24_hour(hour, minute, match.group(3))


def _twenty_four_hour(match: re.Match, reference: datetime) -> Optional[str]:
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def _customer_name(match: re.Match, reference: datetime) -> str:
    return capitalize_name(match.group(1))


# ============================================================================
# Cascades, in priority order
# ============================================================================

_NUMBER = rf"(\d+|{NUMBER_WORD_PATTERN})"

GUEST_MATCHERS: Tuple[Matcher, ...] = (
    RegexMatcher("digits+noun", rf"(\d+)\s*{GUEST_NOUN_PATTERN}", _guest_count),
    RegexMatcher("words+noun", rf"\b({NUMBER_WORD_PATTERN})\s*{GUEST_NOUN_PATTERN}", _guest_count),
    RegexMatcher("table for", rf"\btable\s+for\s+{_NUMBER}\b", _guest_count),
    RegexMatcher("party of", rf"\bparty\s+of\s+{_NUMBER}\b", _guest_count),
)

CUISINE_MATCHERS: Tuple[Matcher, ...] = (
    KeywordMatcher("cuisine keywords", CUISINE_KEYWORDS),
)

DATE_MATCHERS: Tuple[Matcher, ...] = (
    RegexMatcher("today", r"\btoday\b", _relative_day(0, "today")),
    RegexMatcher(
        "day after tomorrow",
        r"\bday\s+after\s+tomorrow\b",
        _relative_day(2, "day after tomorrow"),
    ),
    RegexMatcher("tomorrow", r"\btomorrow\b", _relative_day(1, "tomorrow")),
    RegexMatcher("weekday", rf"(?:\b(this|next)\s+)?\b({WEEKDAY_PATTERN})\b", _weekday),
    RegexMatcher(
        "day month",
        rf"\b(\d{{1,2}})(?:st|nd|rd|th)?\s+(?:of\s+)?({MONTH_PATTERN})\b(?:,?\s+(\d{{4}}))?",
        _day_month,
    ),
    RegexMatcher(
        "month day",
        rf"\b({MONTH_PATTERN})\s+(\d{{1,2}})(?:st|nd|rd|th)?\b(?:,?\s+(\d{{4}}))?",
        _month_day,
    ),
    RegexMatcher(
        "numeric",
        r"\b(\d{1,2})[/-](\d{1,2})(?:[/-](\d{2,4}))?\b",
        _numeric_date,
    ),
)

TIME_MATCHERS: Tuple[Matcher, ...] = (
    RegexMatcher(
        "12-hour",
        rf"\b(\d{{1,2}}|{HOUR_WORD_PATTERN})(?::(\d{{2}}))?\s*(a\.m\.?|p\.m\.?|am|pm)(?![a-z])",
        _twelve_hour,
    ),
    RegexMatcher("24-hour", r"\b(\d{1,2}):(\d{2})\b", _twenty_four_hour),
    PhraseMatcher("time phrases", TIME_PHRASES),
)

SPECIAL_REQUEST_MATCHERS: Tuple[Matcher, ...] = (
    KeywordCollector("special request keywords", SPECIAL_REQUEST_KEYWORDS),
)

NAME_MATCHERS: Tuple[Matcher, ...] = (
    RegexMatcher(
        "self introduction",
        r"\b(?:my name is|i['’]m|i am|this is|call me)\s+([a-z]+(?:\s+[a-z]+)?)",
        _customer_name,
    ),
)


def first_match(matchers: Sequence[Matcher], text: str, reference: datetime) -> Optional[Any]:
    """
    Run a cascade and return the first non-None value.

    Args:
        matchers: Matchers in priority order
        text: Raw utterance
        reference: Current moment for relative dates

    Returns:
        Extracted value or None if no matcher fired
    """
    for matcher in matchers:
        value = matcher.attempt(text, reference)
        if value is not None:
            return value
    return None


__all__ = [
    "Matcher",
    "RegexMatcher",
    "KeywordMatcher",
    "KeywordCollector",
    "PhraseMatcher",
    "DateMatch",
    "GUEST_MATCHERS",
    "CUISINE_MATCHERS",
    "DATE_MATCHERS",
    "TIME_MATCHERS",
    "SPECIAL_REQUEST_MATCHERS",
    "NAME_MATCHERS",
    "first_match",
]
