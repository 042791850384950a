"""
Helper tables and functions for parsing guest counts, dates and times.

This module holds the fixed vocabularies the extractor scans for (number
words, cuisines, special-request keywords, time phrases) and the small
date/time conversions shared by the matchers.
"""
from datetime import date, timedelta
from typing import Optional

from models.schemas import Cuisine


# Number words to digits
NUMBER_WORDS = {
    "zero": 0, "one": 1, "two": 2, "three": 3, "four": 4,
    "five": 5, "six": 6, "seven": 7, "eight": 8, "nine": 9,
    "ten": 10, "eleven": 11, "twelve": 12, "thirteen": 13,
    "fourteen": 14, "fifteen": 15, "sixteen": 16, "seventeen": 17,
    "eighteen": 18, "nineteen": 19, "twenty": 20,
}

# Longest words first so "seventeen" is never cut down to "seven"
NUMBER_WORD_PATTERN = "|".join(sorted(NUMBER_WORDS, key=len, reverse=True))

HOUR_WORD_PATTERN = "|".join(
    sorted((w for w, n in NUMBER_WORDS.items() if 1 <= n <= 12), key=len, reverse=True)
)

GUEST_NOUN_PATTERN = r"(?:people|persons?|guests?|pax|diners?)"

# Keyword -> cuisine. Iteration order is the tie-break when several keywords appear.
CUISINE_KEYWORDS = {
    "italian": Cuisine.ITALIAN,
    "chinese": Cuisine.CHINESE,
    "indian": Cuisine.INDIAN,
    "mexican": Cuisine.MEXICAN,
    "japanese": Cuisine.JAPANESE,
    "sushi": Cuisine.JAPANESE,
    "american": Cuisine.AMERICAN,
    "thai": Cuisine.THAI,
    "french": Cuisine.FRENCH,
    "mediterranean": Cuisine.MEDITERRANEAN,
    "pizza": Cuisine.ITALIAN,
    "pasta": Cuisine.ITALIAN,
    "curry": Cuisine.INDIAN,
    "ramen": Cuisine.JAPANESE,
    "tacos": Cuisine.MEXICAN,
}

# Dietary, accessibility and occasion terms; every hit is collected in this order
SPECIAL_REQUEST_KEYWORDS = (
    "birthday", "anniversary", "celebration", "vegetarian",
    "vegan", "gluten-free", "gluten free", "allergic", "allergy",
    "wheelchair", "accessible", "quiet", "window", "view",
)

# Phrase pattern -> HH:MM, checked in order
TIME_PHRASES = (
    (r"\bnoon\b", "12:00"),
    (r"\bmidnight\b", "00:00"),
    (r"\bmorning\b", "09:00"),
    (r"\bafternoon\b", "14:00"),
    (r"\bevening\b", "19:00"),
    (r"\blunch\s*time\b", "12:30"),
    (r"\bdinner\s*time\b", "19:30"),
)

MONTHS = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)
MONTH_PATTERN = "|".join(MONTHS)

# Sunday-first, matching how relative weekdays are counted
WEEKDAYS = (
    "sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday",
)
WEEKDAY_PATTERN = "|".join(WEEKDAYS)


def word_to_number(token: str) -> Optional[int]:
    """
    Convert a digit string or a number word (zero-twenty) to an integer.

    Returns:
        The integer value, or None for unmapped words
    """
    token = token.strip().lower()
    if token.isdigit():
        return int(token)
    return NUMBER_WORDS.get(token)


def resolve_weekday(reference: date, weekday: str, prefix: Optional[str] = None) -> date:
    """
    Resolve "friday", "this friday" or "next friday" against a reference date.

    A weekday that is today or already past this week rolls forward 7 days;
    "next" always rolls forward a full week.

    Args:
        reference: Date the utterance was made
        weekday: Full lowercase weekday name
        prefix: "this", "next" or None

    Returns:
        The resolved calendar date
    """
    current = reference.isoweekday() % 7
    target = WEEKDAYS.index(weekday.lower())
    days_ahead = target - current

    if prefix == "next" or days_ahead <= 0:
        days_ahead += 7

    return reference + timedelta(days=days_ahead)


def build_date(year: int, month: int, day: int) -> Optional[date]:
    """Build a date, returning None when the combination is not on the calendar."""
    try:
        return date(year, month, day)
    except ValueError:
        return None


def expand_year(year_text: Optional[str], default_year: int) -> int:
    """
    Expand a year token: missing -> default, two digits -> 2000 + YY.
    """
    if not year_text:
        return default_year
    year = int(year_text)
    if year < 100:
        return 2000 + year
    return year


def to_24_hour(hour: int, minute: int, period: str) -> str:
    """
    Convert a 12-hour clock reading to "HH:MM".

    Args:
        hour: Hour as spoken (1-12)
        minute: Minutes
        period: "am", "pm", "a.m." or "p.m."

    Returns:
        Zero-padded 24-hour time string
    """
    period = period.lower().replace(".", "")

    if period == "pm" and hour != 12:
        hour += 12
    if period == "am" and hour == 12:
        hour = 0

    return f"{hour:02d}:{minute:02d}"


def capitalize_name(raw: str) -> str:
    """Upper-case the first letter of each word; the rest is left as is."""
    return " ".join(word[:1].upper() + word[1:] for word in raw.split())
