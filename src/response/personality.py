"""
Agent Personality Definition - Alex the Restaurant Host.

This module defines the identity and the fixed vocabulary the reply
templates speak with.
"""
from models.schemas import Cuisine

# Agent Identity
AGENT_NAME = "Alex"
RESTAURANT_NAME = "our restaurant"

# Cuisines named when re-prompting; the rest are covered by "and more"
FEATURED_CUISINES = (
    Cuisine.ITALIAN,
    Cuisine.CHINESE,
    Cuisine.INDIAN,
    Cuisine.MEXICAN,
)

# Summary line used when the session has no cuisine yet
ANY_CUISINE = "Any"


def featured_cuisines_phrase() -> str:
    """
    Speakable list of featured cuisines.

    Returns:
        e.g. "Italian, Chinese, Indian, Mexican, and more"
    """
    return ", ".join(str(c) for c in FEATURED_CUISINES) + ", and more"
