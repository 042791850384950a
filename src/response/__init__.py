"""
Response Generation Module for Restaurant Booking Agent.

This module renders the replies of Alex, the restaurant host, from
intent-keyed templates.

Main Components:
    - generator: ResponseGenerator with an injectable random source
    - prompts: Intent templates and step re-prompts
    - personality: Agent identity and featured cuisines
"""

from .generator import ResponseGenerator
from .prompts import get_available_intents, get_templates, RESPONSE_TEMPLATES, REPROMPTS
from .personality import AGENT_NAME, RESTAURANT_NAME

__all__ = [
    "ResponseGenerator",
    "get_available_intents",
    "get_templates",
    "RESPONSE_TEMPLATES",
    "REPROMPTS",
    "AGENT_NAME",
    "RESTAURANT_NAME",
]
