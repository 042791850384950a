"""
Natural Language Understanding (NLU) module for restaurant booking system.

This module provides information extraction capabilities for converting
natural language utterances into structured booking data.
"""
from .extractor import extract_booking_info, ExtractedInfo
from .matchers import DateMatch, Matcher, first_match

__all__ = ["extract_booking_info", "ExtractedInfo", "DateMatch", "Matcher", "first_match"]
