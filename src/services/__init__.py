"""
Services package - collaborators of the dialogue core.
"""
from .booking_service import BookingService, BookingStore
from .weather_service import WeatherService, suggest_seating
from .notification_service import (
    EventPublisher,
    InMemoryEventPublisher,
    LoggingEventPublisher,
    PublishedEvent,
)

__all__ = [
    "BookingService",
    "BookingStore",
    "WeatherService",
    "suggest_seating",
    "EventPublisher",
    "InMemoryEventPublisher",
    "LoggingEventPublisher",
    "PublishedEvent",
]
