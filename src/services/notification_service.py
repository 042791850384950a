"""
Realtime notification publishing for booking conversations.

Events are fire-and-forget: a publisher never raises into the booking flow.
An event addressed to a room (usually the session id) is meant for that
conversation only; events without a room are broadcast.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
from loguru import logger


@dataclass
class PublishedEvent:
    """A single event as it was handed to a publisher."""
    name: str
    payload: Dict[str, Any]
    room: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)


class EventPublisher(ABC):
    """Interface for delivering named events to a room or to everyone."""

    @abstractmethod
    def publish(self, event: str, payload: Dict[str, Any], room: Optional[str] = None) -> None:
        """
        Publish an event.

        Args:
            event: Event name, e.g. "agent-response"
            payload: JSON-serializable event body
            room: Target room; None broadcasts
        """


class LoggingEventPublisher(EventPublisher):
    """Writes every event to the log instead of a transport."""

    def publish(self, event: str, payload: Dict[str, Any], room: Optional[str] = None) -> None:
        target = f"room={room}" if room else "broadcast"
        logger.bind(category="EVENT").debug(f"Event emitted: {event} ({target}) {payload}")


class InMemoryEventPublisher(EventPublisher):
    """
    Keeps published events in a list.

    Used by the console and by tests to inspect what the agent published.
    """

    def __init__(self):
        self.events: List[PublishedEvent] = []

    def publish(self, event: str, payload: Dict[str, Any], room: Optional[str] = None) -> None:
        self.events.append(PublishedEvent(name=event, payload=payload, room=room))
        logger.debug(f"Event recorded: {event}")

    def names(self) -> List[str]:
        return [e.name for e in self.events]

    def events_named(self, name: str) -> List[PublishedEvent]:
        return [e for e in self.events if e.name == name]

    def clear(self) -> None:
        self.events.clear()
