"""In-process pub/sub for state changes other screens react to."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    NOTIFICATIONS_UPDATED = "notifications_updated"
    CLEANING_SCHEDULED = "cleaning_scheduled"
    CLEANING_UPDATED = "cleaning_updated"
    CHECKLIST_COMPLETED = "checklist_completed"
    MAINTENANCE_REPORTED = "maintenance_reported"
    MAINTENANCE_RESOLVED = "maintenance_resolved"
    PROFILE_APPROVED = "profile_approved"


@dataclass
class Event:
    event_type: EventType
    data: dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Subscriber = Callable[[Event], None]


class EventBus:
    """Synchronous pub/sub; a failing subscriber never blocks the others."""

    def __init__(self) -> None:
        self._subscribers: dict[EventType, list[Subscriber]] = defaultdict(list)

    def subscribe(self, event_type: EventType, callback: Subscriber) -> None:
        self._subscribers[event_type].append(callback)
        logger.debug("Subscribed %s to %s", getattr(callback, "__name__", callback), event_type.value)

    def unsubscribe(self, event_type: EventType, callback: Subscriber) -> None:
        try:
            self._subscribers[event_type].remove(callback)
        except ValueError:
            logger.debug("Callback was not subscribed to %s", event_type.value)

    def publish(self, event: Event) -> None:
        logger.debug("Publishing event: %s", event.event_type.value)
        for callback in list(self._subscribers.get(event.event_type, [])):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Error in subscriber %s for event %s",
                    getattr(callback, "__name__", callback),
                    event.event_type.value,
                )


# Global event bus instance
event_bus = EventBus()
