"""Integrations"""

from .event_bus import EventBus, Event

__all__ = [
    "EventBus",
    "Event"
]
