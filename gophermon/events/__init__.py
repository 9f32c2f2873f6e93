from .provider import EventModifierProvider, NoEvents
from .manager import Event, EventManager, EventType

__all__ = ["EventModifierProvider", "NoEvents", "Event", "EventManager", "EventType"]
