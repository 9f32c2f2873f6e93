"""Time-boxed global events and the multipliers they grant.

The manager is shared by every running battle, so all state is guarded by a
re-entrant lock. Expired events are deactivated lazily whenever the active
set is read and dropped for good by :meth:`EventManager.cleanup_expired`.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from itertools import count
from threading import RLock
from typing import Callable, Dict, List, Optional
import random

from gophermon.core.logging import logger


class EventType(str, Enum):
    SHINY_HUNT = "SHINY_HUNT"
    DOUBLE_XP = "DOUBLE_XP"
    RARE_ENCOUNTER = "RARE_ENCOUNTER"
    LUCKY_DAY = "LUCKY_DAY"
    STAT_BOOST = "STAT_BOOST"
    EVOLUTION_FEST = "EVOLUTION_FEST"

    def __str__(self) -> str:
        return self.value


EVENT_NAMES: Dict[EventType, str] = {
    EventType.SHINY_HUNT: "Shiny Hunt Event",
    EventType.DOUBLE_XP: "Double XP Event",
    EventType.RARE_ENCOUNTER: "Rare Encounter Event",
    EventType.LUCKY_DAY: "Lucky Day Event",
    EventType.STAT_BOOST: "Stat Boost Event",
    EventType.EVOLUTION_FEST: "Evolution Festival",
}

EVENT_DESCRIPTIONS: Dict[EventType, str] = {
    EventType.SHINY_HUNT: "Shiny spawn rates increased to 1/100!",
    EventType.DOUBLE_XP: "All battles give 2x XP!",
    EventType.RARE_ENCOUNTER: "Higher chance of RARE, EPIC and LEGENDARY gophers in the wild!",
    EventType.LUCKY_DAY: "Capture rates are significantly improved!",
    EventType.STAT_BOOST: "All gophers get a 10% stat boost!",
    EventType.EVOLUTION_FEST: "Evolution requirements reduced!",
}

NORMAL_SHINY_RATE = 1.0 / 4096.0
EVENT_SHINY_RATE = 1.0 / 100.0
DOUBLE_XP_MULTIPLIER = 2.0
RARITY_BOOST = 2.0
LUCKY_DAY_CAPTURE_MULTIPLIER = 1.5
STAT_BOOST_MULTIPLIER = 1.10
EVOLUTION_LEVEL_REDUCTION = 5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Event:
    id: str
    type: EventType
    name: str
    description: str
    start_time: datetime
    end_time: datetime
    active: bool = True

    def is_live(self, now: datetime) -> bool:
        return self.active and now < self.end_time

    def remaining(self, now: datetime) -> timedelta:
        return max(timedelta(0), self.end_time - now)


class EventManager:
    """Concrete modifier provider backed by a set of timed events."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or _utcnow
        self._lock = RLock()
        self._events: Dict[str, Event] = {}
        self._ids = count(1)
        self.announcement_channel: Optional[str] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start_event(self, event_type: EventType, duration: timedelta) -> Event:
        """Start an event, ending any live event of the same type first."""
        event_type = EventType(event_type)
        with self._lock:
            now = self._clock()
            for existing in self._events.values():
                if existing.type == event_type and existing.active:
                    existing.active = False
            event = Event(
                id=f"event_{int(now.timestamp())}_{next(self._ids)}",
                type=event_type,
                name=EVENT_NAMES[event_type],
                description=EVENT_DESCRIPTIONS[event_type],
                start_time=now,
                end_time=now + duration,
            )
            self._events[event.id] = event
        logger.info("EventStarted", id=event.id, type=event_type.value, ends=event.end_time.isoformat())
        return event

    def start_random_event(self, duration: timedelta, rng: Optional[random.Random] = None) -> Event:
        return self.start_event((rng or random.Random()).choice(list(EventType)), duration)

    def end_event(self, event_id: str) -> bool:
        with self._lock:
            event = self._events.get(event_id)
            if event is None or not event.active:
                return False
            event.active = False
        logger.info("EventEnded", id=event_id)
        return True

    def active_events(self) -> List[Event]:
        with self._lock:
            now = self._clock()
            live = []
            for event in self._events.values():
                if event.is_live(now):
                    live.append(event)
                elif event.active:
                    event.active = False
                    logger.debug("EventExpired", id=event.id)
            return live

    def active_event(self, event_type: EventType) -> Optional[Event]:
        with self._lock:
            now = self._clock()
            for event in self._events.values():
                if event.type == event_type and event.is_live(now):
                    return event
            return None

    def is_active(self, event_type: EventType) -> bool:
        return self.active_event(event_type) is not None

    def cleanup_expired(self) -> int:
        """Drop inactive and expired events; returns how many were removed."""
        with self._lock:
            now = self._clock()
            stale = [eid for eid, e in self._events.items() if not e.is_live(now)]
            for eid in stale:
                del self._events[eid]
        if stale:
            logger.debug("EventsCleanedUp", removed=len(stale))
        return len(stale)

    # ------------------------------------------------------------------
    # Modifiers
    # ------------------------------------------------------------------
    def shiny_rate(self) -> float:
        return EVENT_SHINY_RATE if self.is_active(EventType.SHINY_HUNT) else NORMAL_SHINY_RATE

    def rarity_boost(self) -> float:
        return RARITY_BOOST if self.is_active(EventType.RARE_ENCOUNTER) else 1.0

    def xp_multiplier(self) -> float:
        return DOUBLE_XP_MULTIPLIER if self.is_active(EventType.DOUBLE_XP) else 1.0

    def capture_rate_multiplier(self) -> float:
        return LUCKY_DAY_CAPTURE_MULTIPLIER if self.is_active(EventType.LUCKY_DAY) else 1.0

    def stat_boost_multiplier(self) -> float:
        return STAT_BOOST_MULTIPLIER if self.is_active(EventType.STAT_BOOST) else 1.0

    def evolution_level_reduction(self) -> int:
        return EVOLUTION_LEVEL_REDUCTION if self.is_active(EventType.EVOLUTION_FEST) else 0

__all__ = ["EventType", "Event", "EventManager", "EVENT_NAMES", "EVENT_DESCRIPTIONS"]
