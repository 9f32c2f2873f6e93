from datetime import datetime, timedelta, timezone

from gophermon.events.manager import EventManager, EventType
from gophermon.events.provider import EventModifierProvider, NoEvents


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kw):
        self.now += timedelta(**kw)


def test_neutral_provider():
    p = NoEvents()
    assert isinstance(p, EventModifierProvider)
    assert (p.xp_multiplier(), p.capture_rate_multiplier(), p.stat_boost_multiplier()) == (1.0, 1.0, 1.0)
    assert p.evolution_level_reduction() == 0


def test_multipliers_follow_active_events():
    clock = FakeClock()
    em = EventManager(clock)
    assert isinstance(em, EventModifierProvider)
    assert em.xp_multiplier() == 1.0
    for t in EventType:
        em.start_event(t, timedelta(hours=2))
    assert em.xp_multiplier() == 2.0
    assert em.capture_rate_multiplier() == 1.5
    assert em.stat_boost_multiplier() == 1.10
    assert em.evolution_level_reduction() == 5
    assert em.rarity_boost() == 2.0
    assert em.shiny_rate() == 1 / 100


def test_events_expire_with_clock():
    clock = FakeClock()
    em = EventManager(clock)
    em.start_event(EventType.DOUBLE_XP, timedelta(hours=1))
    clock.advance(minutes=61)
    assert em.xp_multiplier() == 1.0
    assert em.active_events() == []
    assert em.shiny_rate() == 1 / 4096
    assert em.cleanup_expired() == 1


def test_restarting_a_type_replaces_it():
    em = EventManager(FakeClock())
    first = em.start_event(EventType.LUCKY_DAY, timedelta(hours=1))
    second = em.start_event(EventType.LUCKY_DAY, timedelta(hours=3))
    assert first.id != second.id
    assert not first.active
    assert em.active_events() == [second]


def test_end_event():
    em = EventManager(FakeClock())
    ev = em.start_event(EventType.STAT_BOOST, timedelta(hours=1))
    assert em.end_event(ev.id)
    assert not em.end_event(ev.id)
    assert em.stat_boost_multiplier() == 1.0
