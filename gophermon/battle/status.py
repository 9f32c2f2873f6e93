"""Timed status conditions and the per-turn status pass.

Each combatant holds at most one entry per :class:`StatusKind`. Stat
modifier kinds are folded into attack/defense/speed by
:func:`recalculate_stats`; ailments (sleep, paralysis, confusion) only gate
actions and are checked by the battle session, not here.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, List, Optional, Tuple

if TYPE_CHECKING:
    from .models import Combatant


class StatusKind(str, Enum):
    BURN = "BURN"
    POISON = "POISON"
    CONFUSION = "CONFUSION"
    PARALYSIS = "PARALYSIS"
    SLEEP = "SLEEP"
    ATTACK_UP = "ATTACK_UP"
    ATTACK_DOWN = "ATTACK_DOWN"
    DEFENSE_UP = "DEFENSE_UP"
    DEFENSE_DOWN = "DEFENSE_DOWN"
    SPEED_UP = "SPEED_UP"
    SPEED_DOWN = "SPEED_DOWN"
    PROTECT = "PROTECT"


UP_MULTIPLIER = 1.5
DOWN_MULTIPLIER = 0.75

STAT_MODIFIERS: Dict[StatusKind, Tuple[str, float]] = {
    StatusKind.ATTACK_UP: ("attack", UP_MULTIPLIER),
    StatusKind.ATTACK_DOWN: ("attack", DOWN_MULTIPLIER),
    StatusKind.DEFENSE_UP: ("defense", UP_MULTIPLIER),
    StatusKind.DEFENSE_DOWN: ("defense", DOWN_MULTIPLIER),
    StatusKind.SPEED_UP: ("speed", UP_MULTIPLIER),
    StatusKind.SPEED_DOWN: ("speed", DOWN_MULTIPLIER),
}

BUFF_KINDS: FrozenSet[StatusKind] = frozenset({StatusKind.ATTACK_UP, StatusKind.DEFENSE_UP, StatusKind.SPEED_UP})
AILMENT_KINDS: FrozenSet[StatusKind] = frozenset({StatusKind.CONFUSION, StatusKind.PARALYSIS, StatusKind.SLEEP})
NEGATIVE_KINDS: FrozenSet[StatusKind] = frozenset({
    StatusKind.BURN, StatusKind.POISON, StatusKind.CONFUSION, StatusKind.PARALYSIS, StatusKind.SLEEP,
    StatusKind.ATTACK_DOWN, StatusKind.DEFENSE_DOWN, StatusKind.SPEED_DOWN,
})

_EXPIRY_TEXT: Dict[StatusKind, str] = {
    StatusKind.BURN: "{name}'s burn has healed.",
    StatusKind.POISON: "{name} is no longer poisoned.",
    StatusKind.CONFUSION: "{name} snapped out of its confusion!",
    StatusKind.PARALYSIS: "{name} is no longer paralyzed.",
    StatusKind.SLEEP: "{name} woke up!",
    StatusKind.PROTECT: "{name}'s protection wore off.",
}


@dataclass
class StatusEffect:
    kind: StatusKind
    duration: int
    intensity: int = 0

    def __post_init__(self):
        self.kind = StatusKind(self.kind)
        self.intensity = max(0, int(self.intensity))


def find_status_effect(c: "Combatant", kind: StatusKind) -> Optional[StatusEffect]:
    for effect in c.status_effects:
        if effect.kind == kind:
            return effect
    return None


def has_status_effect(c: "Combatant", kind: StatusKind) -> bool:
    return find_status_effect(c, kind) is not None


def add_status_effect(c: "Combatant", kind: StatusKind, duration: int, intensity: int = 0) -> StatusEffect:
    """Apply or refresh ``kind``; intensity only ever goes up."""
    c.snapshot_base_stats()
    existing = find_status_effect(c, kind)
    if existing is not None:
        existing.duration = int(duration)
        existing.intensity = max(existing.intensity, int(intensity))
        return existing
    effect = StatusEffect(kind, int(duration), int(intensity))
    c.status_effects.append(effect)
    return effect


def remove_status_effect(c: "Combatant", kind: StatusKind) -> bool:
    before = len(c.status_effects)
    c.status_effects = [e for e in c.status_effects if e.kind != kind]
    return len(c.status_effects) != before


def clear_status_effects(c: "Combatant", kinds: Optional[Iterable[StatusKind]] = None) -> int:
    """Remove every effect (or only ``kinds``) and recompute stats; returns count removed."""
    before = len(c.status_effects)
    if kinds is None:
        c.status_effects = []
    else:
        drop = set(kinds)
        c.status_effects = [e for e in c.status_effects if e.kind not in drop]
    recalculate_stats(c)
    return before - len(c.status_effects)


def recalculate_stats(c: "Combatant") -> None:
    c.snapshot_base_stats()
    values = {
        "attack": c.base_attack * c.stat_boost,
        "defense": c.base_defense * c.stat_boost,
        "speed": c.base_speed * c.stat_boost,
    }
    for effect in c.status_effects:
        mod = STAT_MODIFIERS.get(effect.kind)
        if mod is None:
            continue
        stat, mult = mod
        values[stat] *= mult
    c.attack = int(values["attack"])
    c.defense = int(values["defense"])
    c.speed = int(values["speed"])


def burn_damage(c: "Combatant") -> int:
    return c.max_hp // 8


def poison_damage(c: "Combatant", intensity: int) -> int:
    return c.max_hp // 16 + intensity


def process_turn_start(c: "Combatant") -> List[str]:
    """Tick every effect once at the start of the owner's turn.

    Durations are decremented first. Burn/poison then deal their damage;
    anything at zero is removed with a message. Protect never survives
    this pass.
    """
    messages: List[str] = []
    for effect in list(c.status_effects):
        effect.duration -= 1
        kind = effect.kind
        if kind == StatusKind.BURN:
            dmg = c.take_damage(burn_damage(c))
            messages.append(f"{c.name} is hurt by its burn! Took {dmg} damage!")
        elif kind == StatusKind.POISON:
            dmg = c.take_damage(poison_damage(c, effect.intensity))
            messages.append(f"{c.name} is hurt by poison! Took {dmg} damage!")

        if kind == StatusKind.PROTECT:
            remove_status_effect(c, kind)
            messages.append(_EXPIRY_TEXT[kind].format(name=c.name))
        elif effect.duration <= 0:
            remove_status_effect(c, kind)
            if kind in STAT_MODIFIERS:
                stat = STAT_MODIFIERS[kind][0]
                messages.append(f"{c.name}'s {stat} returned to normal.")
            else:
                messages.append(_EXPIRY_TEXT[kind].format(name=c.name))
    recalculate_stats(c)
    return messages

__all__ = [
    "StatusKind", "StatusEffect", "STAT_MODIFIERS", "BUFF_KINDS", "AILMENT_KINDS", "NEGATIVE_KINDS",
    "add_status_effect", "remove_status_effect", "has_status_effect", "find_status_effect",
    "clear_status_effects", "recalculate_stats", "process_turn_start",
]
