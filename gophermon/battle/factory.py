"""Factory helpers for constructing combatants.

Shared by the CLI simulator, snapshot restore and tests. All randomness goes
through the ``rng`` argument.
"""
from __future__ import annotations
from typing import Optional, Tuple
import random

from gophermon.core.types import ALL_TYPES, ElementType
from .abilities import abilities_for
from .archetypes import Archetype, BASE_PROFILES
from .experience import clamp_level
from .models import Combatant
from .rarity import Rarity, complexity_range, wild_rarity

STAT_JITTER = 0.05
SECONDARY_TYPE_CHANCE = 0.3
NAME_PREFIXES = ("Go", "Gopher", "Code", "Byte", "Bit", "Dev", "Hack")
NAME_SUFFIXES = ("mon", "gopher", "coder", "dev", "hack", "byte", "bit")


def level_multiplier(level: int) -> float:
    return 1.0 + (level - 1) * 0.1


def generate_base_stats(archetype: Archetype, rarity: Rarity, level: int,
                        rng: random.Random) -> Tuple[int, int, int, int]:
    """(hp, attack, defense, speed) for a freshly generated gopher."""
    profile = BASE_PROFILES[Archetype(archetype)]
    scale = Rarity(rarity).stat_multiplier * level_multiplier(clamp_level(level))
    stats = []
    for base in (profile.hp, profile.attack, profile.defense, profile.speed):
        value = int(base * scale)
        value = int(value * (1.0 - STAT_JITTER + rng.random() * 2 * STAT_JITTER))
        stats.append(max(1, value))
    return stats[0], stats[1], stats[2], stats[3]


def generate_name(archetype: Archetype, rng: random.Random) -> str:
    if rng.random() < 0.3:
        return f"{Archetype(archetype).value}{rng.choice(NAME_SUFFIXES)}"
    return f"{rng.choice(NAME_PREFIXES)}{rng.choice(NAME_SUFFIXES)}"


def roll_secondary_type(primary: ElementType, rarity: Rarity, rng: random.Random) -> Optional[ElementType]:
    guaranteed = Rarity(rarity) in (Rarity.RARE, Rarity.EPIC, Rarity.LEGENDARY)
    if not guaranteed and rng.random() >= SECONDARY_TYPE_CHANCE:
        return None
    return rng.choice([t for t in ALL_TYPES if t != primary])


def create_combatant(archetype: Archetype, level: int, rarity: Rarity, rng: random.Random, *,
                     name: Optional[str] = None, combatant_id: Optional[str] = None,
                     evolution_stage: int = 0, complexity: Optional[int] = None,
                     strict: bool = True) -> Combatant:
    archetype = Archetype(archetype)
    rarity = Rarity(rarity)
    level = clamp_level(level)
    hp, attack, defense, speed = generate_base_stats(archetype, rarity, level, rng)
    primary = archetype.primary_type
    combatant_id = combatant_id or f"gopher_{rng.getrandbits(32):08x}"
    if complexity is None:
        complexity = rng.randint(*complexity_range(rarity))
    return Combatant(
        id=combatant_id,
        name=name or generate_name(archetype, rng),
        archetype=archetype,
        primary_type=primary,
        secondary_type=roll_secondary_type(primary, rarity, rng),
        level=level,
        rarity=rarity,
        evolution_stage=evolution_stage,
        complexity=complexity,
        max_hp=hp,
        attack=attack,
        defense=defense,
        speed=speed,
        abilities=abilities_for(combatant_id, archetype, level, evolution_stage, rarity, strict=strict),
    )


def wild_combatant(rng: random.Random, *, rarity_boost: float = 1.0, min_level: int = 1,
                   max_level: int = 10, strict: bool = True) -> Combatant:
    """Random wild gopher: rarity from the encounter odds, level 1-10 by default."""
    rarity = wild_rarity(rng.random(), rarity_boost)
    archetype = rng.choice(list(Archetype))
    level = rng.randint(min_level, max_level)
    return create_combatant(archetype, level, rarity, rng, strict=strict)

__all__ = [
    "generate_base_stats", "generate_name", "roll_secondary_type", "create_combatant", "wild_combatant",
    "level_multiplier",
]
