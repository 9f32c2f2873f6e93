"""Experience calculation, level thresholds & level-up growth.

- ``xp_needed(n) = 50 * n * n`` is the cumulative XP a gopher must hold to
  be at level ``n``; a gopher levels while ``xp >= xp_needed(level + 1)``.
- Every participant of a won battle gets the same award
  (``enemy_level * 10 * rarity multiplier * event multiplier``).
- Each level gained rolls archetype growth once.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Dict, Any, Optional
import random

from .archetypes import Archetype, GROWTH
from .rarity import Rarity

if TYPE_CHECKING:
    from .models import Combatant
    from gophermon.events.provider import EventModifierProvider

MIN_LEVEL = 1
MAX_LEVEL = 100
XP_PER_ENEMY_LEVEL = 10


def clamp_level(level: int) -> int:
    return max(MIN_LEVEL, min(int(level), MAX_LEVEL))


def xp_needed(level: int) -> int:
    return 50 * level * level


def xp_gain(enemy_level: int, enemy_rarity: Rarity, xp_multiplier: float = 1.0) -> int:
    base = max(1, int(enemy_level)) * XP_PER_ENEMY_LEVEL
    return int(base * Rarity(enemy_rarity).xp_multiplier * float(xp_multiplier))


def xp_gain_for(enemy: "Combatant", provider: Optional["EventModifierProvider"] = None) -> int:
    mult = provider.xp_multiplier() if provider is not None else 1.0
    return xp_gain(enemy.level, enemy.rarity, mult)


def xp_progress(xp: int, level: int) -> tuple[int, int]:
    """(progress, span) towards the next level, for progress displays.

    Gophers may be created at any level holding 0 XP, so raw XP counts as
    progress, capped at the span between the two thresholds.
    """
    xp = max(0, int(xp))
    level = max(MIN_LEVEL, int(level))
    span = xp_needed(level + 1) - xp_needed(level)
    return min(xp, span), span


def apply_level_growth(member: "Combatant", rng: random.Random) -> Dict[str, int]:
    growth = GROWTH[Archetype(member.archetype)]
    hp_up = 10 + rng.randint(0, 5) + member.complexity // 2
    hp_up += rng.randint(*growth.extra_hp)
    gains = {
        "hp": hp_up,
        "attack": rng.randint(*growth.attack),
        "defense": rng.randint(*growth.defense),
        "speed": rng.randint(*growth.speed),
    }
    member.max_hp += hp_up
    member.heal(hp_up)
    member.grow_stats(gains["attack"], gains["defense"], gains["speed"])
    return gains


def apply_experience(member: "Combatant", gained: int, rng: random.Random) -> Dict[str, Any]:
    """Add ``gained`` XP and level up as many times as the thresholds allow."""
    if gained < 0:
        raise ValueError(f"experience gain must be non-negative, got {gained}")
    before_level = member.level
    member.xp += int(gained)
    while member.level < MAX_LEVEL and member.xp >= xp_needed(member.level + 1):
        member.level += 1
        apply_level_growth(member, rng)
    return {"gained": gained, "leveled": member.level > before_level, "from": before_level, "to": member.level}

__all__ = [
    "xp_needed", "xp_gain", "xp_gain_for", "xp_progress", "apply_experience", "apply_level_growth",
    "clamp_level", "MIN_LEVEL", "MAX_LEVEL",
]
