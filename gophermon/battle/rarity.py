"""Rarity tiers and the tables hanging off them."""
from __future__ import annotations
from enum import Enum
from typing import Dict, Tuple


class Rarity(str, Enum):
    COMMON = "COMMON"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    EPIC = "EPIC"
    LEGENDARY = "LEGENDARY"

    def __str__(self) -> str:
        return self.value

    @property
    def stat_multiplier(self) -> float:
        return STAT_MULTIPLIERS[self]

    @property
    def xp_multiplier(self) -> float:
        return XP_MULTIPLIERS[self]

    @property
    def capture_penalty(self) -> float:
        return CAPTURE_PENALTIES[self]

    def next_tier(self) -> "Rarity":
        order = list(Rarity)
        idx = order.index(self)
        return order[min(idx + 1, len(order) - 1)]


STAT_MULTIPLIERS: Dict[Rarity, float] = {
    Rarity.COMMON: 1.0,
    Rarity.UNCOMMON: 1.15,
    Rarity.RARE: 1.3,
    Rarity.EPIC: 1.5,
    Rarity.LEGENDARY: 1.8,
}

XP_MULTIPLIERS: Dict[Rarity, float] = {
    Rarity.COMMON: 1.0,
    Rarity.UNCOMMON: 1.2,
    Rarity.RARE: 1.5,
    Rarity.EPIC: 2.0,
    Rarity.LEGENDARY: 3.0,
}

CAPTURE_PENALTIES: Dict[Rarity, float] = {
    Rarity.COMMON: 0.0,
    Rarity.UNCOMMON: 0.1,
    Rarity.RARE: 0.2,
    Rarity.EPIC: 0.3,
    Rarity.LEGENDARY: 0.4,
}

_COMPLEXITY_RANGES: Dict[Rarity, Tuple[int, int]] = {
    Rarity.COMMON: (1, 2),
    Rarity.UNCOMMON: (3, 4),
    Rarity.RARE: (5, 6),
    Rarity.EPIC: (7, 8),
    Rarity.LEGENDARY: (9, 15),
}

# Wild encounter odds for the non-common tiers; common takes the rest.
WILD_ODDS: Tuple[Tuple[Rarity, float], ...] = (
    (Rarity.LEGENDARY, 0.01),
    (Rarity.EPIC, 0.04),
    (Rarity.RARE, 0.10),
    (Rarity.UNCOMMON, 0.25),
)


def complexity_to_rarity(complexity: int) -> Rarity:
    if complexity <= 2:
        return Rarity.COMMON
    if complexity <= 4:
        return Rarity.UNCOMMON
    if complexity <= 6:
        return Rarity.RARE
    if complexity <= 8:
        return Rarity.EPIC
    return Rarity.LEGENDARY


def complexity_range(rarity: Rarity) -> Tuple[int, int]:
    return _COMPLEXITY_RANGES[Rarity(rarity)]


def wild_rarity(roll: float, boost: float = 1.0) -> Rarity:
    """Map a uniform roll in [0, 1) to a tier.

    With the default odds that is 60/25/10/4/1 percent. ``boost`` scales the
    non-common odds (a rare-encounter event doubles them).
    """
    threshold = 0.0
    for tier, odds in WILD_ODDS:
        threshold += odds * boost
        if roll < threshold:
            return tier
    return Rarity.COMMON

__all__ = ["Rarity", "complexity_to_rarity", "complexity_range", "wild_rarity"]
