"""Species archetypes: base stat profiles, level-up growth and primary type."""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from gophermon.core.types import ElementType


class Archetype(str, Enum):
    HACKER = "Hacker"
    TANK = "Tank"
    SPEEDY = "Speedy"
    SUPPORT = "Support"
    MAGE = "Mage"

    def __str__(self) -> str:
        return self.value

    @property
    def primary_type(self) -> ElementType:
        return ElementType(self.value)


@dataclass(frozen=True)
class StatProfile:
    hp: int
    attack: int
    defense: int
    speed: int


BASE_PROFILES: Dict[Archetype, StatProfile] = {
    Archetype.HACKER: StatProfile(hp=60, attack=45, defense=30, speed=55),
    Archetype.TANK: StatProfile(hp=90, attack=35, defense=50, speed=25),
    Archetype.SPEEDY: StatProfile(hp=50, attack=40, defense=25, speed=65),
    Archetype.SUPPORT: StatProfile(hp=70, attack=35, defense=40, speed=40),
    Archetype.MAGE: StatProfile(hp=55, attack=50, defense=30, speed=45),
}

Range = Tuple[int, int]


@dataclass(frozen=True)
class Growth:
    """Inclusive per-level gain ranges on top of the shared HP gain."""
    attack: Range
    defense: Range
    speed: Range
    extra_hp: Range = (0, 0)


GROWTH: Dict[Archetype, Growth] = {
    Archetype.HACKER: Growth(attack=(3, 5), defense=(1, 2), speed=(4, 6)),
    Archetype.TANK: Growth(attack=(1, 2), defense=(4, 6), speed=(1, 1), extra_hp=(5, 9)),
    Archetype.SPEEDY: Growth(attack=(2, 4), defense=(1, 2), speed=(5, 8)),
    Archetype.SUPPORT: Growth(attack=(2, 3), defense=(2, 3), speed=(2, 3), extra_hp=(3, 5)),
    Archetype.MAGE: Growth(attack=(4, 6), defense=(2, 3), speed=(2, 3)),
}

__all__ = ["Archetype", "StatProfile", "BASE_PROFILES", "Growth", "GROWTH"]
