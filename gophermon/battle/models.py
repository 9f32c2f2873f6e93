"""Battle-scoped combatant state.

A :class:`Combatant` is the mutable view of one gopher for the duration of
an encounter. HP is clamped to ``[0, max_hp]`` on every mutation; live
attack/defense/speed are derived from the lazily captured ``base_*`` values,
the event stat boost and the active stat-modifier effects.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple
import random

from gophermon.core.errors import InvalidCombatantError
from gophermon.core.types import ElementType, parse_type
from .archetypes import Archetype
from .rarity import Rarity
from . import status as _status
from .status import StatusEffect, StatusKind

if TYPE_CHECKING:
    from .abilities import Ability

MAX_EVOLUTION_STAGE = 2


@dataclass
class Combatant:
    id: str
    name: str
    archetype: Archetype
    primary_type: ElementType
    secondary_type: Optional[ElementType] = None
    level: int = 1
    xp: int = 0
    rarity: Rarity = Rarity.COMMON
    evolution_stage: int = 0
    complexity: int = 0
    max_hp: int = 1
    current_hp: Optional[int] = None  # None -> full HP
    attack: int = 0
    defense: int = 0
    speed: int = 0
    base_attack: Optional[int] = None
    base_defense: Optional[int] = None
    base_speed: Optional[int] = None
    stat_boost: float = 1.0
    abilities: List["Ability"] = field(default_factory=list)
    status_effects: List[StatusEffect] = field(default_factory=list)

    def __post_init__(self):
        self.archetype = Archetype(self.archetype)
        self.rarity = Rarity(self.rarity)
        self.primary_type = parse_type(self.primary_type) or self.archetype.primary_type
        self.secondary_type = parse_type(self.secondary_type)
        if self.level < 1:
            raise InvalidCombatantError(f"{self.name}: level must be >= 1 (got {self.level})")
        if not 0 <= self.evolution_stage <= MAX_EVOLUTION_STAGE:
            raise InvalidCombatantError(f"{self.name}: evolution stage out of range ({self.evolution_stage})")
        self.xp = max(0, int(self.xp))
        self.max_hp = max(0, int(self.max_hp))
        if self.current_hp is None:
            self.current_hp = self.max_hp
        self._clamp_hp()

    # ------------------------------------------------------------------
    # HP
    # ------------------------------------------------------------------
    @property
    def types(self) -> Tuple[ElementType, ...]:
        if self.secondary_type is None:
            return (self.primary_type,)
        return (self.primary_type, self.secondary_type)

    def is_fainted(self) -> bool:
        return self.current_hp <= 0

    def _clamp_hp(self):
        self.current_hp = max(0, min(int(self.current_hp), self.max_hp))

    def take_damage(self, amount: int) -> int:
        """Subtract HP (never below 0); returns the amount requested."""
        amount = max(0, int(amount))
        self.current_hp -= amount
        self._clamp_hp()
        return amount

    def heal(self, amount: int) -> int:
        """Restore HP up to max; returns the HP actually restored."""
        old = self.current_hp
        self.current_hp += max(0, int(amount))
        self._clamp_hp()
        return self.current_hp - old

    def restore_full(self) -> int:
        return self.heal(self.max_hp)

    # ------------------------------------------------------------------
    # Stats & status effects
    # ------------------------------------------------------------------
    def snapshot_base_stats(self):
        """Capture base stats once; later modified values never overwrite them."""
        if self.base_attack is None:
            self.base_attack = self.attack
        if self.base_defense is None:
            self.base_defense = self.defense
        if self.base_speed is None:
            self.base_speed = self.speed

    def recalculate_stats(self):
        _status.recalculate_stats(self)

    def apply_stat_boost(self, multiplier: float):
        """Fold an event stat multiplier into every later recalculation."""
        self.snapshot_base_stats()
        self.stat_boost = float(multiplier)
        self.recalculate_stats()

    def grow_stats(self, attack: int = 0, defense: int = 0, speed: int = 0):
        self.snapshot_base_stats()
        self.base_attack += attack
        self.base_defense += defense
        self.base_speed += speed
        self.recalculate_stats()

    def add_status_effect(self, kind: StatusKind, duration: int, intensity: int = 0) -> StatusEffect:
        return _status.add_status_effect(self, kind, duration, intensity)

    def remove_status_effect(self, kind: StatusKind) -> bool:
        return _status.remove_status_effect(self, kind)

    def has_status_effect(self, kind: StatusKind) -> bool:
        return _status.has_status_effect(self, kind)

    def status_effect(self, kind: StatusKind) -> Optional[StatusEffect]:
        return _status.find_status_effect(self, kind)

    def process_status_effects(self) -> List[str]:
        return _status.process_turn_start(self)

    # ------------------------------------------------------------------
    # Progression
    # ------------------------------------------------------------------
    def add_xp(self, amount: int, rng: random.Random) -> Tuple[bool, int]:
        from .experience import apply_experience
        result = apply_experience(self, amount, rng)
        return result["leveled"], self.level

    def __repr__(self) -> str:
        return f"Combatant({self.name!r}, Lv{self.level}, {self.current_hp}/{self.max_hp} HP)"

__all__ = ["Combatant", "MAX_EVOLUTION_STAGE"]
