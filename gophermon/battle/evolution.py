"""Evolution: stage thresholds, stat boosts and ability re-binding."""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
import random

from gophermon.core.logging import logger
from .abilities import abilities_for
from .models import Combatant, MAX_EVOLUTION_STAGE
from .rarity import Rarity, complexity_range

EVOLUTION_LEVELS = (16, 32)


@dataclass
class EvolutionResult:
    name: str
    from_stage: int
    to_stage: int
    from_rarity: Rarity
    to_rarity: Rarity
    hp_boost: int
    attack_boost: int
    defense_boost: int
    speed_boost: int

    def messages(self) -> List[str]:
        return [
            f"{self.name} is evolving!",
            f"Evolution stage: {self.from_stage} -> {self.to_stage}",
            f"Rarity: {self.from_rarity} -> {self.to_rarity}",
            "Stats increased significantly!",
        ]


def evolution_threshold(stage: int, level_reduction: int = 0) -> Optional[int]:
    """Level needed to leave ``stage``; None once fully evolved."""
    if not 0 <= stage < MAX_EVOLUTION_STAGE:
        return None
    return max(1, EVOLUTION_LEVELS[stage] - max(0, int(level_reduction)))


def can_evolve(c: Combatant, level_reduction: int = 0) -> bool:
    threshold = evolution_threshold(c.evolution_stage, level_reduction)
    return threshold is not None and c.level >= threshold


def try_evolve(c: Combatant, rng: random.Random, level_reduction: int = 0,
               *, strict: bool = True) -> Optional[EvolutionResult]:
    """Advance ``c`` by one stage if its level allows it.

    The gopher climbs one rarity tier (capped at Legendary), gains
    stage-scaled stats, heals by the HP gained and has its abilities rebuilt
    for the new stage.
    """
    if not can_evolve(c, level_reduction):
        return None
    old_stage, old_rarity = c.evolution_stage, c.rarity
    stage = old_stage + 1
    rarity = old_rarity.next_tier()
    complexity = c.complexity + rng.randint(2, 4)
    c.complexity = max(complexity, complexity_range(rarity)[0])

    hp_boost = 20 + stage * 10
    result = EvolutionResult(
        name=c.name,
        from_stage=old_stage,
        to_stage=stage,
        from_rarity=old_rarity,
        to_rarity=rarity,
        hp_boost=hp_boost,
        attack_boost=5 + stage * 3,
        defense_boost=5 + stage * 3,
        speed_boost=3 + stage * 2,
    )
    c.evolution_stage = stage
    c.rarity = rarity
    c.max_hp += hp_boost
    c.heal(hp_boost)
    c.grow_stats(result.attack_boost, result.defense_boost, result.speed_boost)
    c.abilities = abilities_for(c.id, c.archetype, c.level, stage, rarity, strict=strict)
    logger.info("GopherEvolved", id=c.id, name=c.name, stage=stage, rarity=rarity.value)
    return result

__all__ = ["EvolutionResult", "evolution_threshold", "can_evolve", "try_evolve", "EVOLUTION_LEVELS"]
