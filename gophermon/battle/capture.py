"""Capture & escape mechanics for wild encounters."""
from __future__ import annotations
import random

from .rarity import Rarity

MIN_CAPTURE_CHANCE = 0.05
MAX_CAPTURE_CHANCE = 0.90
ESCAPE_CHANCE = 0.70


def capture_chance(current_hp: int, max_hp: int, rarity: Rarity, multiplier: float = 1.0) -> float:
    """Chance that a net holds, given the target's remaining HP.

    A target with no max HP is treated as fully worn down.
    """
    if max_hp <= 0:
        hp_fraction = 0.0
    else:
        hp_fraction = max(0, min(current_hp, max_hp)) / max_hp
    chance = (1.0 - hp_fraction) * (1.0 - Rarity(rarity).capture_penalty) * float(multiplier)
    return max(MIN_CAPTURE_CHANCE, min(chance, MAX_CAPTURE_CHANCE))


def attempt_capture(rng: random.Random, current_hp: int, max_hp: int, rarity: Rarity,
                    multiplier: float = 1.0) -> bool:
    return rng.random() < capture_chance(current_hp, max_hp, rarity, multiplier)


def escape_success(rng: random.Random) -> bool:
    return rng.random() < ESCAPE_CHANCE

__all__ = [
    "capture_chance", "attempt_capture", "escape_success",
    "MIN_CAPTURE_CHANCE", "MAX_CAPTURE_CHANCE", "ESCAPE_CHANCE",
]
