"""Read-only modifier interface the battle engine consumes.

Anything exposing these four methods can be handed to a battle; the engine
never writes through it. :class:`NoEvents` is the neutral default.
"""
from __future__ import annotations
from typing import Protocol, runtime_checkable


@runtime_checkable
class EventModifierProvider(Protocol):
    def xp_multiplier(self) -> float: ...
    def capture_rate_multiplier(self) -> float: ...
    def stat_boost_multiplier(self) -> float: ...
    def evolution_level_reduction(self) -> int: ...


class NoEvents:
    def xp_multiplier(self) -> float:
        return 1.0

    def capture_rate_multiplier(self) -> float:
        return 1.0

    def stat_boost_multiplier(self) -> float:
        return 1.0

    def evolution_level_reduction(self) -> int:
        return 0

__all__ = ["EventModifierProvider", "NoEvents"]
