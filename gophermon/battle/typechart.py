"""Type effectiveness chart for the five gopher types.

The chart is asymmetric on purpose (Tank vs Hacker is 2.0 while Hacker vs
Tank is 0.5).  Dual typing follows two different rules:

* exactly one side dual-typed -> average of the two single lookups
* both sides dual-typed       -> best of the four pairings for the attacker
"""
from __future__ import annotations
from typing import Dict, Optional
from gophermon.core.types import ElementType

H, T, S, P, M = (ElementType.HACKER, ElementType.TANK, ElementType.SPEEDY,
                 ElementType.SUPPORT, ElementType.MAGE)

_TYPE_CHART: Dict[ElementType, Dict[ElementType, float]] = {
    H: {H: 1.0, T: 0.5, S: 2.0, P: 1.5, M: 1.0},
    T: {H: 2.0, T: 0.5, S: 0.5, P: 1.5, M: 1.5},
    S: {H: 1.5, T: 2.0, S: 1.0, P: 1.0, M: 1.5},
    P: {H: 1.0, T: 1.5, S: 1.0, P: 0.5, M: 2.0},
    M: {H: 1.5, T: 1.0, S: 1.5, P: 0.5, M: 1.0},
}


def effectiveness(attacker: Optional[ElementType], defender: Optional[ElementType]) -> float:
    """Single-type multiplier; anything not in the chart is neutral."""
    return _TYPE_CHART.get(attacker, {}).get(defender, 1.0)  # type: ignore[arg-type]


def dual_effectiveness(attacker1: ElementType, attacker2: Optional[ElementType],
                       defender1: ElementType, defender2: Optional[ElementType]) -> float:
    if attacker2 is None and defender2 is None:
        return effectiveness(attacker1, defender1)
    if defender2 is None:
        return (effectiveness(attacker1, defender1) + effectiveness(attacker2, defender1)) / 2.0
    if attacker2 is None:
        return (effectiveness(attacker1, defender1) + effectiveness(attacker1, defender2)) / 2.0
    return max(
        effectiveness(attacker1, defender1),
        effectiveness(attacker1, defender2),
        effectiveness(attacker2, defender1),
        effectiveness(attacker2, defender2),
    )


def effectiveness_message(mult: float) -> str:
    if mult >= 2.0:
        return "It's super effective!"
    if mult >= 1.5:
        return "It's effective!"
    if mult <= 0.5:
        return "It's not very effective..."
    return ""

__all__ = ["effectiveness", "dual_effectiveness", "effectiveness_message"]
