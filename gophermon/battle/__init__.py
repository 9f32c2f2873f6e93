"""
Battle engine package.
- typechart.py (type match-ups)
- status.py (timed status effects)
- models.py (Combatant)
- abilities.py (effect variants, template registry)
- session.py (per-encounter state machine)
"""
from .models import Combatant
from .session import Battle, BattleState, TurnOwner, ActionKind, new_battle

__all__ = ["Combatant", "Battle", "BattleState", "TurnOwner", "ActionKind", "new_battle"]
