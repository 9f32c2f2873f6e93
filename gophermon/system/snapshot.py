"""JSON-compatible snapshots of combatants and battles.

Used to park an active battle between actions and pick it up again after a
restart. Abilities are stored by template id and bound again on load; the
RNG is never stored, the restoring caller supplies a fresh one.
"""
from __future__ import annotations
import json
from typing import Any, Dict, Optional
import random

from gophermon.core.errors import GophermonError, SnapshotError
from gophermon.battle.abilities import create_ability
from gophermon.battle.models import Combatant
from gophermon.battle.session import Battle
from gophermon.battle.status import StatusEffect
from gophermon.events.provider import EventModifierProvider

SNAPSHOT_VERSION = 1


def combatant_to_json(c: Combatant) -> Dict[str, Any]:
    return {
        "id": c.id,
        "name": c.name,
        "archetype": c.archetype.value,
        "primary_type": c.primary_type.value,
        "secondary_type": c.secondary_type.value if c.secondary_type else None,
        "level": c.level,
        "xp": c.xp,
        "rarity": c.rarity.value,
        "evolution_stage": c.evolution_stage,
        "complexity": c.complexity,
        "max_hp": c.max_hp,
        "current_hp": c.current_hp,
        "attack": c.attack,
        "defense": c.defense,
        "speed": c.speed,
        "base_attack": c.base_attack,
        "base_defense": c.base_defense,
        "base_speed": c.base_speed,
        "stat_boost": c.stat_boost,
        "abilities": [{"id": a.id, "template_id": a.template_id} for a in c.abilities],
        "status_effects": [
            {"kind": e.kind.value, "duration": e.duration, "intensity": e.intensity}
            for e in c.status_effects
        ],
    }


def combatant_from_json(data: Dict[str, Any], *, strict: bool = True) -> Combatant:
    try:
        abilities = [create_ability(a["template_id"], a.get("id"), strict=strict) for a in data.get("abilities", [])]
        effects = [StatusEffect(e["kind"], int(e["duration"]), int(e.get("intensity", 0)))
                   for e in data.get("status_effects", [])]
        return Combatant(
            id=data["id"],
            name=data["name"],
            archetype=data["archetype"],
            primary_type=data.get("primary_type"),
            secondary_type=data.get("secondary_type"),
            level=int(data.get("level", 1)),
            xp=int(data.get("xp", 0)),
            rarity=data.get("rarity", "COMMON"),
            evolution_stage=int(data.get("evolution_stage", 0)),
            complexity=int(data.get("complexity", 0)),
            max_hp=int(data["max_hp"]),
            current_hp=data.get("current_hp"),
            attack=int(data["attack"]),
            defense=int(data["defense"]),
            speed=int(data["speed"]),
            base_attack=data.get("base_attack"),
            base_defense=data.get("base_defense"),
            base_speed=data.get("base_speed"),
            stat_boost=float(data.get("stat_boost", 1.0)),
            abilities=abilities,
            status_effects=effects,
        )
    except (KeyError, TypeError, ValueError, AttributeError, GophermonError) as e:
        raise SnapshotError("combatant", f"{type(e).__name__}: {e}") from e


def battle_to_json(b: Battle) -> Dict[str, Any]:
    return {
        "version": SNAPSHOT_VERSION,
        "state": b.state.value,
        "turn_owner": b.turn_owner.value,
        "turn": b.turn,
        "captured": b.captured,
        "active_id": b.player_active.id,
        "enemy": combatant_to_json(b.enemy),
        "reserve": [combatant_to_json(m) for m in b.reserve],
        "participating_ids": [m.id for m in b.participating],
        "log": list(b.log),
    }


def battle_from_json(data: Dict[str, Any], provider: Optional[EventModifierProvider] = None,
                     rng: Optional[random.Random] = None, *, strict: bool = True) -> Battle:
    if not isinstance(data, dict):
        raise SnapshotError("battle", "snapshot must be an object")
    if data.get("version", SNAPSHOT_VERSION) != SNAPSHOT_VERSION:
        raise SnapshotError("battle", f"unsupported snapshot version {data.get('version')}")
    try:
        reserve = [combatant_from_json(m, strict=strict) for m in data["reserve"]]
        enemy = combatant_from_json(data["enemy"], strict=strict)
        by_id = {m.id: m for m in reserve}
        active = by_id[data["active_id"]]
        participating = [by_id[pid] for pid in data.get("participating_ids", [active.id])]
        return Battle.restore(
            player_active=active,
            enemy=enemy,
            reserve=reserve,
            participating=participating,
            state=data["state"],
            turn_owner=data.get("turn_owner", "PLAYER"),
            log=data.get("log", []),
            captured=data.get("captured", False),
            turn=data.get("turn", 0),
            provider=provider,
            rng=rng,
        )
    except SnapshotError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise SnapshotError("battle", f"{type(e).__name__}: {e}") from e


def dumps_battle(b: Battle) -> str:
    return json.dumps(battle_to_json(b), indent=2)


def loads_battle(text: str, provider: Optional[EventModifierProvider] = None,
                 rng: Optional[random.Random] = None, *, strict: bool = True) -> Battle:
    try:
        data = json.loads(text)
    except ValueError as e:
        raise SnapshotError("battle", f"invalid JSON: {e}") from e
    return battle_from_json(data, provider, rng, strict=strict)

__all__ = [
    "combatant_to_json", "combatant_from_json", "battle_to_json", "battle_from_json",
    "dumps_battle", "loads_battle", "SNAPSHOT_VERSION",
]
