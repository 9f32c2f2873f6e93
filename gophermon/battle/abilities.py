"""Ability catalog: effect variants, the template registry and dispatch.

Templates are plain data. Each carries one effect variant holding only its
numeric parameters; :func:`apply_effect` dispatches on the variant type.
Effects mutate nothing but the two combatants they are handed and draw
randomness only from the ``rng`` passed in, so one template can back any
number of abilities at once.

The registry is built on first use and exposed read-only.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache, singledispatch
from types import MappingProxyType
from typing import TYPE_CHECKING, List, Mapping, Optional, Tuple
import random

from gophermon.core.errors import UnknownAbilityError
from gophermon.core.logging import logger
from gophermon.core.types import ElementType
from .archetypes import Archetype
from .rarity import Rarity
from .status import StatusKind, NEGATIVE_KINDS, STAT_MODIFIERS
from .typechart import dual_effectiveness, effectiveness, effectiveness_message

if TYPE_CHECKING:
    from .models import Combatant

DAMAGE_JITTER = 0.10
DEFENSE_FACTOR = 0.5
PROTECT_DURATION = 1
FALLBACK_TEMPLATE = "hesitate"


class Target(str, Enum):
    SELF = "SELF"
    ENEMY = "ENEMY"
    BOTH = "BOTH"


class Cleanse(str, Enum):
    NONE = "NONE"
    NEGATIVE = "NEGATIVE"
    ALL = "ALL"


# ---------------------------------------------------------------------------
# Effect variants
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Damage:
    power: int
    attack_type: Optional[ElementType] = None


@dataclass(frozen=True)
class MultiHit:
    power: int
    min_hits: int
    max_hits: int


@dataclass(frozen=True)
class Backfire:
    power: int
    chance: float = 0.2


@dataclass(frozen=True)
class Heal:
    base: int = 0
    per_level: int = 0
    full: bool = False
    cleanse: Cleanse = Cleanse.NONE
    buffs: Tuple[StatusKind, ...] = ()
    buff_duration: int = 3
    protect: bool = False


@dataclass(frozen=True)
class Buff:
    kinds: Tuple[StatusKind, ...]
    base_duration: int = 3
    level_divisor: int = 5
    protect: bool = False


@dataclass(frozen=True)
class Debuff:
    kind: StatusKind
    base_duration: int = 3
    level_divisor: int = 5


@dataclass(frozen=True)
class StatusInflict:
    power: int
    kind: StatusKind
    chance: float
    min_duration: int
    max_duration: int
    intensity_base: int = 0
    intensity_level_divisor: int = 0
    both: bool = False


@dataclass(frozen=True)
class DualDamage:
    power: int
    self_divisor: int = 3


@dataclass(frozen=True)
class Idle:
    pass


AbilityEffect = (Damage, MultiHit, Backfire, Heal, Buff, Debuff, StatusInflict, DualDamage, Idle)


@dataclass(frozen=True)
class AbilityTemplate:
    template_id: str
    name: str
    description: str
    power: int
    cost: int
    target: Target
    effect: object


@dataclass(frozen=True)
class Ability:
    id: str
    template_id: str
    name: str
    description: str
    power: int
    cost: int
    target: Target
    effect: object = field(repr=False)

    def use(self, user: "Combatant", target: "Combatant", rng: random.Random) -> List[str]:
        return apply_effect(self.effect, self.name, user, target, rng)


# ---------------------------------------------------------------------------
# Damage formula
# ---------------------------------------------------------------------------
def matchup(attacker: "Combatant", defender: "Combatant") -> float:
    return dual_effectiveness(attacker.primary_type, attacker.secondary_type,
                              defender.primary_type, defender.secondary_type)


def calculate_damage(attacker: "Combatant", defender: "Combatant", power: int,
                     rng: random.Random) -> Tuple[int, float]:
    """Return ``(damage, effectiveness)``; damage is always at least 1."""
    raw = attacker.attack * (power / 100.0) - defender.defense * DEFENSE_FACTOR
    eff = matchup(attacker, defender)
    jitter = 1.0 + rng.uniform(-DAMAGE_JITTER, DAMAGE_JITTER)
    return max(1, round(raw * eff * jitter)), eff


def _with_matchup(messages: List[str], eff: float) -> List[str]:
    note = effectiveness_message(eff)
    if note:
        messages.append(note)
    return messages


def _stat_names(kinds: Tuple[StatusKind, ...]) -> str:
    names = [STAT_MODIFIERS[k][0] for k in kinds]
    if len(names) >= 3:
        return "All stats"
    return " and ".join(names).capitalize()


def _buff_duration(user: "Combatant", base: int, divisor: int) -> int:
    return base + (user.level // divisor if divisor else 0)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------
@singledispatch
def apply_effect(effect, name: str, user: "Combatant", target: "Combatant", rng: random.Random) -> List[str]:
    raise TypeError(f"unsupported ability effect: {type(effect).__name__}")


@apply_effect.register
def _(effect: Damage, name, user, target, rng):
    dmg, eff = calculate_damage(user, target, effect.power, rng)
    if effect.attack_type is not None:
        # signature attacks: fixed type only drives the message
        eff = effectiveness(effect.attack_type, target.primary_type)
    target.take_damage(dmg)
    return _with_matchup([f"{user.name} used {name}! Dealt {dmg} damage!"], eff)


@apply_effect.register
def _(effect: MultiHit, name, user, target, rng):
    hits = rng.randint(effect.min_hits, effect.max_hits)
    total = 0
    eff = 1.0
    for _ in range(hits):
        dmg, eff = calculate_damage(user, target, effect.power, rng)
        target.take_damage(dmg)
        total += dmg
    return _with_matchup([f"{user.name} used {name}! Hit {hits} times for {total} total damage!"], eff)


@apply_effect.register
def _(effect: Backfire, name, user, target, rng):
    dmg, eff = calculate_damage(user, target, effect.power, rng)
    if rng.random() < effect.chance:
        recoil = user.take_damage(dmg // 2)
        return [f"{user.name} used {name}, but it backfired! Took {recoil} damage!"]
    target.take_damage(dmg)
    return _with_matchup([f"{user.name} used {name}! Dealt {dmg} damage!"], eff)


@apply_effect.register
def _(effect: Heal, name, user, target, rng):
    if effect.full:
        healed = user.restore_full()
        parts = ["Fully restored HP"]
    else:
        healed = user.heal(effect.base + effect.per_level * user.level)
        parts = [f"Healed {healed} HP"]
    if effect.cleanse == Cleanse.ALL:
        user.status_effects = []
        parts.append("removed all status effects")
    elif effect.cleanse == Cleanse.NEGATIVE:
        user.status_effects = [e for e in user.status_effects if e.kind not in NEGATIVE_KINDS]
        parts.append("cleansed negative status")
    if effect.buffs:
        duration = _buff_duration(user, effect.buff_duration, 5)
        for kind in effect.buffs:
            user.add_status_effect(kind, duration)
        parts.append("boosted stats")
    if effect.protect:
        user.add_status_effect(StatusKind.PROTECT, PROTECT_DURATION)
        parts.append("gained protection")
    user.recalculate_stats()
    if len(parts) > 1:
        summary = ", ".join(parts[:-1]) + " and " + parts[-1]
    else:
        summary = parts[0]
    return [f"{user.name} used {name}! {summary}!"]


@apply_effect.register
def _(effect: Buff, name, user, target, rng):
    duration = _buff_duration(user, effect.base_duration, effect.level_divisor)
    for kind in effect.kinds:
        user.add_status_effect(kind, duration)
    text = f"{user.name} used {name}! {_stat_names(effect.kinds)} increased!"
    if effect.protect:
        user.add_status_effect(StatusKind.PROTECT, PROTECT_DURATION)
        text = f"{user.name} used {name}! {_stat_names(effect.kinds)} increased and protection gained!"
    user.recalculate_stats()
    return [text]


@apply_effect.register
def _(effect: Debuff, name, user, target, rng):
    duration = _buff_duration(user, effect.base_duration, effect.level_divisor)
    target.add_status_effect(effect.kind, duration)
    target.recalculate_stats()
    stat = STAT_MODIFIERS[effect.kind][0]
    return [f"{user.name} used {name}! {target.name}'s {stat} decreased!"]


_INFLICT_TEXT = {
    StatusKind.BURN: "burned",
    StatusKind.POISON: "poisoned",
    StatusKind.PARALYSIS: "paralyzed",
    StatusKind.SLEEP: "put to sleep",
    StatusKind.CONFUSION: "confused",
}


@apply_effect.register
def _(effect: StatusInflict, name, user, target, rng):
    if effect.power > 0:
        dmg, eff = calculate_damage(user, target, effect.power, rng)
        target.take_damage(dmg)
        messages = _with_matchup([f"{user.name} used {name}! Dealt {dmg} damage!"], eff)
    else:
        messages = [f"{user.name} used {name}!"]

    if rng.random() < effect.chance:
        duration = rng.randint(effect.min_duration, effect.max_duration)
        intensity = effect.intensity_base
        if effect.intensity_level_divisor:
            intensity += user.level // effect.intensity_level_divisor
        target.add_status_effect(effect.kind, duration, intensity)
        verb = _INFLICT_TEXT[effect.kind]
        if effect.both:
            user.add_status_effect(effect.kind, duration, intensity)
            messages.append(f"Both fighters were {verb} by {name}!")
        elif effect.kind == StatusKind.SLEEP:
            messages.append(f"{target.name} fell asleep!")
        elif effect.kind == StatusKind.CONFUSION:
            messages.append(f"{target.name} became confused!")
        else:
            messages.append(f"{target.name} was {verb}!")
    elif effect.power <= 0:
        messages.append("But it failed!")
    return messages


@apply_effect.register
def _(effect: DualDamage, name, user, target, rng):
    dmg, eff = calculate_damage(user, target, effect.power, rng)
    recoil = dmg // effect.self_divisor
    target.take_damage(dmg)
    user.take_damage(recoil)
    text = f"{user.name} used {name}! Dealt {dmg} damage to {target.name} and {recoil} to itself!"
    return _with_matchup([text], eff)


@apply_effect.register
def _(effect: Idle, name, user, target, rng):
    return [f"{user.name} hesitated and did nothing."]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
def _t(template_id: str, name: str, description: str, cost: int, target: Target, effect,
       power: Optional[int] = None) -> AbilityTemplate:
    if power is None:
        power = getattr(effect, "power", 0)
    return AbilityTemplate(template_id, name, description, power, cost, target, effect)


def _build_templates() -> List[AbilityTemplate]:
    S, E, B = Target.SELF, Target.ENEMY, Target.BOTH
    K = StatusKind
    return [
        _t("quick_hit", "Quick Hit", "A fast, low-damage attack", 5, E, Damage(20)),
        _t("go_panic", "Go Panic()", "Medium damage with chance to confuse", 10, E,
           StatusInflict(40, K.CONFUSION, 0.3, 2, 3)),
        _t("garbage_collector", "Garbage Collector", "Heal HP and cleanse status effects", 15, S,
           Heal(base=30, per_level=2, cleanse=Cleanse.NEGATIVE), power=30),
        _t("race_condition", "Race Condition", "High damage but can backfire", 20, E, Backfire(60, 0.2)),
        _t("goroutine", "Goroutine", "Quick multi-hit attack", 8, E, MultiHit(15, 2, 3)),
        _t("channel_blast", "Channel Blast", "Powerful channel-based attack", 18, E, Damage(50)),
        _t("interface_guard", "Interface Guard", "Boost defense", 12, S, Buff((K.DEFENSE_UP,))),
        _t("defer_recover", "Defer Recover", "Heal and prevent next attack", 20, S,
           Heal(base=35, per_level=3, protect=True), power=35),
        # status infliction
        _t("burn_attack", "Flame On", "Attack that may burn the target", 12, E,
           StatusInflict(35, K.BURN, 0.4, 3, 4)),
        _t("poison_sting", "Toxic Code", "Attack that may poison the target", 10, E,
           StatusInflict(30, K.POISON, 0.5, 4, 5, intensity_base=2, intensity_level_divisor=5)),
        _t("paralyze_bolt", "Static Shock", "Attack that may paralyze the target", 12, E,
           StatusInflict(35, K.PARALYSIS, 0.3, 2, 3)),
        _t("sleep_powder", "Sleep Mode", "May put the target to sleep", 15, E,
           StatusInflict(0, K.SLEEP, 0.6, 2, 3)),
        _t("confuse_ray", "Confuse Ray", "Confuses the target", 10, E,
           StatusInflict(0, K.CONFUSION, 0.7, 2, 3)),
        # buffs
        _t("power_up", "Power Up", "Increases attack for several turns", 15, S, Buff((K.ATTACK_UP,))),
        _t("harden", "Harden", "Increases defense for several turns", 15, S, Buff((K.DEFENSE_UP,))),
        _t("agility", "Agility", "Increases speed for several turns", 15, S, Buff((K.SPEED_UP,))),
        # debuffs
        _t("weaken", "Weaken", "Reduces enemy attack", 12, E, Debuff(K.ATTACK_DOWN)),
        _t("break_armor", "Break Armor", "Reduces enemy defense", 12, E, Debuff(K.DEFENSE_DOWN)),
        _t("slow_down", "Slow Down", "Reduces enemy speed", 12, E, Debuff(K.SPEED_DOWN)),
        # type signatures
        _t("hack_attack", "Hack Attack", "Powerful Hacker-type attack", 18, E, Damage(55, ElementType.HACKER)),
        _t("tank_slam", "Tank Slam", "Powerful Tank-type attack", 18, E, Damage(55, ElementType.TANK)),
        _t("speed_rush", "Speed Rush", "Powerful Speedy-type attack", 18, E, Damage(55, ElementType.SPEEDY)),
        _t("support_boost", "Support Boost", "Heals and boosts stats", 20, S,
           Heal(base=40, per_level=3, buffs=(K.ATTACK_UP, K.DEFENSE_UP)), power=40),
        _t("magic_blast", "Magic Blast", "Powerful Mage-type attack", 18, E, Damage(55, ElementType.MAGE)),
        # evolution stage 1
        _t("concurrent_strike", "Concurrent Strike", "Multi-hit attack (Evolution Stage 1+)", 15, E,
           MultiHit(25, 3, 4)),
        _t("mutex_lock", "Mutex Lock", "Powerful attack that may paralyze (Evolution Stage 1+)", 22, E,
           StatusInflict(65, K.PARALYSIS, 0.4, 2, 3)),
        _t("context_timeout", "Context Timeout", "High damage with chance to sleep (Evolution Stage 1+)", 20, E,
           StatusInflict(60, K.SLEEP, 0.35, 2, 3)),
        _t("reflect_guard", "Reflect Guard", "Boost defense and block the next attack (Evolution Stage 1+)", 18, S,
           Buff((K.DEFENSE_UP,), protect=True)),
        _t("select_storm", "Select Storm", "Multi-hit channel attack (Evolution Stage 1+)", 16, E,
           MultiHit(20, 4, 5)),
        # evolution stage 2
        _t("deadlock", "Deadlock", "Devastating attack that may paralyze both (Evolution Stage 2+)", 30, E,
           StatusInflict(80, K.PARALYSIS, 0.3, 1, 1, both=True)),
        _t("goroutine_swarm", "Goroutine Swarm", "Massive multi-hit attack (Evolution Stage 2+)", 25, E,
           MultiHit(18, 5, 7)),
        _t("channel_overload", "Channel Overload", "Extremely powerful channel attack (Evolution Stage 2+)", 35, E,
           Damage(90)),
        _t("full_recovery", "Full Recovery", "Full heal and status cleanse (Evolution Stage 2+)", 30, S,
           Heal(full=True, cleanse=Cleanse.NEGATIVE)),
        _t("ultimate_guard", "Ultimate Guard", "Massive defense boost and protection (Evolution Stage 2+)", 28, S,
           Buff((K.DEFENSE_UP,), base_duration=4, protect=True)),
        # legendary
        _t("legendary_strike", "Legendary Strike", "Legendary gopher's signature attack", 40, E, Damage(100)),
        _t("divine_heal", "Divine Heal", "Legendary healing that restores all HP", 35, S, Heal(full=True)),
        _t("god_mode", "God Mode", "Legendary buff that boosts all stats", 40, S,
           Buff((K.ATTACK_UP, K.DEFENSE_UP, K.SPEED_UP), base_duration=5, level_divisor=3)),
        _t("apocalypse", "Apocalypse", "Legendary attack that damages both fighters", 50, B, DualDamage(120, 3)),
        _t("time_rewind", "Time Rewind", "Legendary ability that fully restores HP and removes all status", 45, S,
           Heal(full=True, cleanse=Cleanse.ALL)),
        # fallback for catalog misses outside strict mode
        _t(FALLBACK_TEMPLATE, "Hesitate", "Does nothing", 0, S, Idle()),
    ]


@lru_cache(maxsize=1)
def ability_templates() -> Mapping[str, AbilityTemplate]:
    return MappingProxyType({t.template_id: t for t in _build_templates()})


def get_template(template_id: str) -> AbilityTemplate:
    try:
        return ability_templates()[template_id]
    except KeyError:
        raise UnknownAbilityError(template_id) from None


def create_ability(template_id: str, ability_id: Optional[str] = None, *, strict: bool = True) -> Ability:
    """Bind a template to a fresh ability instance.

    Unknown ids raise :class:`UnknownAbilityError`; with ``strict=False`` the
    non-damaging fallback is bound instead and a warning is logged.
    """
    try:
        tpl = get_template(template_id)
    except UnknownAbilityError:
        if strict:
            raise
        logger.warn("AbilityTemplateMissing", template=template_id, fallback=FALLBACK_TEMPLATE)
        tpl = get_template(FALLBACK_TEMPLATE)
    return Ability(
        id=ability_id or tpl.template_id,
        template_id=tpl.template_id,
        name=tpl.name,
        description=tpl.description,
        power=tpl.power,
        cost=tpl.cost,
        target=tpl.target,
        effect=tpl.effect,
    )


# ---------------------------------------------------------------------------
# Per-archetype pools
# ---------------------------------------------------------------------------
ARCHETYPE_ABILITIES = {
    Archetype.HACKER: ("quick_hit", "go_panic", "goroutine", "race_condition"),
    Archetype.TANK: ("quick_hit", "interface_guard", "defer_recover", "garbage_collector"),
    Archetype.SPEEDY: ("quick_hit", "goroutine", "channel_blast", "go_panic"),
    Archetype.SUPPORT: ("garbage_collector", "interface_guard", "defer_recover", "quick_hit"),
    Archetype.MAGE: ("channel_blast", "go_panic", "race_condition", "goroutine"),
}

STAGE_ONE_ABILITIES = {
    Archetype.HACKER: "mutex_lock",
    Archetype.TANK: "reflect_guard",
    Archetype.SPEEDY: "concurrent_strike",
    Archetype.SUPPORT: "support_boost",
    Archetype.MAGE: "context_timeout",
}

STAGE_TWO_ABILITIES = {
    Archetype.HACKER: "deadlock",
    Archetype.TANK: "ultimate_guard",
    Archetype.SPEEDY: "goroutine_swarm",
    Archetype.SUPPORT: "full_recovery",
    Archetype.MAGE: "channel_overload",
}

LEGENDARY_ABILITIES = {
    Archetype.HACKER: "legendary_strike",
    Archetype.TANK: "god_mode",
    Archetype.SPEEDY: "legendary_strike",
    Archetype.SUPPORT: "time_rewind",
    Archetype.MAGE: "apocalypse",
}

MIN_ABILITIES = 2
MAX_ABILITIES = 7


def _level_slots(level: int) -> int:
    if level >= 20:
        return 4
    if level >= 10:
        return 3
    return MIN_ABILITIES


def ability_count_for(level: int, evolution_stage: int, rarity: Rarity) -> int:
    """Number of abilities a gopher carries into battle.

    2 base slots, +1 at level 10, +1 at level 20, +1 per evolution stage and
    +1 for legendaries.
    """
    count = _level_slots(level) + max(0, min(int(evolution_stage), 2))
    if Rarity(rarity) == Rarity.LEGENDARY:
        count += 1
    return max(MIN_ABILITIES, min(count, MAX_ABILITIES))


def ability_ids_for(archetype: Archetype, level: int, evolution_stage: int, rarity: Rarity) -> List[str]:
    archetype = Archetype(archetype)
    ids = list(ARCHETYPE_ABILITIES[archetype][:_level_slots(level)])
    if evolution_stage >= 1:
        ids.append(STAGE_ONE_ABILITIES[archetype])
    if evolution_stage >= 2:
        ids.append(STAGE_TWO_ABILITIES[archetype])
    if Rarity(rarity) == Rarity.LEGENDARY:
        ids.append(LEGENDARY_ABILITIES[archetype])
    return ids[:ability_count_for(level, evolution_stage, rarity)]


def abilities_for(owner_id: str, archetype: Archetype, level: int, evolution_stage: int, rarity: Rarity,
                  *, strict: bool = True) -> List[Ability]:
    ids = ability_ids_for(archetype, level, evolution_stage, rarity)
    return [create_ability(tid, f"{owner_id}_ability_{i}", strict=strict) for i, tid in enumerate(ids)]

__all__ = [
    "Target", "Cleanse", "Ability", "AbilityTemplate", "AbilityEffect",
    "Damage", "MultiHit", "Backfire", "Heal", "Buff", "Debuff", "StatusInflict", "DualDamage", "Idle",
    "apply_effect", "calculate_damage", "matchup", "ability_templates", "get_template", "create_ability",
    "ability_count_for", "ability_ids_for", "abilities_for", "MIN_ABILITIES", "MAX_ABILITIES",
]
