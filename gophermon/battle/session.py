"""Battle session: one wild encounter driven by player actions.

Every call to :meth:`Battle.submit_action` resolves a full turn (player
half, then the enemy half where the rules call for it) and returns the
narrative messages it produced. Invalid input is answered with a single
message and leaves the battle untouched; nothing in here raises once the
battle has been built.
"""
from __future__ import annotations
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple
import random

from gophermon.core.errors import InvalidCombatantError
from gophermon.core.logging import logger
from gophermon.events.provider import EventModifierProvider, NoEvents
from .abilities import Ability
from .capture import attempt_capture, escape_success
from .experience import apply_experience, xp_gain_for
from .models import Combatant
from .status import StatusKind

WAKE_CHANCE = 0.30
PARALYSIS_SKIP_CHANCE = 0.25
CONFUSION_SELF_HIT_CHANCE = 0.33


class BattleState(str, Enum):
    ACTIVE = "ACTIVE"
    WON = "WON"
    LOST = "LOST"
    ESCAPED = "ESCAPED"

    def __str__(self) -> str:
        return self.value


class TurnOwner(str, Enum):
    PLAYER = "PLAYER"
    ENEMY = "ENEMY"

    def __str__(self) -> str:
        return self.value


class ActionKind(str, Enum):
    FIGHT = "fight"
    SWAP = "swap"
    RUN = "run"
    THROW_NET = "throw_net"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = value.strip().lower().replace("-", "_")
            if key == "thrownet":
                key = "throw_net"
            for member in cls:
                if member.value == key:
                    return member
        return None


def _unique_by_id(combatants: Iterable[Combatant]) -> List[Combatant]:
    seen = set()
    out = []
    for c in combatants:
        if c.id not in seen:
            seen.add(c.id)
            out.append(c)
    return out


class Battle:
    """State machine for a single encounter.

    ``reserve`` is the player's full party in order, active member included.
    The battle owns every combatant handed to it until it ends; the caller
    writes final stats back afterwards.
    """

    def __init__(self, player_active: Combatant, enemy: Combatant, reserve: Optional[Sequence[Combatant]] = None,
                 provider: Optional[EventModifierProvider] = None, rng: Optional[random.Random] = None):
        reserve = list(reserve) if reserve is not None else [player_active]
        if not reserve:
            raise InvalidCombatantError("player reserve is empty")
        if all(m.id != player_active.id for m in reserve):
            raise InvalidCombatantError(f"{player_active.name} is not part of the player's reserve")
        if player_active.is_fainted():
            raise InvalidCombatantError(f"{player_active.name} is fainted and cannot start a battle")
        if enemy.is_fainted():
            raise InvalidCombatantError(f"{enemy.name} is fainted and cannot start a battle")

        self.provider: EventModifierProvider = provider or NoEvents()
        self.rng = rng or random.Random()
        self._player_active = player_active
        self._enemy = enemy
        self._reserve = reserve
        self._participating: List[Combatant] = [player_active]
        self._state = BattleState.ACTIVE
        self._turn_owner = TurnOwner.PLAYER
        self._log: List[str] = [f"A wild {enemy.name} appeared!"]
        self._captured = False
        self._turn = 0
        self._logger = logger.bind(enemy_id=enemy.id)

        boost = self.provider.stat_boost_multiplier()
        for c in _unique_by_id([player_active, enemy, *reserve]):
            c.apply_stat_boost(boost)
        self._logger.info("BattleStarted", player=player_active.name, enemy=enemy.name,
                          enemy_level=enemy.level, rarity=enemy.rarity.value, boost=boost)

    @classmethod
    def restore(cls, *, player_active: Combatant, enemy: Combatant, reserve: Sequence[Combatant],
                participating: Sequence[Combatant], state: BattleState, turn_owner: TurnOwner,
                log: Sequence[str], captured: bool = False, turn: int = 0,
                provider: Optional[EventModifierProvider] = None,
                rng: Optional[random.Random] = None) -> "Battle":
        """Rebuild a battle from persisted parts without re-applying event boosts."""
        battle = cls.__new__(cls)
        battle.provider = provider or NoEvents()
        battle.rng = rng or random.Random()
        battle._player_active = player_active
        battle._enemy = enemy
        battle._reserve = list(reserve)
        battle._participating = list(participating)
        battle._state = BattleState(state)
        battle._turn_owner = TurnOwner(turn_owner)
        battle._log = list(log)
        battle._captured = bool(captured)
        battle._turn = int(turn)
        battle._logger = logger.bind(enemy_id=enemy.id)
        return battle

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------
    @property
    def state(self) -> BattleState:
        return self._state

    @property
    def turn_owner(self) -> TurnOwner:
        return self._turn_owner

    @property
    def player_active(self) -> Combatant:
        return self._player_active

    @property
    def enemy(self) -> Combatant:
        return self._enemy

    @property
    def reserve(self) -> Tuple[Combatant, ...]:
        return tuple(self._reserve)

    @property
    def participating(self) -> Tuple[Combatant, ...]:
        return tuple(self._participating)

    @property
    def log(self) -> Tuple[str, ...]:
        return tuple(self._log)

    @property
    def captured(self) -> bool:
        return self._captured

    @property
    def turn(self) -> int:
        return self._turn

    def is_over(self) -> bool:
        return self._state is not BattleState.ACTIVE

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------
    def submit_action(self, kind, parameter: int = 0) -> List[str]:
        if self._state is not BattleState.ACTIVE:
            return ["Battle is already over!"]
        if self._turn_owner is not TurnOwner.PLAYER:
            return ["It's not your turn!"]
        try:
            action = ActionKind(kind)
        except ValueError:
            return ["Unknown action!"]
        try:
            parameter = int(parameter)
        except (TypeError, ValueError):
            parameter = -1
        rejection = self._validate(action, parameter)
        if rejection is not None:
            return [rejection]

        self._turn += 1
        self._logger.debug("BattleAction", turn=self._turn, action=action.value, parameter=parameter,
                           player=self._player_active.name)
        messages = self._resolve(action, parameter)
        self._log.extend(messages)
        if self._state is not BattleState.ACTIVE:
            self._logger.info("BattleEnded", state=self._state.value, turns=self._turn, captured=self._captured)
        return messages

    def _validate(self, action: ActionKind, parameter: int) -> Optional[str]:
        if action is ActionKind.FIGHT:
            if not 0 <= parameter < len(self._player_active.abilities):
                return "Invalid ability!"
        elif action is ActionKind.SWAP:
            if not 0 <= parameter < len(self._reserve):
                return "Invalid party member!"
            member = self._reserve[parameter]
            if member.is_fainted():
                return f"{member.name} is fainted and can't battle!"
            if member.id == self._player_active.id:
                return "That gopher is already in battle!"
        return None

    def _resolve(self, action: ActionKind, parameter: int) -> List[str]:
        player = self._player_active
        messages = player.process_status_effects()
        if player.is_fainted():
            messages += self._handle_player_faint()
            return messages

        if self._loses_turn(player, messages):
            messages += self._enemy_phase()
            return messages

        if action is ActionKind.FIGHT:
            hurt = self._confusion_hit(player)
            if hurt is not None:
                messages.append(hurt)
                messages += self._enemy_phase()
                return messages
            player.remove_status_effect(StatusKind.PROTECT)
            messages += self._fight(parameter)
        elif action is ActionKind.SWAP:
            messages += self._swap(parameter)
        elif action is ActionKind.RUN:
            messages += self._run()
        else:
            messages += self._throw_net()
        return messages

    def _fight(self, index: int) -> List[str]:
        player = self._player_active
        messages = self._use(player.abilities[index], player, self._enemy)
        if self._enemy.is_fainted():
            messages += self._win()
        else:
            # a self-inflicted knock-out still gives the enemy its turn
            messages += self._enemy_phase()
        return messages

    def _swap(self, index: int) -> List[str]:
        outgoing = self._player_active
        incoming = self._reserve[index]
        self._bring_in(incoming)
        messages = [f"{outgoing.name}, come back!", f"Go, {incoming.name}!"]
        messages += self._enemy_phase(voluntary_swap=True)
        return messages

    def _run(self) -> List[str]:
        if escape_success(self.rng):
            self._state = BattleState.ESCAPED
            return ["Got away safely!"]
        return ["Couldn't escape!"] + self._enemy_phase()

    def _throw_net(self) -> List[str]:
        enemy = self._enemy
        caught = attempt_capture(self.rng, enemy.current_hp, enemy.max_hp, enemy.rarity,
                                 self.provider.capture_rate_multiplier())
        if caught:
            self._captured = True
            self._state = BattleState.WON
            return [f"Successfully captured {enemy.name}!"] + self._distribute_xp()
        return ["The gopher broke free!"] + self._enemy_phase()

    # ------------------------------------------------------------------
    # Shared resolution steps
    # ------------------------------------------------------------------
    def _loses_turn(self, actor: Combatant, messages: List[str]) -> bool:
        """Sleep and paralysis checks; appends the outcome messages."""
        if actor.has_status_effect(StatusKind.SLEEP):
            if self.rng.random() < WAKE_CHANCE:
                actor.remove_status_effect(StatusKind.SLEEP)
                messages.append(f"{actor.name} woke up!")
            else:
                messages.append(f"{actor.name} is fast asleep!")
                return True
        if actor.has_status_effect(StatusKind.PARALYSIS) and self.rng.random() < PARALYSIS_SKIP_CHANCE:
            messages.append(f"{actor.name} is paralyzed! It can't move!")
            return True
        return False

    def _confusion_hit(self, actor: Combatant) -> Optional[str]:
        if not actor.has_status_effect(StatusKind.CONFUSION):
            return None
        if self.rng.random() >= CONFUSION_SELF_HIT_CHANCE:
            return None
        damage = actor.take_damage(actor.max_hp // 8)
        return f"{actor.name} is confused! It hurt itself in confusion for {damage} damage!"

    def _use(self, ability: Ability, user: Combatant, target: Combatant) -> List[str]:
        if target.remove_status_effect(StatusKind.PROTECT):
            return [f"{target.name} was protected from the attack!"]
        return ability.use(user, target, self.rng)

    def _enemy_phase(self, voluntary_swap: bool = False) -> List[str]:
        self._turn_owner = TurnOwner.ENEMY
        messages = self._enemy_turn()
        self._turn_owner = TurnOwner.PLAYER
        if self._enemy.is_fainted():
            messages += self._win()
        elif self._player_active.is_fainted():
            if voluntary_swap:
                messages.append(f"{self._player_active.name} was defeated!")
                self._state = BattleState.LOST
            else:
                messages += self._handle_player_faint()
        return messages

    def _enemy_turn(self) -> List[str]:
        enemy = self._enemy
        messages = enemy.process_status_effects()
        if enemy.is_fainted():
            return messages
        if self._loses_turn(enemy, messages):
            return messages
        hurt = self._confusion_hit(enemy)
        if hurt is not None:
            messages.append(hurt)
            return messages
        if not enemy.abilities:
            messages.append(f"{enemy.name} has no abilities!")
            return messages
        ability = enemy.abilities[self.rng.randrange(len(enemy.abilities))]
        self._logger.debug("EnemyAbility", enemy=enemy.name, ability=ability.template_id)
        messages += self._use(ability, enemy, self._player_active)
        return messages

    def _handle_player_faint(self) -> List[str]:
        """Auto-swap to the next healthy reserve member, or lose."""
        fainted = self._player_active
        messages = [f"{fainted.name} was defeated!"]
        for member in self._reserve:
            if member.id != fainted.id and not member.is_fainted():
                self._bring_in(member)
                self._turn_owner = TurnOwner.PLAYER
                messages += [f"{fainted.name}, come back!", f"Go, {member.name}!"]
                self._logger.debug("AutoSwap", out=fainted.name, into=member.name)
                return messages
        self._state = BattleState.LOST
        return messages

    def _bring_in(self, member: Combatant):
        self._player_active = member
        if all(p.id != member.id for p in self._participating):
            self._participating.append(member)

    def _win(self) -> List[str]:
        self._state = BattleState.WON
        return [f"{self._enemy.name} was defeated!"] + self._distribute_xp()

    def _distribute_xp(self) -> List[str]:
        gained = xp_gain_for(self._enemy, self.provider)
        messages = []
        for member in self._participating:
            result = apply_experience(member, gained, self.rng)
            messages.append(f"{member.name} gained {gained} XP!")
            if result["leveled"]:
                messages.append(f"{member.name} leveled up to level {member.level}!")
        self._logger.debug("ExperienceAwarded", amount=gained, members=len(self._participating))
        return messages


def new_battle(player_active: Combatant, enemy: Combatant, reserve: Optional[Sequence[Combatant]] = None,
               provider: Optional[EventModifierProvider] = None, rng: Optional[random.Random] = None) -> Battle:
    return Battle(player_active, enemy, reserve, provider, rng)

__all__ = [
    "Battle", "BattleState", "TurnOwner", "ActionKind", "new_battle",
    "WAKE_CHANCE", "PARALYSIS_SKIP_CHANCE", "CONFUSION_SELF_HIT_CHANCE",
]
