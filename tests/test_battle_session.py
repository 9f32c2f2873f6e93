from datetime import timedelta

import pytest

from gophermon.core.errors import InvalidCombatantError
from gophermon.battle.session import ActionKind, Battle, BattleState, TurnOwner, new_battle
from gophermon.battle.status import StatusKind
from gophermon.events.manager import EventManager, EventType


@pytest.fixture
def alpha(make_gopher):
    return make_gopher("Alpha", abilities=("quick_hit", "harden"))


@pytest.fixture
def bravo(make_gopher):
    return make_gopher("Bravo", level=3)


def test_opening_state(alpha, bravo, rng):
    b = new_battle(alpha, bravo, [alpha], rng=rng)
    assert b.state is BattleState.ACTIVE
    assert b.turn_owner is TurnOwner.PLAYER
    assert b.log == ("A wild Bravo appeared!",)
    assert b.participating == (alpha,)


def test_full_exchange_returns_turn_to_player(alpha, bravo, rng):
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert msgs == ["Alpha used Quick Hit! Dealt 15 damage!", "Bravo used Quick Hit! Dealt 15 damage!"]
    assert bravo.current_hp == 33
    assert alpha.current_hp == 33
    assert b.turn_owner is TurnOwner.PLAYER
    assert b.turn == 1
    assert b.log[1:] == tuple(msgs)


def test_lethal_ability_ends_battle(make_gopher, alpha, rng):
    bravo = make_gopher("Bravo", level=3, current_hp=5)
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action(ActionKind.FIGHT, 0)
    assert b.state is BattleState.WON
    assert bravo.current_hp == 0
    assert msgs == ["Alpha used Quick Hit! Dealt 15 damage!", "Bravo was defeated!", "Alpha gained 30 XP!"]
    # no enemy sub-turn
    assert alpha.current_hp == alpha.max_hp
    assert alpha.xp == 30


def test_sleep_discards_action(alpha, bravo, rng):
    alpha.add_status_effect(StatusKind.SLEEP, 2)
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert msgs[0] == "Alpha is fast asleep!"
    assert bravo.current_hp == bravo.max_hp
    assert alpha.current_hp == 33
    assert alpha.status_effect(StatusKind.SLEEP).duration == 1
    assert b.turn_owner is TurnOwner.PLAYER


def test_wake_up_then_act(alpha, bravo, rng):
    alpha.add_status_effect(StatusKind.SLEEP, 3)
    rng.queue(0.1)
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert msgs[:2] == ["Alpha woke up!", "Alpha used Quick Hit! Dealt 15 damage!"]
    assert not alpha.has_status_effect(StatusKind.SLEEP)


def test_paralysis_skip(alpha, bravo, rng):
    alpha.add_status_effect(StatusKind.PARALYSIS, 3)
    rng.queue(0.1)
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert msgs[0] == "Alpha is paralyzed! It can't move!"
    assert bravo.current_hp == bravo.max_hp
    assert alpha.current_hp == 33


def test_confusion_self_hit_then_enemy_acts(alpha, bravo, rng):
    alpha.add_status_effect(StatusKind.CONFUSION, 3)
    rng.queue(0.1)
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert msgs[0] == "Alpha is confused! It hurt itself in confusion for 6 damage!"
    assert bravo.current_hp == bravo.max_hp
    assert alpha.current_hp == 48 - 6 - 15


def test_protect_blocks_and_is_consumed(alpha, bravo, rng):
    bravo.add_status_effect(StatusKind.PROTECT, 1)
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert msgs[0] == "Bravo was protected from the attack!"
    assert bravo.current_hp == bravo.max_hp
    assert not bravo.has_status_effect(StatusKind.PROTECT)
    assert alpha.current_hp == 33


def test_faint_triggers_auto_swap_and_xp_reaches_fainted(make_gopher, rng):
    alpha = make_gopher("Alpha", current_hp=1, abilities=("harden",))
    charlie = make_gopher("Charlie")
    bravo = make_gopher("Bravo", level=3, current_hp=10)
    b = Battle(alpha, bravo, [alpha, charlie], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert msgs[-3:] == ["Alpha was defeated!", "Alpha, come back!", "Go, Charlie!"]
    assert b.state is BattleState.ACTIVE
    assert b.player_active.id == charlie.id
    assert b.turn_owner is TurnOwner.PLAYER
    assert [m.id for m in b.participating] == [alpha.id, charlie.id]

    b.submit_action("fight", 0)
    assert b.state is BattleState.WON
    assert alpha.xp == 30
    assert charlie.xp == 30


def test_no_reserve_left_means_lost(make_gopher, rng):
    alpha = make_gopher("Alpha", current_hp=1, abilities=("harden",))
    dead = make_gopher("Delta", current_hp=0)
    bravo = make_gopher("Bravo", level=3)
    b = Battle(alpha, bravo, [alpha, dead], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert b.state is BattleState.LOST
    assert msgs[-1] == "Alpha was defeated!"
    assert b.submit_action("fight", 0) == ["Battle is already over!"]


def test_turn_start_dot_faint_skips_enemy(make_gopher, rng):
    alpha = make_gopher("Alpha", current_hp=1)
    alpha.add_status_effect(StatusKind.BURN, 3)
    charlie = make_gopher("Charlie")
    bravo = make_gopher("Bravo", level=3)
    b = Battle(alpha, bravo, [alpha, charlie], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert msgs == [
        "Alpha is hurt by its burn! Took 6 damage!",
        "Alpha was defeated!", "Alpha, come back!", "Go, Charlie!",
    ]
    assert bravo.current_hp == bravo.max_hp
    assert charlie.current_hp == charlie.max_hp


def test_enemy_self_knockout_is_a_win(make_gopher, alpha, rng):
    bravo = make_gopher("Bravo", level=3, current_hp=1, abilities=("race_condition",))
    rng.queue(0.1)
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action("fight", 1)
    assert b.state is BattleState.WON
    assert "Bravo was defeated!" in msgs
    assert alpha.xp == 30


def test_capture_success(alpha, bravo, rng):
    rng.queue(0.0)
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action("throw_net")
    assert b.state is BattleState.WON
    assert b.captured
    assert "Successfully captured Bravo!" in msgs
    assert alpha.xp == 30


def test_capture_failure_gives_enemy_a_turn(alpha, bravo, rng):
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action("throwNet")
    assert msgs[0] == "The gopher broke free!"
    assert b.state is BattleState.ACTIVE
    assert not b.captured
    assert alpha.current_hp == 33


def test_run(alpha, bravo, rng):
    rng.queue(0.9, 0.5)
    b = Battle(alpha, bravo, [alpha], rng=rng)
    assert b.submit_action("run")[0] == "Couldn't escape!"
    assert alpha.current_hp == 33
    assert b.submit_action("run") == ["Got away safely!"]
    assert b.state is BattleState.ESCAPED


def test_voluntary_swap_costs_the_turn(make_gopher, alpha, bravo, rng):
    charlie = make_gopher("Charlie")
    b = Battle(alpha, bravo, [alpha, charlie], rng=rng)
    msgs = b.submit_action("swap", 1)
    assert msgs[:3] == ["Alpha, come back!", "Go, Charlie!", "Bravo used Quick Hit! Dealt 15 damage!"]
    assert b.player_active.id == charlie.id
    assert charlie.current_hp == 33
    assert alpha.current_hp == alpha.max_hp


def test_faint_after_voluntary_swap_is_lost(make_gopher, alpha, bravo, rng):
    charlie = make_gopher("Charlie", current_hp=1)
    b = Battle(alpha, bravo, [alpha, charlie], rng=rng)
    msgs = b.submit_action("swap", 1)
    assert b.state is BattleState.LOST
    assert msgs[-1] == "Charlie was defeated!"


def test_invalid_input_leaves_battle_untouched(make_gopher, alpha, bravo, rng):
    alpha.add_status_effect(StatusKind.BURN, 3)
    dead = make_gopher("Delta", current_hp=0)
    b = Battle(alpha, bravo, [alpha, dead], rng=rng)
    assert b.submit_action("fight", 9) == ["Invalid ability!"]
    assert b.submit_action("swap", 7) == ["Invalid party member!"]
    assert b.submit_action("swap", 0) == ["That gopher is already in battle!"]
    assert b.submit_action("swap", 1) == ["Delta is fainted and can't battle!"]
    assert b.submit_action("dance") == ["Unknown action!"]
    assert alpha.status_effect(StatusKind.BURN).duration == 3
    assert alpha.current_hp == alpha.max_hp
    assert b.turn == 0
    assert len(b.log) == 1


def test_out_of_turn_is_rejected(alpha, bravo, rng):
    b = Battle.restore(player_active=alpha, enemy=bravo, reserve=[alpha], participating=[alpha],
                       state=BattleState.ACTIVE, turn_owner=TurnOwner.ENEMY, log=[], rng=rng)
    assert b.submit_action("fight", 0) == ["It's not your turn!"]
    assert bravo.current_hp == bravo.max_hp


def test_event_boosts_apply_at_construction(make_gopher, alpha, rng):
    events = EventManager()
    events.start_event(EventType.STAT_BOOST, timedelta(hours=1))
    events.start_event(EventType.DOUBLE_XP, timedelta(hours=1))
    bravo = make_gopher("Bravo", level=3, current_hp=5)
    b = Battle(alpha, bravo, [alpha], provider=events, rng=rng)
    assert alpha.attack == 110
    assert bravo.attack == 110
    b.submit_action("fight", 0)
    assert alpha.xp == 60


def test_construction_rejects_bad_parties(make_gopher, alpha, bravo):
    with pytest.raises(InvalidCombatantError):
        Battle(alpha, bravo, [])
    with pytest.raises(InvalidCombatantError):
        Battle(alpha, bravo, [make_gopher("Other")])
    with pytest.raises(InvalidCombatantError):
        Battle(make_gopher("Down", current_hp=0), bravo)


def test_confusion_knockout_still_runs_enemy_turn(make_gopher, rng):
    alpha = make_gopher("Alpha", current_hp=6)
    alpha.add_status_effect(StatusKind.CONFUSION, 3)
    bravo = make_gopher("Bravo", level=3, current_hp=1)
    bravo.add_status_effect(StatusKind.BURN, 3)
    rng.queue(0.1)
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert msgs[:3] == [
        "Alpha is confused! It hurt itself in confusion for 6 damage!",
        "Bravo is hurt by its burn! Took 6 damage!",
        "Bravo was defeated!",
    ]
    assert b.state is BattleState.WON
    assert alpha.xp == 30


def test_backfire_knockout_still_runs_enemy_turn(make_gopher, rng):
    alpha = make_gopher("Alpha", current_hp=20, abilities=("race_condition",))
    bravo = make_gopher("Bravo", level=3, current_hp=1)
    bravo.add_status_effect(StatusKind.POISON, 3, intensity=1)
    rng.queue(0.1)
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert alpha.is_fainted()
    assert "Bravo was defeated!" in msgs
    assert b.state is BattleState.WON


def test_self_knockout_then_enemy_acts_before_auto_swap(make_gopher, rng):
    alpha = make_gopher("Alpha", current_hp=6)
    alpha.add_status_effect(StatusKind.CONFUSION, 3)
    charlie = make_gopher("Charlie")
    bravo = make_gopher("Bravo", level=3)
    rng.queue(0.1)
    b = Battle(alpha, bravo, [alpha, charlie], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert msgs == [
        "Alpha is confused! It hurt itself in confusion for 6 damage!",
        "Bravo used Quick Hit! Dealt 15 damage!",
        "Alpha was defeated!", "Alpha, come back!", "Go, Charlie!",
    ]
    assert b.player_active.id == charlie.id
    assert charlie.current_hp == charlie.max_hp
    assert b.state is BattleState.ACTIVE


def test_sleeping_enemy_loses_its_turn(alpha, bravo, rng):
    bravo.add_status_effect(StatusKind.SLEEP, 3)
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert msgs == ["Alpha used Quick Hit! Dealt 15 damage!", "Bravo is fast asleep!"]
    assert alpha.current_hp == alpha.max_hp
    assert bravo.status_effect(StatusKind.SLEEP).duration == 2
    assert b.turn_owner is TurnOwner.PLAYER


def test_paralyzed_enemy_loses_its_turn(alpha, bravo, rng):
    bravo.add_status_effect(StatusKind.PARALYSIS, 3)
    rng.queue(0.1)
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert msgs == ["Alpha used Quick Hit! Dealt 15 damage!", "Bravo is paralyzed! It can't move!"]
    assert alpha.current_hp == alpha.max_hp
    assert b.turn_owner is TurnOwner.PLAYER


def test_confused_enemy_hurts_itself(alpha, bravo, rng):
    bravo.add_status_effect(StatusKind.CONFUSION, 3)
    rng.queue(0.1)
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert msgs == [
        "Alpha used Quick Hit! Dealt 15 damage!",
        "Bravo is confused! It hurt itself in confusion for 6 damage!",
    ]
    assert bravo.current_hp == 48 - 15 - 6
    assert alpha.current_hp == alpha.max_hp
    assert b.turn_owner is TurnOwner.PLAYER


def test_player_protect_blocks_enemy_attack(make_gopher, bravo, rng):
    alpha = make_gopher("Alpha", abilities=("defer_recover",))
    b = Battle(alpha, bravo, [alpha], rng=rng)
    msgs = b.submit_action("fight", 0)
    assert msgs[0].startswith("Alpha used Defer Recover!")
    assert msgs[-1] == "Alpha was protected from the attack!"
    assert alpha.current_hp == alpha.max_hp
    assert not alpha.has_status_effect(StatusKind.PROTECT)
    assert b.turn_owner is TurnOwner.PLAYER
