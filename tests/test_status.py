from gophermon.battle.status import StatusKind


def test_single_slot_refresh_and_intensity(make_gopher):
    g = make_gopher()
    g.add_status_effect(StatusKind.POISON, 5, intensity=3)
    g.add_status_effect(StatusKind.POISON, 2, intensity=1)
    assert len(g.status_effects) == 1
    effect = g.status_effect(StatusKind.POISON)
    assert effect.duration == 2
    assert effect.intensity == 3


def test_recalculate_applies_modifiers_from_base(make_gopher):
    g = make_gopher(attack=40, defense=20)
    g.add_status_effect(StatusKind.ATTACK_UP, 3)
    g.recalculate_stats()
    assert g.attack == 60
    g.add_status_effect(StatusKind.ATTACK_DOWN, 3)
    g.recalculate_stats()
    assert g.attack == 45
    # base never picks up a modified value
    g.snapshot_base_stats()
    assert g.base_attack == 40
    g.remove_status_effect(StatusKind.ATTACK_UP)
    g.remove_status_effect(StatusKind.ATTACK_DOWN)
    g.recalculate_stats()
    assert g.attack == 40


def test_burn_ticks_and_expires(make_gopher):
    g = make_gopher(hp=48)
    g.add_status_effect(StatusKind.BURN, 1)
    msgs = g.process_status_effects()
    assert g.current_hp == 42
    assert "Alpha is hurt by its burn! Took 6 damage!" in msgs
    assert "Alpha's burn has healed." in msgs
    assert not g.has_status_effect(StatusKind.BURN)


def test_poison_scales_with_intensity(make_gopher):
    g = make_gopher(hp=48)
    g.add_status_effect(StatusKind.POISON, 3, intensity=2)
    g.process_status_effects()
    assert g.current_hp == 43
    assert g.status_effect(StatusKind.POISON).duration == 2


def test_dot_never_drops_hp_below_zero(make_gopher):
    g = make_gopher(hp=48, current_hp=2)
    g.add_status_effect(StatusKind.BURN, 3)
    g.process_status_effects()
    assert g.current_hp == 0
    assert g.is_fainted()


def test_protect_always_removed(make_gopher):
    g = make_gopher()
    g.add_status_effect(StatusKind.PROTECT, 5)
    msgs = g.process_status_effects()
    assert not g.has_status_effect(StatusKind.PROTECT)
    assert "Alpha's protection wore off." in msgs


def test_stat_modifier_expiry_restores_stat(make_gopher):
    g = make_gopher(attack=40)
    g.add_status_effect(StatusKind.ATTACK_UP, 2)
    g.recalculate_stats()
    assert g.process_status_effects() == []
    assert g.attack == 60
    msgs = g.process_status_effects()
    assert msgs == ["Alpha's attack returned to normal."]
    assert g.attack == 40


def test_ailments_expire_with_message(make_gopher):
    g = make_gopher()
    g.add_status_effect(StatusKind.SLEEP, 1)
    g.add_status_effect(StatusKind.CONFUSION, 2)
    msgs = g.process_status_effects()
    assert msgs == ["Alpha woke up!"]
    assert g.has_status_effect(StatusKind.CONFUSION)


def test_dot_has_no_minimum_on_tiny_pools(make_gopher):
    g = make_gopher(hp=7)
    g.add_status_effect(StatusKind.BURN, 3)
    msgs = g.process_status_effects()
    assert g.current_hp == 7
    assert "Alpha is hurt by its burn! Took 0 damage!" in msgs
