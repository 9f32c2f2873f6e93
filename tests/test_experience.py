import random
import pytest

from gophermon.battle.experience import apply_experience, xp_gain, xp_needed, xp_progress
from gophermon.battle.rarity import Rarity


def test_thresholds():
    assert xp_needed(2) == 200
    assert xp_needed(10) == 5000


def test_gain_formula():
    assert xp_gain(3, Rarity.COMMON) == 30
    assert xp_gain(3, Rarity.RARE, 2.0) == 90
    assert xp_gain(10, Rarity.LEGENDARY) == 300


def test_growth_applied_once_per_level(make_gopher, rng):
    g = make_gopher(level=1, hp=50, attack=40)
    result = apply_experience(g, 1800, rng)
    assert result == {"gained": 1800, "leveled": True, "from": 1, "to": 6}
    # Hacker: 10 HP and 3 attack per level at the low end of every range
    assert g.max_hp == 100
    assert g.current_hp == 100
    assert g.base_attack == 55


def test_no_level_below_threshold(make_gopher, rng):
    g = make_gopher(level=1)
    result = apply_experience(g, 199, rng)
    assert not result["leveled"]
    assert g.level == 1
    assert g.xp == 199


def test_negative_gain_rejected(make_gopher, rng):
    with pytest.raises(ValueError):
        apply_experience(make_gopher(), -1, rng)


def test_xp_and_level_never_decrease(make_gopher):
    g = make_gopher(level=1)
    r = random.Random(5)
    for _ in range(50):
        level, xp = g.level, g.xp
        g.add_xp(r.randint(0, 400), r)
        assert g.level >= level
        assert g.xp >= xp
        assert g.xp < xp_needed(g.level + 1)


def test_progress_is_capped():
    assert xp_progress(100, 1) == (100, 150)
    assert xp_progress(10_000, 1) == (150, 150)
