# Ensure project root is on sys.path for tests
import sys, pathlib
import random
root = pathlib.Path(__file__).resolve().parent
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

import pytest

from gophermon.battle.abilities import create_ability
from gophermon.battle.models import Combatant


class ScriptedRandom(random.Random):
    """Deterministic stand-in for the engine's RNG.

    ``random()`` pops queued rolls and answers 0.99 (nothing procs) once the
    queue is empty; jitter is always neutral, ranges resolve to their lower
    bound and choices to the first element.
    """

    def __init__(self, *rolls: float):
        super().__init__(0)
        self.rolls = list(rolls)

    def queue(self, *rolls: float):
        self.rolls.extend(rolls)

    def random(self):
        if self.rolls:
            return self.rolls.pop(0)
        return 0.99

    def uniform(self, a, b):
        return (a + b) / 2.0

    def randint(self, a, b):
        return a

    def randrange(self, start, stop=None, step=1):
        return 0 if stop is None else start

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def rng():
    return ScriptedRandom()


@pytest.fixture
def make_gopher():
    counter = {"n": 0}

    def _make(name="Alpha", *, archetype="Hacker", level=5, hp=48, current_hp=None, attack=100,
              defense=10, speed=30, abilities=("quick_hit",), secondary=None, rarity="COMMON",
              gopher_id=None, complexity=0):
        counter["n"] += 1
        gid = gopher_id or f"{name.lower()}_{counter['n']}"
        return Combatant(
            id=gid, name=name, archetype=archetype, primary_type=archetype, secondary_type=secondary,
            level=level, rarity=rarity, complexity=complexity, max_hp=hp, current_hp=current_hp,
            attack=attack, defense=defense, speed=speed,
            abilities=[create_ability(t, f"{gid}_ability_{i}") for i, t in enumerate(abilities)],
        )

    return _make
