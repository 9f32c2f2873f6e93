"""Developer command line: auto-play seeded encounters and inspect the catalog.

    python -m gophermon simulate --seed 7 --party 3
    python -m gophermon abilities
"""
from __future__ import annotations
import argparse
import random
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.box import ROUNDED

from gophermon import __version__
from gophermon.battle.abilities import ability_templates
from gophermon.battle.archetypes import Archetype
from gophermon.battle.evolution import try_evolve
from gophermon.battle.experience import xp_progress
from gophermon.battle.factory import create_combatant, wild_combatant
from gophermon.battle.models import Combatant
from gophermon.battle.rarity import Rarity
from gophermon.battle.session import ActionKind, Battle, BattleState
from gophermon.core.logging import logger
from gophermon.core.types import format_types, strip_ansi
from gophermon.events.manager import EventManager, EventType
from gophermon.system.settings import Settings
from gophermon.system.snapshot import dumps_battle

console = Console()

NET_THRESHOLD = 0.3


def _party(rng: random.Random, size: int, level: int, strict: bool) -> List[Combatant]:
    archetypes = list(Archetype)
    return [
        create_combatant(archetypes[i % len(archetypes)], level, Rarity.COMMON, rng,
                         combatant_id=f"player_{i}", strict=strict)
        for i in range(size)
    ]


def choose_action(battle: Battle, rng: random.Random):
    enemy = battle.enemy
    if enemy.max_hp and enemy.current_hp / enemy.max_hp < NET_THRESHOLD:
        return ActionKind.THROW_NET, 0
    return ActionKind.FIGHT, rng.randrange(len(battle.player_active.abilities))


def hp_table(battle: Battle) -> Table:
    table = Table(title="[bold bright_cyan]Gophers[/bold bright_cyan]", box=ROUNDED)
    table.add_column("Side", style="bright_white")
    table.add_column("Name", style="bold")
    table.add_column("Types")
    table.add_column("Lv", justify="right")
    table.add_column("HP", justify="right")
    table.add_column("XP", justify="right")
    table.add_column("Status")
    rows = [("Enemy", battle.enemy)] + [
        ("Active" if m.id == battle.player_active.id else "Reserve", m) for m in battle.reserve
    ]
    for side, c in rows:
        progress, span = xp_progress(c.xp, c.level)
        hp_style = "red" if c.is_fainted() else "green"
        effects = ", ".join(f"{e.kind.value}({e.duration})" for e in c.status_effects) or "-"
        table.add_row(side, c.name, strip_ansi(format_types(c.types, color=False)), str(c.level),
                      f"[{hp_style}]{c.current_hp}/{c.max_hp}[/{hp_style}]", f"{progress}/{span}", effects)
    return table


def simulate(args: argparse.Namespace, settings: Settings) -> int:
    rng = random.Random(args.seed)
    events = EventManager()
    for name in args.event or []:
        events.start_event(EventType(name.upper()), timedelta(hours=settings.data.default_event_hours))
    strict = settings.data.strict_abilities
    party = _party(rng, args.party, args.level, strict)
    if args.enemy_level:
        enemy = create_combatant(rng.choice(list(Archetype)), args.enemy_level, Rarity.COMMON, rng, strict=strict)
    else:
        enemy = wild_combatant(rng, rarity_boost=events.rarity_boost(), strict=strict)
    battle = Battle(party[0], enemy, party, provider=events, rng=rng)

    console.print(Panel(f"[bold bright_cyan]{battle.log[0]}[/bold bright_cyan]\n"
                        f"{enemy.name} Lv{enemy.level} {enemy.rarity.value}", box=ROUNDED))
    while not battle.is_over() and battle.turn < args.max_turns:
        kind, param = choose_action(battle, rng)
        for line in battle.submit_action(kind, param):
            console.print(f"  {line}")

    for member in battle.participating:
        result = try_evolve(member, rng, events.evolution_level_reduction(), strict=strict)
        if result:
            for line in result.messages():
                console.print(f"[magenta]{line}[/magenta]")

    console.print(hp_table(battle))
    style = "green" if battle.state is BattleState.WON else "yellow"
    console.print(Panel(f"[bold {style}]{battle.state.value}[/bold {style}] after {battle.turn} turns"
                        + (" (captured)" if battle.captured else ""), box=ROUNDED))
    if args.snapshot:
        Path(args.snapshot).write_text(dumps_battle(battle), encoding="utf-8")
        logger.info("SnapshotWritten", path=args.snapshot)
    return 0 if battle.is_over() else 1


def list_abilities(args: argparse.Namespace, settings: Settings) -> int:
    table = Table(title="[bold bright_cyan]Ability Catalog[/bold bright_cyan]", box=ROUNDED)
    table.add_column("Id", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Power", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("Target")
    table.add_column("Effect")
    for tpl in ability_templates().values():
        table.add_row(tpl.template_id, tpl.name, str(tpl.power), str(tpl.cost), tpl.target.value,
                      type(tpl.effect).__name__)
    console.print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gophermon", description="Gophermon battle engine tools")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", action="store_true", help="Verbose engine logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sim = sub.add_parser("simulate", help="Auto-play one seeded wild encounter")
    sim.add_argument("--seed", type=int, default=None, help="RNG seed for a reproducible run")
    sim.add_argument("--party", type=int, default=3, help="Number of gophers in the player's party")
    sim.add_argument("--level", type=int, default=8, help="Level of the player's gophers")
    sim.add_argument("--enemy-level", type=int, default=None, help="Fixed enemy level (random wild otherwise)")
    sim.add_argument("--max-turns", type=int, default=100)
    sim.add_argument("--event", action="append", choices=[t.value for t in EventType],
                     type=str.upper, help="Start an event before the battle (repeatable)")
    sim.add_argument("--snapshot", default=None, help="Write the final battle snapshot to this path")
    sim.set_defaults(func=simulate)

    abl = sub.add_parser("abilities", help="List the ability catalog")
    abl.set_defaults(func=list_abilities)
    return parser


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.load()
    settings.apply_logging()
    if args.debug:
        logger.set_level("DEBUG")
    if getattr(args, "party", 1) < 1:
        console.print("[red]--party must be at least 1[/red]")
        return 2
    return args.func(args, settings)

__all__ = ["run", "build_parser", "simulate", "choose_action"]
