"""Elemental type metadata: the closed set of types, colors & abbreviations.

Provides:
  ElementType: the five gopher types
  TYPE_COLORS_HEX: mapping type -> hex color string (#RRGGBB)
  TYPE_ABBREVIATIONS: mapping type -> 3-letter abbreviation (upper)
  helper functions for colorized terminal output (used by the developer CLI).
"""
from __future__ import annotations
from enum import Enum
from typing import Dict, Optional, Tuple
import os, re

from colorama import Fore, Style


class ElementType(str, Enum):
    HACKER = "Hacker"
    TANK = "Tank"
    SPEEDY = "Speedy"
    SUPPORT = "Support"
    MAGE = "Mage"

    def __str__(self) -> str:
        return self.value


ALL_TYPES: Tuple[ElementType, ...] = tuple(ElementType)

TYPE_COLORS_HEX: Dict[ElementType, str] = {
    ElementType.HACKER: "#00ADD8",
    ElementType.TANK: "#8D6E63",
    ElementType.SPEEDY: "#F7D02C",
    ElementType.SUPPORT: "#7AC74C",
    ElementType.MAGE: "#A33EA1",
}

TYPE_ABBREVIATIONS: Dict[ElementType, str] = {
    ElementType.HACKER: "HCK",
    ElementType.TANK: "TNK",
    ElementType.SPEEDY: "SPD",
    ElementType.SUPPORT: "SUP",
    ElementType.MAGE: "MAG",
}

_TRUECOLOR = "truecolor" in os.environ.get("COLORTERM", "").lower()

_FALLBACK_FORE: Dict[ElementType, str] = {
    ElementType.HACKER: Fore.CYAN,
    ElementType.TANK: Fore.YELLOW,
    ElementType.SPEEDY: Fore.WHITE,
    ElementType.SUPPORT: Fore.GREEN,
    ElementType.MAGE: Fore.MAGENTA,
}

RESET = Style.RESET_ALL


def parse_type(value: "str | ElementType | None") -> Optional[ElementType]:
    """Case-insensitive lookup; empty values mean "no type"."""
    if value is None or value == "":
        return None
    if isinstance(value, ElementType):
        return value
    for t in ElementType:
        if t.value.lower() == str(value).lower():
            return t
    raise ValueError(f"unknown elemental type: {value!r}")


def _hex_to_rgb(h: str) -> Tuple[int,int,int]:
    h = h.lstrip('#')
    return int(h[0:2],16), int(h[2:4],16), int(h[4:6],16)

def color_code(t: ElementType) -> str:
    if _TRUECOLOR:
        r,g,b = _hex_to_rgb(TYPE_COLORS_HEX[t])
        return f"\033[38;2;{r};{g};{b}m"
    return _FALLBACK_FORE.get(t, '')

def colorize_type_text(t: ElementType, text: str) -> str:
    code = color_code(t)
    if not code:
        return text
    return f"{code}{text}{RESET}"

def type_abbreviation(t: ElementType) -> str:
    return TYPE_ABBREVIATIONS[t]

def format_types(types: Tuple[ElementType, ...], color: bool = True) -> str:
    if color:
        parts = [colorize_type_text(t, type_abbreviation(t)) for t in types]
    else:
        parts = [type_abbreviation(t) for t in types]
    return '/'.join(parts)

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")

def strip_ansi(s: str) -> str:
    return ANSI_ESCAPE_RE.sub('', s)

__all__ = [
    'ElementType','ALL_TYPES','TYPE_COLORS_HEX','TYPE_ABBREVIATIONS','parse_type',
    'colorize_type_text','type_abbreviation','format_types','strip_ansi'
]
