"""
Lightweight logger used across the engine.
Level-coloured output through colorama; extras rendered as key=value pairs.
Bound loggers stamp a fixed context (e.g. the battle id) on every line.
"""
from __future__ import annotations
import sys
from datetime import datetime, timezone
from typing import Literal, Any, Dict, TextIO, Optional

from colorama import Fore, Style, init as colorama_init

Level = Literal["DEBUG","INFO","WARN","ERROR"]

colorama_init()
COLORS = {
    "DEBUG": Fore.BLUE,
    "INFO": Fore.GREEN,
    "WARN": Fore.YELLOW,
    "ERROR": Fore.RED
}
RESET = Style.RESET_ALL

class Logger:
    _order = {"DEBUG":10,"INFO":20,"WARN":30,"ERROR":40}
    def __init__(self, level: Level = "INFO", stream: Optional[TextIO] = None):
        self.threshold = self._order[level]
        self.stream = stream

    def set_level(self, level: Level):
        self.threshold = self._order.get(level, 20)

    def enabled(self, lvl: Level) -> bool:
        return self._order[lvl] >= self.threshold

    def _emit(self, lvl: Level, msg: str, **extra: Any):
        if not self.enabled(lvl):
            return
        ts = datetime.now(timezone.utc).isoformat(timespec="seconds")
        extras = ""
        if extra:
            extras = " " + " ".join(f"{k}={v}" for k, v in extra.items())
        out = self.stream or sys.stderr
        out.write(f"{COLORS[lvl]}{ts} [{lvl}] {msg}{extras}{RESET}\n")

    def bind(self, **context: Any) -> "BoundLogger":
        return BoundLogger(self, context)

    def debug(self, msg: str, **kw): self._emit("DEBUG", msg, **kw)
    def info(self, msg: str, **kw): self._emit("INFO", msg, **kw)
    def warn(self, msg: str, **kw): self._emit("WARN", msg, **kw)
    def error(self, msg: str, **kw): self._emit("ERROR", msg, **kw)

class BoundLogger:
    """Shares the parent's threshold and stream; only adds context."""
    def __init__(self, parent: Logger, context: Dict[str, Any]):
        self.parent = parent
        self.context = dict(context)

    def bind(self, **context: Any) -> "BoundLogger":
        return BoundLogger(self.parent, {**self.context, **context})

    def _emit(self, lvl: Level, msg: str, **extra: Any):
        self.parent._emit(lvl, msg, **{**self.context, **extra})

    def debug(self, msg: str, **kw): self._emit("DEBUG", msg, **kw)
    def info(self, msg: str, **kw): self._emit("INFO", msg, **kw)
    def warn(self, msg: str, **kw): self._emit("WARN", msg, **kw)
    def error(self, msg: str, **kw): self._emit("ERROR", msg, **kw)

logger = Logger("INFO")
