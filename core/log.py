"""core/log.py — Player-facing message log.

A ring buffer of simulation events (combat hits, pickups, quest
progress…) that a HUD can read.  It is plain data so it survives a
JSON save untouched.

Usage:
    log = state.log
    log.record("combat", "You hit Slime for 7!", tick=state.tick,
               details={"damage": 7, "crit": False})

Each entry is a dict:
    {"tick": int, "cat": str, "msg": str, "details": dict | None}
"""

from __future__ import annotations
from dataclasses import dataclass, field


@dataclass
class GameLog:
    """Bounded list of simulation events, newest last."""

    entries: list[dict] = field(default_factory=list)
    max_entries: int = 200

    def record(self, cat: str, msg: str, *, tick: int = 0,
               details: dict | None = None) -> None:
        self.entries.append({
            "tick": tick,
            "cat": cat,
            "msg": msg,
            "details": details,
        })
        if len(self.entries) > self.max_entries:
            self.entries = self.entries[-self.max_entries:]

    def clear(self):
        self.entries.clear()

    def recent(self, n: int = 20) -> list[dict]:
        """Return the *n* most recent entries (newest last)."""
        return self.entries[-n:]

    def for_cat(self, cat: str, n: int = 50) -> list[dict]:
        """Return last *n* entries in a category."""
        return [e for e in self.entries if e["cat"] == cat][-n:]

    def messages(self, n: int = 20) -> list[str]:
        return [e["msg"] for e in self.entries[-n:]]
