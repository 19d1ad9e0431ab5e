"""Player-facing message log (the in-game message pane).

Entries are plain dicts ``{"turn", "text", "category"}`` so render snapshots
can copy them out directly. The log keeps the last 250 entries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

MAX_MESSAGES = 250
CATEGORIES = ("system", "combat", "item")


@dataclass
class MessageLog:
    entries: List[Dict] = field(default_factory=list)
    turn: int = 0

    def add(self, text: str, category: str = "system") -> None:
        if category not in CATEGORIES:
            category = "system"
        self.entries.append({"turn": self.turn, "text": text, "category": category})
        if len(self.entries) > MAX_MESSAGES:
            del self.entries[: len(self.entries) - MAX_MESSAGES]

    def recent(self, count: int = 20) -> List[Dict]:
        return [dict(e) for e in self.entries[-count:]]

    def texts(self) -> List[str]:
        return [e["text"] for e in self.entries]

    def clear(self) -> None:
        self.entries.clear()
