from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


STAT_NAMES = (
    "strength",
    "dexterity",
    "vitality",
    "intelligence",
    "wisdom",
    "charisma",
    "luck",
)

# Short attribute names used by the compact context markup.
STAT_ABBREVIATIONS = {
    "strength": "str",
    "dexterity": "dex",
    "vitality": "vit",
    "intelligence": "int",
    "wisdom": "wis",
    "charisma": "cha",
}


@dataclass(frozen=True)
class Stats:
    strength: int = 0
    dexterity: int = 0
    vitality: int = 0
    intelligence: int = 0
    wisdom: int = 0
    charisma: int = 0
    luck: int = 0

    def as_dict(self) -> dict[str, int]:
        return {name: int(getattr(self, name)) for name in STAT_NAMES}


def stats_from_mapping(values: Mapping[str, Any] | None) -> Stats:
    attrs = values or {}

    def _stat(name: str) -> int:
        raw = attrs.get(name)
        try:
            return max(0, int(raw)) if raw is not None else 0
        except (TypeError, ValueError):
            return 0

    return Stats(**{name: _stat(name) for name in STAT_NAMES})
