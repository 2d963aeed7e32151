from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from deathmountain.domain.models.item import Equipment
from deathmountain.domain.models.stats import Stats


@dataclass(frozen=True)
class Adventurer:
    id: int
    health: int
    xp: int
    level: int
    gold: int
    stats: Stats = field(default_factory=Stats)
    equipment: Equipment = field(default_factory=Equipment)
    stat_upgrades_available: int = 0
    item_specials_seed: int = 0
    beast_health: int = 0
    action_count: int = 0

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    @property
    def in_battle(self) -> bool:
        return self.beast_health > 0


@dataclass(frozen=True)
class AdventurerOutlook:
    """Figures that follow from the adventurer alone, whatever the phase."""

    max_health: int
    next_level_xp: int
    level_progress: float
    potion_price: int
    discovery_chance: int
    dodge_chances: Dict[str, int] = field(default_factory=dict)
