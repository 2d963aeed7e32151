from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class PlayerDamage:
    base: int
    critical: int
    elemental_bonus: int = 0
    strength_bonus: int = 0
    special_bonus: int = 0


@dataclass(frozen=True)
class BeastDamage:
    max: int
    per_slot: Dict[str, int] = field(default_factory=dict)
    protection_percent: int = 0
    average: int = 0


@dataclass(frozen=True)
class CollectableTraits:
    shiny: bool = False
    animated: bool = False
    eligible: bool = False


@dataclass(frozen=True)
class CombatOutcome:
    adventurer_wins: bool
    rounds: int
    damage_taken: int

    @property
    def summary(self) -> str:
        plural = "" if self.rounds == 1 else "s"
        if not self.adventurer_wins:
            return f"Lose in {self.rounds} round{plural}"
        if self.damage_taken == 0:
            return f"Win in {self.rounds} round{plural}, no damage"
        return f"Win in {self.rounds} round{plural}, take {self.damage_taken} damage"


@dataclass(frozen=True)
class CombatPreview:
    player_damage: PlayerDamage
    beast_damage: BeastDamage
    crit_chance: int
    flee_chance: int
    ambush_chance: int
    collectable: CollectableTraits
    outcome: CombatOutcome

    def as_dict(self) -> dict:
        return {
            "playerDamage": {
                "base": self.player_damage.base,
                "critical": self.player_damage.critical,
            },
            "beastDamage": {
                "max": self.beast_damage.max,
                "perSlot": dict(self.beast_damage.per_slot),
                "protectionPercent": self.beast_damage.protection_percent,
                "average": self.beast_damage.average,
            },
            "critChance": self.crit_chance,
            "fleeChance": self.flee_chance,
            "ambushChance": self.ambush_chance,
            "collectable": {
                "shiny": self.collectable.shiny,
                "animated": self.collectable.animated,
                "eligible": self.collectable.eligible,
            },
            "outcome": self.outcome.summary,
        }
