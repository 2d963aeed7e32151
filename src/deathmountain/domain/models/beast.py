from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


UNKNOWN_BEAST_NAME = "Unknown"


@dataclass(frozen=True)
class BeastRewards:
    gold: int
    xp: int


@dataclass(frozen=True)
class Beast:
    id: int
    base_name: str
    health: int
    level: int
    tier: int
    type: str
    armor_type: str
    attack_type: str
    seed: int = 0
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    is_collectable: bool = False
    placeholder: bool = False
    rewards: Optional[BeastRewards] = None

    @property
    def name(self) -> str:
        if self.prefix and self.suffix:
            return f'"{self.prefix} {self.suffix}" {self.base_name}'
        if self.prefix:
            return f'"{self.prefix}" {self.base_name}'
        if self.suffix:
            return f'"{self.suffix}" {self.base_name}'
        return self.base_name

    @property
    def power(self) -> int:
        return self.level * (6 - self.tier)
