from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from deathmountain.domain.models.activity import ActivityFeedEntry
from deathmountain.domain.models.adventurer import Adventurer, AdventurerOutlook
from deathmountain.domain.models.beast import Beast
from deathmountain.domain.models.combat import CombatPreview
from deathmountain.domain.models.item import Item, MarketItem


class GamePhase(str, Enum):
    DEATH = "death"
    COMBAT = "combat"
    LEVEL_UP = "level_up"
    EXPLORATION = "exploration"


@dataclass(frozen=True)
class GameState:
    game_id: int
    action_count: int
    phase: GamePhase
    adventurer: Adventurer
    outlook: Optional[AdventurerOutlook] = None
    beast: Optional[Beast] = None
    bag: List[Item] = field(default_factory=list)
    market: List[MarketItem] = field(default_factory=list)
    combat_preview: Optional[CombatPreview] = None
    recent_events: List[ActivityFeedEntry] = field(default_factory=list)


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    adventurer_id: int
    xp: int
    level: int
