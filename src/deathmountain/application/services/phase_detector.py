from __future__ import annotations

from deathmountain.domain.models.adventurer import Adventurer
from deathmountain.domain.models.game_state import GamePhase


def detect_phase(health: int, beast_health: int, stat_upgrades_available: int) -> GamePhase:
    """Priority is death, then combat, then level-up, then exploration."""

    if health is None or health <= 0:
        return GamePhase.DEATH
    if beast_health and beast_health > 0:
        return GamePhase.COMBAT
    if stat_upgrades_available and stat_upgrades_available > 0:
        return GamePhase.LEVEL_UP
    return GamePhase.EXPLORATION


def phase_for(adventurer: Adventurer) -> GamePhase:
    return detect_phase(adventurer.health, adventurer.beast_health, adventurer.stat_upgrades_available)
