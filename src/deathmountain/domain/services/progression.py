from __future__ import annotations

from math import isqrt


STARTING_HEALTH = 100
MAX_HEALTH_CAP = 1023
HEALTH_PER_VITALITY = 15
ITEM_MAX_XP = 400
POTION_HEAL_AMOUNT = 10


def level_from_xp(xp: int) -> int:
    """Return floor(sqrt(xp)) for adventurers and items alike.

    xp == 0 yields level 0. Some client call sites report level 1 there; this
    package keeps the plain formula everywhere and lets the percentage helpers
    treat a level-0 adventurer as fully capped instead of dividing by zero.
    """

    return isqrt(max(0, int(xp)))


def next_level_xp(level: int, *, item: bool = False) -> int:
    required = (int(level) + 1) ** 2
    if item:
        return min(ITEM_MAX_XP, required)
    return required


def level_progress(xp: int, *, item: bool = False) -> float:
    level = level_from_xp(xp)
    floor_xp = level ** 2
    ceiling_xp = next_level_xp(level, item=item)
    if ceiling_xp <= floor_xp:
        return 100.0
    return (int(xp) - floor_xp) / (ceiling_xp - floor_xp) * 100


def max_health(vitality: int) -> int:
    return min(MAX_HEALTH_CAP, STARTING_HEALTH + int(vitality) * HEALTH_PER_VITALITY)


def potion_price(level: int, charisma: int) -> int:
    return max(1, int(level) - int(charisma) * 2)
