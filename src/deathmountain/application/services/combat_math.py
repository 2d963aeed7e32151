"""Deterministic combat arithmetic.

All functions are pure and integer based. Results must agree with the
on-chain rules exactly, so every division here is an explicit floor and the
only rounding (the mean beast hit) is half-up.
"""

from __future__ import annotations

import math
from typing import Dict, Optional

from deathmountain.domain.models.adventurer import Adventurer, AdventurerOutlook
from deathmountain.domain.models.beast import Beast
from deathmountain.domain.models.combat import (
    BeastDamage,
    CombatOutcome,
    CombatPreview,
    PlayerDamage,
)
from deathmountain.domain.models.item import ARMOR_SLOTS, Item, ItemType
from deathmountain.domain.services.beast_catalog import collectable_traits
from deathmountain.domain.services.item_catalog import (
    NECK_ARMOR_AFFINITY,
    PLATINUM_RING_ID,
    TITANIUM_RING_ID,
)
from deathmountain.domain.services.obstacle_catalog import OBSTACLE_ATTACK_TYPES
from deathmountain.domain.services.progression import level_progress, max_health, next_level_xp, potion_price


MIN_DAMAGE = 4
BEAST_MIN_DAMAGE = 2
STRENGTH_BONUS_PERCENT = 10
PREFIX_MATCH_MULTIPLIER = 8
SUFFIX_MATCH_MULTIPLIER = 2
RING_BONUS_PERCENT_PER_LEVEL = 3
NECK_BONUS_PERCENT_PER_LEVEL = 3

_STRONG_AGAINST = {
    (ItemType.MAGIC.value, ItemType.METAL.value),
    (ItemType.BLADE.value, ItemType.CLOTH.value),
    (ItemType.BLUDGEON.value, ItemType.HIDE.value),
}
_WEAK_AGAINST = {
    (ItemType.MAGIC.value, ItemType.HIDE.value),
    (ItemType.BLADE.value, ItemType.METAL.value),
    (ItemType.BLUDGEON.value, ItemType.CLOTH.value),
}


def elemental_adjusted_damage(base_attack: int, attack_type: str, defense_type: str) -> int:
    effect = int(base_attack) // 2
    pair = (str(attack_type), str(defense_type))
    if pair in _STRONG_AGAINST:
        return int(base_attack) + effect
    if pair in _WEAK_AGAINST:
        return int(base_attack) - effect
    return int(base_attack)


def strength_bonus(damage: int, strength: int) -> int:
    if strength <= 0:
        return 0
    return int(damage) * int(strength) * STRENGTH_BONUS_PERCENT // 100


def _ring_bonus(amount: int, ring: Optional[Item], ring_id: int) -> int:
    if ring is None or ring.id != ring_id:
        return 0
    return amount * RING_BONUS_PERCENT_PER_LEVEL * ring.level // 100


def calculate_player_damage(adventurer: Adventurer, beast: Beast) -> PlayerDamage:
    weapon = adventurer.equipment.weapon
    if weapon is None:
        return PlayerDamage(base=MIN_DAMAGE, critical=MIN_DAMAGE * 2)

    base_attack = weapon.power
    elemental = elemental_adjusted_damage(base_attack, weapon.type, beast.armor_type)
    strength = strength_bonus(elemental, adventurer.stats.strength)

    special = 0
    if weapon.prefix and weapon.prefix == beast.prefix:
        special += elemental * PREFIX_MATCH_MULTIPLIER
    if weapon.suffix and weapon.suffix == beast.suffix:
        special += elemental * SUFFIX_MATCH_MULTIPLIER

    ring = adventurer.equipment.ring
    if special > 0:
        special += _ring_bonus(special, ring, PLATINUM_RING_ID)

    beast_armor = beast.power
    crit_bonus = elemental + _ring_bonus(elemental, ring, TITANIUM_RING_ID)
    total = elemental + strength + special
    return PlayerDamage(
        base=max(MIN_DAMAGE, total - beast_armor),
        critical=max(MIN_DAMAGE, total + crit_bonus - beast_armor),
        elemental_bonus=elemental - base_attack,
        strength_bonus=strength,
        special_bonus=special,
    )


def calculate_slot_damage(beast: Beast, armor: Item, neck: Optional[Item] = None) -> int:
    """Damage a beast deals through one equipped armor piece."""

    damage = elemental_adjusted_damage(beast.power, beast.attack_type, armor.type)
    if armor.suffix and armor.suffix == beast.suffix:
        damage *= SUFFIX_MATCH_MULTIPLIER
    if armor.prefix and armor.prefix == beast.prefix:
        damage *= PREFIX_MATCH_MULTIPLIER

    armor_value = armor.power
    damage = max(BEAST_MIN_DAMAGE, damage - armor_value)

    if neck is not None and NECK_ARMOR_AFFINITY.get(neck.id) == armor.type:
        damage -= armor_value * neck.level * NECK_BONUS_PERCENT_PER_LEVEL // 100
    return max(BEAST_MIN_DAMAGE, damage)


def unarmored_slot_damage(beast: Beast) -> int:
    # 1.5x the beast's attack, kept in integers.
    return max(BEAST_MIN_DAMAGE, beast.power * 3 // 2)


def _round_half_up(numerator: int, denominator: int) -> int:
    return (2 * numerator + denominator) // (2 * denominator)


def calculate_beast_damage(adventurer: Adventurer, beast: Beast) -> BeastDamage:
    neck = adventurer.equipment.neck
    # Twice the per-slot ceiling (1.5x attack), so all protection math stays integral.
    doubled_ceiling = beast.power * 3
    per_slot: Dict[str, int] = {}
    doubled_defense = 0
    for slot in ARMOR_SLOTS:
        armor = adventurer.equipment.get(slot)
        if armor is None:
            per_slot[slot] = unarmored_slot_damage(beast)
            continue
        damage = calculate_slot_damage(beast, armor, neck)
        per_slot[slot] = damage
        doubled_defense += max(0, doubled_ceiling - 2 * damage)

    if doubled_ceiling <= 2 * BEAST_MIN_DAMAGE:
        protection = 100
    else:
        protection = doubled_defense * 100 // ((doubled_ceiling - 2 * BEAST_MIN_DAMAGE) * len(ARMOR_SLOTS))
    protection = max(0, min(100, protection))

    highest = max([BEAST_MIN_DAMAGE, *per_slot.values()])
    average = max(BEAST_MIN_DAMAGE, _round_half_up(sum(per_slot.values()), len(ARMOR_SLOTS)))
    return BeastDamage(max=highest, per_slot=per_slot, protection_percent=protection, average=average)


def ability_based_percentage(level: int, relevant_stat: int) -> int:
    if relevant_stat >= level:
        return 100
    return int(relevant_stat) * 100 // int(level)


def flee_chance(level: int, dexterity: int) -> int:
    return ability_based_percentage(level, dexterity)


def ambush_chance(level: int, wisdom: int) -> int:
    if wisdom >= level:
        return 0
    return (int(level) - int(wisdom)) * 100 // int(level)


def discovery_chance(level: int, intelligence: int) -> int:
    return ability_based_percentage(level, intelligence)


def obstacle_dodge_chances(level: int, intelligence: int, wisdom: int) -> Dict[str, int]:
    """Dodge chance per obstacle attack type: magic is dodged with intelligence, the rest with wisdom."""

    return {
        attack_type: ability_based_percentage(level, intelligence if attack_type == ItemType.MAGIC.value else wisdom)
        for attack_type in OBSTACLE_ATTACK_TYPES
    }


def crit_chance(luck: int) -> int:
    return max(0, min(100, int(luck)))


def estimate_outcome(
    adventurer_health: int,
    beast_health: int,
    average_player_damage: float,
    beast_damage: int,
) -> CombatOutcome:
    """Adventurer strikes first; each surviving beast turn lands ``beast_damage``."""

    player_damage = max(1.0, float(average_player_damage))
    rounds_to_kill_beast = max(1, math.ceil(max(0, beast_health) / player_damage))
    if beast_damage <= 0:
        return CombatOutcome(adventurer_wins=True, rounds=rounds_to_kill_beast, damage_taken=0)
    rounds_to_kill_adventurer = math.ceil(max(0, adventurer_health) / beast_damage)

    if rounds_to_kill_beast <= rounds_to_kill_adventurer:
        return CombatOutcome(
            adventurer_wins=True,
            rounds=rounds_to_kill_beast,
            damage_taken=(rounds_to_kill_beast - 1) * beast_damage,
        )
    return CombatOutcome(adventurer_wins=False, rounds=rounds_to_kill_adventurer, damage_taken=adventurer_health)


def build_combat_preview(adventurer: Adventurer, beast: Beast) -> CombatPreview:
    player = calculate_player_damage(adventurer, beast)
    incoming = calculate_beast_damage(adventurer, beast)
    crit = crit_chance(adventurer.stats.luck)
    average_player_damage = max(1.0, player.base + crit / 100 * (player.critical - player.base))
    return CombatPreview(
        player_damage=player,
        beast_damage=incoming,
        crit_chance=crit,
        flee_chance=flee_chance(adventurer.level, adventurer.stats.dexterity),
        ambush_chance=ambush_chance(adventurer.level, adventurer.stats.wisdom),
        collectable=collectable_traits(beast.seed, beast.is_collectable),
        outcome=estimate_outcome(adventurer.health, beast.health, average_player_damage, incoming.average),
    )


def build_adventurer_outlook(adventurer: Adventurer) -> AdventurerOutlook:
    stats = adventurer.stats
    return AdventurerOutlook(
        max_health=max_health(stats.vitality),
        next_level_xp=next_level_xp(adventurer.level),
        level_progress=round(level_progress(adventurer.xp), 2),
        potion_price=potion_price(adventurer.level, stats.charisma),
        discovery_chance=discovery_chance(adventurer.level, stats.intelligence),
        dodge_chances=obstacle_dodge_chances(adventurer.level, stats.intelligence, stats.wisdom),
    )
