"""Static item tables for the loot set.

Every id in 1..101 is classified once at import time into an ``ItemSpec``.
Call sites look ids up in ``ITEM_TABLE`` instead of re-deriving tier, type and
slot from numeric ranges, so the boundaries live in exactly one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from deathmountain.domain.models.item import Item, ItemSlot, ItemType, MarketItem
from deathmountain.domain.services.progression import level_from_xp


NUM_ITEMS = 101
TIER_PRICE = 4
MINIMUM_ITEM_PRICE = 1
CHARISMA_ITEM_DISCOUNT = 1

SUFFIX_UNLOCK_LEVEL = 15
PREFIX_UNLOCK_LEVEL = 19

NUM_PREFIXES = 69
NUM_SUFFIXES = 18
MAX_ITEM_ENTROPY = 65535

PENDANT_ID = 1
NECKLACE_ID = 2
AMULET_ID = 3
PLATINUM_RING_ID = 6
TITANIUM_RING_ID = 7

ITEM_NAME_PREFIXES: Dict[int, str] = dict(
    enumerate(
        (
            "Agony", "Apocalypse", "Armageddon", "Beast", "Behemoth", "Blight", "Blood",
            "Bramble", "Brimstone", "Brood", "Carrion", "Cataclysm", "Chimeric", "Corpse",
            "Corruption", "Damnation", "Death", "Demon", "Dire", "Dragon", "Dread", "Doom",
            "Dusk", "Eagle", "Empyrean", "Fate", "Foe", "Gale", "Ghoul", "Gloom", "Glyph",
            "Golem", "Grim", "Hate", "Havoc", "Honour", "Horror", "Hypnotic", "Kraken",
            "Loath", "Maelstrom", "Mind", "Miracle", "Morbid", "Oblivion", "Onslaught",
            "Pain", "Pandemonium", "Phoenix", "Plague", "Rage", "Rapture", "Rune", "Skull",
            "Sol", "Soul", "Sorrow", "Spirit", "Storm", "Tempest", "Torment", "Vengeance",
            "Victory", "Viper", "Vortex", "Woe", "Wrath", "Light's", "Shimmering",
        ),
        start=1,
    )
)

ITEM_NAME_SUFFIXES: Dict[int, str] = dict(
    enumerate(
        (
            "Bane", "Root", "Bite", "Song", "Roar", "Grasp", "Instrument", "Glow", "Bender",
            "Shadow", "Whisper", "Shout", "Growl", "Tear", "Peak", "Form", "Sun", "Moon",
        ),
        start=1,
    )
)

SLOT_LENGTHS: Dict[str, int] = {
    ItemSlot.WEAPON.value: 18,
    ItemSlot.CHEST.value: 15,
    ItemSlot.HEAD.value: 15,
    ItemSlot.WAIST.value: 15,
    ItemSlot.FOOT.value: 15,
    ItemSlot.HAND.value: 15,
    ItemSlot.NECK.value: 3,
    ItemSlot.RING.value: 5,
}

# Neck pieces that reduce damage taken through armor of one material.
NECK_ARMOR_AFFINITY: Dict[int, str] = {
    AMULET_ID: ItemType.CLOTH.value,
    PENDANT_ID: ItemType.HIDE.value,
    NECKLACE_ID: ItemType.METAL.value,
}


@dataclass(frozen=True)
class ItemSpec:
    id: int
    name: str
    tier: int
    type: str
    slot: str
    slot_index: int


# (slot, type, highest slot index, ((name, tier), ...)); ids are assigned in order from 1.
_ITEM_GROUPS: Sequence[tuple[ItemSlot, ItemType, int, Sequence[tuple[str, int]]]] = (
    (ItemSlot.NECK, ItemType.NECKLACE, 2, (("Pendant", 1), ("Necklace", 1), ("Amulet", 1))),
    (
        ItemSlot.RING,
        ItemType.RING,
        4,
        (("Silver Ring", 2), ("Bronze Ring", 3), ("Platinum Ring", 1), ("Titanium Ring", 1), ("Gold Ring", 1)),
    ),
    (
        ItemSlot.WEAPON,
        ItemType.MAGIC,
        17,
        (
            ("Ghost Wand", 1), ("Grave Wand", 2), ("Bone Wand", 3), ("Wand", 5),
            ("Grimoire", 1), ("Chronicle", 2), ("Tome", 3), ("Book", 5),
        ),
    ),
    (ItemSlot.CHEST, ItemType.CLOTH, 14, (("Divine Robe", 1), ("Silk Robe", 2), ("Linen Robe", 3), ("Robe", 4), ("Shirt", 5))),
    (ItemSlot.HEAD, ItemType.CLOTH, 14, (("Crown", 1), ("Divine Hood", 2), ("Silk Hood", 3), ("Linen Hood", 4), ("Hood", 5))),
    (
        ItemSlot.WAIST,
        ItemType.CLOTH,
        14,
        (("Brightsilk Sash", 1), ("Silk Sash", 2), ("Wool Sash", 3), ("Linen Sash", 4), ("Sash", 5)),
    ),
    (
        ItemSlot.FOOT,
        ItemType.CLOTH,
        14,
        (("Divine Slippers", 1), ("Silk Slippers", 2), ("Wool Shoes", 3), ("Linen Shoes", 4), ("Shoes", 5)),
    ),
    (
        ItemSlot.HAND,
        ItemType.CLOTH,
        14,
        (("Divine Gloves", 1), ("Silk Gloves", 2), ("Wool Gloves", 3), ("Linen Gloves", 4), ("Gloves", 5)),
    ),
    (
        ItemSlot.WEAPON,
        ItemType.BLADE,
        9,
        (("Katana", 1), ("Falchion", 2), ("Scimitar", 3), ("Long Sword", 4), ("Short Sword", 5)),
    ),
    (
        ItemSlot.CHEST,
        ItemType.HIDE,
        9,
        (
            ("Demon Husk", 1), ("Dragonskin Armor", 2), ("Studded Leather Armor", 3),
            ("Hard Leather Armor", 4), ("Leather Armor", 5),
        ),
    ),
    (
        ItemSlot.HEAD,
        ItemType.HIDE,
        9,
        (("Demon Crown", 1), ("Dragons Crown", 2), ("War Cap", 3), ("Leather Cap", 4), ("Cap", 5)),
    ),
    (
        ItemSlot.WAIST,
        ItemType.HIDE,
        9,
        (
            ("Demonhide Belt", 1), ("Dragonskin Belt", 2), ("Studded Leather Belt", 3),
            ("Hard Leather Belt", 4), ("Leather Belt", 5),
        ),
    ),
    (
        ItemSlot.FOOT,
        ItemType.HIDE,
        9,
        (
            ("Demonhide Boots", 1), ("Dragonskin Boots", 2), ("Studded Leather Boots", 3),
            ("Hard Leather Boots", 4), ("Leather Boots", 5),
        ),
    ),
    (
        ItemSlot.HAND,
        ItemType.HIDE,
        9,
        (
            ("Demons Hands", 1), ("Dragonskin Gloves", 2), ("Studded Leather Gloves", 3),
            ("Hard Leather Gloves", 4), ("Leather Gloves", 5),
        ),
    ),
    (
        ItemSlot.WEAPON,
        ItemType.BLUDGEON,
        4,
        (("Warhammer", 1), ("Quarterstaff", 2), ("Maul", 3), ("Mace", 4), ("Club", 5)),
    ),
    (
        ItemSlot.CHEST,
        ItemType.METAL,
        4,
        (("Holy Chestplate", 1), ("Ornate Chestplate", 2), ("Plate Mail", 3), ("Chain Mail", 4), ("Ring Mail", 5)),
    ),
    (
        ItemSlot.HEAD,
        ItemType.METAL,
        4,
        (("Ancient Helm", 1), ("Ornate Helm", 2), ("Great Helm", 3), ("Full Helm", 4), ("Helm", 5)),
    ),
    (
        ItemSlot.WAIST,
        ItemType.METAL,
        4,
        (("Ornate Belt", 1), ("War Belt", 2), ("Plated Belt", 3), ("Mesh Belt", 4), ("Heavy Belt", 5)),
    ),
    (
        ItemSlot.FOOT,
        ItemType.METAL,
        4,
        (("Holy Greaves", 1), ("Ornate Greaves", 2), ("Greaves", 3), ("Chain Boots", 4), ("Heavy Boots", 5)),
    ),
    (
        ItemSlot.HAND,
        ItemType.METAL,
        4,
        (
            ("Holy Gauntlets", 1), ("Ornate Gauntlets", 2), ("Gauntlets", 3),
            ("Chain Gloves", 4), ("Heavy Gloves", 5),
        ),
    ),
)


def _build_item_table() -> Dict[int, ItemSpec]:
    table: Dict[int, ItemSpec] = {}
    next_id = 1
    for slot, item_type, top_index, entries in _ITEM_GROUPS:
        for offset, (name, tier) in enumerate(entries):
            table[next_id] = ItemSpec(
                id=next_id,
                name=name,
                tier=tier,
                type=item_type.value,
                slot=slot.value,
                slot_index=top_index - offset,
            )
            next_id += 1
    if len(table) != NUM_ITEMS:
        raise RuntimeError(f"Item table has {len(table)} entries, expected {NUM_ITEMS}")
    return table


ITEM_TABLE: Dict[int, ItemSpec] = _build_item_table()


def item_spec(item_id: int) -> Optional[ItemSpec]:
    return ITEM_TABLE.get(int(item_id))


def item_name(item_id: int) -> str:
    spec = item_spec(item_id)
    return spec.name if spec is not None else f"Item {item_id}"


def item_tier(item_id: int) -> int:
    spec = item_spec(item_id)
    return spec.tier if spec is not None else 0


def item_type(item_id: int) -> str:
    spec = item_spec(item_id)
    return spec.type if spec is not None else ItemType.NONE.value


def item_slot(item_id: int) -> str:
    spec = item_spec(item_id)
    return spec.slot if spec is not None else ItemSlot.NONE.value


def base_price(tier: int) -> int:
    if 1 <= int(tier) <= 5:
        return (6 - int(tier)) * TIER_PRICE
    return 0


def item_price(item_id: int, charisma: int = 0) -> int:
    discount = CHARISMA_ITEM_DISCOUNT * max(0, int(charisma))
    return max(MINIMUM_ITEM_PRICE, base_price(item_tier(item_id)) - discount)


def special_seed(item_id: int, entropy: int) -> int:
    """Item-specific entropy used to index the special name tables."""

    spec = item_spec(item_id)
    item_entropy = int(entropy) + int(item_id)
    if item_entropy > MAX_ITEM_ENTROPY:
        item_entropy = int(entropy) - int(item_id)
    rnd = item_entropy % NUM_ITEMS
    slot_length = SLOT_LENGTHS.get(spec.slot, 1) if spec is not None else 1
    slot_index = spec.slot_index if spec is not None else 0
    return rnd * slot_length + slot_index


def special_prefix(item_id: int, entropy: int) -> Optional[str]:
    return ITEM_NAME_PREFIXES.get(special_seed(item_id, entropy) % NUM_PREFIXES + 1)


def special_suffix(item_id: int, entropy: int) -> Optional[str]:
    return ITEM_NAME_SUFFIXES.get(special_seed(item_id, entropy) % NUM_SUFFIXES + 1)


def build_item(item_id: int, xp: int, *, specials_seed: int = 0, bag_slot: int | None = None) -> Item:
    level = level_from_xp(xp)
    prefix = None
    suffix = None
    if specials_seed:
        if level >= PREFIX_UNLOCK_LEVEL:
            prefix = special_prefix(item_id, specials_seed)
        if level >= SUFFIX_UNLOCK_LEVEL:
            suffix = special_suffix(item_id, specials_seed)
    return Item(
        id=int(item_id),
        xp=max(0, int(xp)),
        level=level,
        base_name=item_name(item_id),
        tier=item_tier(item_id),
        type=item_type(item_id),
        slot=item_slot(item_id),
        prefix=prefix,
        suffix=suffix,
        bag_slot=bag_slot,
    )


def build_market_item(item_id: int, charisma: int) -> MarketItem:
    return MarketItem(
        id=int(item_id),
        name=item_name(item_id),
        tier=item_tier(item_id),
        type=item_type(item_id),
        slot=item_slot(item_id),
        price=item_price(item_id, charisma),
    )
