from __future__ import annotations

from typing import Any, Dict, Optional

from deathmountain.domain.models.beast import Beast, BeastRewards
from deathmountain.domain.models.combat import CollectableTraits
from deathmountain.domain.models.item import ItemType
from deathmountain.domain.services.item_catalog import ITEM_NAME_PREFIXES, ITEM_NAME_SUFFIXES


MAX_BEAST_ID = 75
BEAST_BAND_SIZE = 25
BEAST_SPECIAL_NAME_LEVEL_UNLOCK = 19

MIN_XP_REWARD = 4
GOLD_REWARD_DIVISOR = 2

# Out of 10000; both traits are independent 5% rolls on the two seed halves.
SHINY_THRESHOLD = 500
ANIMATED_THRESHOLD = 500

BEAST_NAMES: Dict[int, str] = dict(
    enumerate(
        (
            # Magic / Cloth
            "Warlock", "Typhon", "Jiangshi", "Anansi", "Basilisk",
            "Gorgon", "Kitsune", "Lich", "Chimera", "Wendigo",
            "Rakshasa", "Werewolf", "Banshee", "Draugr", "Vampire",
            "Goblin", "Ghoul", "Wraith", "Sprite", "Kappa",
            "Fairy", "Leprechaun", "Kelpie", "Pixie", "Gnome",
            # Hunter / Hide
            "Griffin", "Manticore", "Phoenix", "Dragon", "Minotaur",
            "Qilin", "Ammit", "Nue", "Skinwalker", "Chupacabra",
            "Weretiger", "Wyvern", "Roc", "Harpy", "Pegasus",
            "Hippogriff", "Fenrir", "Jaguar", "Satori", "Dire Wolf",
            "Bear", "Wolf", "Mantis", "Spider", "Rat",
            # Brute / Metal
            "Kraken", "Colossus", "Balrog", "Leviathan", "Tarrasque",
            "Titan", "Nephilim", "Behemoth", "Hydra", "Juggernaut",
            "Oni", "Jotunn", "Ettin", "Cyclops", "Giant",
            "Nemean Lion", "Berserker", "Yeti", "Golem", "Ent",
            "Troll", "Bigfoot", "Ogre", "Orc", "Skeleton",
        ),
        start=1,
    )
)

_BANDS = (
    ("Magic", ItemType.CLOTH.value, ItemType.MAGIC.value),
    ("Hunter", ItemType.HIDE.value, ItemType.BLADE.value),
    ("Brute", ItemType.METAL.value, ItemType.BLUDGEON.value),
)


def _band(beast_id: int) -> Optional[tuple[str, str, str]]:
    beast_id = int(beast_id)
    if beast_id < 1 or beast_id > MAX_BEAST_ID:
        return None
    return _BANDS[(beast_id - 1) // BEAST_BAND_SIZE]


def beast_name(beast_id: int) -> str:
    return BEAST_NAMES.get(int(beast_id), f"Beast {beast_id}")


def beast_type(beast_id: int) -> str:
    band = _band(beast_id)
    return band[0] if band else ItemType.NONE.value


def beast_armor_type(beast_id: int) -> str:
    band = _band(beast_id)
    return band[1] if band else ItemType.NONE.value


def beast_attack_type(beast_id: int) -> str:
    band = _band(beast_id)
    return band[2] if band else ItemType.NONE.value


def beast_tier(beast_id: int) -> int:
    """Tiers 1-4 take five ids each at the start of a band; the last five are tier 5."""

    if _band(beast_id) is None:
        return 5
    position = (int(beast_id) - 1) % BEAST_BAND_SIZE
    return min(5, position // 5 + 1)


def beast_rewards(level: int, tier: int) -> BeastRewards:
    multiplier = 6 - int(tier) if 1 <= int(tier) <= 5 else 1
    return BeastRewards(
        gold=int(level) * multiplier // GOLD_REWARD_DIVISOR,
        xp=max(MIN_XP_REWARD, int(level) * 2),
    )


def parse_beast_seed(raw: Any) -> int:
    """Seeds arrive as ints or hex/decimal strings. Anything unparseable becomes 0."""

    if raw is None or isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return max(0, raw)
    text = str(raw).strip().lower()
    if not text:
        return 0
    try:
        value = int(text, 16) if text.startswith("0x") else int(text)
    except ValueError:
        return 0
    return max(0, value)


def collectable_traits(seed: int, is_collectable: bool) -> CollectableTraits:
    eligible = bool(is_collectable) and int(seed) != 0
    if not eligible:
        return CollectableTraits(shiny=False, animated=False, eligible=False)
    low = int(seed) & 0xFFFFFFFF
    high = (int(seed) >> 32) & 0xFFFFFFFF
    return CollectableTraits(
        shiny=low % 10000 < SHINY_THRESHOLD,
        animated=high % 10000 < ANIMATED_THRESHOLD,
        eligible=True,
    )


def build_beast(
    beast_id: int,
    *,
    health: int,
    level: int,
    seed: Any = 0,
    special2: Optional[int] = None,
    special3: Optional[int] = None,
    is_collectable: bool = False,
) -> Beast:
    prefix = None
    suffix = None
    if int(level) >= BEAST_SPECIAL_NAME_LEVEL_UNLOCK:
        if special2:
            prefix = ITEM_NAME_PREFIXES.get(int(special2))
        if special3:
            suffix = ITEM_NAME_SUFFIXES.get(int(special3))
    return Beast(
        id=int(beast_id),
        base_name=beast_name(beast_id),
        health=max(0, int(health)),
        level=max(0, int(level)),
        tier=beast_tier(beast_id),
        type=beast_type(beast_id),
        armor_type=beast_armor_type(beast_id),
        attack_type=beast_attack_type(beast_id),
        seed=parse_beast_seed(seed),
        prefix=prefix,
        suffix=suffix,
        is_collectable=bool(is_collectable),
        rewards=beast_rewards(max(0, int(level)), beast_tier(beast_id)),
    )
