from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Optional


class ItemType(str, Enum):
    MAGIC = "Magic"
    BLADE = "Blade"
    BLUDGEON = "Bludgeon"
    CLOTH = "Cloth"
    HIDE = "Hide"
    METAL = "Metal"
    RING = "Ring"
    NECKLACE = "Necklace"
    NONE = "None"


class ItemSlot(str, Enum):
    WEAPON = "Weapon"
    CHEST = "Chest"
    HEAD = "Head"
    WAIST = "Waist"
    FOOT = "Foot"
    HAND = "Hand"
    NECK = "Neck"
    RING = "Ring"
    NONE = "None"


EQUIPMENT_SLOTS = ("weapon", "chest", "head", "waist", "foot", "hand", "neck", "ring")
ARMOR_SLOTS = ("head", "chest", "waist", "hand", "foot")


@dataclass(frozen=True)
class Item:
    id: int
    xp: int
    level: int
    base_name: str
    tier: int
    type: str
    slot: str
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    bag_slot: Optional[int] = None

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
    def label(self) -> str:
        return f"{self.name}:L{self.level}:T{self.tier}"

    @property
    def power(self) -> int:
        # Attack for weapons, armor value for armor: level * (6 - tier).
        return self.level * (6 - self.tier)

    def as_dict(self) -> dict:
        payload = {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "tier": self.tier,
            "type": self.type,
            "slot": self.slot,
            "xp": self.xp,
        }
        if self.prefix or self.suffix:
            payload["specials"] = {"prefix": self.prefix, "suffix": self.suffix}
        if self.bag_slot is not None:
            payload["bagSlot"] = self.bag_slot
        return payload


@dataclass(frozen=True)
class Equipment:
    weapon: Optional[Item] = None
    chest: Optional[Item] = None
    head: Optional[Item] = None
    waist: Optional[Item] = None
    foot: Optional[Item] = None
    hand: Optional[Item] = None
    neck: Optional[Item] = None
    ring: Optional[Item] = None

    def get(self, slot: str) -> Optional[Item]:
        if slot not in EQUIPMENT_SLOTS:
            raise KeyError(slot)
        return getattr(self, slot)

    def items(self) -> Iterator[tuple[str, Optional[Item]]]:
        for slot in EQUIPMENT_SLOTS:
            yield slot, getattr(self, slot)

    def as_dict(self) -> Dict[str, dict]:
        return {slot: item.as_dict() for slot, item in self.items() if item is not None}


@dataclass(frozen=True)
class MarketItem:
    id: int
    name: str
    tier: int
    type: str
    slot: str
    price: int

    @property
    def label(self) -> str:
        return f"{self.name}:T{self.tier}:{self.price}g"

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "tier": self.tier,
            "type": self.type,
            "slot": self.slot,
            "price": self.price,
        }

