"""Flattened Torii rows to domain entities.

Rows carry dotted column names (``details.adventurer.health``). Each entity
declares the columns it needs in a ``RowSchema``; required columns are checked
once, here, and every missing one is reported in a single ``RowSchemaError``.
Downstream code receives typed entities and never reads raw rows again.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

from deathmountain.domain.errors import RowSchemaError
from deathmountain.domain.models.adventurer import Adventurer
from deathmountain.domain.models.beast import Beast
from deathmountain.domain.models.game_state import LeaderboardEntry
from deathmountain.domain.models.item import EQUIPMENT_SLOTS, Equipment, Item, MarketItem
from deathmountain.domain.models.stats import STAT_NAMES, stats_from_mapping
from deathmountain.domain.services.beast_catalog import build_beast
from deathmountain.domain.services.item_catalog import build_item, build_market_item
from deathmountain.domain.services.progression import level_from_xp


ADVENTURER_PREFIX = "details.adventurer"
BEAST_PREFIX = "details.beast"
BAG_PREFIX = "details.bag"
MARKET_ITEMS_KEY = "details.market_items.items"
BAG_SLOT_COUNT = 15


@dataclass(frozen=True)
class RowSchema:
    entity: str
    required: tuple[str, ...]
    optional: tuple[str, ...] = ()

    def validate(self, row: Mapping[str, Any] | None) -> None:
        values = row or {}
        missing = tuple(key for key in self.required if values.get(key) is None)
        if missing:
            raise RowSchemaError(self.entity, missing)


ADVENTURER_SCHEMA = RowSchema(
    entity="adventurer",
    required=(f"{ADVENTURER_PREFIX}.health", f"{ADVENTURER_PREFIX}.xp"),
    optional=(
        "action_count",
        f"{ADVENTURER_PREFIX}.gold",
        f"{ADVENTURER_PREFIX}.beast_health",
        f"{ADVENTURER_PREFIX}.stat_upgrades_available",
        f"{ADVENTURER_PREFIX}.item_specials_seed",
        *(f"{ADVENTURER_PREFIX}.stats.{name}" for name in STAT_NAMES),
        *(f"{ADVENTURER_PREFIX}.equipment.{slot}.{field}" for slot in EQUIPMENT_SLOTS for field in ("id", "xp")),
    ),
)

BEAST_SCHEMA = RowSchema(
    entity="beast",
    required=(f"{BEAST_PREFIX}.id",),
    optional=(
        f"{BEAST_PREFIX}.health",
        f"{BEAST_PREFIX}.level",
        f"{BEAST_PREFIX}.seed",
        f"{BEAST_PREFIX}.is_collectable",
        f"{BEAST_PREFIX}.specials.special2",
        f"{BEAST_PREFIX}.specials.special3",
        f"{ADVENTURER_PREFIX}.beast_health",
    ),
)

LEADERBOARD_SCHEMA = RowSchema(entity="leaderboard", required=("adventurer_id",), optional=("xp",))


def as_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    if isinstance(value, (bool, int)):
        return int(value)
    text = str(value).strip().lower()
    if not text:
        return default
    try:
        return int(text, 16) if text.startswith("0x") else int(float(text))
    except (ValueError, OverflowError):
        return default


def as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


def parse_game_id(value: Any) -> int:
    """Adventurer ids come back as zero-padded hex strings or plain integers."""

    return as_int(value, default=0)


def game_id_hex(game_id: int) -> str:
    return "0x" + format(int(game_id), "016x")


def parse_maybe_json(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


def _stats_from_row(row: Mapping[str, Any]):
    return stats_from_mapping({name: row.get(f"{ADVENTURER_PREFIX}.stats.{name}") for name in STAT_NAMES})


def _item_from_row(row: Mapping[str, Any], slot: str, specials_seed: int) -> Optional[Item]:
    item_id = as_int(row.get(f"{ADVENTURER_PREFIX}.equipment.{slot}.id"))
    if item_id <= 0:
        return None
    xp = as_int(row.get(f"{ADVENTURER_PREFIX}.equipment.{slot}.xp"))
    return build_item(item_id, xp, specials_seed=specials_seed)


def to_adventurer(row: Mapping[str, Any], game_id: int) -> Adventurer:
    ADVENTURER_SCHEMA.validate(row)
    specials_seed = as_int(row.get(f"{ADVENTURER_PREFIX}.item_specials_seed"))
    xp = max(0, as_int(row.get(f"{ADVENTURER_PREFIX}.xp")))
    equipment = Equipment(**{slot: _item_from_row(row, slot, specials_seed) for slot in EQUIPMENT_SLOTS})
    return Adventurer(
        id=int(game_id),
        health=max(0, as_int(row.get(f"{ADVENTURER_PREFIX}.health"))),
        xp=xp,
        level=level_from_xp(xp),
        gold=max(0, as_int(row.get(f"{ADVENTURER_PREFIX}.gold"))),
        stats=_stats_from_row(row),
        equipment=equipment,
        stat_upgrades_available=max(0, as_int(row.get(f"{ADVENTURER_PREFIX}.stat_upgrades_available"))),
        item_specials_seed=specials_seed,
        beast_health=max(0, as_int(row.get(f"{ADVENTURER_PREFIX}.beast_health"))),
        action_count=max(0, as_int(row.get("action_count"))),
    )


def to_beast(row: Mapping[str, Any] | None, *, require_alive: bool = True) -> Optional[Beast]:
    """Beast on the row, or None when the row carries no live beast.

    The adventurer's ``beast_health`` column is the beast's current health and
    wins over the spawn health on the beast record when it is positive.
    """

    if not row:
        return None
    spawn_health = as_int(row.get(f"{BEAST_PREFIX}.health"))
    if require_alive and spawn_health <= 0:
        return None
    beast_id = as_int(row.get(f"{BEAST_PREFIX}.id"))
    if beast_id <= 0:
        return None
    BEAST_SCHEMA.validate(row)
    current_health = as_int(row.get(f"{ADVENTURER_PREFIX}.beast_health"))
    return build_beast(
        beast_id,
        health=current_health if current_health > 0 else spawn_health,
        level=as_int(row.get(f"{BEAST_PREFIX}.level"), default=1),
        seed=row.get(f"{BEAST_PREFIX}.seed"),
        special2=as_int(row.get(f"{BEAST_PREFIX}.specials.special2")),
        special3=as_int(row.get(f"{BEAST_PREFIX}.specials.special3")),
        is_collectable=as_bool(row.get(f"{BEAST_PREFIX}.is_collectable")),
    )


def to_bag(row: Mapping[str, Any], specials_seed: int = 0) -> List[Item]:
    items: List[Item] = []
    for bag_slot in range(1, BAG_SLOT_COUNT + 1):
        item_id = as_int(row.get(f"{BAG_PREFIX}.item_{bag_slot}.id"))
        if item_id <= 0:
            continue
        xp = as_int(row.get(f"{BAG_PREFIX}.item_{bag_slot}.xp"))
        items.append(build_item(item_id, xp, specials_seed=specials_seed, bag_slot=bag_slot))
    return items


def _market_item_id(raw: Any) -> Optional[int]:
    if isinstance(raw, Mapping):
        raw = raw.get("item_id", raw.get("id"))
    if raw is None or isinstance(raw, bool):
        return None
    item_id = as_int(raw, default=-1)
    return item_id if item_id > 0 else None


def to_market(raw_items: Any, charisma: int) -> List[MarketItem]:
    """Market payload is a JSON string or a list. Anything malformed yields an empty market."""

    items = parse_maybe_json(raw_items)
    if not isinstance(items, list):
        return []
    market: List[MarketItem] = []
    for raw in items:
        item_id = _market_item_id(raw)
        if item_id is None:
            continue
        market.append(build_market_item(item_id, charisma))
    return market


def to_leaderboard(rows: Sequence[Mapping[str, Any]]) -> List[LeaderboardEntry]:
    entries: List[LeaderboardEntry] = []
    for index, row in enumerate(rows):
        LEADERBOARD_SCHEMA.validate(row)
        xp = max(0, as_int(row.get("xp")))
        entries.append(
            LeaderboardEntry(
                rank=index + 1,
                adventurer_id=parse_game_id(row.get("adventurer_id")),
                xp=xp,
                level=level_from_xp(xp),
            )
        )
    return entries
