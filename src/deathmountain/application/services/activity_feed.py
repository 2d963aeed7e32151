"""Merge game-event rows and packed snapshots into one ordered, annotated feed."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from deathmountain.application.mappers.row_mapper import as_bool, as_int, parse_maybe_json
from deathmountain.domain.models.activity import ActivityFeedEntry, ChainEventRef
from deathmountain.domain.models.stats import STAT_ABBREVIATIONS, STAT_NAMES
from deathmountain.domain.services.beast_catalog import beast_name
from deathmountain.domain.services.obstacle_catalog import obstacle_name, obstacle_tier, obstacle_type


DEFAULT_FEED_SIZE = 10
DEFAULT_KIND_WEIGHT = 999

KIND_WEIGHTS: Dict[str, int] = {
    "BeastEncounter": 10,
    "Ambush": 20,
    "Attack": 30,
    "Flee": 35,
    "BeastAttack": 40,
    "Obstacle": 45,
    "Discovery": 50,
    "Purchase": 60,
    "Equip": 70,
    "Drop": 80,
    "LevelUp": 90,
    "StatUpgrade": 95,
    "BeastDefeated": 100,
    "FledBeast": 105,
    "MarketUpdated": 110,
    "AdventurerPacked": 120,
    "BagPacked": 130,
    "Unknown": 200,
}

Summary = Dict[str, Any]


class _EventView:
    def __init__(self, row: Mapping[str, Any]) -> None:
        self._row = row

    def get(self, key: str) -> Any:
        return self._row.get(key)

    def has(self, *keys: str) -> bool:
        return any(self._row.get(key) is not None for key in keys)


def _beast_defeated(event: _EventView) -> Optional[Summary]:
    if not event.has("details.defeated_beast.beast_id"):
        return None
    beast_id = as_int(event.get("details.defeated_beast.beast_id"))
    return {
        "beastId": beast_id,
        "beastName": beast_name(beast_id),
        "gold": as_int(event.get("details.defeated_beast.gold_reward")),
        "xp": as_int(event.get("details.defeated_beast.xp_reward")),
    }


def _fled_beast(event: _EventView) -> Optional[Summary]:
    if not event.has("details.fled_beast.beast_id"):
        return None
    beast_id = as_int(event.get("details.fled_beast.beast_id"))
    return {
        "beastId": beast_id,
        "beastName": beast_name(beast_id),
        "xp": as_int(event.get("details.fled_beast.xp_reward")),
    }


def _beast_encounter(event: _EventView) -> Optional[Summary]:
    if not event.has("details.beast.id", "details.beast.level"):
        return None
    beast_id = as_int(event.get("details.beast.id"))
    return {
        "id": beast_id,
        "name": beast_name(beast_id) if beast_id > 0 else None,
        "level": as_int(event.get("details.beast.level")),
        "health": as_int(event.get("details.beast.health")),
        "specials": {
            "special2": event.get("details.beast.specials.special2"),
            "special3": event.get("details.beast.specials.special3"),
        },
    }


def _obstacle(event: _EventView) -> Optional[Summary]:
    if not event.has("details.obstacle.obstacle_id"):
        return None
    obstacle_id = as_int(event.get("details.obstacle.obstacle_id"))
    return {
        "obstacleId": obstacle_id,
        "obstacleName": obstacle_name(obstacle_id),
        "obstacleType": obstacle_type(obstacle_id),
        "obstacleTier": obstacle_tier(obstacle_id),
        "dodged": as_bool(event.get("details.obstacle.dodged")),
        "damage": as_int(event.get("details.obstacle.damage")),
        "location": event.get("details.obstacle.location"),
        "critical": as_bool(event.get("details.obstacle.critical_hit")),
    }


def _discovery(event: _EventView) -> Optional[Summary]:
    if not event.has(
        "details.discovery.discovery_type",
        "details.discovery.xp_reward",
        "details.discovery.discovery_type.Gold",
        "details.discovery.discovery_type.Health",
        "details.discovery.discovery_type.Loot",
    ):
        return None
    summary: Summary = {}
    if event.has("details.discovery.discovery_type.Gold"):
        summary = {"kind": "Gold", "amount": as_int(event.get("details.discovery.discovery_type.Gold"))}
    elif event.has("details.discovery.discovery_type.Health"):
        summary = {"kind": "Health", "amount": as_int(event.get("details.discovery.discovery_type.Health"))}
    elif event.has("details.discovery.discovery_type.Loot"):
        summary = {"kind": "Loot", "itemId": as_int(event.get("details.discovery.discovery_type.Loot"))}
    summary["xp"] = as_int(event.get("details.discovery.xp_reward"))
    return summary


def _stat_upgrade(event: _EventView) -> Optional[Summary]:
    keys = [f"details.stat_upgrade.stats.{name}" for name in STAT_NAMES]
    if not event.has(*keys):
        return None
    return {name: as_int(event.get(key)) for name, key in zip(STAT_NAMES, keys) if event.has(key)}


def _purchase(event: _EventView) -> Optional[Summary]:
    if not event.has("details.buy_items.potions", "details.buy_items.items_purchased"):
        return None
    return {
        "potions": as_int(event.get("details.buy_items.potions")),
        "items": parse_maybe_json(event.get("details.buy_items.items_purchased")),
    }


def _items_field(key: str) -> Callable[[_EventView], Optional[Summary]]:
    def detect(event: _EventView) -> Optional[Summary]:
        if not event.has(key):
            return None
        return {"items": parse_maybe_json(event.get(key))}

    return detect


def _level_up(event: _EventView) -> Optional[Summary]:
    if not event.has("details.level_up.level"):
        return None
    return {"level": as_int(event.get("details.level_up.level"))}


def _hit(section: str, *, match_location: bool = False) -> Callable[[_EventView], Optional[Summary]]:
    damage_key = f"details.{section}.damage"
    location_key = f"details.{section}.location"

    def detect(event: _EventView) -> Optional[Summary]:
        keys = (damage_key, location_key) if match_location else (damage_key,)
        if not event.has(*keys):
            return None
        return {
            "damage": as_int(event.get(damage_key)),
            "location": event.get(location_key),
            "critical": as_bool(event.get(f"details.{section}.critical_hit")),
        }

    return detect


def _flee(event: _EventView) -> Optional[Summary]:
    if not event.has("details.flee"):
        return None
    return {"success": as_bool(event.get("details.flee"))}


def _market_updated(event: _EventView) -> Optional[Summary]:
    if not event.has("details.market_items.items"):
        return None
    items = parse_maybe_json(event.get("details.market_items.items"))
    return {"itemsCount": len(items) if isinstance(items, list) else 0}


# One row can describe several actions; each detector that matches yields an entry.
_DETECTORS: Sequence[tuple[str, Callable[[_EventView], Optional[Summary]]]] = (
    ("BeastDefeated", _beast_defeated),
    ("FledBeast", _fled_beast),
    ("BeastEncounter", _beast_encounter),
    ("Obstacle", _obstacle),
    ("Discovery", _discovery),
    ("StatUpgrade", _stat_upgrade),
    ("Purchase", _purchase),
    ("Equip", _items_field("details.equip.items")),
    ("Drop", _items_field("details.drop.items")),
    ("LevelUp", _level_up),
    ("Attack", _hit("attack")),
    ("BeastAttack", _hit("beast_attack")),
    ("Ambush", _hit("ambush", match_location=True)),
    ("Flee", _flee),
    ("MarketUpdated", _market_updated),
)


def _critical(data: Summary) -> str:
    return " (critical)" if data.get("critical") else ""


def _purchase_message(data: Summary) -> str:
    items = data.get("items")
    if isinstance(items, list) and items:
        return f"Purchased {len(items)} item{'' if len(items) == 1 else 's'}"
    if data.get("potions"):
        return f"Purchased {data['potions']} potions"
    return "Purchased items"


def _obstacle_message(data: Summary) -> str:
    verb = "Dodged" if data.get("dodged") else "Hit by"
    damage = f" for {data['damage']}" if data.get("damage") else ""
    return f"{verb} {data.get('obstacleName') or 'obstacle'}{damage}{_critical(data)}"


def _discovery_message(data: Summary) -> str:
    kind = data.get("kind")
    if kind == "Gold":
        return f"Discovered gold: +{data.get('amount') or 0}"
    if kind == "Health":
        return f"Recovered health: +{data.get('amount') or 0}"
    if kind == "Loot":
        return "Discovered loot"
    return "Discovery"


def _stat_upgrade_message(data: Summary) -> str:
    parts = [
        f"{STAT_ABBREVIATIONS.get(name, name).upper()} +{value}"
        for name, value in data.items()
        if isinstance(value, int) and value > 0
    ]
    return "Upgraded stats: " + ", ".join(parts) if parts else "Upgraded stats"


_FORMATTERS: Dict[str, Callable[[Summary], str]] = {
    "BeastDefeated": lambda d: f"Defeated {d.get('beastName')}: +{d.get('gold') or 0} gold, +{d.get('xp') or 0} XP",
    "FledBeast": lambda d: f"Fled from {d.get('beastName')}: +{d.get('xp') or 0} XP",
    "BeastEncounter": lambda d: (
        f"Encountered {d.get('name') or 'Beast ' + str(d.get('id'))}"
        + (f" (Lv {d['level']})" if d.get("level") else "")
    ),
    "Obstacle": _obstacle_message,
    "Discovery": _discovery_message,
    "StatUpgrade": _stat_upgrade_message,
    "Purchase": _purchase_message,
    "Equip": lambda d: "Equipped items",
    "Drop": lambda d: "Dropped items",
    "LevelUp": lambda d: f"Leveled up to {d.get('level')}",
    "Attack": lambda d: f"You hit for {d.get('damage')}{_critical(d)}",
    "BeastAttack": lambda d: f"Beast hit for {d.get('damage')}{_critical(d)}",
    "Ambush": lambda d: f"Ambushed: -{d.get('damage') or 0} health{_critical(d)}",
    "Flee": lambda d: "Fled successfully" if d.get("success") else "Failed to flee",
    "MarketUpdated": lambda d: f"Market updated ({d.get('itemsCount') or 0} items)",
    "AdventurerPacked": lambda d: "Adventurer snapshot",
    "BagPacked": lambda d: "Bag snapshot",
}


def format_message(kind: str, data: Any) -> str:
    formatter = _FORMATTERS.get(kind)
    if formatter is None:
        return kind or "Event"
    return formatter(data if isinstance(data, dict) else {})


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        # numeric values are epoch milliseconds
        try:
            parsed = datetime.fromtimestamp(float(value) / 1000, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return None
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _raw_id(row: Mapping[str, Any]) -> Any:
    raw = row.get("internal_event_id")
    return raw if raw is not None else row.get("event_id")


def entries_from_event_row(row: Mapping[str, Any]) -> List[ActivityFeedEntry]:
    event = _EventView(row)
    chain = ChainEventRef.parse(_raw_id(row))
    timestamp = parse_timestamp(row.get("internal_executed_at"))
    action_count = row.get("action_count")
    action_count = as_int(action_count) if action_count is not None else None

    entries: List[ActivityFeedEntry] = []
    for kind, detect in _DETECTORS:
        summary = detect(event)
        if summary is None:
            continue
        entries.append(
            ActivityFeedEntry(
                kind=kind,
                timestamp=timestamp,
                summary=summary,
                message=format_message(kind, summary),
                action_count=action_count,
                chain=chain,
            )
        )
    if not entries:
        entries.append(
            ActivityFeedEntry(
                kind="Unknown",
                timestamp=timestamp,
                message=format_message("Unknown", {}),
                action_count=action_count,
                chain=chain,
            )
        )
    return entries


def entry_from_snapshot(kind: str, row: Mapping[str, Any]) -> ActivityFeedEntry:
    data = parse_maybe_json(row.get("packed"))
    return ActivityFeedEntry(
        kind=kind,
        timestamp=parse_timestamp(row.get("internal_executed_at")),
        summary=data if isinstance(data, dict) else {"packed": data},
        message=format_message(kind, data),
        chain=ChainEventRef.parse(row.get("internal_event_id")),
    )


def feed_sort_key(entry: ActivityFeedEntry) -> tuple[float, float, int]:
    timestamp = entry.timestamp.timestamp() if entry.timestamp is not None else 0.0
    event_index = entry.chain.event_index
    return (
        -timestamp,
        float(event_index) if event_index is not None else math.inf,
        KIND_WEIGHTS.get(entry.kind, DEFAULT_KIND_WEIGHT),
    )


def build_activity_feed(
    events: Iterable[Mapping[str, Any]],
    adventurer_packed: Iterable[Mapping[str, Any]] = (),
    bag_packed: Iterable[Mapping[str, Any]] = (),
    *,
    limit: int = DEFAULT_FEED_SIZE,
) -> List[ActivityFeedEntry]:
    feed: List[ActivityFeedEntry] = []
    for row in events:
        if row:
            feed.extend(entries_from_event_row(row))
    feed.extend(entry_from_snapshot("AdventurerPacked", row) for row in adventurer_packed if row)
    feed.extend(entry_from_snapshot("BagPacked", row) for row in bag_packed if row)
    feed.sort(key=feed_sort_key)
    return feed[: max(0, int(limit))]
