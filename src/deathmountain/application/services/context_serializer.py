"""Render a derived ``GameState`` as compact markup or as a structured payload.

The markup form is a single line with no whitespace between tags; one of four
fixed shapes is chosen by phase. Nothing here recomputes game values, it only
formats what the state already carries.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Optional
from xml.sax.saxutils import escape

from deathmountain.application.contract import CONTEXT_KEYS, CONTRACT_VERSION
from deathmountain.domain.models.adventurer import Adventurer, AdventurerOutlook
from deathmountain.domain.models.beast import UNKNOWN_BEAST_NAME, Beast
from deathmountain.domain.models.game_state import GamePhase, GameState
from deathmountain.domain.models.item import Item
from deathmountain.domain.models.stats import STAT_ABBREVIATIONS


_ATTR_ENTITIES = {'"': "&quot;"}


def _text(value: Any) -> str:
    return escape(str(value))


def _attr(value: Any) -> str:
    return escape(str(value), _ATTR_ENTITIES)


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _tag(tag_name: str, **attrs: Any) -> str:
    rendered = "".join(f' {key}="{_attr(value)}"' for key, value in attrs.items())
    return f"<{tag_name}{rendered}/>"


def _element(name: str, value: Any) -> str:
    return f"<{name}>{_text(value)}</{name}>"


def _equipment_label(item: Optional[Item]) -> str:
    return item.label if item is not None else "None"


def _adventurer_block(adventurer: Adventurer) -> str:
    stats = adventurer.stats
    stat_attrs = {abbr: getattr(stats, name) for name, abbr in STAT_ABBREVIATIONS.items()}
    equipment_attrs = {slot: _equipment_label(item) for slot, item in adventurer.equipment.items()}
    return (
        _tag(
            "adventurer",
            health=adventurer.health,
            level=adventurer.level,
            gold=adventurer.gold,
            xp=adventurer.xp,
        )
        + _tag("stats", **stat_attrs)
        + _tag("equipment", **equipment_attrs)
    )


def _death_context(state: GameState) -> str:
    adventurer = state.adventurer
    return (
        "<context>"
        + _element("phase", GamePhase.DEATH.value)
        + _element("level", adventurer.level)
        + _element("xp", adventurer.xp)
        + _element("gold", adventurer.gold)
        + "</context>"
    )


def _combat_context(state: GameState) -> str:
    beast = state.beast
    preview = state.combat_preview
    if beast is not None:
        beast_tag = _tag("beast", name=beast.name, health=beast.health, level=beast.level, tier=beast.tier)
    else:
        beast_tag = _tag("beast", name=UNKNOWN_BEAST_NAME, health=0, level=1, tier=0)

    if preview is not None:
        damage_tag = _tag(
            "damage",
            player=preview.player_damage.base,
            critical=preview.player_damage.critical,
            beast=preview.beast_damage.max,
        )
        collectable = preview.collectable
        collectable_tag = _tag(
            "collectable",
            shiny=_bool(collectable.shiny),
            animated=_bool(collectable.animated),
            eligible=_bool(collectable.eligible),
        )
        flee_tag = _tag("flee", chance=preview.flee_chance)
        estimate = preview.outcome.summary
    else:
        damage_tag = _tag("damage", player=0, critical=0, beast=0)
        collectable_tag = _tag("collectable", shiny="false", animated="false", eligible="false")
        flee_tag = _tag("flee", chance=0)
        estimate = "Unknown"

    return (
        "<context>"
        + _element("phase", GamePhase.COMBAT.value)
        + _adventurer_block(state.adventurer)
        + beast_tag
        + damage_tag
        + collectable_tag
        + flee_tag
        + _element("estimate", estimate)
        + "</context>"
    )


def _level_up_context(state: GameState) -> str:
    adventurer = state.adventurer
    stats = "".join(
        _element(abbr, getattr(adventurer.stats, name)) for name, abbr in STAT_ABBREVIATIONS.items()
    )
    return (
        "<context>"
        + _element("phase", GamePhase.LEVEL_UP.value)
        + _element("level", adventurer.level)
        + _element("points", adventurer.stat_upgrades_available)
        + f"<stats>{stats}</stats>"
        + "</context>"
    )


def _exploration_context(state: GameState) -> str:
    adventurer = state.adventurer
    affordable = [item for item in state.market if item.price <= adventurer.gold]
    market = "".join(_element("item", item.label) for item in affordable) or "<!-- No affordable items -->"
    bag = "".join(_element("item", item.label) for item in state.bag) or "<!-- No bag items -->"
    return (
        "<context>"
        + _element("phase", GamePhase.EXPLORATION.value)
        + _adventurer_block(adventurer)
        + f"<market>{market}</market>"
        + f"<bag>{bag}</bag>"
        + "</context>"
    )


_RENDERERS = {
    GamePhase.DEATH: _death_context,
    GamePhase.COMBAT: _combat_context,
    GamePhase.LEVEL_UP: _level_up_context,
    GamePhase.EXPLORATION: _exploration_context,
}


def render_context(state: GameState) -> str:
    return _RENDERERS.get(GamePhase(state.phase), _exploration_context)(state)


def render_error(message: str, game_id: Any) -> str:
    return "<error>" + _element("message", message) + _element("gameId", game_id) + "</error>"


def estimate_tokens(content: str) -> int:
    return math.ceil(len(content) / 4)


def _outlook_payload(outlook: Optional[AdventurerOutlook]) -> Dict[str, Any]:
    if outlook is None:
        return {}
    return {
        "maxHealth": outlook.max_health,
        "nextLevelXp": outlook.next_level_xp,
        "levelProgress": outlook.level_progress,
        "potionPrice": outlook.potion_price,
        "discoveryChance": outlook.discovery_chance,
        "dodgeChance": dict(outlook.dodge_chances),
    }


def _adventurer_payload(state: GameState) -> Dict[str, Any]:
    adventurer = state.adventurer
    return {
        "id": adventurer.id,
        "health": adventurer.health,
        "xp": adventurer.xp,
        "level": adventurer.level,
        "gold": adventurer.gold,
        "beastHealth": adventurer.beast_health,
        "statUpgradesAvailable": adventurer.stat_upgrades_available,
        **_outlook_payload(state.outlook),
        "stats": adventurer.stats.as_dict(),
        "equipment": adventurer.equipment.as_dict(),
        "bag": [item.as_dict() for item in state.bag],
    }


def _beast_payload(beast: Optional[Beast]) -> Optional[Dict[str, Any]]:
    if beast is None:
        return None
    payload: Dict[str, Any] = {
        "id": beast.id,
        "name": beast.name,
        "health": beast.health,
        "level": beast.level,
        "tier": beast.tier,
        "type": beast.type,
        "armorType": beast.armor_type,
        "attackType": beast.attack_type,
        "seed": hex(beast.seed),
        "isCollectable": beast.is_collectable,
        "placeholder": beast.placeholder,
    }
    if beast.prefix or beast.suffix:
        payload["specials"] = {"prefix": beast.prefix, "suffix": beast.suffix}
    if beast.rewards is not None:
        payload["rewards"] = {"gold": beast.rewards.gold, "xp": beast.rewards.xp}
    return payload


def to_payload(state: GameState, keys: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """Structured view keyed by ``CONTEXT_KEYS``; ``keys`` restricts the output to a subset."""

    selected: List[str] = list(CONTEXT_KEYS) if keys is None else list(keys)
    unknown = [key for key in selected if key not in CONTEXT_KEYS]
    if unknown:
        raise ValueError(f"Unknown context keys: {', '.join(unknown)}")

    builders = {
        "game": lambda: {
            "id": state.game_id,
            "phase": GamePhase(state.phase).value,
            "actionCount": state.action_count,
            "contractVersion": CONTRACT_VERSION,
        },
        "adventurer": lambda: _adventurer_payload(state),
        "currentBeast": lambda: _beast_payload(state.beast),
        "damagePreview": lambda: state.combat_preview.as_dict() if state.combat_preview is not None else None,
        "market": lambda: [item.as_dict() for item in state.market],
        "recentEvents": lambda: [entry.as_dict() for entry in state.recent_events],
    }
    return {key: builders[key]() for key in CONTEXT_KEYS if key in selected}
