from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from deathmountain.application.mappers.row_mapper import (
    MARKET_ITEMS_KEY,
    as_int,
    to_adventurer,
    to_bag,
    to_beast,
    to_leaderboard,
    to_market,
)
from deathmountain.application.services.activity_feed import DEFAULT_FEED_SIZE, build_activity_feed
from deathmountain.application.services.combat_math import build_adventurer_outlook, build_combat_preview
from deathmountain.application.services.context_serializer import render_context, to_payload
from deathmountain.application.services.phase_detector import phase_for
from deathmountain.application.services.state_cache import GameStateCache
from deathmountain.domain.errors import GameNotFoundError
from deathmountain.domain.models.adventurer import Adventurer
from deathmountain.domain.models.beast import UNKNOWN_BEAST_NAME, Beast
from deathmountain.domain.models.game_state import GamePhase, GameState, LeaderboardEntry
from deathmountain.domain.models.item import ItemType
from deathmountain.domain.repositories import GameEventSource


DEFAULT_EVENT_WINDOW = 50
DEFAULT_SNAPSHOT_WINDOW = 10


def placeholder_beast(adventurer: Adventurer) -> Beast:
    return Beast(
        id=0,
        base_name=UNKNOWN_BEAST_NAME,
        health=adventurer.beast_health,
        level=1,
        tier=0,
        type=ItemType.NONE.value,
        armor_type=ItemType.NONE.value,
        attack_type=ItemType.NONE.value,
        placeholder=True,
    )


def latest_encounter_beast_id(events: Iterable[Mapping[str, Any]]) -> Optional[int]:
    """Beast id from the newest encounter among ``events``, newest-first by action count."""

    ordered = sorted(
        (row for row in events if row),
        key=lambda row: as_int(row.get("action_count")),
        reverse=True,
    )
    for row in ordered:
        beast_id = as_int(row.get("details.beast.id"))
        if beast_id > 0:
            return beast_id
    return None


class GameStateService:
    """Builds a fresh ``GameState`` from upstream rows on every call.

    A ``GameStateCache`` may be passed in; the service never creates one on
    its own, so caching stays a decision of whoever owns the service.
    """

    def __init__(
        self,
        source: GameEventSource,
        *,
        cache: GameStateCache | None = None,
        feed_size: int = DEFAULT_FEED_SIZE,
        event_window: int = DEFAULT_EVENT_WINDOW,
        snapshot_window: int = DEFAULT_SNAPSHOT_WINDOW,
    ) -> None:
        self.source = source
        self.cache = cache
        self.feed_size = max(0, int(feed_size))
        self.event_window = max(1, int(event_window))
        self.snapshot_window = max(0, int(snapshot_window))
        self._logger = logging.getLogger(__name__)

    def get_game_state(self, game_id: int, *, refresh: bool = False) -> GameState:
        if self.cache is None:
            return self.build_game_state(game_id)
        if refresh:
            self.cache.invalidate(game_id)
        return self.cache.get_or_load(game_id, self.build_game_state)

    def build_game_state(self, game_id: int) -> GameState:
        row = self.source.latest_event_row(game_id)
        if not row:
            raise GameNotFoundError(game_id)

        adventurer = to_adventurer(row, game_id)
        phase = phase_for(adventurer)
        events = self.source.recent_event_rows(game_id, self.event_window)

        beast: Optional[Beast] = None
        preview = None
        if phase == GamePhase.COMBAT:
            beast = self._resolve_beast(row, adventurer, events)
            if not beast.placeholder:
                preview = build_combat_preview(adventurer, beast)

        recent_events = []
        if self.feed_size > 0:
            packed = self.source.adventurer_packed_rows(game_id, self.snapshot_window) if self.snapshot_window else []
            bag_packed = self.source.bag_packed_rows(game_id, self.snapshot_window) if self.snapshot_window else []
            recent_events = build_activity_feed(events, packed, bag_packed, limit=self.feed_size)

        return GameState(
            game_id=int(game_id),
            action_count=adventurer.action_count,
            phase=phase,
            adventurer=adventurer,
            outlook=build_adventurer_outlook(adventurer),
            beast=beast,
            bag=to_bag(row, adventurer.item_specials_seed),
            market=to_market(row.get(MARKET_ITEMS_KEY), adventurer.stats.charisma),
            combat_preview=preview,
            recent_events=recent_events,
        )

    def _resolve_beast(self, row: Mapping[str, Any], adventurer: Adventurer, events: Sequence[Mapping[str, Any]]) -> Beast:
        beast = to_beast(row)
        if beast is not None:
            return beast

        beast_id = latest_encounter_beast_id(events)
        if beast_id is not None:
            try:
                fallback = to_beast(self.source.beast_row(beast_id), require_alive=False)
            except Exception:
                self._logger.warning(
                    "Beast lookup failed; using placeholder beast",
                    exc_info=True,
                    extra={"game_id": adventurer.id, "beast_id": beast_id},
                )
                fallback = None
            if fallback is not None:
                # The looked-up record belongs to another row; current health is ours.
                if adventurer.beast_health > 0:
                    fallback = replace(fallback, health=adventurer.beast_health)
                return fallback

        self._logger.warning(
            "In combat without a resolvable beast; using placeholder beast",
            extra={"game_id": adventurer.id, "beast_id": beast_id},
        )
        return placeholder_beast(adventurer)

    def get_context(self, game_id: int) -> str:
        return render_context(self.get_game_state(game_id))

    def get_payload(self, game_id: int, keys: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        return to_payload(self.get_game_state(game_id), keys)

    def get_leaderboard(self, limit: int = 10) -> List[LeaderboardEntry]:
        limit = max(1, int(limit))
        if self.cache is not None:
            cached = self.cache.get_leaderboard(limit)
            if cached is not None:
                return cached
        entries = to_leaderboard(self.source.leaderboard_rows(limit))
        if self.cache is not None:
            self.cache.put_leaderboard(limit, entries)
        return entries
