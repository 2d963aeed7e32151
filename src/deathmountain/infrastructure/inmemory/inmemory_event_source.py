from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from deathmountain.application.mappers.row_mapper import as_int, parse_game_id
from deathmountain.domain.repositories import GameEventSource


Row = Dict[str, Any]


class InMemoryGameEventSource(GameEventSource):
    """Rows held in memory, queried the way the indexer would answer.

    Every row is keyed by ``adventurer_id`` (int or hex string); event rows are
    returned newest action first, snapshot rows newest execution time first.
    """

    def __init__(
        self,
        events: List[Row] | None = None,
        adventurer_packed: List[Row] | None = None,
        bag_packed: List[Row] | None = None,
    ) -> None:
        self._events: List[Row] = list(events or [])
        self._adventurer_packed: List[Row] = list(adventurer_packed or [])
        self._bag_packed: List[Row] = list(bag_packed or [])

    @classmethod
    def from_json_file(cls, path: str | Path) -> "InMemoryGameEventSource":
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"Fixture {path} must be a JSON object")
        return cls(
            events=payload.get("events") or [],
            adventurer_packed=payload.get("adventurer_packed") or [],
            bag_packed=payload.get("bag_packed") or [],
        )

    def add_event(self, row: Row) -> None:
        self._events.append(dict(row))

    def _for_game(self, rows: List[Row], game_id: int) -> List[Row]:
        return [row for row in rows if parse_game_id(row.get("adventurer_id")) == int(game_id)]

    def latest_event_row(self, game_id: int) -> Optional[Row]:
        rows = self.recent_event_rows(game_id, limit=1)
        return rows[0] if rows else None

    def recent_event_rows(self, game_id: int, limit: int = 50) -> List[Row]:
        rows = sorted(
            self._for_game(self._events, game_id),
            key=lambda row: as_int(row.get("action_count")),
            reverse=True,
        )
        return [dict(row) for row in rows[: max(1, int(limit))]]

    def _snapshots(self, rows: List[Row], game_id: int, limit: int) -> List[Row]:
        ordered = sorted(
            self._for_game(rows, game_id),
            key=lambda row: str(row.get("internal_executed_at") or ""),
            reverse=True,
        )
        return [
            {key: row.get(key) for key in ("internal_event_id", "internal_executed_at", "packed")}
            for row in ordered[: max(1, int(limit))]
        ]

    def adventurer_packed_rows(self, game_id: int, limit: int = 10) -> List[Row]:
        return self._snapshots(self._adventurer_packed, game_id, limit)

    def bag_packed_rows(self, game_id: int, limit: int = 10) -> List[Row]:
        return self._snapshots(self._bag_packed, game_id, limit)

    def beast_row(self, beast_id: int) -> Optional[Row]:
        matches = [row for row in self._events if as_int(row.get("details.beast.id")) == int(beast_id)]
        if not matches:
            return None
        latest = max(matches, key=lambda row: as_int(row.get("action_count")))
        return {key: value for key, value in latest.items() if key == "action_count" or key.startswith("details.beast.")}

    def leaderboard_rows(self, limit: int = 10) -> List[Row]:
        by_adventurer: Dict[int, Row] = {}
        for row in self._events:
            adventurer_id = parse_game_id(row.get("adventurer_id"))
            xp = as_int(row.get("details.adventurer.xp"))
            health = as_int(row.get("details.adventurer.health"))
            current = by_adventurer.get(adventurer_id)
            if current is None:
                by_adventurer[adventurer_id] = {"adventurer_id": row.get("adventurer_id"), "xp": xp, "health": health}
                continue
            current["xp"] = max(current["xp"], xp)
            current["health"] = min(current["health"], health)
        dead = [row for row in by_adventurer.values() if row["health"] == 0]
        dead.sort(key=lambda row: row["xp"], reverse=True)
        return dead[: max(1, int(limit))]
