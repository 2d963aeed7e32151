from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from deathmountain.domain.models.game_state import GameState, LeaderboardEntry


DEFAULT_STATE_TTL_SECONDS = 5.0

T = TypeVar("T")


@dataclass
class _Entry(Generic[T]):
    value: T
    stored_at: float


class GameStateCache:
    """Caller-owned read-through cache for derived game states.

    An entry is dropped when its TTL elapses or on explicit
    ``invalidate``/``clear``. A fresh entry is never replaced by a state with
    a lower action count. Nothing is shared across instances.
    """

    def __init__(self, *, ttl_seconds: float = DEFAULT_STATE_TTL_SECONDS, clock: Callable[[], float] | None = None) -> None:
        self.ttl_seconds = max(0.0, float(ttl_seconds))
        self._clock = clock or time.monotonic
        self._states: Dict[int, _Entry[GameState]] = {}
        self._leaderboards: Dict[int, _Entry[List[LeaderboardEntry]]] = {}

    def _fresh(self, entry: _Entry) -> bool:
        return self._clock() - entry.stored_at < self.ttl_seconds

    def get(self, game_id: int) -> Optional[GameState]:
        entry = self._states.get(int(game_id))
        if entry is None:
            return None
        if not self._fresh(entry):
            del self._states[int(game_id)]
            return None
        return entry.value

    def put(self, state: GameState) -> None:
        current = self._states.get(int(state.game_id))
        if current is not None and self._fresh(current) and current.value.action_count > state.action_count:
            return
        self._states[int(state.game_id)] = _Entry(value=state, stored_at=self._clock())

    def get_or_load(self, game_id: int, loader: Callable[[int], GameState]) -> GameState:
        cached = self.get(game_id)
        if cached is not None:
            return cached
        state = loader(int(game_id))
        self.put(state)
        return state

    def get_leaderboard(self, limit: int) -> Optional[List[LeaderboardEntry]]:
        entry = self._leaderboards.get(int(limit))
        if entry is None:
            return None
        if not self._fresh(entry):
            del self._leaderboards[int(limit)]
            return None
        return list(entry.value)

    def put_leaderboard(self, limit: int, entries: List[LeaderboardEntry]) -> None:
        self._leaderboards[int(limit)] = _Entry(value=list(entries), stored_at=self._clock())

    def invalidate(self, game_id: int) -> None:
        self._states.pop(int(game_id), None)

    def clear(self) -> None:
        self._states.clear()
        self._leaderboards.clear()

    def __len__(self) -> int:
        return len(self._states)
