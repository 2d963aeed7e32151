from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


Row = Dict[str, Any]


class GameEventSource(ABC):
    """Read-only access to indexed game rows, keyed by flattened dotted column names."""

    @abstractmethod
    def latest_event_row(self, game_id: int) -> Optional[Row]:
        raise NotImplementedError

    @abstractmethod
    def recent_event_rows(self, game_id: int, limit: int = 50) -> List[Row]:
        raise NotImplementedError

    @abstractmethod
    def adventurer_packed_rows(self, game_id: int, limit: int = 10) -> List[Row]:
        raise NotImplementedError

    @abstractmethod
    def bag_packed_rows(self, game_id: int, limit: int = 10) -> List[Row]:
        raise NotImplementedError

    @abstractmethod
    def beast_row(self, beast_id: int) -> Optional[Row]:
        raise NotImplementedError

    @abstractmethod
    def leaderboard_rows(self, limit: int = 10) -> List[Row]:
        raise NotImplementedError
