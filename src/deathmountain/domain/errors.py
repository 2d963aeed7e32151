from __future__ import annotations

from typing import Sequence


class GameNotFoundError(LookupError):
    def __init__(self, game_id: int) -> None:
        super().__init__(f"Game {game_id} not found")
        self.game_id = int(game_id)


class RowSchemaError(ValueError):
    """Raised once per row when required fields are absent.

    The message lists every missing key so a broken indexer projection is
    diagnosed in one pass instead of one field at a time.
    """

    def __init__(self, entity: str, missing: Sequence[str]) -> None:
        self.entity = entity
        self.missing = tuple(missing)
        joined = ", ".join(self.missing)
        super().__init__(f"{entity} row is missing fields: {joined}")


class UpstreamQueryError(RuntimeError):
    pass
