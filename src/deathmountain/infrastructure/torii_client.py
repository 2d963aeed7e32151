"""Torii SQL endpoint as a ``GameEventSource``.

Torii exposes ``GET {torii}/sql?query=...`` and answers with a JSON array of
flat rows. Queries are written as SQLAlchemy ``text()`` with bound parameters
and rendered to literal SQLite SQL, since the endpoint takes a finished string.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy import bindparam, text
from sqlalchemy.dialects import sqlite

from deathmountain.application.mappers.row_mapper import game_id_hex
from deathmountain.domain.repositories import GameEventSource
from deathmountain.infrastructure.resilient_http import CircuitBreaker, RetryPolicy, fetch_rows


DEFAULT_TORII_URL = "https://api.cartridge.gg/x/boat-ls2-mainnet-v2/torii"
DEFAULT_NAMESPACE = "ls_0_0_9"

_NAMESPACE_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")

_BEAST_COLUMNS = (
    "action_count",
    "details.beast.id",
    "details.beast.seed",
    "details.beast.health",
    "details.beast.level",
    "details.beast.is_collectable",
    "details.beast.specials.special2",
    "details.beast.specials.special3",
)


class ToriiClient(GameEventSource):
    def __init__(
        self,
        base_url: str = DEFAULT_TORII_URL,
        namespace: str = DEFAULT_NAMESPACE,
        timeout: float = 10.0,
        retries: int = 2,
        backoff_seconds: float = 0.2,
        http_client: httpx.Client | None = None,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        if not _NAMESPACE_PATTERN.match(str(namespace or "")):
            raise ValueError(f"Invalid Torii namespace '{namespace}'")
        self.namespace = namespace
        self.retry_policy = RetryPolicy(retries=retries, backoff_seconds=backoff_seconds)
        self.breaker = breaker or CircuitBreaker.from_env()
        self.client = http_client or httpx.Client(base_url=base_url, timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def _table(self, model: str) -> str:
        return f'"{self.namespace}-{model}"'

    @staticmethod
    def render(statement: str, **params: Any) -> str:
        clause = text(statement).bindparams(*(bindparam(key, value) for key, value in params.items()))
        compiled = clause.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True})
        return " ".join(str(compiled).split())

    def query(self, sql: str) -> List[Dict[str, Any]]:
        rows = fetch_rows(self.client, sql, breaker=self.breaker, policy=self.retry_policy)
        self._logger.debug("Torii query returned rows", extra={"rows": len(rows)})
        return rows

    def latest_event_row(self, game_id: int) -> Optional[Dict[str, Any]]:
        rows = self.recent_event_rows(game_id, limit=1)
        return rows[0] if rows else None

    def recent_event_rows(self, game_id: int, limit: int = 50) -> List[Dict[str, Any]]:
        sql = self.render(
            f"SELECT * FROM {self._table('GameEvent')} "
            "WHERE adventurer_id = :adventurer_id "
            "ORDER BY action_count DESC LIMIT :limit",
            adventurer_id=game_id_hex(game_id),
            limit=max(1, int(limit)),
        )
        return self.query(sql)

    def _packed_rows(self, model: str, game_id: int, limit: int) -> List[Dict[str, Any]]:
        sql = self.render(
            "SELECT internal_event_id, internal_executed_at, packed "
            f"FROM {self._table(model)} "
            "WHERE adventurer_id = :adventurer_id "
            "ORDER BY internal_executed_at DESC LIMIT :limit",
            adventurer_id=game_id_hex(game_id),
            limit=max(1, int(limit)),
        )
        return self.query(sql)

    def adventurer_packed_rows(self, game_id: int, limit: int = 10) -> List[Dict[str, Any]]:
        return self._packed_rows("AdventurerPacked", game_id, limit)

    def bag_packed_rows(self, game_id: int, limit: int = 10) -> List[Dict[str, Any]]:
        return self._packed_rows("BagPacked", game_id, limit)

    def beast_row(self, beast_id: int) -> Optional[Dict[str, Any]]:
        columns = ", ".join(f'"{column}"' for column in _BEAST_COLUMNS)
        sql = self.render(
            f"SELECT {columns} FROM {self._table('GameEvent')} "
            'WHERE "details.beast.id" = :beast_id '
            "ORDER BY action_count DESC LIMIT 1",
            beast_id=int(beast_id),
        )
        rows = self.query(sql)
        return rows[0] if rows else None

    def leaderboard_rows(self, limit: int = 10) -> List[Dict[str, Any]]:
        sql = self.render(
            "SELECT adventurer_id, "
            'MAX("details.adventurer.xp") AS xp, '
            'MIN("details.adventurer.health") AS health '
            f"FROM {self._table('GameEvent')} "
            "GROUP BY adventurer_id HAVING health = 0 "
            "ORDER BY xp DESC LIMIT :limit",
            limit=max(1, int(limit)),
        )
        return self.query(sql)

    def close(self) -> None:
        self.client.close()
