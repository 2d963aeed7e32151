import os

from deathmountain.application.services.game_state_service import GameStateService
from deathmountain.application.services.state_cache import DEFAULT_STATE_TTL_SECONDS, GameStateCache
from deathmountain.domain.repositories import GameEventSource
from deathmountain.infrastructure.inmemory.inmemory_event_source import InMemoryGameEventSource
from deathmountain.infrastructure.torii_client import DEFAULT_NAMESPACE, DEFAULT_TORII_URL, ToriiClient


def _build_torii_source() -> ToriiClient:
    base_url = os.getenv("DM_TORII_URL", DEFAULT_TORII_URL).strip() or DEFAULT_TORII_URL
    namespace = os.getenv("DM_NAMESPACE", DEFAULT_NAMESPACE).strip() or DEFAULT_NAMESPACE
    timeout = float(os.getenv("DM_HTTP_TIMEOUT_S", "10"))
    retries = int(os.getenv("DM_HTTP_RETRIES", "2"))
    backoff_seconds = float(os.getenv("DM_HTTP_BACKOFF_S", "0.2"))
    return ToriiClient(
        base_url=base_url.rstrip("/"),
        namespace=namespace,
        timeout=timeout,
        retries=retries,
        backoff_seconds=backoff_seconds,
    )


def _build_cache() -> GameStateCache | None:
    ttl_seconds = float(os.getenv("DM_STATE_CACHE_TTL_S", str(DEFAULT_STATE_TTL_SECONDS)))
    if ttl_seconds <= 0:
        return None
    return GameStateCache(ttl_seconds=ttl_seconds)


def create_game_state_service(fixture_path: str | None = None) -> GameStateService:
    fixture_path = fixture_path or os.getenv("DM_FIXTURE_PATH") or None
    source: GameEventSource
    if fixture_path:
        source = InMemoryGameEventSource.from_json_file(fixture_path)
    else:
        source = _build_torii_source()
    return GameStateService(
        source,
        cache=_build_cache(),
        feed_size=int(os.getenv("DM_FEED_SIZE", "10")),
    )
