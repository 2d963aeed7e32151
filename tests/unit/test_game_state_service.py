import json
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from deathmountain.application.services.game_state_service import GameStateService, latest_encounter_beast_id
from deathmountain.application.services.state_cache import GameStateCache
from deathmountain.domain.errors import GameNotFoundError
from deathmountain.domain.models.game_state import GamePhase
from deathmountain.infrastructure.inmemory.inmemory_event_source import InMemoryGameEventSource

FIXTURE = Path(__file__).resolve().parents[1] / "fixtures" / "golden_game.json"
LOGGER = "deathmountain.application.services.game_state_service"


def _fixture() -> dict:
    return json.loads(FIXTURE.read_text(encoding="utf-8"))


def _without_beast(row: dict) -> dict:
    return {key: value for key, value in row.items() if not key.startswith("details.beast.")}


class _CountingSource(InMemoryGameEventSource):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.latest_calls = 0
        self.leaderboard_calls = 0

    def latest_event_row(self, game_id):
        self.latest_calls += 1
        return super().latest_event_row(game_id)

    def leaderboard_rows(self, limit=10):
        self.leaderboard_calls += 1
        return super().leaderboard_rows(limit)


class _BrokenBeastSource(InMemoryGameEventSource):
    def beast_row(self, beast_id):
        raise RuntimeError("indexer unavailable")


class GameStateServiceTests(unittest.TestCase):
    def test_golden_game_state(self) -> None:
        service = GameStateService(InMemoryGameEventSource.from_json_file(FIXTURE))

        state = service.get_game_state(1)

        self.assertEqual(GamePhase.COMBAT, state.phase)
        self.assertEqual(42, state.action_count)
        self.assertEqual("Wolf", state.beast.name)
        self.assertEqual("Win in 6 rounds, take 75 damage", state.combat_preview.outcome.summary)
        self.assertEqual(
            ["BeastEncounter", "AdventurerPacked", "Discovery"],
            [entry.kind for entry in state.recent_events],
        )

    def test_unknown_game_raises_not_found(self) -> None:
        service = GameStateService(InMemoryGameEventSource.from_json_file(FIXTURE))

        with self.assertRaises(GameNotFoundError) as ctx:
            service.get_game_state(99)

        self.assertEqual("Game 99 not found", str(ctx.exception))

    def test_dead_adventurer_has_no_beast(self) -> None:
        service = GameStateService(InMemoryGameEventSource.from_json_file(FIXTURE))

        state = service.get_game_state(2)

        self.assertEqual(GamePhase.DEATH, state.phase)
        self.assertIsNone(state.beast)
        self.assertIsNone(state.combat_preview)

    def test_beast_is_looked_up_from_earlier_encounter(self) -> None:
        fixture = _fixture()
        latest = _without_beast(fixture["events"][0])
        latest["action_count"] = 43
        encounter = dict(fixture["events"][0], **{"details.beast.health": 30})
        del encounter["details.adventurer.beast_health"]
        service = GameStateService(InMemoryGameEventSource(events=[latest, encounter]))

        state = service.get_game_state(1)

        self.assertEqual("Wolf", state.beast.name)
        self.assertEqual(21, state.beast.health)
        self.assertFalse(state.beast.placeholder)
        self.assertEqual("Win in 6 rounds, take 75 damage", state.combat_preview.outcome.summary)

    def test_placeholder_when_no_beast_can_be_resolved(self) -> None:
        latest = _without_beast(_fixture()["events"][0])
        service = GameStateService(InMemoryGameEventSource(events=[latest]))

        with self.assertLogs(LOGGER, level="WARNING"):
            state = service.get_game_state(1)

        self.assertTrue(state.beast.placeholder)
        self.assertEqual(21, state.beast.health)
        self.assertIsNone(state.combat_preview)
        self.assertIn("<estimate>Unknown</estimate>", service.get_context(1))

    def test_failed_beast_lookup_falls_back_to_placeholder(self) -> None:
        fixture = _fixture()
        latest = _without_beast(fixture["events"][0])
        latest["action_count"] = 43
        service = GameStateService(_BrokenBeastSource(events=[latest, fixture["events"][0]]))

        with self.assertLogs(LOGGER, level="WARNING") as logs:
            state = service.get_game_state(1)

        self.assertTrue(state.beast.placeholder)
        self.assertTrue(any("Beast lookup failed" in line for line in logs.output))

    def test_latest_encounter_prefers_newest_action(self) -> None:
        rows = [
            {"action_count": 3, "details.beast.id": 5},
            {"action_count": 9, "details.beast.id": 47},
            {"action_count": 12},
        ]
        self.assertEqual(47, latest_encounter_beast_id(rows))
        self.assertIsNone(latest_encounter_beast_id([{"action_count": 1}]))

    def test_numeric_timestamps_do_not_fail_the_request(self) -> None:
        row = {
            "adventurer_id": 1,
            "action_count": 3,
            "internal_executed_at": 1735689600000,
            "details.adventurer.health": 50,
            "details.adventurer.xp": 16,
        }
        huge = dict(row, action_count=2, internal_executed_at=10**20)
        service = GameStateService(InMemoryGameEventSource(events=[row, huge]))

        state = service.get_game_state(1)

        self.assertEqual(GamePhase.EXPLORATION, state.phase)
        self.assertEqual(2025, state.recent_events[0].timestamp.year)
        self.assertIsNone(state.recent_events[-1].timestamp)

    def test_outlook_and_rewards_are_derived(self) -> None:
        state = GameStateService(InMemoryGameEventSource.from_json_file(FIXTURE)).get_game_state(1)

        self.assertEqual(130, state.outlook.max_health)
        self.assertEqual(25, state.outlook.discovery_chance)
        self.assertEqual(6, state.beast.rewards.gold)

    def test_feed_can_be_disabled(self) -> None:
        service = GameStateService(InMemoryGameEventSource.from_json_file(FIXTURE), feed_size=0)

        self.assertEqual([], service.get_game_state(1).recent_events)

    def test_payload_and_context_entry_points(self) -> None:
        service = GameStateService(InMemoryGameEventSource.from_json_file(FIXTURE))

        self.assertIn('<beast name="Wolf" health="21" level="12" tier="5"/>', service.get_context(1))
        payload = service.get_payload(1, ["game"])
        self.assertEqual({"game"}, set(payload))
        self.assertEqual("combat", payload["game"]["phase"])

    def test_cache_serves_repeat_reads_until_refresh(self) -> None:
        source = _CountingSource(**{key: value for key, value in _fixture().items()})
        service = GameStateService(source, cache=GameStateCache(ttl_seconds=60, clock=lambda: 0.0))

        first = service.get_game_state(1)
        second = service.get_game_state(1)
        service.get_game_state(1, refresh=True)

        self.assertIs(first, second)
        self.assertEqual(2, source.latest_calls)

    def test_leaderboard_is_cached_per_limit(self) -> None:
        source = _CountingSource(**{key: value for key, value in _fixture().items()})
        service = GameStateService(source, cache=GameStateCache(ttl_seconds=60, clock=lambda: 0.0))

        entries = service.get_leaderboard(5)
        service.get_leaderboard(5)

        self.assertEqual(1, source.leaderboard_calls)
        self.assertEqual([(1, 2, 10)], [(entry.rank, entry.adventurer_id, entry.level) for entry in entries])


if __name__ == "__main__":
    unittest.main()
