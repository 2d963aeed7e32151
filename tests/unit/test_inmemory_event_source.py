import json
import sys
import tempfile
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from deathmountain.infrastructure.inmemory.inmemory_event_source import InMemoryGameEventSource

FIXTURE = Path(__file__).resolve().parents[1] / "fixtures" / "golden_game.json"


class InMemoryGameEventSourceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.source = InMemoryGameEventSource.from_json_file(FIXTURE)

    def test_events_are_newest_action_first(self) -> None:
        rows = self.source.recent_event_rows(1)

        self.assertEqual([42, 41], [row["action_count"] for row in rows])
        self.assertEqual(42, self.source.latest_event_row(1)["action_count"])
        self.assertIsNone(self.source.latest_event_row(99))

    def test_hex_and_integer_ids_match_the_same_game(self) -> None:
        self.source.add_event({"adventurer_id": 1, "action_count": 50, "details.adventurer.health": 1})

        self.assertEqual(50, self.source.latest_event_row(1)["action_count"])

    def test_snapshot_rows_are_trimmed_to_snapshot_columns(self) -> None:
        rows = self.source.adventurer_packed_rows(1)

        self.assertEqual(
            [{"internal_event_id": "0x10:0xabc:0x0:0x3", "internal_executed_at": "2025-01-01T00:00:10Z", "packed": "0x1234"}],
            rows,
        )
        self.assertEqual([], self.source.bag_packed_rows(1))

    def test_beast_row_returns_latest_beast_columns(self) -> None:
        row = self.source.beast_row(47)

        self.assertEqual(42, row["action_count"])
        self.assertEqual(12, row["details.beast.level"])
        self.assertNotIn("details.adventurer.health", row)
        self.assertIsNone(self.source.beast_row(1))

    def test_leaderboard_lists_only_fallen_adventurers(self) -> None:
        rows = self.source.leaderboard_rows()

        self.assertEqual([{"adventurer_id": 2, "xp": 100, "health": 0}], rows)

    def test_fixture_must_be_an_object(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "fixture.json"
            path.write_text(json.dumps([1, 2]), encoding="utf-8")

            with self.assertRaises(ValueError):
                InMemoryGameEventSource.from_json_file(path)


if __name__ == "__main__":
    unittest.main()
