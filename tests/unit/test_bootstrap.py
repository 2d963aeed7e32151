import contextlib
import io
import os
import sys
from pathlib import Path
import unittest
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from deathmountain.__main__ import main
from deathmountain.bootstrap import create_game_state_service
from deathmountain.infrastructure.inmemory.inmemory_event_source import InMemoryGameEventSource
from deathmountain.infrastructure.torii_client import ToriiClient

FIXTURE = Path(__file__).resolve().parents[1] / "fixtures" / "golden_game.json"


class BootstrapTests(unittest.TestCase):
    def test_fixture_path_selects_in_memory_source(self) -> None:
        service = create_game_state_service(str(FIXTURE))

        self.assertIsInstance(service.source, InMemoryGameEventSource)
        self.assertIsNotNone(service.cache)

    def test_environment_configures_torii_source_and_cache(self) -> None:
        env = {"DM_NAMESPACE": "ls_test", "DM_STATE_CACHE_TTL_S": "0", "DM_FEED_SIZE": "3"}

        with mock.patch.dict(os.environ, env, clear=False):
            service = create_game_state_service()

        self.assertIsInstance(service.source, ToriiClient)
        self.assertEqual("ls_test", service.source.namespace)
        self.assertIsNone(service.cache)
        self.assertEqual(3, service.feed_size)
        service.source.close()

    def test_fixture_from_environment(self) -> None:
        with mock.patch.dict(os.environ, {"DM_FIXTURE_PATH": str(FIXTURE)}, clear=False):
            service = create_game_state_service()

        self.assertIsInstance(service.source, InMemoryGameEventSource)


class MainEntryTests(unittest.TestCase):
    def test_main_prints_context_for_fixture_game(self) -> None:
        stdout = io.StringIO()

        with mock.patch("deathmountain.__main__.load_dotenv"), contextlib.redirect_stdout(stdout):
            code = main(["--fixture", str(FIXTURE), "context", "1"])

        self.assertEqual(0, code)
        self.assertIn("<phase>combat</phase>", stdout.getvalue())

    def test_keyboard_interrupt_exits_with_130(self) -> None:
        stdout = io.StringIO()

        with mock.patch("deathmountain.__main__.load_dotenv"), mock.patch(
            "deathmountain.__main__.run", side_effect=KeyboardInterrupt
        ), contextlib.redirect_stdout(stdout):
            code = main(["context", "1"])

        self.assertEqual(130, code)


if __name__ == "__main__":
    unittest.main()
