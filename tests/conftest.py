import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def disable_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("time.sleep", lambda *_args, **_kwargs: None)


@pytest.fixture(autouse=True)
def no_dotenv_leak(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "DM_TORII_URL",
        "DM_NAMESPACE",
        "DM_FIXTURE_PATH",
        "DM_STATE_CACHE_TTL_S",
        "DM_FEED_SIZE",
        "DM_HTTP_CIRCUIT_BREAKER_ENABLED",
        "DM_HTTP_CIRCUIT_FAILURE_THRESHOLD",
        "DM_HTTP_CIRCUIT_RESET_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
