from datetime import datetime
from pathlib import Path

import fncli
import pytest

from habitual import config, db
from habitual.lib import clock

# Wednesday
FIXED_NOW = datetime(2025, 3, 12, 9, 30)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def frozen_clock(monkeypatch, now):
    monkeypatch.setattr(clock, "now", lambda: now)
    return now


@pytest.fixture
def tmp_habitual_dir(tmp_path, monkeypatch) -> Path:
    home = tmp_path / ".habitual"
    monkeypatch.setattr(config, "HABITUAL_DIR", home)
    monkeypatch.setattr(config, "DB_PATH", home / "habitual.db")
    monkeypatch.setattr(config, "CONFIG_PATH", home / "config.yaml")
    monkeypatch.setattr(config, "LOG_PATH", home / "habitual.log")
    config.Config.reset()
    db.init()
    yield home
    config.Config.reset()


class FnCLIRunner:
    """Runs `habitual <args>` in-process and captures the result."""

    def __init__(self):
        import habitual.dash
        import habitual.history
        import habitual.tasks  # noqa: F401

    def invoke(self, args: list[str]) -> fncli.Result:
        return fncli.invoke(["habitual", *args])
