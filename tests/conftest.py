"""Shared fixtures for keeper engine tests."""

from pathlib import Path

import pytest

from keeper_cascade.config import LeagueKeeperSettings, default_settings
from keeper_cascade.data_io import load_league_snapshot
from keeper_cascade.engine import LeagueSnapshot

FIXTURE_PATH = Path(__file__).parent / "fixtures" / "sample_league.json"


@pytest.fixture
def settings() -> LeagueKeeperSettings:
    """Default league keeper rules."""
    return default_settings()


@pytest.fixture
def sample_path() -> str:
    """Path to the sample league snapshot."""
    return str(FIXTURE_PATH)


@pytest.fixture
def snapshot() -> LeagueSnapshot:
    """Freshly loaded sample league snapshot."""
    return load_league_snapshot(str(FIXTURE_PATH))
