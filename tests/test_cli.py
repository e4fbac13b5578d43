"""Tests for the command-line interface."""

import json
import logging
import tempfile
from pathlib import Path

import pytest
from click.testing import CliRunner

from keeper_cascade.cli import cli


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers bound to the runner's captured stdout."""
    yield
    logging.getLogger().handlers.clear()


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_eligibility(runner: CliRunner, sample_path: str) -> None:
    """Test eligibility lists every rostered player with a cost."""
    result = runner.invoke(cli, ["eligibility", sample_path, "1"])
    assert result.exit_code == 0
    assert "Amon Brooks" in result.output
    assert "R10 (Waiver pickup = Round 10)" in result.output
    assert "Franchise only (R1)" in result.output


def test_eligibility_unknown_roster(runner: CliRunner, sample_path: str) -> None:
    """Test an unknown roster exits with an error."""
    result = runner.invoke(cli, ["eligibility", sample_path, "9"])
    assert result.exit_code == 1
    assert "Unknown roster: 9" in result.output


def test_cascade(runner: CliRunner, sample_path: str) -> None:
    """Test cascade prints final rounds and cascade reasons."""
    result = runner.invoke(cli, ["cascade", sample_path])
    assert result.exit_code == 0
    assert "Alpha (2025)" in result.output
    assert "Ben Carver [REGULAR] - Round 4 taken by Amon Brooks" in result.output


def test_cascade_single_roster_to_csv(runner: CliRunner, sample_path: str) -> None:
    """Test --roster limits output and --output writes a CSV."""
    with tempfile.TemporaryDirectory() as temp_dir:
        output_path = Path(temp_dir) / "cascade.csv"
        result = runner.invoke(
            cli,
            ["cascade", sample_path, "--roster", "2", "--output", str(output_path)],
        )
        assert result.exit_code == 0
        assert output_path.exists()
    assert "Bravo (2025)" in result.output
    assert "Alpha (2025)" not in result.output


def test_cascade_conflict_exit_code(runner: CliRunner, sample_path: str) -> None:
    """Test unplaceable keepers make the command fail."""
    data = json.loads(Path(sample_path).read_text())
    data["traded_picks"] = [
        {"season": 2025, "round": r, "original_owner_id": "1", "current_owner_id": "2"}
        for r in range(4, 11)
    ]
    with tempfile.TemporaryDirectory() as temp_dir:
        path = Path(temp_dir) / "league.json"
        path.write_text(json.dumps(data))
        result = runner.invoke(cli, ["cascade", str(path)])
    assert result.exit_code == 1
    assert "No owned, unclaimed round" in result.output


def test_board(runner: CliRunner, sample_path: str) -> None:
    """Test the board shows keepers and traded picks."""
    result = runner.invoke(cli, ["board", sample_path])
    assert result.exit_code == 0
    assert "-> Bravo" in result.output
    assert "Amon Brooks" in result.output


def test_board_conflicts(runner: CliRunner, sample_path: str) -> None:
    """Test the board lists unplaced keepers and fails."""
    data = json.loads(Path(sample_path).read_text())
    data["traded_picks"] = [
        {"season": 2025, "round": r, "original_owner_id": "1", "current_owner_id": "2"}
        for r in range(4, 11)
    ]
    with tempfile.TemporaryDirectory() as temp_dir:
        path = Path(temp_dir) / "league.json"
        path.write_text(json.dumps(data))
        result = runner.invoke(cli, ["board", str(path)])
    assert result.exit_code == 1
    assert "❌ Alpha: Ben Carver: No owned, unclaimed round" in result.output


def test_trade(runner: CliRunner, sample_path: str) -> None:
    """Test a trade prints the fairness score and facts."""
    result = runner.invoke(
        cli,
        [
            "trade",
            sample_path,
            "--team1",
            "1",
            "--team2",
            "2",
            "--give1",
            "p1",
            "--give2",
            "p6",
            "--pick2",
            "2026:3",
            "--date",
            "2025-10-01",
        ],
    )
    assert result.exit_code == 0
    assert "before the deadline" in result.output
    assert "Fairness score:" in result.output
    assert "[keeper]" in result.output


def test_trade_bad_pick(runner: CliRunner, sample_path: str) -> None:
    """Test malformed picks are rejected by the parser."""
    result = runner.invoke(
        cli,
        ["trade", sample_path, "--team1", "1", "--team2", "2", "--pick1", "third"],
    )
    assert result.exit_code == 2
    assert "SEASON:ROUND" in result.output


def test_project(runner: CliRunner, sample_path: str) -> None:
    """Test projections print one line per season."""
    result = runner.invoke(cli, ["project", sample_path, "1", "--years", "2"])
    assert result.exit_code == 0
    assert "Amon Brooks (WR): R4 now, IMPROVING" in result.output
    assert "2026 REGULAR" in result.output


def test_validate(runner: CliRunner, sample_path: str) -> None:
    """Test a legal keeper set validates."""
    result = runner.invoke(cli, ["validate", sample_path, "1"])
    assert result.exit_code == 0
    assert "2 keepers within league limits" in result.output


def test_summary(runner: CliRunner, sample_path: str) -> None:
    """Test the league summary counts."""
    result = runner.invoke(cli, ["summary", sample_path])
    assert result.exit_code == 0
    assert "Season 2025: 3 keepers" in result.output
    assert "RB: 2" in result.output


def test_missing_settings(runner: CliRunner, sample_path: str) -> None:
    """Test a snapshot without keeper settings exits with a configuration error."""
    data = json.loads(Path(sample_path).read_text())
    del data["settings"]
    with tempfile.TemporaryDirectory() as temp_dir:
        path = Path(temp_dir) / "league.json"
        path.write_text(json.dumps(data))
        result = runner.invoke(cli, ["summary", str(path)])
    assert result.exit_code == 1
    assert "Configuration error" in result.output
